from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    APP_NAME: str = "Anonchat API"
    CORS_ORIGINS: str = "http://localhost:3000"

    # Matchmaking
    WAITING_ENTRY_TTL_SECONDS: int = 300
    MATCH_CANDIDATE_SCAN_LIMIT: int = 200

    # Messages
    MESSAGE_MAX_LENGTH: int = 2000
    MESSAGE_RETENTION_HOURS: int = 24

    # Voice messages
    VOICE_MAX_SIZE_BYTES: int = 10 * 1024 * 1024  # 10MB
    VOICE_MAX_DURATION_SECONDS: int = 300
    UPLOAD_DIR: str = "./uploads"

    # Call signaling
    SIGNAL_TTL_SECONDS: int = 60

    # Rate limits (requests per window)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MATCH: int = 20
    RATE_LIMIT_MESSAGE: int = 30
    RATE_LIMIT_VOICE: int = 6
    RATE_LIMIT_SIGNAL: int = 120
    RATE_LIMIT_REPORT: int = 5

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
