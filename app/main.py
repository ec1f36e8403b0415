import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.v1.router import router as v1_router
from app.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.database import check_db_connection

logger = logging.getLogger(__name__)

# Voice blobs live under UPLOAD_DIR/voice and are served read-only from /uploads
uploads_dir = Path(settings.UPLOAD_DIR)
uploads_dir.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is owned by Alembic: alembic upgrade head
    if await check_db_connection():
        logger.info("Session store reachable")
    else:
        logger.warning("Session store unreachable; matching and relay calls will fail")
    logger.info(
        "Serving voice uploads from %s (max %d bytes)",
        uploads_dir.resolve(),
        settings.VOICE_MAX_SIZE_BYTES,
    )
    yield


app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Retry-After"],
)

app.include_router(v1_router, prefix="/api/v1")
app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")


@app.get("/health")
async def health_check():
    """Liveness plus a session store check, for load balancers."""
    database_ok = await check_db_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unreachable",
    }
