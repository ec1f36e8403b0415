from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Identity resolved from the bearer token."""

    id: UUID


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: UUID


class TokenPayload(BaseModel):
    sub: str
    exp: int
