import logging
import uuid
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer

from app.core.exceptions import TokenInvalidError
from app.core.security import create_access_token, decode_access_token
from app.schemas.user import CurrentUser, Token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/guest")


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> CurrentUser:
    payload = decode_access_token(token)

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        raise TokenInvalidError()

    return CurrentUser(id=user_id)


@router.post("/guest", response_model=Token, status_code=status.HTTP_201_CREATED)
async def create_guest() -> Token:
    """Issue a fresh anonymous identity and its bearer token."""
    user_id = uuid.uuid4()
    logger.info("Issued guest identity %s", user_id)
    return Token(access_token=create_access_token(str(user_id)), user_id=user_id)


@router.get("/me", response_model=CurrentUser)
async def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    return current_user
