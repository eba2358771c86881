import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.database import get_db
from notesync.models import User
from notesync.services.auth import decode_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 like every other credential failure
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("Unauthorized")
    try:
        token_data = decode_token(credentials.credentials)
    except Exception as e:
        logger.warning("Invalid token", extra={"error": str(e)})
        raise _unauthorized("Invalid or expired token")
    if token_data.user_id is None:
        raise _unauthorized("Invalid token")
    result = await db.execute(select(User).where(User.id == token_data.user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized("User not found")
    return user
