from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.config import settings
from notesync.database import get_db
from notesync.dependencies import get_current_user
from notesync.middleware.rate_limit import auth_limiter
from notesync.models import User
from notesync.schemas.auth import AuthConfig, Token, UserCreate, UserLogin, UserResponse
from notesync.services.auth import authenticate_user, issue_token, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/config", response_model=AuthConfig)
async def auth_config() -> AuthConfig:
    return AuthConfig(allow_registration=settings.allow_registration)


@router.post("/register", response_model=Token)
@auth_limiter
async def register(request: Request, data: UserCreate, db: AsyncSession = Depends(get_db)) -> Token:
    if not settings.allow_registration:
        raise HTTPException(status_code=403, detail="Registration is disabled")
    user = await register_user(db, data.username, data.password)
    return issue_token(user)


@router.post("/login", response_model=Token)
@auth_limiter
async def login(request: Request, data: UserLogin, db: AsyncSession = Depends(get_db)) -> Token:
    user = await authenticate_user(db, data.username, data.password)
    return issue_token(user)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(user_id=user.id, username=user.username)
