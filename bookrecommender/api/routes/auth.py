"""Authentication routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.middleware.auth import get_current_user
from bookrecommender.api.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserInfo,
)
from bookrecommender.database import get_session
from bookrecommender.domain.models import User
from bookrecommender.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse)
async def register(
    data: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Create an account and return a bearer token."""
    return await AuthService(session).register(data)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    return await AuthService(session).login(data)


@router.get("/me", response_model=UserInfo)
async def me(user: User = Depends(get_current_user)) -> UserInfo:
    """Return the authenticated user's profile."""
    return UserInfo.model_validate(user)
