"""Authentication and user lifecycle service."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.middleware.auth import (
    create_access_token,
    hash_password,
    verify_password,
)
from bookrecommender.api.schemas import AuthResponse, LoginRequest, RegisterRequest
from bookrecommender.domain.models import User

logger = logging.getLogger(__name__)


class AuthService:
    """Handles user registration and authentication."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _find_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Register a new user and issue a token. Raises 400 on mismatch or duplicate."""
        if data.password != data.confirm_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Passwords do not match",
            )

        if await self._find_by_email(data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user = User(email=data.email.lower(), password_hash=hash_password(data.password))
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            ) from exc

        logger.info("Registered user id=%d", user.id)
        return self._issue(user)

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Authenticate user and return a JWT access token."""
        user = await self._find_by_email(data.email)

        if not user or not verify_password(data.password, user.password_hash):
            logger.info("Failed login attempt")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email or password",
            )

        logger.info("User id=%d logged in", user.id)
        return self._issue(user)

    @staticmethod
    def _issue(user: User) -> AuthResponse:
        token, expires = create_access_token(user)
        return AuthResponse(id=user.id, email=user.email, token=token, expires=expires)
