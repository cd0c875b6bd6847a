"""Personal library ("my books") routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.middleware.auth import get_current_user
from bookrecommender.api.schemas import (
    AddBookToUserRequest,
    UpdateUserBookRequest,
    UserBookResponse,
)
from bookrecommender.database import get_session
from bookrecommender.domain.models import ReadingStatus, User
from bookrecommender.services.library import LibraryService

router = APIRouter(prefix="/api/my-books", tags=["Library"])


@router.get("", response_model=list[UserBookResponse])
async def list_my_books(
    reading_status: ReadingStatus | None = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[UserBookResponse]:
    """List the current user's library, most recently updated first."""
    entries = await LibraryService(session, user.id).list_entries(reading_status)
    return [UserBookResponse.model_validate(e) for e in entries]


@router.post("", response_model=UserBookResponse, status_code=status.HTTP_201_CREATED)
async def add_to_library(
    data: AddBookToUserRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> UserBookResponse:
    entry = await LibraryService(session, user.id).add_book(data)
    return UserBookResponse.model_validate(entry)


@router.put("/{entry_id}", response_model=UserBookResponse)
async def update_library_entry(
    entry_id: int,
    data: UpdateUserBookRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> UserBookResponse:
    """Change reading status, rating, review or reading dates."""
    entry = await LibraryService(session, user.id).update_entry(entry_id, data)
    return UserBookResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_library(
    entry_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> None:
    await LibraryService(session, user.id).remove_entry(entry_id)
