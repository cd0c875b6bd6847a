"""Book catalog routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.middleware.auth import get_current_user
from bookrecommender.api.schemas import BookResponse, CreateBookRequest, UpdateBookRequest
from bookrecommender.database import get_session
from bookrecommender.domain.models import User
from bookrecommender.services.books import BookService

router = APIRouter(prefix="/api/books", tags=["Books"])


@router.get("", response_model=list[BookResponse])
async def list_books(
    search: str | None = Query(default=None, max_length=255),
    session: AsyncSession = Depends(get_session),
) -> list[BookResponse]:
    """Browse the catalog. Public."""
    books = await BookService(session).list_books(search)
    return [BookResponse.model_validate(b) for b in books]


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: int,
    session: AsyncSession = Depends(get_session),
) -> BookResponse:
    book = await BookService(session).get_book(book_id)
    return BookResponse.model_validate(book)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    data: CreateBookRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> BookResponse:
    """Add a book to the shared catalog."""
    book = await BookService(session).create_book(data, user)
    return BookResponse.model_validate(book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    data: UpdateBookRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> BookResponse:
    book = await BookService(session).update_book(book_id, data, user)
    return BookResponse.model_validate(book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> None:
    await BookService(session).delete_book(book_id, user)
