"""Book catalog service."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.schemas import CreateBookRequest, UpdateBookRequest
from bookrecommender.domain.models import Book, Recommendation, User, UserBook

logger = logging.getLogger(__name__)


class BookService:
    """Create, browse, edit and remove catalog books."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_books(self, search: str | None = None) -> list[Book]:
        """All books ordered by title, optionally filtered by title/author."""
        query = select(Book).order_by(Book.title, Book.id)
        if search and search.strip():
            term = search.strip().lower()
            # literal substring match: % and _ in the term are not wildcards
            query = query.where(
                or_(
                    func.lower(Book.title).contains(term, autoescape=True),
                    func.lower(Book.author).contains(term, autoescape=True),
                )
            )
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def get_book(self, book_id: int) -> Book:
        """Fetch a book or raise 404."""
        result = await self._session.execute(select(Book).where(Book.id == book_id))
        book = result.scalar_one_or_none()
        if not book:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Book not found"
            )
        return book

    async def create_book(self, data: CreateBookRequest, user: User) -> Book:
        book = Book(**data.model_dump(), created_by_user_id=user.id)
        self._session.add(book)
        await self._session.flush()
        logger.info("User id=%d added book id=%d (%s)", user.id, book.id, book.title)
        return await self._reload(book.id)

    async def update_book(self, book_id: int, data: UpdateBookRequest, user: User) -> Book:
        """Apply the fields present in the request. Only the creator may edit."""
        book = await self._get_owned(book_id, user)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(book, field, value)
        await self._session.flush()
        logger.info("User id=%d updated book id=%d", user.id, book.id)
        return await self._reload(book.id)

    async def delete_book(self, book_id: int, user: User) -> None:
        """Delete a book together with its library entries and recommendations."""
        book = await self._get_owned(book_id, user)
        await self._session.execute(delete(UserBook).where(UserBook.book_id == book.id))
        await self._session.execute(
            delete(Recommendation).where(Recommendation.book_id == book.id)
        )
        await self._session.delete(book)
        await self._session.flush()
        logger.info("User id=%d deleted book id=%d", user.id, book_id)

    async def _get_owned(self, book_id: int, user: User) -> Book:
        book = await self.get_book(book_id)
        if book.created_by_user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the user who added this book can modify it",
            )
        return book

    async def _reload(self, book_id: int) -> Book:
        result = await self._session.execute(
            select(Book)
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
