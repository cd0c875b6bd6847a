"""Personal reading library service (the user's UserBook rows)."""

import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.schemas import AddBookToUserRequest, UpdateUserBookRequest
from bookrecommender.domain.models import Book, ReadingStatus, UserBook

logger = logging.getLogger(__name__)

_DUPLICATE_DETAIL = "Book is already in your library"


class LibraryService:
    """
    Manages the books a user tracks and their reading status.

    Every query is scoped to a single user: entries belonging to someone
    else behave exactly like missing ones.
    """

    def __init__(self, session: AsyncSession, user_id: int) -> None:
        self._session = session
        self._user_id = user_id

    async def list_entries(self, reading_status: ReadingStatus | None = None) -> list[UserBook]:
        query = (
            select(UserBook)
            .where(UserBook.user_id == self._user_id)
            .order_by(UserBook.updated_at.desc(), UserBook.id.desc())
        )
        if reading_status is not None:
            query = query.where(UserBook.reading_status == int(reading_status))
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def add_book(self, data: AddBookToUserRequest) -> UserBook:
        """
        Add a catalog book to the user's library.

        Raises 404 if the book does not exist and 400 if it is already tracked.
        """
        book = await self._session.get(Book, data.book_id)
        if not book:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Book not found"
            )

        if await self._tracked_entry_id(data.book_id) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_DETAIL
            )

        entry = UserBook(
            user_id=self._user_id,
            book_id=data.book_id,
            reading_status=int(data.reading_status),
        )
        self._session.add(entry)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # lost a race against a concurrent insert of the same pair
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_DETAIL
            ) from exc

        logger.info(
            "User id=%d added book id=%d to library as %s",
            self._user_id,
            data.book_id,
            data.reading_status.name,
        )
        return await self._reload(entry.id)

    async def update_entry(self, entry_id: int, data: UpdateUserBookRequest) -> UserBook:
        """Apply the fields present in the request to one of the user's entries."""
        entry = await self._get_entry(entry_id)
        changes = data.model_dump(exclude_unset=True)
        if "reading_status" in changes:
            changes["reading_status"] = int(changes["reading_status"])
        for field, value in changes.items():
            setattr(entry, field, value)
        entry.updated_at = datetime.utcnow()
        await self._session.flush()
        logger.info(
            "User id=%d updated library entry id=%d (%s)",
            self._user_id,
            entry_id,
            ", ".join(sorted(changes)) or "no fields",
        )
        return await self._reload(entry.id)

    async def remove_entry(self, entry_id: int) -> None:
        entry = await self._get_entry(entry_id)
        await self._session.delete(entry)
        await self._session.flush()
        logger.info("User id=%d removed library entry id=%d", self._user_id, entry_id)

    async def _tracked_entry_id(self, book_id: int) -> int | None:
        result = await self._session.execute(
            select(UserBook.id).where(
                UserBook.user_id == self._user_id, UserBook.book_id == book_id
            )
        )
        return result.scalar_one_or_none()

    async def _get_entry(self, entry_id: int) -> UserBook:
        result = await self._session.execute(
            select(UserBook).where(
                UserBook.id == entry_id, UserBook.user_id == self._user_id
            )
        )
        entry = result.scalar_one_or_none()
        if not entry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Library entry not found",
            )
        return entry

    async def _reload(self, entry_id: int) -> UserBook:
        result = await self._session.execute(
            select(UserBook)
            .where(UserBook.id == entry_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
