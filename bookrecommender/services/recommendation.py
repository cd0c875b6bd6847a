"""AI book recommendation service."""

import json
import logging
import re

from fastapi import HTTPException, status
from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.api.schemas import AIRecommendation
from bookrecommender.domain.models import Book, Recommendation, UserBook
from bookrecommender.ports.llm import LLMPort, LLMProviderError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"```[a-zA-Z]*\s*", re.MULTILINE)
_ITEMS = TypeAdapter(list[AIRecommendation])


def clean_llm_response(content: str) -> str:
    """Strip markdown code fences and surrounding whitespace from a completion."""
    return _FENCE_OPEN.sub("", content.strip()).replace("```", "").strip()


def parse_recommendations(content: str) -> list[AIRecommendation]:
    """
    Parse a completion into recommendation items.

    Accepts a JSON array of objects (or an object wrapping one under a
    "recommendations" key). Keys are matched case-insensitively.
    Raises ValueError if the content is not valid JSON of that shape.
    """
    data = json.loads(clean_llm_response(content))
    if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
        data = data["recommendations"]
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    items = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError("expected an array of objects")
        items.append({str(k).lower(): v for k, v in item.items() if v is not None})
    return _ITEMS.validate_python(items)


class RecommendationService:
    """Turns a user's reading history into persisted AI recommendations."""

    def __init__(self, session: AsyncSession, user_id: int, count: int = 5) -> None:
        self._session = session
        self._user_id = user_id
        self._count = count

    async def recommend(self, llm: LLMPort) -> list[Recommendation]:
        """
        Ask the LLM for books similar to the user's library and store them.

        Raises 400 when the library is empty and 502 when the provider fails
        or answers with something that is not a usable JSON array.
        """
        history = await self._reading_history()
        if not history:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User has no reading history.",
            )

        try:
            content = await llm.recommend_books(history, self._count)
        except LLMProviderError as exc:
            logger.error("Recommendation provider failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Recommendation provider error",
            ) from exc

        try:
            items = parse_recommendations(content)
        except ValueError as exc:
            logger.warning(
                "Invalid JSON from %s (%d chars): %s", llm.model, len(content), exc
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"error": "Invalid JSON from AI", "raw": content},
            ) from exc

        if not items:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="AI returned no recommendations.",
            )

        saved: list[Recommendation] = []
        for item in items:
            book = await self._find_or_create_book(
                item.title.strip()[:255], item.author.strip()[:255]
            )
            rec = Recommendation(user_id=self._user_id, book_id=book.id, reason=item.reason)
            self._session.add(rec)
            saved.append(rec)
        await self._session.flush()

        logger.info(
            "Stored %d recommendations for user id=%d (model=%s)",
            len(saved),
            self._user_id,
            llm.model,
        )
        return await self._load([r.id for r in saved])

    async def history(self) -> list[Recommendation]:
        """Previously stored recommendations, newest first."""
        result = await self._session.execute(
            select(Recommendation)
            .where(Recommendation.user_id == self._user_id)
            .order_by(Recommendation.created_at.desc(), Recommendation.id.desc())
        )
        return list(result.scalars().all())

    async def _reading_history(self) -> list[dict]:
        result = await self._session.execute(
            select(UserBook)
            .where(UserBook.user_id == self._user_id)
            .order_by(UserBook.added_at, UserBook.id)
        )
        return [
            {"title": entry.book.title, "author": entry.book.author}
            for entry in result.scalars().all()
        ]

    async def _find_or_create_book(self, title: str, author: str) -> Book:
        result = await self._session.execute(
            select(Book)
            .where(Book.title == title, Book.author == author)
            .order_by(Book.id)
            .limit(1)
        )
        book = result.scalar_one_or_none()
        if book:
            return book

        # suggested books have no human creator
        book = Book(title=title, author=author)
        self._session.add(book)
        await self._session.flush()
        logger.info("Created book id=%d from recommendation: %s", book.id, title)
        return book

    async def _load(self, ids: list[int]) -> list[Recommendation]:
        result = await self._session.execute(
            select(Recommendation)
            .where(Recommendation.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        by_id = {rec.id: rec for rec in result.scalars().all()}
        return [by_id[i] for i in ids]
