"""AI recommendation routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookrecommender.adapters.llm import get_llm_adapter
from bookrecommender.api.middleware.auth import get_current_user
from bookrecommender.api.schemas import RecommendationResponse
from bookrecommender.config import settings
from bookrecommender.database import get_session
from bookrecommender.domain.models import Recommendation, User
from bookrecommender.ports.llm import LLMNotConfiguredError, LLMPort
from bookrecommender.services.recommendation import RecommendationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recommendations", tags=["Recommendations"])


def get_llm() -> LLMPort:
    """Provide the shared LLM adapter; 503 when it cannot be built."""
    try:
        return get_llm_adapter(settings)
    except LLMNotConfiguredError as exc:
        logger.error("LLM provider %s unavailable: %s", settings.llm_provider.value, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Recommendation service is not configured",
        ) from exc


def _to_response(rec: Recommendation) -> RecommendationResponse:
    return RecommendationResponse(
        id=rec.id,
        book_id=rec.book_id,
        title=rec.book.title,
        author=rec.book.author,
        reason=rec.reason,
        created_at=rec.created_at,
    )


@router.get("", response_model=list[RecommendationResponse])
async def get_recommendations(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    llm: LLMPort = Depends(get_llm),
) -> list[RecommendationResponse]:
    """Ask the LLM for books similar to the current user's library."""
    service = RecommendationService(session, user.id, count=settings.recommendation_count)
    return [_to_response(r) for r in await service.recommend(llm)]


@router.get("/history", response_model=list[RecommendationResponse])
async def get_recommendation_history(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[RecommendationResponse]:
    """Previously generated recommendations, newest first."""
    service = RecommendationService(session, user.id)
    return [_to_response(r) for r in await service.history()]
