import logging

from openai import AsyncOpenAI, OpenAIError

from bookrecommender.ports.llm import LLMNotConfiguredError, LLMPort, LLMProviderError
from bookrecommender.prompts.templates import (
    RECOMMEND_BOOKS,
    render_recommendation_prompt,
)

logger = logging.getLogger(__name__)


class OpenAILLMAdapter(LLMPort):
    """LLM adapter using OpenAI API (GPT-4o, GPT-4o-mini, etc.)."""

    def __init__(self, api_key: str, model: str, timeout: float = 60.0) -> None:
        if not api_key:
            raise LLMNotConfiguredError("OpenAI API key is not configured")
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model

    async def _generate(self, system: str, user: str, max_tokens: int) -> str:
        """Send a chat completion request to OpenAI."""
        logger.info("OpenAI request: model=%s, max_tokens=%d", self.model, max_tokens)
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=0.7,
            )
        except OpenAIError as exc:
            raise LLMProviderError(f"OpenAI request failed: {exc}") from exc
        result = resp.choices[0].message.content or ""
        logger.info("OpenAI response: %d chars", len(result))
        return result

    async def recommend_books(self, history: list[dict], count: int) -> str:
        """Generate book recommendations via OpenAI."""
        prompt = render_recommendation_prompt(history, count)
        return await self._generate(
            prompt["system"], prompt["user"], RECOMMEND_BOOKS.max_tokens
        )

    async def aclose(self) -> None:
        await self._client.close()
