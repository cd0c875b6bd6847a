import logging

import httpx

from bookrecommender.ports.llm import LLMPort, LLMProviderError
from bookrecommender.prompts.templates import (
    RECOMMEND_BOOKS,
    render_recommendation_prompt,
)

logger = logging.getLogger(__name__)


class OllamaLLMAdapter(LLMPort):
    """LLM adapter using a local Ollama instance."""

    def __init__(self, base_url: str, model: str, timeout: float = 180.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.model = model

    async def _generate(self, system: str, user: str, max_tokens: int) -> str:
        """Send a chat completion request to Ollama."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {"num_predict": max_tokens},
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            logger.info("Ollama request: model=%s, max_tokens=%d", self.model, max_tokens)
            try:
                resp = await client.post(f"{self._base_url}/api/chat", json=payload)
                resp.raise_for_status()
                result = resp.json()["message"]["content"]
            except (httpx.HTTPError, KeyError, ValueError) as exc:
                raise LLMProviderError(f"Ollama request failed: {exc}") from exc
            logger.info("Ollama response: %d chars", len(result))
            return result

    async def recommend_books(self, history: list[dict], count: int) -> str:
        """Generate book recommendations via Ollama."""
        prompt = render_recommendation_prompt(history, count)
        return await self._generate(
            prompt["system"], prompt["user"], RECOMMEND_BOOKS.max_tokens
        )
