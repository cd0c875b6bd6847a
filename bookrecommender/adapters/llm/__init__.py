"""LLM adapter selection."""

import logging

from bookrecommender.config import LLMProvider, Settings
from bookrecommender.ports.llm import LLMPort

logger = logging.getLogger(__name__)

# one adapter (and one HTTP connection pool) per provider configuration
_adapters: dict[tuple, LLMPort] = {}


def build_llm_adapter(settings: Settings) -> LLMPort:
    """
    Instantiate the adapter for the configured provider.

    Raises LLMNotConfiguredError when the provider lacks required settings.
    """
    if settings.llm_provider == LLMProvider.OPENAI:
        from bookrecommender.adapters.llm.openai_adapter import OpenAILLMAdapter

        return OpenAILLMAdapter(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.llm_timeout_seconds,
        )
    if settings.llm_provider == LLMProvider.OLLAMA:
        from bookrecommender.adapters.llm.ollama import OllamaLLMAdapter

        return OllamaLLMAdapter(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            timeout=settings.llm_timeout_seconds,
        )

    from bookrecommender.adapters.llm.mock import MockLLMAdapter

    return MockLLMAdapter()


def get_llm_adapter(settings: Settings) -> LLMPort:
    """Return the shared adapter for the current settings, building it on first use."""
    key = (
        settings.llm_provider,
        settings.openai_api_key,
        settings.openai_model,
        settings.ollama_base_url,
        settings.ollama_model,
        settings.llm_timeout_seconds,
    )
    adapter = _adapters.get(key)
    if adapter is None:
        adapter = _adapters[key] = build_llm_adapter(settings)
        logger.info(
            "LLM adapter ready: provider=%s model=%s",
            settings.llm_provider.value,
            adapter.model,
        )
    return adapter


async def close_llm_adapters() -> None:
    """Close every shared adapter. Called on application shutdown."""
    while _adapters:
        _, adapter = _adapters.popitem()
        await adapter.aclose()
