"""LLM port — abstract interface for chat-completion providers."""

from abc import ABC, abstractmethod


class LLMNotConfiguredError(RuntimeError):
    """The selected provider is missing required configuration."""


class LLMProviderError(RuntimeError):
    """The provider could not be reached or returned an unusable response."""


class LLMPort(ABC):
    """Abstraction over the chat-completion provider used for recommendations."""

    #: Human-readable model identifier, used in logs.
    model: str = "unknown"

    @abstractmethod
    async def recommend_books(self, history: list[dict], count: int) -> str:
        """
        Ask the model for `count` books similar to the reading history.

        Returns the raw text content of the completion; parsing is the
        caller's job.
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the adapter."""
