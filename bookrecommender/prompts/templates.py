"""
Structured, versioned prompt templates for LLM interactions.

Prompts are immutable dataclass objects so adapters never build inline
strings. The same template works with every provider.
"""

from dataclasses import dataclass, field

# ── Token Estimation ─────────────────────────────────────────────
# Rough estimate: 1 token ≈ 4 characters for English text.

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate token count from character length."""
    return len(text) // CHARS_PER_TOKEN


# ── Prompt Template ──────────────────────────────────────────────


@dataclass(frozen=True)
class PromptTemplate:
    """
    Immutable prompt template with system persona and user message.

    Attributes:
        name:              Unique identifier for logging.
        version:           Version of the prompt text.
        system:            System message defining the LLM persona.
        user_template:     User message template with {variable} placeholders.
        max_tokens:        Maximum output tokens requested from the LLM.
        tags:              Metadata tags for categorization.
    """

    name: str
    version: str
    system: str
    user_template: str
    max_tokens: int = 1024
    tags: tuple[str, ...] = field(default_factory=tuple)

    def render(self, **kwargs: object) -> dict[str, str]:
        """Render template with variables, returning system + user messages."""
        return {
            "system": self.system,
            "user": self.user_template.format(**kwargs),
        }


# ── Book Recommendation Prompt ───────────────────────────────────

RECOMMEND_BOOKS = PromptTemplate(
    name="recommend_books",
    version="1.0.0",
    system="You are a book recommendation engine.",
    user_template=(
        "The user has read the following books: {titles}. "
        "Suggest {count} similar books with title and author. "
        "Output ONLY valid JSON in the following format:\n"
        "[\n"
        '  {{ "title": "Book Title", "author": "Author Name", '
        '"reason": "Why they might like it" }}\n'
        "]"
    ),
    max_tokens=1024,
    tags=("recommendation", "books"),
)


def render_recommendation_prompt(history: list[dict], count: int) -> dict[str, str]:
    """
    Render the recommendation prompt for a reading history.

    Args:
        history: List of dicts with 'title' and 'author' keys.
        count: Number of books to ask for.

    Returns:
        Dict with 'system' and 'user' keys ready for any LLM adapter.
    """
    titles = ", ".join(f"{b['title']} by {b['author']}" for b in history)
    return RECOMMEND_BOOKS.render(titles=titles, count=count)
