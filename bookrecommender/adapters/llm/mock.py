import json
import logging

from bookrecommender.ports.llm import LLMPort
from bookrecommender.prompts.templates import estimate_tokens, render_recommendation_prompt

logger = logging.getLogger(__name__)

CATALOG: tuple[dict[str, str], ...] = (
    {"title": "The Left Hand of Darkness", "author": "Ursula K. Le Guin"},
    {"title": "Station Eleven", "author": "Emily St. John Mandel"},
    {"title": "The Remains of the Day", "author": "Kazuo Ishiguro"},
    {"title": "Piranesi", "author": "Susanna Clarke"},
    {"title": "The Name of the Rose", "author": "Umberto Eco"},
    {"title": "Middlemarch", "author": "George Eliot"},
    {"title": "A Wizard of Earthsea", "author": "Ursula K. Le Guin"},
    {"title": "The Road", "author": "Cormac McCarthy"},
)


class MockLLMAdapter(LLMPort):
    """
    Mock LLM adapter for testing without API access.

    Returns deterministic suggestions from a fixed catalog, skipping
    anything already in the reading history, wrapped in a markdown code
    fence the way chat models tend to answer.
    """

    model = "mock"

    async def recommend_books(self, history: list[dict], count: int) -> str:
        """Return a fenced JSON array of up to `count` recommendations."""
        prompt = render_recommendation_prompt(history, count)
        read = {b["title"].lower() for b in history}
        basis = history[0]["title"] if history else "your reading"

        picks = [
            {
                "title": book["title"],
                "author": book["author"],
                "reason": f"Readers who enjoyed {basis} often like this one.",
            }
            for book in CATALOG
            if book["title"].lower() not in read
        ][:count]

        logger.info(
            "MockLLM: recommend_books called (%d history items, ~%d prompt tokens)",
            len(history),
            estimate_tokens(prompt["user"]),
        )
        return "```json\n" + json.dumps(picks, indent=2) + "\n```"
