"""Search-grounded research about a scanned contact."""

from scan2meet.config import Settings
from scan2meet.research.base import Researcher, build_research_prompt
from scan2meet.research.gemini import GeminiResearcher
from scan2meet.research.session import ResearchSession


def create_researcher(settings: Settings) -> Researcher:
    """Create the configured researcher."""
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY is not set")
    return GeminiResearcher(
        api_key=settings.gemini_api_key,
        model=settings.research_model,
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout,
    )


__all__ = [
    "GeminiResearcher",
    "Researcher",
    "ResearchSession",
    "build_research_prompt",
    "create_researcher",
]
