"""Vision-model extractors for structured data extraction from card images."""

from scan2meet.config import Settings
from scan2meet.extractor.base import Extractor, extract_json, parse_card
from scan2meet.extractor.gemini import GeminiExtractor
from scan2meet.extractor.openai import OpenAIExtractor

BACKENDS = ("gemini", "openai")


def split_backend(spec: str) -> tuple[str, str]:
    """Split ``<backend>[:<model>]``; the model is empty when not given."""
    backend, _, model = spec.partition(":")
    return backend.strip().lower(), model.strip()


def create_extractor(spec: str, settings: Settings) -> Extractor:
    """Create an extractor from ``<backend>`` or ``<backend>:<model>``."""
    backend, model = split_backend(spec)

    if backend == "gemini":
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is not set")
        return GeminiExtractor(
            api_key=settings.gemini_api_key,
            model=model or settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
        )
    if backend == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        return OpenAIExtractor(
            api_key=settings.openai_api_key,
            model=model or settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout,
        )
    raise ValueError(
        f"Unknown extractor backend: {backend}. Use one of: {', '.join(BACKENDS)}"
    )


__all__ = [
    "BACKENDS",
    "Extractor",
    "GeminiExtractor",
    "OpenAIExtractor",
    "create_extractor",
    "extract_json",
    "parse_card",
    "split_backend",
]
