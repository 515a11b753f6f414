"""Shared fixtures."""

import pytest

from scan2meet.config import get_settings

_ENV_VARS = (
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "SCAN2MEET_GEMINI_API_KEY",
    "SCAN2MEET_OPENAI_API_KEY",
    "SCAN2MEET_EXTRACTOR_BACKEND",
    "SCAN2MEET_LINKS_PATH",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep real API keys and cached settings out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
