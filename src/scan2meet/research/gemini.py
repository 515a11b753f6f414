"""Gemini researcher grounded with Google Search."""

import logging

import httpx

from scan2meet.api import gemini_candidate, gemini_text, post_json
from scan2meet.errors import ResearchError
from scan2meet.extractor.gemini import GEMINI_BASE_URL
from scan2meet.models.business_card import ResearchResult
from scan2meet.research.base import Researcher, build_research_prompt

logger = logging.getLogger(__name__)


class GeminiResearcher(Researcher):
    """Researcher using Gemini with the ``google_search`` tool enabled."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("A Gemini API key is required")
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    def research(
        self, company: str, full_name: str, department: str = ""
    ) -> ResearchResult:
        if not company.strip() or not full_name.strip():
            raise ResearchError("Research needs both a company and a name")

        logger.info("Researching %s at %s", full_name, company)
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": build_research_prompt(company, full_name, department)}
                    ],
                }
            ],
            "tools": [{"google_search": {}}],
        }
        data = post_json(
            f"{self._base_url}/models/{self._model}:generateContent",
            payload,
            service="Gemini",
            headers={"x-goog-api-key": self._api_key},
            timeout=self._timeout,
            error_cls=ResearchError,
            transport=self._transport,
        )

        grounding = gemini_candidate(data).get("groundingMetadata") or {}
        sources = (grounding.get("searchEntryPoint") or {}).get("renderedContent")
        return ResearchResult(summary=gemini_text(data), sources=sources or None)
