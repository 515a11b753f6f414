"""Gemini vision extractor."""

import logging

import httpx

from scan2meet.api import gemini_text, post_json
from scan2meet.capture import CardImage
from scan2meet.errors import ExtractionError
from scan2meet.extractor.base import EXTRACTION_PROMPT, Extractor, parse_card
from scan2meet.models.business_card import BusinessCardData

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiExtractor(Extractor):
    """Extractor using Gemini ``generateContent`` with an inline image."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize Gemini extractor.

        Args:
            api_key: Gemini API key.
            model: Gemini model name (e.g., "gemini-2.0-flash").
            base_url: Generative Language API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
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

    def extract(self, image: CardImage) -> BusinessCardData:
        """Extract business card data using Gemini."""
        logger.info("Analyzing %s with %s", image.filename, self.name)
        text = self._call_gemini(image)
        return parse_card(text)

    def _call_gemini(self, image: CardImage) -> str:
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": EXTRACTION_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": image.mime_type,
                                "data": image.to_base64(),
                            }
                        },
                    ],
                }
            ],
        }
        data = post_json(
            f"{self._base_url}/models/{self._model}:generateContent",
            payload,
            service="Gemini",
            headers={"x-goog-api-key": self._api_key},
            timeout=self._timeout,
            error_cls=ExtractionError,
            transport=self._transport,
        )
        text = gemini_text(data)
        if not text:
            raise ExtractionError("Gemini returned no text for the card image")
        return text
