"""OpenAI vision extractor."""

import logging

import httpx

from scan2meet.api import post_json
from scan2meet.capture import CardImage
from scan2meet.errors import ExtractionError
from scan2meet.extractor.base import EXTRACTION_PROMPT, Extractor, parse_card
from scan2meet.models.business_card import BusinessCardData

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIExtractor(Extractor):
    """Extractor using the chat completions API in JSON mode."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = OPENAI_BASE_URL,
        timeout: float = 60.0,
        max_tokens: int = 1000,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("An OpenAI API key is required")
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._transport = transport

    @property
    def name(self) -> str:
        return f"openai:{self._model}"

    def extract(self, image: CardImage) -> BusinessCardData:
        """Extract business card data using OpenAI."""
        logger.info("Analyzing %s with %s", image.filename, self.name)
        content = self._call_openai(image)
        return parse_card(content)

    def _call_openai(self, image: CardImage) -> str:
        payload = {
            "model": self._model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {"type": "image_url", "image_url": {"url": image.to_data_url()}},
                    ],
                }
            ],
            "max_tokens": self._max_tokens,
            "response_format": {"type": "json_object"},
        }
        data = post_json(
            f"{self._base_url}/chat/completions",
            payload,
            service="OpenAI",
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
            error_cls=ExtractionError,
            transport=self._transport,
        )
        choices = data.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise ExtractionError("OpenAI returned an empty response")
        return content
