"""Abstract base class for card extractors and shared response parsing."""

import json
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError

from scan2meet.capture import CardImage
from scan2meet.errors import ExtractionError
from scan2meet.models.business_card import BusinessCardData

EXTRACTION_PROMPT = """This image is a business card. Extract the following fields and return them as JSON:
- lastName: family name
- firstName: given name
- position: job title
- department: department name
- company: company name
- phone: phone number
- email: email address
- address: postal address
- website: website URL

Return ONLY the JSON object, with no other text.
If a field is not on the card, use an empty string "" for it.
Always split the person's name into lastName and firstName. For Japanese names the
family name comes first: in "山田 太郎", "山田" is lastName and "太郎" is firstName.
department means an organisational unit such as "Sales", "Engineering" or "Marketing"."""

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class Extractor(ABC):
    """Abstract base class for vision-model extractors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this extractor."""
        ...

    @abstractmethod
    def extract(self, image: CardImage) -> BusinessCardData:
        """
        Extract contact fields from a business card image.

        Args:
            image: The encoded card image.

        Returns:
            BusinessCardData with the fields found on the card.

        Raises:
            ExtractionError: If the request fails or the response is invalid.
        """
        ...


def extract_json(text: str) -> str:
    """Pull the JSON object out of free-form model text."""
    block = _CODE_BLOCK_RE.search(text)
    if block and "{" in block.group(1):
        return block.group(1).strip()

    match = _OBJECT_RE.search(text)
    if match:
        return match.group(0)

    raise ExtractionError("No JSON object found in model response")


def parse_card(text: str) -> BusinessCardData:
    """Parse a model response into BusinessCardData.

    The whole text is tried as JSON first; if that fails the embedded
    object is located with :func:`extract_json`.
    """
    if not text or not text.strip():
        raise ExtractionError("Model response is empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = json.loads(extract_json(text))
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Invalid JSON response from model: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError(
            f"Expected a JSON object from model, got {type(data).__name__}"
        )
    # metadata is filled in by the scanner, never by the model
    data.pop("metadata", None)
    try:
        return BusinessCardData.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Unexpected fields in model response: {e}") from e
