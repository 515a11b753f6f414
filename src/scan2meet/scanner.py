"""Capture-to-contact pipeline."""

import logging
import time
from pathlib import Path

from scan2meet.capture import CardImage, preprocess
from scan2meet.extractor.base import Extractor
from scan2meet.models.business_card import BusinessCardData, Metadata
from scan2meet.preprocessing import CardCropper

logger = logging.getLogger(__name__)


class BusinessCardScanner:
    """Main controller for turning a card image into contact fields."""

    def __init__(self, extractor: Extractor, cropper: CardCropper | None = None):
        """
        Initialize the scanner.

        Args:
            extractor: Vision-model extractor that reads the card.
            cropper: Optional cropper applied before upload.
        """
        self._extractor = extractor
        self._cropper = cropper

    @property
    def extractor(self) -> Extractor:
        return self._extractor

    def scan(self, image: CardImage) -> BusinessCardData:
        """
        Read the contact fields from a card image.

        Args:
            image: Card image from the camera, an upload or a file.

        Returns:
            BusinessCardData with processing metadata attached.

        Raises:
            ExtractionError: If the model call or response parsing fails.
        """
        start_time = time.perf_counter()

        if self._cropper is not None:
            image = preprocess(image, self._cropper)

        card = self._extractor.extract(image)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        card.metadata = Metadata(
            extractor_backend=self._extractor.name,
            processing_time_ms=round(elapsed_ms, 2),
        )
        logger.info("Scanned %s in %.0fms", image.filename, elapsed_ms)
        return card

    def scan_path(self, image_path: str | Path) -> BusinessCardData:
        """Read a card from an image file."""
        return self.scan(CardImage.from_path(image_path))
