"""Batch scanning of multiple business card images."""

import csv
import io
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from scan2meet.capture import IMAGE_MIME_TYPES
from scan2meet.models.business_card import CARD_FIELDS
from scan2meet.scanner import BusinessCardScanner

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Result of scanning multiple images."""

    results: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    total_time_ms: float = 0.0

    @property
    def total(self) -> int:
        """Number of images attempted."""
        return len(self.results) + len(self.errors)

    @property
    def succeeded(self) -> int:
        """Number of images that produced a card."""
        return len(self.results)

    @property
    def failed(self) -> int:
        """Number of images that raised during the scan."""
        return len(self.errors)


class BatchProcessor:
    """Scan multiple card images, isolating failures per image."""

    IMAGE_EXTENSIONS = set(IMAGE_MIME_TYPES)

    def __init__(self, scanner: BusinessCardScanner):
        self._scanner = scanner

    def process(self, image_paths: list[Path]) -> BatchResult:
        """
        Scan each image in turn; one failure does not stop the batch.

        Args:
            image_paths: Image paths to scan.

        Returns:
            BatchResult with contact fields per image and per-image errors.
        """
        start_time = time.perf_counter()
        results: list[dict] = []
        errors: list[dict] = []

        for path in image_paths:
            try:
                card = self._scanner.scan_path(path)
            except Exception as e:
                logger.warning("Failed to scan %s: %s", path, e)
                errors.append({"image_path": str(path), "error": str(e)})
                continue
            row = card.contact_fields()
            row["image_path"] = str(path)
            results.append(row)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return BatchResult(
            results=results,
            errors=errors,
            total_time_ms=round(elapsed_ms, 2),
        )

    def collect_images(self, inputs: list[Path]) -> list[Path]:
        """Expand files and directories into a sorted list of image paths."""
        images: set[Path] = set()

        for path in inputs:
            if path.is_dir():
                images.update(
                    p
                    for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in self.IMAGE_EXTENSIONS
                )
            elif path.is_file() and path.suffix.lower() in self.IMAGE_EXTENSIONS:
                images.add(path)

        return sorted(images)

    def to_json(self, result: BatchResult) -> str:
        """Format as JSON with a summary block, the cards and the errors."""
        output = {
            "metadata": {
                "total": result.total,
                "succeeded": result.succeeded,
                "failed": result.failed,
                "total_time_ms": result.total_time_ms,
            },
            "results": result.results,
            "errors": result.errors,
        }
        return json.dumps(output, indent=2, ensure_ascii=False)

    def to_csv(self, result: BatchResult) -> str:
        """Format as CSV: one row per image, errors after successes."""
        output = io.StringIO()
        fieldnames = ["image_path", *CARD_FIELDS, "error"]
        writer = csv.DictWriter(output, fieldnames=fieldnames, lineterminator="\n")
        writer.writeheader()

        for item in result.results:
            row = {k: item.get(k, "") for k in fieldnames}
            row["error"] = ""
            writer.writerow(row)

        for item in result.errors:
            row = {k: "" for k in fieldnames}
            row["image_path"] = item["image_path"]
            row["error"] = item["error"]
            writer.writerow(row)

        return output.getvalue()
