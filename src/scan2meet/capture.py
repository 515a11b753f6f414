"""Card images as they arrive from the camera, an upload or a file."""

import base64
import binascii
import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

from scan2meet.preprocessing import CardCropper

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".heic": "image/heic",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*?)?;base64,(?P<data>.*)$", re.S)


@dataclass(frozen=True)
class CardImage:
    """Encoded image bytes plus the MIME type the model should be told."""

    data: bytes
    mime_type: str = "image/jpeg"
    filename: str = "card.jpg"

    @classmethod
    def from_path(cls, path: str | Path) -> "CardImage":
        """
        Read an image file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the suffix is not a supported image type.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {path}")
        mime_type = IMAGE_MIME_TYPES.get(path.suffix.lower())
        if mime_type is None:
            raise ValueError(f"Unsupported image type: {path.suffix or path.name}")
        return cls.from_bytes(path.read_bytes(), mime_type=mime_type, filename=path.name)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        mime_type: str | None = None,
        filename: str = "card.jpg",
    ) -> "CardImage":
        """Wrap raw bytes, e.g. a Streamlit camera or upload buffer."""
        if not data:
            raise ValueError("Image data is empty")
        if not mime_type:
            mime_type = mimetypes.guess_type(filename)[0] or "image/jpeg"
        return cls(data=bytes(data), mime_type=mime_type, filename=filename)

    @classmethod
    def from_data_url(cls, url: str, filename: str = "capture.jpg") -> "CardImage":
        """Decode a ``data:<mime>;base64,<payload>`` URL."""
        match = _DATA_URL_RE.match(url.strip())
        if not match:
            raise ValueError("Not a base64 data URL")
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
        return cls.from_bytes(data, mime_type=match.group("mime"), filename=filename)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


def preprocess(image: CardImage, cropper: CardCropper) -> CardImage:
    """Crop and shrink the card; return the image unchanged if nothing applies."""
    cropped = cropper.crop_bytes(image.data)
    if cropped is None:
        logger.debug("Sending %s without cropping", image.filename)
        return image

    stem = Path(image.filename).stem or "card"
    logger.debug(
        "Cropped %s from %d to %d bytes", image.filename, len(image.data), len(cropped)
    )
    return CardImage(data=cropped, mime_type="image/jpeg", filename=f"{stem}.jpg")
