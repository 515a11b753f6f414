"""Crop the card out of a photo before it is uploaded."""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class CardCropper:
    """Find the card in a photo, flatten it and shrink it for upload.

    The card is taken to be the largest convex quadrilateral whose area is
    a plausible share of the frame. A bright-region mask is tried first
    since most cards are lighter than the table they lie on; plain Canny
    edges are the second attempt.
    """

    def __init__(
        self,
        max_dim: int = 1600,
        min_area_ratio: float = 0.05,
        max_area_ratio: float = 0.9,
        epsilon_factor: float = 0.02,
        jpeg_quality: int = 90,
    ):
        """
        Args:
            max_dim: Longest side of the image sent to the model, in pixels.
            min_area_ratio: Smallest card area as a share of the frame.
            max_area_ratio: Largest card area as a share of the frame.
            epsilon_factor: Polygon approximation tolerance relative to perimeter.
            jpeg_quality: Quality used when re-encoding the result.
        """
        self._max_dim = max_dim
        self._min_area_ratio = min_area_ratio
        self._max_area_ratio = max_area_ratio
        self._epsilon_factor = epsilon_factor
        self._jpeg_quality = jpeg_quality

    @property
    def max_dim(self) -> int:
        return self._max_dim

    def crop_bytes(self, data: bytes) -> bytes | None:
        """
        Crop an encoded image and return it as JPEG bytes.

        Returns None when the bytes cannot be decoded, or when no card was
        found and the image is already small enough to send as is.
        """
        buf = np.frombuffer(data, dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
        if img is None:
            logger.warning("Could not decode image (%d bytes)", len(data))
            return None

        result = self.crop(img)
        if result is None:
            return None

        ok, encoded = cv2.imencode(
            ".jpg", result, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality]
        )
        if not ok:
            logger.warning("JPEG encoding failed for cropped card")
            return None
        return encoded.tobytes()

    def crop(self, img: np.ndarray | None) -> np.ndarray | None:
        """Crop a BGR array; see :meth:`crop_bytes` for the None cases."""
        if img is None or img.size == 0:
            return None

        quad = self.find_card(img)
        if quad is not None:
            return self._shrink(self._flatten(img, quad))

        if max(img.shape[:2]) > self._max_dim:
            logger.debug("No card outline found, downscaling whole frame")
            return self._shrink(img)
        return None

    def find_card(self, img: np.ndarray) -> np.ndarray | None:
        """Return the card outline as a (4, 2) float32 array in image coordinates."""
        h, w = img.shape[:2]
        scale = min(1.0, 1000 / max(h, w))
        small = cv2.resize(img, (int(w * scale), int(h * scale))) if scale < 1.0 else img

        for mask_fn in (self._bright_mask, self._edge_mask):
            contours, _ = cv2.findContours(
                mask_fn(small), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
            )
            quad = self._largest_quad(contours, small.shape[0] * small.shape[1])
            if quad is not None:
                logger.debug("Card outline found with %s", mask_fn.__name__)
                return quad.reshape(4, 2).astype(np.float32) / scale
        return None

    def _bright_mask(self, img: np.ndarray) -> np.ndarray:
        lightness = cv2.cvtColor(img, cv2.COLOR_BGR2LAB)[:, :, 0]
        _, mask = cv2.threshold(lightness, 180, 255, cv2.THRESH_BINARY)
        kernel = np.ones((7, 7), np.uint8)
        mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel, iterations=3)
        return cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel, iterations=2)

    def _edge_mask(self, img: np.ndarray) -> np.ndarray:
        gray = cv2.GaussianBlur(cv2.cvtColor(img, cv2.COLOR_BGR2GRAY), (5, 5), 0)
        edges = cv2.Canny(gray, 50, 150)
        return cv2.dilate(edges, np.ones((3, 3), np.uint8), iterations=2)

    def _largest_quad(self, contours, frame_area: int) -> np.ndarray | None:
        best, best_area = None, 0.0
        for contour in contours:
            area = cv2.contourArea(contour)
            if not (
                frame_area * self._min_area_ratio
                <= area
                <= frame_area * self._max_area_ratio
            ):
                continue
            approx = cv2.approxPolyDP(
                contour, self._epsilon_factor * cv2.arcLength(contour, True), True
            )
            if len(approx) == 4 and cv2.isContourConvex(approx) and area > best_area:
                best, best_area = approx, area
        return best

    def _flatten(self, img: np.ndarray, quad: np.ndarray) -> np.ndarray:
        corners = order_corners(quad)
        tl, tr, br, bl = corners
        width = int(max(np.linalg.norm(tr - tl), np.linalg.norm(br - bl), 100))
        height = int(max(np.linalg.norm(bl - tl), np.linalg.norm(br - tr), 60))
        target = np.array(
            [[0, 0], [width - 1, 0], [width - 1, height - 1], [0, height - 1]],
            dtype=np.float32,
        )
        matrix = cv2.getPerspectiveTransform(corners, target)
        return cv2.warpPerspective(img, matrix, (width, height))

    def _shrink(self, img: np.ndarray) -> np.ndarray:
        h, w = img.shape[:2]
        if max(h, w) <= self._max_dim:
            return img
        factor = self._max_dim / max(h, w)
        return cv2.resize(
            img, (int(w * factor), int(h * factor)), interpolation=cv2.INTER_AREA
        )


def order_corners(pts: np.ndarray) -> np.ndarray:
    """Order four points as top-left, top-right, bottom-right, bottom-left."""
    pts = pts.reshape(4, 2).astype(np.float32)
    total = pts.sum(axis=1)
    diff = np.diff(pts, axis=1).ravel()
    return np.array(
        [
            pts[np.argmin(total)],
            pts[np.argmin(diff)],
            pts[np.argmax(total)],
            pts[np.argmax(diff)],
        ],
        dtype=np.float32,
    )
