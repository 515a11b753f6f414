"""Image preprocessing applied before upload."""

from scan2meet.preprocessing.card_cropper import CardCropper, order_corners

__all__ = ["CardCropper", "order_corners"]
