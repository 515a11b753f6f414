"""Business card capture with vision-model extraction and contact research."""

from scan2meet.capture import CardImage
from scan2meet.models.business_card import BusinessCardData
from scan2meet.scanner import BusinessCardScanner

__version__ = "0.1.0"
__all__ = ["BusinessCardData", "BusinessCardScanner", "CardImage"]
