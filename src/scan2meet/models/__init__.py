"""Data models for business card information."""

from scan2meet.models.business_card import (
    CARD_FIELDS,
    FIELD_LABELS,
    BusinessCardData,
    Metadata,
    ResearchResult,
    ResearchState,
    ResearchStatus,
    SchedulingLink,
)

__all__ = [
    "CARD_FIELDS",
    "FIELD_LABELS",
    "BusinessCardData",
    "Metadata",
    "ResearchResult",
    "ResearchState",
    "ResearchStatus",
    "SchedulingLink",
]
