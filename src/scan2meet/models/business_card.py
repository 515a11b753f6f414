"""Pydantic models for business card data and research state."""

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CARD_FIELDS = (
    "last_name",
    "first_name",
    "position",
    "department",
    "company",
    "phone",
    "email",
    "address",
    "website",
)

FIELD_LABELS = {
    "last_name": "Last name",
    "first_name": "First name",
    "position": "Position",
    "department": "Department",
    "company": "Company",
    "phone": "Phone",
    "email": "Email",
    "address": "Address",
    "website": "Website",
}


class Metadata(BaseModel):
    """Processing metadata."""

    extractor_backend: str = Field(description="Extractor used")
    processing_time_ms: float = Field(description="Total processing time in ms")


class BusinessCardData(BaseModel):
    """Contact fields read from a single business card.

    Every field is a plain string and an empty string means "not on the
    card". The model's JSON uses camelCase for the name fields, which are
    accepted as aliases.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    last_name: str = Field(default="", alias="lastName", description="Family name")
    first_name: str = Field(default="", alias="firstName", description="Given name")
    position: str = Field(default="", description="Job title or position")
    department: str = Field(default="", description="Department or division")
    company: str = Field(default="", description="Company name")
    phone: str = Field(default="", description="Phone number")
    email: str = Field(default="", description="Email address")
    address: str = Field(default="", description="Postal address")
    website: str = Field(default="", description="Website URL")
    metadata: Metadata | None = Field(default=None, description="Processing metadata")

    @field_validator(*CARD_FIELDS, mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        """Collapse null, lists and numbers into a stripped string."""
        if value is None:
            return ""
        if isinstance(value, list):
            value = next((v for v in value if v not in (None, "")), "")
        return str(value).strip()

    @property
    def full_name(self) -> str:
        """Family name then given name, separated by a space."""
        if self.last_name and self.first_name:
            return f"{self.last_name} {self.first_name}"
        return self.last_name or self.first_name

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in CARD_FIELDS)

    def update(self, **fields: Any) -> "BusinessCardData":
        """Apply user edits in place and return self."""
        unknown = set(fields) - set(CARD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown card field(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self, name, value)
        return self

    def contact_fields(self) -> dict[str, str]:
        """The nine contact fields, without metadata."""
        return self.model_dump(include=set(CARD_FIELDS))


class ResearchResult(BaseModel):
    """Summary returned by a search-grounded research call."""

    summary: str = Field(default="", description="Markdown summary")
    sources: str | None = Field(
        default=None, description="Rendered search entry point HTML"
    )


class ResearchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ResearchState(BaseModel):
    """Current state of the research panel."""

    status: ResearchStatus = ResearchStatus.IDLE
    data: ResearchResult | None = None
    error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is ResearchStatus.LOADING

    @classmethod
    def idle(cls) -> "ResearchState":
        return cls()

    @classmethod
    def loading(cls) -> "ResearchState":
        return cls(status=ResearchStatus.LOADING)

    @classmethod
    def loaded(cls, data: ResearchResult) -> "ResearchState":
        return cls(status=ResearchStatus.LOADED, data=data)

    @classmethod
    def failed(cls, error: str) -> "ResearchState":
        return cls(status=ResearchStatus.ERROR, error=error)


class SchedulingLink(BaseModel):
    """A user-configured scheduling page."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    label: str
    url: str
