"""Scheduling links: a small on-disk registry and URL building."""

import json
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

from pydantic import TypeAdapter, ValidationError

from scan2meet.config import Settings
from scan2meet.models.business_card import BusinessCardData, SchedulingLink

logger = logging.getLogger(__name__)

MAX_LINKS = 3
DEFAULT_LABEL = "Schedule meeting"

_links_adapter = TypeAdapter(list[SchedulingLink])


class SchedulingLinkStore:
    """User-managed scheduling links persisted as a JSON list.

    Every mutation rewrites the whole file. At most ``MAX_LINKS`` links are
    kept.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path).expanduser()
        self._links = self.load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def links(self) -> list[SchedulingLink]:
        return list(self._links)

    @property
    def is_full(self) -> bool:
        return len(self._links) >= MAX_LINKS

    def load(self) -> list[SchedulingLink]:
        """Read links from disk; a missing or unreadable file yields no links."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Could not read scheduling links from %s: %s", self._path, e)
            return []

        try:
            return _links_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed scheduling links file %s: %s", self._path, e)
            return []

    def get(self, link_id: str) -> SchedulingLink | None:
        return next((link for link in self._links if link.id == link_id), None)

    def add(self, label: str, url: str) -> SchedulingLink | None:
        """Add a link; returns None when the store is already full."""
        label, url = _clean(label, url)
        if self.is_full:
            logger.info("Scheduling link limit (%d) reached", MAX_LINKS)
            return None
        link = SchedulingLink(label=label, url=url)
        self._links.append(link)
        self._save()
        return link

    def update(self, link_id: str, label: str, url: str) -> SchedulingLink | None:
        """Replace a link's label and URL; returns None for an unknown id."""
        label, url = _clean(label, url)
        link = self.get(link_id)
        if link is None:
            return None
        link.label = label
        link.url = url
        self._save()
        return link

    def remove(self, link_id: str) -> bool:
        before = len(self._links)
        self._links = [link for link in self._links if link.id != link_id]
        if len(self._links) == before:
            return False
        self._save()
        return True

    def _save(self) -> None:
        """Write the links next to the target, then swap the file into place."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(
            [link.model_dump() for link in self._links],
            indent=2,
            ensure_ascii=False,
        )
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp.write(content)
        tmp_path = Path(tmp.name)
        try:
            tmp_path.replace(self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


def _clean(label: str, url: str) -> tuple[str, str]:
    url = (url or "").strip()
    if not url:
        raise ValueError("Scheduling link URL must not be empty")
    return (label or "").strip() or DEFAULT_LABEL, url


@dataclass(frozen=True)
class QueryParamNames:
    """Query parameter names the scheduling page expects."""

    last_name: str = "lastName"
    first_name: str = "firstName"
    full_name: str = "fullName"
    department: str = "department"
    company: str = "company"
    email: str = "email"
    phone: str = "phone"

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueryParamNames":
        return cls(
            last_name=settings.query_param_last_name,
            first_name=settings.query_param_first_name,
            full_name=settings.query_param_full_name,
            department=settings.query_param_department,
            company=settings.query_param_company,
            email=settings.query_param_email,
            phone=settings.query_param_phone,
        )


def build_scheduling_url(
    base_url: str,
    card: BusinessCardData,
    param_names: QueryParamNames | None = None,
) -> str:
    """Append the card's non-empty fields to a scheduling page URL."""
    names = param_names or QueryParamNames()
    values = [
        (names.last_name, card.last_name),
        (names.first_name, card.first_name),
        (names.full_name, card.full_name),
        (names.department, card.department),
        (names.company, card.company),
        (names.email, card.email),
        (names.phone, card.phone),
    ]
    query = urlencode([(key, value) for key, value in values if value])
    if not query:
        return base_url
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{query}"
