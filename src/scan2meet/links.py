"""Outbound deep links built from card fields."""

from urllib.parse import quote_plus

from scan2meet.models.business_card import BusinessCardData


def google_search_url(query: str) -> str | None:
    if not query:
        return None
    return f"https://www.google.com/search?q={quote_plus(query)}"


def facebook_search_url(query: str) -> str | None:
    if not query:
        return None
    return f"https://www.facebook.com/search_results/?q={quote_plus(query)}"


def tel_url(phone: str) -> str | None:
    if not phone:
        return None
    return f"tel:{phone.replace(' ', '')}"


def mailto_url(email: str) -> str | None:
    return f"mailto:{email}" if email else None


def website_url(website: str) -> str | None:
    """Website as an absolute URL; bare domains get an https scheme."""
    if not website:
        return None
    return website if website.startswith("http") else f"https://{website}"


def company_search_query(card: BusinessCardData) -> str | None:
    return card.company or None


def department_search_query(card: BusinessCardData) -> str | None:
    if not card.department:
        return None
    return f"{card.company} {card.department}".strip()
