"""Thin HTTP helpers shared by the hosted-model clients."""

import logging
from typing import Any

import httpx

from scan2meet.errors import Scan2MeetError

logger = logging.getLogger(__name__)


def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    service: str,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    timeout: float = 60.0,
    error_cls: type[Scan2MeetError] = Scan2MeetError,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded JSON body.

    Transport failures, non-2xx responses and non-JSON bodies are raised as
    ``error_cls`` with the original exception chained.
    """
    logger.debug("POST %s (%s)", url, service)
    with httpx.Client(timeout=timeout, transport=transport) as client:
        try:
            resp = client.post(url, json=payload, headers=headers, params=params)
            resp.raise_for_status()
        except httpx.ConnectError as e:
            raise error_cls(f"Cannot connect to {service} at {url}") from e
        except httpx.TimeoutException as e:
            raise error_cls(f"{service} request timed out after {timeout:.0f}s") from e
        except httpx.HTTPStatusError as e:
            raise error_cls(
                f"{service} API error ({e.response.status_code}): {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise error_cls(f"{service} request failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise error_cls(f"{service} returned a non-JSON response") from e
    logger.debug("%s responded with HTTP %d", service, resp.status_code)
    return data


def gemini_candidate(data: dict[str, Any]) -> dict[str, Any]:
    """First candidate of a generateContent response, or an empty dict."""
    candidates = data.get("candidates") or []
    return candidates[0] if candidates else {}


def gemini_text(data: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    parts = gemini_candidate(data).get("content", {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))
