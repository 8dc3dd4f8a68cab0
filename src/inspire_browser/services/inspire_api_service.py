"""Internal INSPIRE-HEP literature search service."""

from __future__ import annotations

import logging

import httpx

from inspire_browser.action_messages import describe_http_failure
from inspire_browser.errors import SearchError
from inspire_browser.models import DEFAULT_MAX_RESULTS, ResultEntry
from inspire_browser.parsing import parse_inspire_response

logger = logging.getLogger(__name__)

INSPIRE_API_URL = "https://inspirehep.net/api/literature"
INSPIRE_API_TIMEOUT = 30  # Seconds to wait for INSPIRE responses
INSPIRE_FIELDS = (
    "titles,arxiv_eprints,authors.full_name,authors.last_name,publication_info,control_number"
)
USER_AGENT = "inspire-browser/1.0"


def build_search_params(query: str, size: int = DEFAULT_MAX_RESULTS) -> dict[str, str | int]:
    """Query parameters for a literature search, most recent first."""
    return {
        "q": query,
        "sort": "mostrecent",
        "size": size,
        "fields": INSPIRE_FIELDS,
    }


async def search_literature(
    *,
    client: httpx.AsyncClient | None,
    query: str,
    size: int,
    timeout_seconds: int,
    user_agent: str,
) -> list[ResultEntry]:
    """Run one INSPIRE literature search and parse the hits.

    Raises:
        SearchError: On transport failures, HTTP errors or malformed payloads.
    """
    params = build_search_params(query, size)
    headers = {"User-Agent": user_agent, "Accept": "application/json"}

    try:
        if client is not None:
            response = await client.get(
                INSPIRE_API_URL,
                params=params,
                headers=headers,
                timeout=timeout_seconds,
            )
        else:
            async with httpx.AsyncClient() as tmp_client:
                response = await tmp_client.get(
                    INSPIRE_API_URL,
                    params=params,
                    headers=headers,
                    timeout=timeout_seconds,
                )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("INSPIRE search failed for %r: %s", query, exc)
        raise SearchError(
            describe_http_failure(
                "search INSPIRE",
                exc,
                service="INSPIRE",
                retry_hint="edit the query to search again",
            )
        ) from exc

    try:
        entries = parse_inspire_response(response.json())
    except ValueError as exc:
        logger.warning("Malformed INSPIRE response for %r: %s", query, exc)
        raise SearchError("INSPIRE returned an unexpected response.") from exc

    logger.debug("INSPIRE search %r returned %d records", query, len(entries))
    return entries


__all__ = [
    "INSPIRE_API_TIMEOUT",
    "INSPIRE_API_URL",
    "INSPIRE_FIELDS",
    "USER_AGENT",
    "build_search_params",
    "search_literature",
]
