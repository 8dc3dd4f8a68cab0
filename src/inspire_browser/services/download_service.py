"""Internal arXiv preprint download service helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from inspire_browser.action_messages import describe_http_failure
from inspire_browser.errors import DownloadError
from inspire_browser.models import FetchedPreprint
from inspire_browser.parsing import (
    normalize_arxiv_id,
    parse_arxiv_preprint_feed,
    preprint_filename,
    validate_preprint_identity,
)

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
ARXIV_API_TIMEOUT = 30  # Seconds to wait for arXiv API responses
PDF_DOWNLOAD_TIMEOUT = 60  # Seconds per download
USER_AGENT = "inspire-browser/1.0"


async def _resolve_pdf_url(
    client: httpx.AsyncClient, arxiv_id: str, timeout_seconds: int
) -> tuple[str, int]:
    """Look up ``arxiv_id`` and return (pdf_url, version)."""
    response = await client.get(
        ARXIV_API_URL,
        params={"id_list": arxiv_id},
        headers={"User-Agent": USER_AGENT},
        timeout=min(timeout_seconds, ARXIV_API_TIMEOUT),
    )
    response.raise_for_status()
    try:
        link = parse_arxiv_preprint_feed(response.text)
        _basename, version = validate_preprint_identity(link.entry_id, arxiv_id, link.pdf_url)
    except ValueError as exc:
        logger.warning("arXiv lookup for %s rejected: %s", arxiv_id, exc)
        raise DownloadError(f"Could not resolve arXiv:{arxiv_id}: {exc}.") from exc
    return link.pdf_url, version


async def _stream_pdf(
    client: httpx.AsyncClient,
    url: str,
    timeout_seconds: int,
    on_progress: Callable[[int, int | None], None] | None,
) -> bytes:
    chunks: list[bytes] = []
    received = 0
    async with client.stream(
        "GET",
        url,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout_seconds,
        follow_redirects=True,
    ) as response:
        response.raise_for_status()
        length = response.headers.get("Content-Length")
        total = int(length) if length and length.isdigit() else None
        async for chunk in response.aiter_bytes():
            if not chunk:
                continue
            chunks.append(chunk)
            received += len(chunk)
            if on_progress is not None:
                on_progress(received, total)
    return b"".join(chunks)


async def fetch_preprint(
    *,
    client: httpx.AsyncClient | None,
    arxiv_id: str,
    timeout_seconds: int,
    on_progress: Callable[[int, int | None], None] | None = None,
) -> FetchedPreprint:
    """Resolve the current version of ``arxiv_id`` and download its PDF.

    ``on_progress(received, total)`` is called after every chunk; ``total`` is
    ``None`` when the server sends no length.

    Raises:
        DownloadError: On transport failures or an inconsistent arXiv answer.
    """
    requested = normalize_arxiv_id(arxiv_id)
    if not requested:
        raise DownloadError("Could not download: the record has no arXiv identifier.")

    async def _fetch(active_client: httpx.AsyncClient) -> FetchedPreprint:
        pdf_url, version = await _resolve_pdf_url(active_client, requested, timeout_seconds)
        logger.debug("Downloading %s (v%d) from %s", requested, version, pdf_url)
        content = await _stream_pdf(active_client, pdf_url, timeout_seconds, on_progress)
        return FetchedPreprint(
            arxiv_id=requested,
            version=version,
            filename=preprint_filename(requested, version),
            content=content,
        )

    try:
        if client is not None:
            return await _fetch(client)
        async with httpx.AsyncClient() as tmp_client:
            return await _fetch(tmp_client)
    except httpx.HTTPError as exc:
        logger.warning("Download of %s failed: %s", requested, exc)
        raise DownloadError(
            describe_http_failure(
                f"download arXiv:{requested}",
                exc,
                service="arXiv",
                retry_hint="press Enter to retry",
            )
        ) from exc


__all__ = [
    "ARXIV_API_TIMEOUT",
    "ARXIV_API_URL",
    "PDF_DOWNLOAD_TIMEOUT",
    "USER_AGENT",
    "fetch_preprint",
]
