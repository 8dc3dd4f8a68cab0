"""Service interfaces + default adapters consumed by the request pipeline."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

from inspire_browser.models import DEFAULT_MAX_RESULTS, FetchedPreprint, ResultEntry
from inspire_browser.services import download_service as _download
from inspire_browser.services import inspire_api_service as _inspire_api

ProgressCallback = Callable[[int, int | None], None]


@runtime_checkable
class SearchService(Protocol):
    """Remote literature search. Raises ``SearchError`` on failure."""

    async def search(self, query: str) -> list[ResultEntry]:
        """Return the ranked records matching ``query``."""
        ...


@runtime_checkable
class FetchService(Protocol):
    """Remote preprint fetch. Raises ``DownloadError`` on failure."""

    async def fetch(
        self,
        ref: str,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> FetchedPreprint:
        """Download the preprint identified by ``ref``."""
        ...


@runtime_checkable
class PreprintSink(Protocol):
    """Where fetched preprints end up (local library + viewer)."""

    async def lookup(self, ref: str) -> Path | None:
        """Return the stored file for ``ref`` if it was downloaded before."""
        ...

    async def store(self, preprint: FetchedPreprint) -> Path:
        """Persist a fetched preprint and return its path."""
        ...

    async def open(self, path: Path) -> None:
        """Open a stored preprint for the user."""
        ...

    async def record_results(self, entries: Sequence[ResultEntry]) -> None:
        """Remember search records; must never raise."""
        ...


class DefaultSearchService:
    """Default adapter that delegates to the function-based INSPIRE service."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        timeout_seconds: int = _inspire_api.INSPIRE_API_TIMEOUT,
    ) -> None:
        self.client = client
        self.max_results = max_results
        self.timeout_seconds = timeout_seconds

    async def search(self, query: str) -> list[ResultEntry]:
        return await _inspire_api.search_literature(
            client=self.client,
            query=query,
            size=self.max_results,
            timeout_seconds=self.timeout_seconds,
            user_agent=_inspire_api.USER_AGENT,
        )


class DefaultFetchService:
    """Default adapter that delegates to the function-based download service."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: int = _download.PDF_DOWNLOAD_TIMEOUT,
    ) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def fetch(
        self,
        ref: str,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> FetchedPreprint:
        return await _download.fetch_preprint(
            client=self.client,
            arxiv_id=ref,
            timeout_seconds=self.timeout_seconds,
            on_progress=on_progress,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated capabilities handed to the request pipeline."""

    search: SearchService
    fetch: FetchService
    sink: PreprintSink

    def attach_client(self, client: httpx.AsyncClient | None) -> None:
        """Share one pooled HTTP client with the default adapters."""
        for service in (self.search, self.fetch):
            if isinstance(service, DefaultSearchService | DefaultFetchService):
                service.client = client


def build_default_app_services(
    *,
    sink: PreprintSink,
    max_results: int = DEFAULT_MAX_RESULTS,
    client: httpx.AsyncClient | None = None,
) -> AppServices:
    """Build default services backed by the function-based service modules."""
    return AppServices(
        search=DefaultSearchService(client=client, max_results=max_results),
        fetch=DefaultFetchService(client=client),
        sink=sink,
    )


__all__ = [
    "AppServices",
    "DefaultFetchService",
    "DefaultSearchService",
    "FetchService",
    "PreprintSink",
    "ProgressCallback",
    "SearchService",
    "build_default_app_services",
]
