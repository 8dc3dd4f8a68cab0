"""Shared test fixtures for INSPIRE Browser tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from inspire_browser.models import FetchedPreprint, ResultEntry, UserConfig
from inspire_browser.services.interfaces import AppServices

# ── Fakes for the pipeline capabilities ──────────────────────────────────────


class FakeSearch:
    """Search double: canned responses per query, optional failure."""

    def __init__(self, responses: dict[str, Sequence[ResultEntry]] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def search(self, query: str) -> list[ResultEntry]:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return list(self.responses.get(query, ()))


class FakeFetch:
    """Fetch double; set ``gate`` to hold the download open until released."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.version = 2

    async def fetch(self, ref: str, *, on_progress=None) -> FetchedPreprint:
        self.calls.append(ref)
        if on_progress is not None:
            on_progress(50, 100)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return FetchedPreprint(
            arxiv_id=ref,
            version=self.version,
            filename=f"{ref}v{self.version}.pdf",
            content=b"%PDF-1.4",
        )


class FakeSink:
    """In-memory preprint sink."""

    def __init__(self) -> None:
        self.library: dict[str, Path] = {}
        self.opened: list[Path] = []
        self.recorded: list[tuple[ResultEntry, ...]] = []
        self.open_error: Exception | None = None

    async def lookup(self, ref: str) -> Path | None:
        return self.library.get(ref)

    async def store(self, preprint: FetchedPreprint) -> Path:
        path = Path("/library") / preprint.filename
        self.library[preprint.arxiv_id] = path
        return path

    async def open(self, path: Path) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened.append(path)

    async def record_results(self, entries: Sequence[ResultEntry]) -> None:
        self.recorded.append(tuple(entries))


class _Handle:
    def __init__(self, delay: float, callback: Any, args: tuple[Any, ...]) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """``call_later`` replacement whose timers fire only when told to."""

    def __init__(self) -> None:
        self.handles: list[_Handle] = []

    def __call__(self, delay: float, callback: Any, *args: Any) -> _Handle:
        handle = _Handle(delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[_Handle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def fire_all(self) -> int:
        """Run every uncancelled timer once; returns how many fired."""
        fired = 0
        for handle in self.live:
            handle.cancelled = True
            handle.callback(*handle.args)
            fired += 1
        return fired


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_entry():
    """Factory fixture for creating ResultEntry instances with sensible defaults."""

    def _make(
        id: str = "1234567",
        title: str = "Test Record",
        authors: tuple[str, ...] = ("Author",),
        venue: str | None = None,
        year: int | None = 2024,
        created: str = "2024-01-15",
        download_ref: str | None = "2401.12345",
        eprints: tuple[str, ...] | None = None,
    ) -> ResultEntry:
        if eprints is None:
            eprints = (download_ref,) if download_ref else ()
        return ResultEntry(
            id=id,
            title=title,
            authors=authors,
            venue=venue,
            year=year,
            created=created,
            eprints=eprints,
            download_ref=download_ref,
        )

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs: Any) -> UserConfig:
        return UserConfig(**kwargs)

    return _make


@pytest.fixture
def fake_search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def fake_fetch() -> FakeFetch:
    return FakeFetch()


@pytest.fixture
def fake_sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def app_services(fake_search, fake_fetch, fake_sink) -> AppServices:
    return AppServices(search=fake_search, fetch=fake_fetch, sink=fake_sink)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
