"""Data models and constants for the INSPIRE browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Application identity, used for every platformdirs path
CONFIG_APP_NAME = "inspire-browser"

# Search defaults
DEFAULT_MAX_RESULTS = 50
MAX_RESULTS_LIMIT = 250
DEFAULT_SEARCH_DEBOUNCE_MS = 300
MIN_SEARCH_DEBOUNCE_MS = 50
MAX_SEARCH_DEBOUNCE_MS = 5000
DEFAULT_MIN_QUERY_LENGTH = 3
MAX_MIN_QUERY_LENGTH = 20

# List navigation
PAGE_STEP = 10
DOUBLE_CLICK_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class ResultEntry:
    """One literature record returned by a search.

    ``download_ref`` is the arXiv eprint handed to the fetch capability; it is
    ``None`` when the record has no preprint.
    """

    id: str
    title: str
    authors: tuple[str, ...] = ()
    venue: str | None = None
    year: int | None = None
    created: str = ""
    eprints: tuple[str, ...] = ()
    download_ref: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or "(No title)"

    @property
    def authors_text(self) -> str:
        return ", ".join(self.authors)


@dataclass(frozen=True, slots=True)
class FetchedPreprint:
    """Payload produced by the fetch capability for one eprint."""

    arxiv_id: str
    version: int
    filename: str
    content: bytes


@dataclass(slots=True)
class UserConfig:
    """User configuration persisted as JSON."""

    download_dir: str = ""
    pdf_viewer: str = ""  # Custom PDF viewer command; empty = platform opener
    search_debounce_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS
    min_query_length: int = DEFAULT_MIN_QUERY_LENGTH
    max_results: int = DEFAULT_MAX_RESULTS
    confirm_exit: bool = False
    version: int = 1
    config_defaulted: bool = field(default=False, repr=False)

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000


@dataclass(frozen=True, slots=True)
class Viewport:
    """Terminal size in cells."""

    width: int = 80
    height: int = 24


# ============================================================================
# Pipeline status
# ============================================================================


@dataclass(frozen=True, slots=True)
class Idle:
    """No search outstanding."""


@dataclass(frozen=True, slots=True)
class Pending:
    """A search tagged with ``generation`` is in flight."""

    generation: int
    query: str = ""


@dataclass(frozen=True, slots=True)
class SearchFailed:
    """The live search failed; ``message`` is shown in the status line."""

    message: str


PipelineStatus = Idle | Pending | SearchFailed


# ============================================================================
# Download status
# ============================================================================


@dataclass(frozen=True, slots=True)
class NoDownload:
    """No download has been attempted yet."""


@dataclass(frozen=True, slots=True)
class DownloadInFlight:
    entry_id: str
    received: int = 0
    total: int | None = None

    @property
    def percent(self) -> int | None:
        if not self.total:
            return None
        return min(100, (self.received * 100) // self.total)


@dataclass(frozen=True, slots=True)
class DownloadDone:
    entry_id: str
    path: Path


@dataclass(frozen=True, slots=True)
class DownloadFailed:
    entry_id: str
    message: str


DownloadStatus = NoDownload | DownloadInFlight | DownloadDone | DownloadFailed


# ============================================================================
# Session modes
# ============================================================================


@dataclass(frozen=True, slots=True)
class Browsing:
    """Default mode: the query box and the result list take input."""


@dataclass(frozen=True, slots=True)
class Notice:
    """Modal warning dialog."""

    message: str


@dataclass(frozen=True, slots=True)
class ConfirmExit:
    """Modal asking whether to leave the session."""


@dataclass(frozen=True, slots=True)
class Terminated:
    """Terminal state; the host tears the terminal down and exits."""

    exit_code: int = 0


SessionMode = Browsing | Notice | ConfirmExit | Terminated


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_MIN_QUERY_LENGTH",
    "DEFAULT_SEARCH_DEBOUNCE_MS",
    "DOUBLE_CLICK_SECONDS",
    "MAX_MIN_QUERY_LENGTH",
    "MAX_RESULTS_LIMIT",
    "MAX_SEARCH_DEBOUNCE_MS",
    "MIN_SEARCH_DEBOUNCE_MS",
    "PAGE_STEP",
    "Browsing",
    "ConfirmExit",
    "DownloadDone",
    "DownloadFailed",
    "DownloadInFlight",
    "DownloadStatus",
    "FetchedPreprint",
    "Idle",
    "NoDownload",
    "Notice",
    "Pending",
    "PipelineStatus",
    "ResultEntry",
    "SearchFailed",
    "SessionMode",
    "Terminated",
    "UserConfig",
    "Viewport",
]
