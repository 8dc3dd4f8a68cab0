"""Events consumed by the session loop.

Terminal events come from the host; timer and completion events are posted by
the request pipeline. All of them travel through one queue and are applied one
at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from inspire_browser.models import ResultEntry

# ============================================================================
# Terminal input
# ============================================================================


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A key using Textual key names (``"left"``, ``"pageup"``, ``"ctrl+r"``...).

    ``character`` is set for printable keys.
    """

    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class MouseScroll:
    delta: int


@dataclass(frozen=True, slots=True)
class MouseClick:
    """Click on ``row`` of the visible list window (0 = first visible row)."""

    row: int


@dataclass(frozen=True, slots=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class Redraw:
    """Force a full redraw without touching model state."""


@dataclass(frozen=True, slots=True)
class InputClosed:
    """The terminal input stream ended or failed."""

    reason: str = "terminal input closed"


# ============================================================================
# Pipeline timer and completions
# ============================================================================


@dataclass(frozen=True, slots=True)
class DebounceElapsed:
    token: int


@dataclass(frozen=True, slots=True)
class SearchCompleted:
    generation: int
    query: str
    entries: tuple[ResultEntry, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class SearchFailedEvent:
    generation: int
    query: str
    message: str


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    entry_id: str
    received: int
    total: int | None


@dataclass(frozen=True, slots=True)
class DownloadCompleted:
    entry_id: str
    path: Path
    arxiv_id: str = ""
    version: int | None = None


@dataclass(frozen=True, slots=True)
class DownloadFailedEvent:
    entry_id: str
    message: str


TerminalEvent = KeyPress | MouseScroll | MouseClick | Resize | Redraw | InputClosed
PipelineEvent = (
    DebounceElapsed
    | SearchCompleted
    | SearchFailedEvent
    | DownloadProgress
    | DownloadCompleted
    | DownloadFailedEvent
)
Event = TerminalEvent | PipelineEvent


__all__ = [
    "DebounceElapsed",
    "DownloadCompleted",
    "DownloadFailedEvent",
    "DownloadProgress",
    "Event",
    "InputClosed",
    "KeyPress",
    "MouseClick",
    "MouseScroll",
    "PipelineEvent",
    "Redraw",
    "Resize",
    "SearchCompleted",
    "SearchFailedEvent",
    "TerminalEvent",
]
