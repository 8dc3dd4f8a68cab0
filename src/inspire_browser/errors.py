"""Exception hierarchy for the INSPIRE browser.

Search and download failures are recoverable and end up as status-line or
dialog messages. ``TerminalIOError`` is the only fatal kind.
"""

from __future__ import annotations


class BrowserError(Exception):
    """Base class for all application errors.

    ``str(error)`` is the user-facing message.
    """


class SearchError(BrowserError):
    """The remote search failed or returned malformed data."""


class DownloadError(BrowserError):
    """Resolving, downloading, storing or opening a preprint failed."""


class LibraryError(BrowserError):
    """The local preprint library could not be read or written."""


class TerminalIOError(BrowserError):
    """Reading input from or drawing a frame to the terminal failed."""


__all__ = [
    "BrowserError",
    "DownloadError",
    "LibraryError",
    "SearchError",
    "TerminalIOError",
]
