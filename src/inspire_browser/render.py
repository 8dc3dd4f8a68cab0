"""Pure frame rendering: session state in, a ``Frame`` description out.

Layout, top to bottom: query line, column header, ``list_rows(height)`` list
rows, status line, key hints. A modal dialog is described separately and drawn
on top by the host.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from inspire_browser.action_messages import first_line
from inspire_browser.editor import QueryEditor
from inspire_browser.models import (
    DEFAULT_MIN_QUERY_LENGTH,
    ConfirmExit,
    DownloadDone,
    DownloadFailed,
    DownloadInFlight,
    DownloadStatus,
    Notice,
    Pending,
    PipelineStatus,
    SearchFailed,
    SessionMode,
    Viewport,
)
from inspire_browser.result_list import ResultList

PROMPT = "> "
LIST_TOP = 2  # query line + column header
CHROME_ROWS = 4  # query line, header, status line, key hints

_GLYPH_SETS: dict[str, dict[str, str]] = {
    "unicode": {
        "selected": "▶",
        "downloaded": "✓",
        "ellipsis": "…",
        "separator": " · ",
        "updown": "↑↓",
    },
    "ascii": {
        "selected": ">",
        "downloaded": "v",
        "ellipsis": "~",
        "separator": " | ",
        "updown": "Up/Down",
    },
}


@dataclass(frozen=True, slots=True)
class ListRow:
    index: int
    text: str
    selected: bool = False
    downloaded: bool = False


@dataclass(frozen=True, slots=True)
class Dialog:
    title: str
    body: tuple[str, ...]
    hint: str


@dataclass(frozen=True, slots=True)
class Frame:
    """Everything the host needs to draw one screen."""

    width: int
    height: int
    input_line: str
    cursor_column: int
    header: str
    rows: tuple[ListRow, ...]
    list_top: int
    list_message: str
    status_text: str
    status_severity: str
    help_text: str
    busy: bool = False
    dialog: Dialog | None = None


def list_rows(height: int) -> int:
    """Number of list rows that fit a terminal ``height`` rows tall."""
    return max(1, height - CHROME_ROWS)


def _fit(text: str, width: int, ellipsis: str) -> str:
    """Truncate or pad ``text`` to exactly ``width`` cells."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text.ljust(width)
    if width <= len(ellipsis):
        return text[:width]
    return text[: width - len(ellipsis)] + ellipsis


def _column_widths(width: int) -> tuple[int, int, int]:
    """(title, eprint, authors) widths for a row ``width`` cells wide."""
    content = max(0, width - 3 - 2)  # marker + glyph + space, two column gaps
    eprint = min(14, content // 5)
    rest = content - eprint
    title = rest * 65 // 90
    return title, eprint, rest - title


def _input_window(editor: QueryEditor, width: int) -> tuple[str, int]:
    """Visible query slice plus cursor column, scrolled so the cursor fits."""
    available = max(1, width - len(PROMPT) - 1)
    start = max(0, editor.cursor - available)
    visible = editor.text[start : start + available]
    return PROMPT + visible, len(PROMPT) + editor.cursor - start


def _render_rows(
    results: ResultList,
    height: int,
    width: int,
    downloaded: Mapping[str, int],
    glyphs: dict[str, str],
) -> tuple[ListRow, ...]:
    title_w, eprint_w, authors_w = _column_widths(width)
    ellipsis = glyphs["ellipsis"]
    rows: list[ListRow] = []
    for offset, entry in enumerate(results.visible_window(height)):
        index = results.scroll_offset + offset
        is_selected = index == results.selected
        version = downloaded.get(entry.download_ref) if entry.download_ref else None
        eprint = entry.download_ref or ""
        if version is not None:
            eprint = f"{eprint}v{version}"
        marker = glyphs["selected"] if is_selected else " "
        glyph = glyphs["downloaded"] if version is not None else " "
        text = (
            f"{marker}{glyph} "
            f"{_fit(entry.display_title, title_w, ellipsis)} "
            f"{_fit(eprint, eprint_w, ellipsis)} "
            f"{_fit(entry.authors_text, authors_w, ellipsis)}"
        )
        rows.append(
            ListRow(
                index=index,
                text=_fit(text, width, ellipsis),
                selected=is_selected,
                downloaded=version is not None,
            )
        )
    return tuple(rows)


def _render_header(width: int, ellipsis: str) -> str:
    title_w, eprint_w, authors_w = _column_widths(width)
    text = (
        f"   {_fit('Title', title_w, ellipsis)} "
        f"{_fit('arXiv', eprint_w, ellipsis)} "
        f"{_fit('Authors', authors_w, ellipsis)}"
    )
    return _fit(text, width, ellipsis)


def _list_message(
    results: ResultList, editor: QueryEditor, status: PipelineStatus, min_query_length: int
) -> str:
    if len(results):
        return ""
    if isinstance(status, Pending):
        return "Searching..."
    query = editor.text.strip()
    if len(query) < max(1, min_query_length):
        return f"Type at least {max(1, min_query_length)} characters to search INSPIRE"
    return "No results"


def _download_label(results: ResultList, entry_id: str) -> str:
    for entry in results.entries:
        if entry.id == entry_id:
            return entry.download_ref or entry_id
    return entry_id


def _status_line(
    results: ResultList,
    status: PipelineStatus,
    download_status: DownloadStatus,
    separator: str,
) -> tuple[str, str]:
    parts: list[str] = []
    severity = "information"

    if isinstance(status, Pending):
        parts.append(f"Searching for {status.query!r}...")
    elif isinstance(status, SearchFailed):
        parts.append(first_line(status.message))
        severity = "error"
    elif len(results):
        parts.append(f"{len(results)} result{'s' if len(results) != 1 else ''}")

    if isinstance(download_status, DownloadInFlight):
        label = _download_label(results, download_status.entry_id)
        percent = download_status.percent
        suffix = f" {percent}%" if percent is not None else ""
        parts.append(f"Downloading {label}...{suffix}")
    elif isinstance(download_status, DownloadDone):
        parts.append(f"Opened {download_status.path.name}")
    elif isinstance(download_status, DownloadFailed):
        label = _download_label(results, download_status.entry_id)
        parts.append(f"Download of {label} failed")
        severity = "error"

    return separator.join(parts), severity


def _dialog(mode: SessionMode) -> Dialog | None:
    if isinstance(mode, Notice):
        return Dialog("Notice", tuple(mode.message.splitlines()) or ("",), "Enter/Esc: dismiss")
    if isinstance(mode, ConfirmExit):
        return Dialog("Quit", ("Leave inspire-browser?",), "Enter/y: quit   n/Esc: stay")
    return None


def render_frame(
    editor: QueryEditor,
    results: ResultList,
    status: PipelineStatus,
    download_status: DownloadStatus,
    viewport: Viewport,
    *,
    downloaded: Mapping[str, int] | None = None,
    mode: SessionMode | None = None,
    min_query_length: int = DEFAULT_MIN_QUERY_LENGTH,
    ascii_glyphs: bool = False,
) -> Frame:
    """Describe the screen for the given state. Never mutates its inputs."""
    glyphs = _GLYPH_SETS["ascii" if ascii_glyphs else "unicode"]
    width = max(1, viewport.width)
    height = max(1, viewport.height)
    rows_available = list_rows(height)

    input_line, cursor_column = _input_window(editor, width)
    status_text, severity = _status_line(results, status, download_status, glyphs["separator"])
    help_text = glyphs["separator"].join(
        (
            "Enter: open",
            f"{glyphs['updown']} PgUp/PgDn: move",
            "Ctrl+U: clear",
            "Ctrl+R: redraw",
            "Esc: quit",
        )
    )

    return Frame(
        width=width,
        height=height,
        input_line=_fit(input_line, width, ""),
        cursor_column=min(cursor_column, width - 1),
        header=_render_header(width, glyphs["ellipsis"]),
        rows=_render_rows(results, rows_available, width, downloaded or {}, glyphs),
        list_top=LIST_TOP,
        list_message=_list_message(results, editor, status, min_query_length),
        status_text=_fit(status_text, width, glyphs["ellipsis"]),
        status_severity=severity,
        help_text=_fit(help_text, width, glyphs["ellipsis"]),
        busy=isinstance(status, Pending) or isinstance(download_status, DownloadInFlight),
        dialog=_dialog(mode) if mode is not None else None,
    )


__all__ = [
    "CHROME_ROWS",
    "LIST_TOP",
    "Dialog",
    "Frame",
    "ListRow",
    "list_rows",
    "render_frame",
]
