"""The single widget that paints rendered session frames."""

from __future__ import annotations

from rich.text import Text
from textual.timer import Timer
from textual.widgets import Static

from inspire_browser.render import Dialog, Frame, list_rows
from inspire_browser.themes import SEVERITY_COLORS, THEME_COLORS

DIALOG_MIN_WIDTH = 24
SPINNER_GLYPHS = ("|", "/", "-", "\\")
SPINNER_INTERVAL = 0.045  # seconds per glyph


def _input_line(frame: Frame) -> Text:
    line = Text(no_wrap=True, overflow="crop")
    before = frame.input_line[: frame.cursor_column]
    under = frame.input_line[frame.cursor_column : frame.cursor_column + 1] or " "
    after = frame.input_line[frame.cursor_column + 1 :]
    line.append(before[:2], style=f"bold {THEME_COLORS['accent']}")
    line.append(before[2:])
    line.append(under, style="reverse")
    line.append(after)
    return line


def _list_lines(frame: Frame) -> list[Text]:
    height = list_rows(frame.height)
    lines: list[Text] = []
    for row in frame.rows:
        if row.selected:
            style = f"bold on {THEME_COLORS['highlight']}"
        elif row.downloaded:
            style = THEME_COLORS["green"]
        else:
            style = ""
        lines.append(Text(row.text, style=style, no_wrap=True, overflow="crop"))
    if not lines and frame.list_message:
        lines.append(Text(f"  {frame.list_message}", style=f"italic {THEME_COLORS['muted']}"))
    while len(lines) < height:
        lines.append(Text(""))
    return lines[:height]


def _dialog_lines(dialog: Dialog, width: int) -> list[Text]:
    """Boxed dialog lines, each at most ``width`` cells wide."""
    content = [dialog.title, "", *dialog.body, "", dialog.hint]
    inner = max(DIALOG_MIN_WIDTH, *(len(line) for line in content))
    inner = max(1, min(inner, width - 4))
    border = THEME_COLORS["orange"]
    lines = [Text(f"┌{'─' * (inner + 2)}┐", style=border)]
    for index, raw in enumerate(content):
        body = raw[:inner].ljust(inner)
        line = Text("│ ", style=border)
        if index == 0:
            line.append(body, style=f"bold {THEME_COLORS['accent_alt']}")
        elif index == len(content) - 1:
            line.append(body, style=THEME_COLORS["muted"])
        else:
            line.append(body)
        line.append(" │", style=border)
        lines.append(line)
    lines.append(Text(f"└{'─' * (inner + 2)}┘", style=border))
    return lines


def _overlay(lines: list[Text], dialog: Dialog, width: int) -> None:
    """Draw ``dialog`` centered over ``lines`` in place."""
    box = _dialog_lines(dialog, width)
    top = max(0, (len(lines) - len(box)) // 2)
    left = max(0, (width - box[0].cell_len) // 2)
    for offset, box_line in enumerate(box):
        target = top + offset
        if target >= len(lines):
            break
        line = Text(" " * left, no_wrap=True, overflow="crop")
        line.append_text(box_line)
        lines[target] = line


def build_frame_text(frame: Frame, spinner: str = "") -> Text:
    """Convert a ``Frame`` into styled rich text, one line per terminal row.

    ``spinner`` is drawn in front of the status text while the frame is busy.
    """
    lines = [
        _input_line(frame),
        Text(frame.header, style=f"bold {THEME_COLORS['accent']}", no_wrap=True),
        *_list_lines(frame),
    ]
    status_color = THEME_COLORS[SEVERITY_COLORS.get(frame.status_severity, "muted")]
    status_style = f"bold {status_color}" if frame.busy else status_color
    status_text = f"{spinner} {frame.status_text}" if frame.busy and spinner else frame.status_text
    lines.append(Text(status_text, style=status_style, no_wrap=True, overflow="crop"))
    lines.append(Text(frame.help_text, style=THEME_COLORS["muted"], no_wrap=True))
    if frame.dialog is not None:
        _overlay(lines, frame.dialog, frame.width)
    return Text("\n", no_wrap=True).join(lines[: frame.height])


class FrameView(Static):
    """Full-screen view of the latest frame; holds focus so keys reach the app."""

    can_focus = True

    def __init__(self) -> None:
        super().__init__("", id="frame")
        self.last_frame: Frame | None = None
        self.spinner_index = 0
        self._spinner_timer: Timer | None = None

    @property
    def spinning(self) -> bool:
        return self._spinner_timer is not None

    def show_frame(self, frame: Frame) -> None:
        self.last_frame = frame
        if frame.busy and self._spinner_timer is None:
            self.spinner_index = 0
            self._spinner_timer = self.set_interval(SPINNER_INTERVAL, self._advance_spinner)
        elif not frame.busy and self._spinner_timer is not None:
            self._spinner_timer.stop()
            self._spinner_timer = None
        self._paint()

    def _advance_spinner(self) -> None:
        self.spinner_index = (self.spinner_index + 1) % len(SPINNER_GLYPHS)
        self._paint()

    def _paint(self) -> None:
        frame = self.last_frame
        if frame is None:
            return
        self.update(build_frame_text(frame, SPINNER_GLYPHS[self.spinner_index]))


__all__ = ["FrameView", "build_frame_text"]
