"""The session loop: one queue, one consumer, every state change in order.

Terminal events from the host, the pipeline's debounce timer and task
completions are all ``post``-ed to a single ``asyncio.Queue``. ``run`` takes
one event at a time, applies it synchronously through ``handle`` and redraws
when something visible changed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping

from inspire_browser.action_messages import build_actionable_error
from inspire_browser.editor import QueryEditor
from inspire_browser.errors import TerminalIOError
from inspire_browser.events import (
    DebounceElapsed,
    DownloadCompleted,
    DownloadFailedEvent,
    DownloadProgress,
    Event,
    InputClosed,
    KeyPress,
    MouseClick,
    MouseScroll,
    Redraw,
    Resize,
    SearchCompleted,
    SearchFailedEvent,
)
from inspire_browser.models import (
    DOUBLE_CLICK_SECONDS,
    PAGE_STEP,
    Browsing,
    ConfirmExit,
    Notice,
    SessionMode,
    Terminated,
    UserConfig,
    Viewport,
)
from inspire_browser.pipeline import CallLater, RequestPipeline
from inspire_browser.render import Frame, list_rows, render_frame
from inspire_browser.result_list import ResultList
from inspire_browser.services.interfaces import AppServices

logger = logging.getLogger(__name__)

FrameSink = Callable[[Frame, bool], None]

REDRAW_KEYS = frozenset({"ctrl+r", "ctrl+l"})

_SELECTION_KEYS = {
    "up": -1,
    "down": 1,
    "pageup": -PAGE_STEP,
    "pagedown": PAGE_STEP,
}

_EDITOR_KEYS: dict[str, Callable[[QueryEditor], bool]] = {
    "backspace": QueryEditor.delete_backward,
    "delete": QueryEditor.delete_forward,
    "left": lambda editor: editor.move(-1),
    "right": lambda editor: editor.move(1),
    "home": QueryEditor.move_home,
    "end": QueryEditor.move_end,
    "ctrl+u": lambda editor: editor.set_text(""),
}


class Session:
    """Owns the editor, the result list and the pipeline for one run.

    ``frame_sink(frame, full)`` draws a rendered frame; ``full`` asks the
    host to repaint everything. Any exception it raises ends the session as a
    ``TerminalIOError``.
    """

    def __init__(
        self,
        *,
        services: AppServices,
        frame_sink: FrameSink,
        config: UserConfig | None = None,
        viewport: Viewport | None = None,
        downloaded: Mapping[str, int] | None = None,
        initial_query: str = "",
        ascii_glyphs: bool = False,
        clock: Callable[[], float] = time.monotonic,
        call_later: CallLater | None = None,
    ) -> None:
        self.config = config or UserConfig()
        self.editor = QueryEditor()
        self.results = ResultList()
        self.viewport = viewport or Viewport()
        self.mode: SessionMode = Browsing()
        self.downloaded: dict[str, int] = dict(downloaded or {})
        self.ascii_glyphs = ascii_glyphs

        self._frame_sink = frame_sink
        self._clock = clock
        self._initial_query = initial_query
        self._last_click: tuple[int, float] | None = None
        self._queue: asyncio.Queue[Event] = asyncio.Queue()

        self.pipeline = RequestPipeline(
            search=services.search,
            fetch=services.fetch,
            sink=services.sink,
            post=self.post,
            debounce_seconds=self.config.search_debounce_seconds,
            min_query_length=self.config.min_query_length,
            call_later=call_later,
        )

    def post(self, event: Event) -> None:
        """Queue ``event`` for the loop. Safe to call from loop callbacks and tasks."""
        self._queue.put_nowait(event)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> int:
        """Process events until the session terminates; returns the exit code.

        Raises:
            TerminalIOError: If input closes or a frame cannot be drawn.
        """
        self.start()
        self._draw(full=True)
        while not isinstance(self.mode, Terminated):
            event = await self._queue.get()
            full = self._is_redraw(event)
            if self.handle(event) or full:
                self._draw(full=full)
        logger.debug("Session terminated with exit code %d", self.mode.exit_code)
        return self.mode.exit_code

    def start(self) -> None:
        """Seed the editor with the initial query; must run inside the event loop."""
        if self.config.config_defaulted:
            self.mode = Notice(
                build_actionable_error(
                    "read config.json",
                    why="the file is invalid, so defaults are in use",
                    next_step="fix the file or run inspire-browser --init-config",
                )
            )
        if self._initial_query and self.editor.set_text(self._initial_query):
            self._edited()

    async def aclose(self) -> None:
        await self.pipeline.aclose()

    def frame(self) -> Frame:
        return render_frame(
            self.editor,
            self.results,
            self.pipeline.status,
            self.pipeline.download_status,
            self.viewport,
            downloaded=self.downloaded,
            mode=self.mode,
            min_query_length=self.config.min_query_length,
            ascii_glyphs=self.ascii_glyphs,
        )

    def _draw(self, *, full: bool) -> None:
        frame = self.frame()
        try:
            self._frame_sink(frame, full)
        except TerminalIOError:
            raise
        except Exception as exc:
            logger.error("Frame draw failed", exc_info=True)
            raise TerminalIOError(f"Could not draw to the terminal: {exc}") from exc

    @staticmethod
    def _is_redraw(event: Event) -> bool:
        return isinstance(event, Redraw) or (
            isinstance(event, KeyPress) and event.key in REDRAW_KEYS
        )

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def handle(self, event: Event) -> bool:
        """Apply one event; returns whether anything visible changed.

        Raises:
            TerminalIOError: On ``InputClosed``.
        """
        if isinstance(event, KeyPress):
            return self._on_key(event)
        if isinstance(event, MouseScroll):
            if not isinstance(self.mode, Browsing):
                return False
            return self._move_selection(event.delta)
        if isinstance(event, MouseClick):
            return self._on_click(event)
        if isinstance(event, Resize):
            self.viewport = Viewport(max(1, event.width), max(1, event.height))
            self._scroll_into_view()
            return True
        if isinstance(event, Redraw):
            return True
        if isinstance(event, InputClosed):
            raise TerminalIOError(event.reason)
        return self._on_pipeline_event(event)

    def _on_pipeline_event(self, event: Event) -> bool:
        pipeline = self.pipeline
        if isinstance(event, DebounceElapsed):
            changed = pipeline.on_debounce_elapsed(event, self.results)
        elif isinstance(event, SearchCompleted):
            changed = pipeline.apply_search_completed(event, self.results)
        elif isinstance(event, SearchFailedEvent):
            return pipeline.apply_search_failed(event)
        elif isinstance(event, DownloadProgress):
            return pipeline.apply_download_progress(event)
        elif isinstance(event, DownloadCompleted):
            changed = pipeline.apply_download_completed(event)
            if changed and event.version is not None:
                known = self.downloaded.get(event.arxiv_id, 0)
                self.downloaded[event.arxiv_id] = max(known, event.version)
            return changed
        elif isinstance(event, DownloadFailedEvent):
            changed = pipeline.apply_download_failed(event)
            if changed and isinstance(self.mode, Browsing):
                self.mode = Notice(event.message)
            return changed
        else:
            logger.debug("Ignoring unknown event %r", event)
            return False
        if changed:
            self._scroll_into_view()
        return changed

    def _on_key(self, event: KeyPress) -> bool:
        key = event.key
        mode = self.mode
        if isinstance(mode, Notice):
            if key in ("escape", "enter"):
                self.mode = Browsing()
                return True
            return False
        if isinstance(mode, ConfirmExit):
            if key in ("enter", "y"):
                self.mode = Terminated(0)
                return True
            if key in ("escape", "n"):
                self.mode = Browsing()
                return True
            return False
        if isinstance(mode, Terminated):
            return False

        if key == "escape":
            self.mode = ConfirmExit() if self.config.confirm_exit else Terminated(0)
            return True
        if key == "enter":
            return self._activate()
        if key in REDRAW_KEYS:
            return False
        if key in _SELECTION_KEYS:
            return self._move_selection(_SELECTION_KEYS[key])

        edit = _EDITOR_KEYS.get(key)
        if edit is not None:
            changed = edit(self.editor)
        elif event.character and len(event.character) == 1 and event.character.isprintable():
            changed = self.editor.insert(event.character)
        else:
            return False
        if self.editor.text_changed:
            self._edited()
        return changed

    def _edited(self) -> None:
        self.editor.consume_change()
        self.pipeline.query_changed(self.editor.text)

    # ------------------------------------------------------------------
    # Selection and activation
    # ------------------------------------------------------------------

    def _scroll_into_view(self) -> None:
        self.results.scroll_into_view(list_rows(self.viewport.height))

    def _move_selection(self, delta: int) -> bool:
        moved = self.results.move_selection(delta)
        if moved:
            self._scroll_into_view()
        return moved

    def _on_click(self, event: MouseClick) -> bool:
        if not isinstance(self.mode, Browsing):
            return False
        if event.row >= list_rows(self.viewport.height):
            return False
        index = self.results.index_at_row(event.row)
        if index is None:
            return False

        now = self._clock()
        last = self._last_click
        changed = self.results.select(index)
        if changed:
            self._scroll_into_view()
        if last is not None and last[0] == index and now - last[1] <= DOUBLE_CLICK_SECONDS:
            self._last_click = None
            return self._activate() or changed
        self._last_click = (index, now)
        return changed

    def _activate(self) -> bool:
        """Download or open the selected entry; a no-op with nothing selected."""
        entry = self.results.current()
        if entry is None:
            return False
        if entry.download_ref is None:
            self.mode = Notice(f"{entry.display_title}\nThis record has no preprint link.")
            return True
        if self.pipeline.download_in_flight:
            self.mode = Notice(
                build_actionable_error(
                    f"start a download for {entry.download_ref}",
                    why="another download is still in progress",
                    next_step="wait for it to finish and press Enter again",
                )
            )
            return True
        return self.pipeline.trigger_download(entry)


__all__ = ["FrameSink", "REDRAW_KEYS", "Session"]
