"""Textual host: terminal events in, session frames out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

import httpx
from textual import events
from textual.app import App, ComposeResult

from inspire_browser.errors import TerminalIOError
from inspire_browser.events import KeyPress, MouseClick, MouseScroll, Resize
from inspire_browser.library import PreprintLibrary
from inspire_browser.models import UserConfig, Viewport
from inspire_browser.render import Frame
from inspire_browser.services.interfaces import AppServices, build_default_app_services
from inspire_browser.session import Session
from inspire_browser.themes import TEXTUAL_THEME, THEME_NAME
from inspire_browser.ui_constants import APP_BINDINGS, APP_CSS
from inspire_browser.widgets import FrameView

logger = logging.getLogger(__name__)


class InspireBrowser(App):
    """A TUI application to search INSPIRE and open preprints."""

    TITLE = "INSPIRE Browser"
    ENABLE_COMMAND_PALETTE = False

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        config: UserConfig | None = None,
        *,
        services: AppServices | None = None,
        downloaded: Mapping[str, int] | None = None,
        initial_query: str = "",
        ascii_icons: bool = False,
        http_client_factory: Callable[[], httpx.AsyncClient] | None = httpx.AsyncClient,
    ) -> None:
        super().__init__()
        self.register_theme(TEXTUAL_THEME)
        self.theme = THEME_NAME
        self._config = config or UserConfig()
        if services is None:
            library = PreprintLibrary.from_config(self._config)
            services = build_default_app_services(
                sink=library, max_results=self._config.max_results
            )
            if downloaded is None:
                downloaded = library.downloaded_versions()
        self._services = services
        self._http_client_factory = http_client_factory
        self._http_client: httpx.AsyncClient | None = None
        self._session_task: asyncio.Task[None] | None = None
        self.session = Session(
            services=services,
            frame_sink=self._draw_frame,
            config=self._config,
            downloaded=downloaded,
            initial_query=initial_query,
            ascii_glyphs=ascii_icons,
        )

    def compose(self) -> ComposeResult:
        yield FrameView()

    def on_mount(self) -> None:
        """Create the shared HTTP client and start the session loop."""
        if self._http_client_factory is not None:
            self._http_client = self._http_client_factory()
            self._services.attach_client(self._http_client)
        self.session.viewport = Viewport(self.size.width, self.size.height)
        self.query_one(FrameView).focus()
        self._session_task = asyncio.create_task(self._run_session())
        logger.debug("App mounted: viewport %dx%d", self.size.width, self.size.height)

    async def _run_session(self) -> None:
        try:
            exit_code = await self.session.run()
        except TerminalIOError as exc:
            logger.error("Session ended: %s", exc)
            self.exit(return_code=1, message=str(exc))
            return
        except Exception as exc:
            logger.error("Session loop crashed", exc_info=True)
            self.exit(return_code=1, message=f"Session loop crashed: {exc}")
            return
        self.exit(return_code=exit_code)

    async def on_unmount(self) -> None:
        """Cancel session work and close the shared HTTP client."""
        await self.session.aclose()

        task = self._session_task
        self._session_task = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task], timeout=0.5)

        client = self._http_client
        self._http_client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )

    def _draw_frame(self, frame: Frame, full: bool) -> None:
        self.query_one(FrameView).show_frame(frame)
        if full:
            self.refresh(repaint=True, layout=True)

    # ------------------------------------------------------------------
    # Terminal events -> session events
    # ------------------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        character = event.character if event.is_printable else None
        self.session.post(KeyPress(event.key, character))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.session.post(MouseScroll(1))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.session.post(MouseScroll(-1))

    def on_click(self, event: events.Click) -> None:
        event.stop()
        view = self.query_one(FrameView)
        top = view.last_frame.list_top if view.last_frame is not None else 0
        self.session.post(MouseClick(event.screen_y - top))

    def on_resize(self, event: events.Resize) -> None:
        self.session.post(Resize(event.size.width, event.size.height))


__all__ = ["InspireBrowser"]
