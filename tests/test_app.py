"""Integration tests for the Textual host using run_test() / Pilot."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from inspire_browser.app import InspireBrowser
from inspire_browser.events import InputClosed
from inspire_browser.models import UserConfig, Viewport
from inspire_browser.session import Session
from inspire_browser.widgets import FrameView, build_frame_text

pytestmark = pytest.mark.integration


def _app(app_services, **config) -> InspireBrowser:
    config.setdefault("search_debounce_ms", 400)
    return InspireBrowser(
        UserConfig(**config),
        services=app_services,
        downloaded={},
        http_client_factory=None,
    )


async def _wait_for(pilot, predicate, timeout: float = 2.0) -> None:
    """Poll until ``predicate()`` holds or the timeout expires."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate() and asyncio.get_running_loop().time() < deadline:
        await pilot.pause(0.05)
    assert predicate()


async def test_typing_searches_and_escape_exits(app_services, fake_search, make_entry) -> None:
    fake_search.responses["quark"] = [make_entry(id="1", title="Quark masses")]
    app = _app(app_services)

    async with app.run_test(size=(100, 30)) as pilot:
        await pilot.press("q", "u", "a", "r", "k")
        await _wait_for(pilot, lambda: len(app.session.results) == 1)
        view = app.query_one(FrameView)
        await _wait_for(pilot, lambda: bool(view.last_frame and view.last_frame.rows))
        assert "Quark masses" in view.last_frame.rows[0].text
        assert fake_search.calls == ["quark"]

        await pilot.press("escape")
        await pilot.pause(0.1)

    assert app.return_code == 0


async def test_confirm_exit_dialog(app_services) -> None:
    app = _app(app_services, confirm_exit=True)

    async with app.run_test() as pilot:
        await pilot.press("escape")
        view = app.query_one(FrameView)
        await _wait_for(
            pilot, lambda: view.last_frame is not None and view.last_frame.dialog is not None
        )
        assert view.last_frame.dialog.title == "Quit"

        await pilot.press("y")
        await pilot.pause(0.1)

    assert app.return_code == 0


async def test_input_failure_exits_with_error(app_services) -> None:
    app = _app(app_services)

    async with app.run_test() as pilot:
        app.session.post(InputClosed("terminal went away"))
        await pilot.pause(0.1)

    assert app.return_code == 1


async def test_unexpected_session_crash_exits_with_error(app_services, monkeypatch) -> None:
    app = _app(app_services)

    def explode(event):
        raise RuntimeError("handler bug")

    monkeypatch.setattr(app.session, "handle", explode)

    async with app.run_test() as pilot:
        await pilot.press("a")
        await pilot.pause(0.1)

    assert app.return_code == 1


async def test_spinner_runs_only_while_busy(app_services) -> None:
    app = _app(app_services)

    async with app.run_test(size=(80, 24)) as pilot:
        view = app.query_one(FrameView)
        idle = app.session.frame()

        view.show_frame(replace(idle, busy=True, status_text="Searching"))
        await _wait_for(pilot, lambda: view.spinner_index > 0)
        assert view.spinning is True

        view.show_frame(idle)
        assert view.spinning is False
        await pilot.press("escape")


async def test_resize_updates_viewport(app_services) -> None:
    app = _app(app_services)

    async with app.run_test(size=(80, 24)) as pilot:
        await pilot.resize_terminal(60, 20)
        await _wait_for(pilot, lambda: app.session.viewport == Viewport(60, 20))
        await pilot.press("escape")


async def test_click_selects_row(app_services, make_entry) -> None:
    app = _app(app_services)

    async with app.run_test(size=(80, 24)) as pilot:
        app.session.results.set_entries(
            make_entry(id=str(i), download_ref=None) for i in range(5)
        )
        # Row 1 of the list sits below the query line and the header.
        await pilot.click(FrameView, offset=(10, 3))
        await _wait_for(pilot, lambda: app.session.results.selected == 1)
        await pilot.press("escape")


def test_frame_text_has_one_line_per_row(app_services, make_entry) -> None:
    session = Session(
        services=app_services, frame_sink=lambda frame, full: None, viewport=Viewport(70, 12)
    )
    session.results.set_entries([make_entry(id="1", title="Lattice QCD")])

    text = build_frame_text(session.frame())

    lines = text.plain.split("\n")
    assert len(lines) == 12
    assert lines[0].startswith("> ")
    assert "Lattice QCD" in lines[2]


def test_spinner_glyph_leads_busy_status_line(app_services) -> None:
    session = Session(
        services=app_services, frame_sink=lambda frame, full: None, viewport=Viewport(70, 12)
    )
    frame = replace(session.frame(), busy=True, status_text="Searching")

    busy_lines = build_frame_text(frame, "/").plain.split("\n")
    idle_lines = build_frame_text(replace(frame, busy=False), "/").plain.split("\n")

    assert busy_lines[-2].startswith("/ Searching")
    assert idle_lines[-2].startswith("Searching")
