"""Tests for viewer launching and atomic preprint writes."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from inspire_browser.errors import DownloadError
from inspire_browser.io_actions import (
    build_viewer_args,
    get_open_command,
    open_path,
    write_bytes_atomic,
)


class TestBuildViewerArgs:
    def test_path_appended_without_placeholder(self) -> None:
        assert build_viewer_args("zathura --fork", "/tmp/a.pdf") == [
            "zathura",
            "--fork",
            "/tmp/a.pdf",
        ]

    def test_placeholder_substituted(self) -> None:
        assert build_viewer_args("open -a Preview {path}", "/tmp/a b.pdf") == [
            "open",
            "-a",
            "Preview",
            "/tmp/a b.pdf",
        ]

    def test_empty_command_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            build_viewer_args("   ", "/tmp/a.pdf")


@pytest.mark.parametrize(
    ("system", "expected"),
    [("Darwin", ["open"]), ("Linux", ["xdg-open"]), ("FreeBSD", ["xdg-open"]), ("Windows", None)],
)
def test_get_open_command(system: str, expected) -> None:
    assert get_open_command(system) == expected


class TestOpenPath:
    def test_platform_opener(self) -> None:
        with (
            patch("inspire_browser.io_actions.platform.system", return_value="Linux"),
            patch("inspire_browser.io_actions.subprocess.Popen") as popen,
        ):
            open_path(Path("/lib/2101.00001v2.pdf"))

        args, _ = popen.call_args
        assert args[0] == ["xdg-open", "/lib/2101.00001v2.pdf"]

    def test_configured_viewer(self) -> None:
        with patch("inspire_browser.io_actions.subprocess.Popen") as popen:
            open_path(Path("/lib/x.pdf"), "evince {path}")

        args, _ = popen.call_args
        assert args[0] == ["evince", "/lib/x.pdf"]

    def test_launch_failure_is_actionable(self, caplog) -> None:
        caplog.set_level("WARNING", logger="inspire_browser.io_actions")
        with (
            patch(
                "inspire_browser.io_actions.subprocess.Popen",
                side_effect=FileNotFoundError("no such viewer"),
            ),
            pytest.raises(DownloadError) as excinfo,
        ):
            open_path(Path("/lib/x.pdf"), "missing-viewer")

        assert str(excinfo.value).startswith("Could not open x.pdf.")
        assert "pdf_viewer" in str(excinfo.value)
        assert "Failed to open" in caplog.text


class TestWriteBytesAtomic:
    def test_writes_and_creates_parents(self, tmp_path) -> None:
        target = tmp_path / "nested" / "dir" / "a.pdf"

        write_bytes_atomic(target, b"%PDF")

        assert target.read_bytes() == b"%PDF"
        assert list(target.parent.glob(".*.tmp")) == []

    def test_replaces_existing_file(self, tmp_path) -> None:
        target = tmp_path / "a.pdf"
        target.write_bytes(b"old")

        write_bytes_atomic(target, b"new")

        assert target.read_bytes() == b"new"

    def test_failed_replace_cleans_temp_file(self, tmp_path) -> None:
        target = tmp_path / "a.pdf"

        with (
            patch("inspire_browser.io_actions.os.replace", side_effect=OSError("denied")),
            pytest.raises(OSError, match="denied"),
        ):
            write_bytes_atomic(target, b"%PDF")

        assert not target.exists()
        assert os.listdir(tmp_path) == []
