"""Helpers for writing preprint files and handing them to a viewer."""

from __future__ import annotations

import logging
import os
import platform
import shlex
import subprocess
import tempfile
from pathlib import Path

from inspire_browser.action_messages import build_actionable_error
from inspire_browser.errors import DownloadError

logger = logging.getLogger(__name__)


def build_viewer_args(viewer_cmd: str, path: str) -> list[str]:
    """Build subprocess argument list for a configured external viewer command."""
    args = shlex.split(viewer_cmd, posix=os.name != "nt")
    if os.name == "nt":
        # Windows split keeps wrapping quotes when posix=False.
        args = [
            arg[1:-1] if len(arg) >= 2 and arg.startswith('"') and arg.endswith('"') else arg
            for arg in args
        ]
    if not args:
        raise ValueError("Viewer command is empty")
    if "{path}" in viewer_cmd:
        return [arg.replace("{path}", path) for arg in args]
    return [*args, path]


def get_open_command(system: str) -> list[str] | None:
    """Return the platform opener command, or ``None`` where ``os.startfile`` is used."""
    if system == "Darwin":
        return ["open"]
    if system == "Windows":
        return None
    return ["xdg-open"]


def open_path(path: Path, viewer_cmd: str = "") -> None:
    """Open ``path`` with the configured viewer or the platform opener.

    Raises:
        DownloadError: If the viewer could not be launched.
    """
    try:
        if viewer_cmd:
            args = build_viewer_args(viewer_cmd, str(path))
        else:
            opener = get_open_command(platform.system())
            if opener is None:
                os.startfile(str(path))  # type: ignore[attr-defined]  # nosec B606
                return
            args = [*opener, str(path)]
        # User-configured local viewer command execution is an explicit feature.
        subprocess.Popen(  # nosec B603
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except (ValueError, OSError) as e:
        logger.warning("Failed to open %s with viewer %r: %s", path, viewer_cmd, e)
        raise DownloadError(
            build_actionable_error(
                f"open {path.name}",
                why="the viewer command failed to launch",
                next_step="check pdf_viewer in config.json",
            )
        ) from e


def write_bytes_atomic(path: Path, content: bytes) -> Path:
    """Write ``content`` to ``path`` using atomic temp-file replacement."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return path


__all__ = [
    "build_viewer_args",
    "get_open_command",
    "open_path",
    "write_bytes_atomic",
]
