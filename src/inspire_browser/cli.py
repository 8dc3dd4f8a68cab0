"""CLI/bootstrap helpers for the INSPIRE browser application."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

from platformdirs import user_log_dir

from inspire_browser import __version__
from inspire_browser.action_messages import build_actionable_error
from inspire_browser.config import get_config_path, load_config, save_config
from inspire_browser.library import get_library_db_path, get_preprint_dir, load_downloaded_versions
from inspire_browser.models import CONFIG_APP_NAME, UserConfig

logger = logging.getLogger(__name__)

LOG_FILENAME = "debug.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI owns the terminal)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_log_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _init_config() -> int:
    """Write a default config file if none exists and print its path."""
    path = get_config_path()
    if path.exists():
        print(f"Config already exists: {path}")
        return 0
    if not save_config(UserConfig()):
        print(
            build_actionable_error(
                "write the default config",
                why=f"{path.parent} is not writable",
                next_step="check the directory permissions",
            ),
            file=sys.stderr,
        )
        return 1
    print(path)
    return 0


def _prepare_library(config: UserConfig) -> dict[str, int] | int:
    """Create the data directories; returns downloaded versions or an exit code."""
    preprint_dir = get_preprint_dir(config)
    db_path = get_library_db_path()
    try:
        preprint_dir.mkdir(parents=True, exist_ok=True)
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Could not create data directories: %s", e)
        print(
            build_actionable_error(
                "start inspire-browser",
                why=f"the preprint directory {preprint_dir} cannot be created ({e.strerror or e})",
                next_step="set download_dir in config.json or pass --download-dir",
            ),
            file=sys.stderr,
        )
        return 1
    return load_downloaded_versions(db_path)


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    prepare_library_fn: Callable[[UserConfig], dict[str, int] | int] = _prepare_library,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = argparse.ArgumentParser(
        description="Search INSPIRE-HEP and download arXiv preprints in a TUI"
    )
    parser.add_argument(
        "-q",
        "--query",
        type=str,
        default="",
        help="Initial search query",
    )
    parser.add_argument(
        "--download-dir",
        type=str,
        default=None,
        help="Directory for downloaded preprints (overrides download_dir in config)",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default config file (if missing), print its path and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (debug.log in the user log directory)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Use ASCII-only glyphs for compatibility with limited terminals",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("inspire-browser %s starting", __version__)

    if args.init_config:
        return _init_config()

    config = load_config_fn()
    if args.download_dir:
        config = replace(config, download_dir=args.download_dir)

    if not validate_interactive_tty_fn():
        print(
            "Error: inspire-browser requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run inspire-browser directly in a terminal session", file=sys.stderr)
        print("  - Use --init-config for non-interactive setup", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    downloaded = prepare_library_fn(config)
    if isinstance(downloaded, int):
        return downloaded

    if app_factory is None:
        from inspire_browser.app import InspireBrowser as _InspireBrowser

        app_factory = _InspireBrowser

    app = app_factory(
        config,
        downloaded=downloaded,
        initial_query=args.query,
        ascii_icons=args.ascii,
    )
    app.run()
    return_code = getattr(app, "return_code", 0)
    return return_code if isinstance(return_code, int) else 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_init_config",
    "_prepare_library",
    "_validate_interactive_tty",
    "main",
]
