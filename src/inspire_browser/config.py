"""Configuration persistence: load and save."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from inspire_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MIN_QUERY_LENGTH,
    DEFAULT_SEARCH_DEBOUNCE_MS,
    MAX_MIN_QUERY_LENGTH,
    MAX_RESULTS_LIMIT,
    MAX_SEARCH_DEBOUNCE_MS,
    MIN_SEARCH_DEBOUNCE_MS,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field               Rule                        Handler
#   ──────────────────  ──────────────────────────  ────────────────
#   search_debounce_ms  50 ≤ x ≤ 5000               _clamp_int
#   min_query_length    0 ≤ x ≤ 20                  _clamp_int
#   max_results         1 ≤ x ≤ 250                 _clamp_int
#   scalar fields       type-checked via _safe_get  _dict_to_config
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/inspire-browser/config.json
    - macOS: ~/Library/Application Support/inspire-browser/config.json
    - Windows: %APPDATA%/inspire-browser/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "download_dir": config.download_dir,
        "pdf_viewer": config.pdf_viewer,
        "search_debounce_ms": _clamp_int(
            config.search_debounce_ms,
            DEFAULT_SEARCH_DEBOUNCE_MS,
            MIN_SEARCH_DEBOUNCE_MS,
            MAX_SEARCH_DEBOUNCE_MS,
        ),
        "min_query_length": _clamp_int(
            config.min_query_length, DEFAULT_MIN_QUERY_LENGTH, 0, MAX_MIN_QUERY_LENGTH
        ),
        "max_results": _clamp_int(config.max_results, DEFAULT_MAX_RESULTS, 1, MAX_RESULTS_LIMIT),
        "confirm_exit": config.confirm_exit,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _clamp_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    """Coerce ``value`` to an int within [minimum, maximum]."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return max(minimum, min(value, maximum))


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        download_dir=_safe_get(data, "download_dir", "", str),
        pdf_viewer=_safe_get(data, "pdf_viewer", "", str),
        search_debounce_ms=_clamp_int(
            data.get("search_debounce_ms"),
            DEFAULT_SEARCH_DEBOUNCE_MS,
            MIN_SEARCH_DEBOUNCE_MS,
            MAX_SEARCH_DEBOUNCE_MS,
        ),
        min_query_length=_clamp_int(
            data.get("min_query_length"), DEFAULT_MIN_QUERY_LENGTH, 0, MAX_MIN_QUERY_LENGTH
        ),
        max_results=_clamp_int(data.get("max_results"), DEFAULT_MAX_RESULTS, 1, MAX_RESULTS_LIMIT),
        confirm_exit=_safe_get(data, "confirm_exit", False, bool),
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted; a corrupted
    file sets ``config_defaulted`` so the UI can say so.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise TypeError("config root is not an object")
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
    except (KeyError, TypeError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
    return UserConfig(config_defaulted=True)


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
