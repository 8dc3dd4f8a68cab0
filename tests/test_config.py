"""Tests for config loading, validation and atomic saving."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from inspire_browser.config import _dict_to_config, load_config, save_config
from inspire_browser.models import UserConfig


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "inspire-browser" / "config.json"
    monkeypatch.setattr("inspire_browser.config.get_config_path", lambda: path)
    return path


def test_missing_file_gives_defaults(config_path) -> None:
    config = load_config()

    assert config == UserConfig()
    assert config.config_defaulted is False


def test_save_then_load(config_path) -> None:
    original = UserConfig(
        download_dir="~/papers",
        pdf_viewer="zathura {path}",
        search_debounce_ms=500,
        min_query_length=2,
        max_results=100,
        confirm_exit=True,
    )

    assert save_config(original) is True
    assert load_config() == original
    assert list(config_path.parent.glob(".config-*.tmp")) == []


def test_saved_file_is_readable_json(config_path) -> None:
    save_config(UserConfig(max_results=25))

    data = json.loads(config_path.read_text(encoding="utf-8"))

    assert data["max_results"] == 25
    assert data["version"] == 1
    assert "config_defaulted" not in data


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '"text"'])
def test_corrupt_file_sets_defaulted_flag(config_path, content, caplog) -> None:
    caplog.set_level("WARNING", logger="inspire_browser.config")
    config_path.parent.mkdir(parents=True)
    config_path.write_text(content, encoding="utf-8")

    config = load_config()

    assert config.config_defaulted is True
    assert config.search_debounce_ms == UserConfig().search_debounce_ms
    assert "using defaults" in caplog.text


def test_out_of_range_values_are_clamped() -> None:
    config = _dict_to_config(
        {"search_debounce_ms": 1, "min_query_length": 99, "max_results": 100000}
    )

    assert config.search_debounce_ms == 50
    assert config.min_query_length == 20
    assert config.max_results == 250


def test_wrong_types_fall_back_to_defaults() -> None:
    config = _dict_to_config(
        {
            "search_debounce_ms": "fast",
            "max_results": True,
            "confirm_exit": "yes",
            "pdf_viewer": 3,
        }
    )

    assert config == UserConfig()


def test_save_failure_returns_false(config_path, caplog) -> None:
    caplog.set_level("ERROR", logger="inspire_browser.config")

    with patch("inspire_browser.config.tempfile.mkstemp", side_effect=OSError("read-only")):
        assert save_config(UserConfig()) is False

    assert "Failed to save config" in caplog.text
    assert not config_path.exists()
