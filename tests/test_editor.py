"""Tests for the single-line query editor."""

from __future__ import annotations

from inspire_browser.editor import QueryEditor


def test_insert_at_cursor_and_flags_change() -> None:
    editor = QueryEditor("hep")
    editor.move(-1)

    assert editor.insert("X") is True
    assert editor.text == "heXp"
    assert editor.cursor == 3
    assert editor.text_changed is True


def test_delete_backward_at_start_is_noop() -> None:
    editor = QueryEditor("abc")
    editor.move_home()

    assert editor.delete_backward() is False
    assert editor.text == "abc"
    assert editor.text_changed is False


def test_delete_forward_removes_char_under_cursor() -> None:
    editor = QueryEditor("abc")
    editor.move(-2)

    assert editor.delete_forward() is True
    assert editor.text == "ac"
    assert editor.cursor == 1


def test_delete_forward_at_end_is_noop() -> None:
    editor = QueryEditor("abc")

    assert editor.delete_forward() is False
    assert editor.text == "abc"


def test_move_clamps_to_text_bounds() -> None:
    editor = QueryEditor("abc")

    assert editor.move(10) is False
    assert editor.cursor == 3
    assert editor.move(-10) is True
    assert editor.cursor == 0


def test_cursor_moves_do_not_flag_text_change() -> None:
    editor = QueryEditor("abc")
    editor.move_home()
    editor.move_end()

    assert editor.text_changed is False


def test_set_text_replaces_and_moves_cursor_to_end() -> None:
    editor = QueryEditor("old")
    editor.move_home()

    assert editor.set_text("new query") is True
    assert editor.text == "new query"
    assert editor.cursor == len("new query")
    assert editor.consume_change() is True
    assert editor.consume_change() is False


def test_set_text_same_value_only_reports_cursor_move() -> None:
    editor = QueryEditor("same")
    editor.move_home()

    assert editor.set_text("same") is True
    assert editor.text_changed is False
    assert editor.set_text("same") is False


def test_insert_empty_string_is_noop() -> None:
    editor = QueryEditor()

    assert editor.insert("") is False
    assert editor.text_changed is False
