"""Property-based tests using Hypothesis.

Verifies the editor cursor invariant, the result-list selection and scroll
invariants, and config clamping for arbitrary inputs.

Run:
    pytest tests/test_properties.py -v
    pytest tests/test_properties.py -v --hypothesis-seed=0  # reproducible
"""

from __future__ import annotations

import hypothesis.strategies as st
from hypothesis import given, settings

from inspire_browser.config import _config_to_dict, _dict_to_config
from inspire_browser.editor import QueryEditor
from inspire_browser.models import (
    MAX_MIN_QUERY_LENGTH,
    MAX_RESULTS_LIMIT,
    MAX_SEARCH_DEBOUNCE_MS,
    MIN_SEARCH_DEBOUNCE_MS,
    ResultEntry,
)
from inspire_browser.parsing import normalize_arxiv_id
from inspire_browser.render import list_rows
from inspire_browser.result_list import ResultList

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")

# ── Custom strategies ────────────────────────────────────────────────

editor_ops = st.one_of(
    st.tuples(st.just("insert"), st.text(min_size=1, max_size=3)),
    st.tuples(st.just("delete_backward"), st.none()),
    st.tuples(st.just("delete_forward"), st.none()),
    st.tuples(st.just("move"), st.integers(min_value=-50, max_value=50)),
    st.tuples(st.just("set_text"), st.text(max_size=20)),
    st.tuples(st.just("move_home"), st.none()),
    st.tuples(st.just("move_end"), st.none()),
)


def _entries(count: int) -> list[ResultEntry]:
    return [ResultEntry(id=str(i), title=f"Record {i}") for i in range(count)]


@st.composite
def arxiv_ids(draw: st.DrawFn) -> str:
    """Generate valid new-style arXiv IDs like '2401.12345'."""
    yy = draw(st.integers(min_value=7, max_value=99))
    mm = draw(st.integers(min_value=1, max_value=12))
    num = draw(st.integers(min_value=1, max_value=99999))
    return f"{yy:02d}{mm:02d}.{num:05d}"


# ── Editor ───────────────────────────────────────────────────────────


@given(st.text(max_size=20), st.lists(editor_ops, max_size=40))
def test_cursor_stays_within_text(initial: str, ops: list) -> None:
    editor = QueryEditor(initial)
    for name, arg in ops:
        method = getattr(editor, name)
        if arg is None:
            method()
        else:
            method(arg)
        assert 0 <= editor.cursor <= len(editor.text)


@given(st.text(max_size=20), st.integers(min_value=-40, max_value=40))
def test_move_never_changes_text(initial: str, delta: int) -> None:
    editor = QueryEditor(initial)
    editor.move(delta)

    assert editor.text == initial
    assert editor.text_changed is False


# ── Result list ──────────────────────────────────────────────────────


@given(
    st.integers(min_value=0, max_value=60),
    st.lists(st.integers(min_value=-100, max_value=100), max_size=30),
)
def test_selection_is_none_iff_empty(count: int, deltas: list[int]) -> None:
    results = ResultList(_entries(count))
    for delta in deltas:
        results.move_selection(delta)
        if count == 0:
            assert results.selected is None
        else:
            assert results.selected is not None
            assert 0 <= results.selected < count


@given(
    st.integers(min_value=0, max_value=60),
    st.lists(st.integers(min_value=-30, max_value=30), max_size=20),
    st.integers(min_value=1, max_value=50),
)
def test_scroll_keeps_selection_visible_and_is_idempotent(
    count: int, deltas: list[int], terminal_height: int
) -> None:
    results = ResultList(_entries(count))
    height = list_rows(terminal_height)
    for delta in deltas:
        results.move_selection(delta)
        offset = results.scroll_into_view(height)
        assert results.scroll_into_view(height) == offset
        assert 0 <= offset <= max(0, count - 1)
        if results.selected is not None:
            assert offset <= results.selected < offset + height


# ── Config ───────────────────────────────────────────────────────────


@given(
    st.dictionaries(
        st.sampled_from(
            ["search_debounce_ms", "min_query_length", "max_results", "confirm_exit", "pdf_viewer"]
        ),
        st.one_of(st.integers(), st.booleans(), st.text(max_size=5), st.none()),
    )
)
def test_dict_to_config_always_within_bounds(data: dict) -> None:
    config = _dict_to_config(data)

    assert MIN_SEARCH_DEBOUNCE_MS <= config.search_debounce_ms <= MAX_SEARCH_DEBOUNCE_MS
    assert 0 <= config.min_query_length <= MAX_MIN_QUERY_LENGTH
    assert 1 <= config.max_results <= MAX_RESULTS_LIMIT
    assert isinstance(config.confirm_exit, bool)
    assert _dict_to_config(_config_to_dict(config)) == config


# ── Parsing ──────────────────────────────────────────────────────────


@given(arxiv_ids(), st.integers(min_value=1, max_value=20))
def test_normalize_arxiv_id_strips_version_and_url(arxiv_id: str, version: int) -> None:
    assert normalize_arxiv_id(f"{arxiv_id}v{version}") == arxiv_id
    assert normalize_arxiv_id(f"https://arxiv.org/abs/{arxiv_id}v{version}") == arxiv_id
    assert normalize_arxiv_id(f"https://arxiv.org/pdf/{arxiv_id}v{version}.pdf") == arxiv_id
