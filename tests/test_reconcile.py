"""Unit tests for log tail reconciliation."""

from tailview.models import DisplayState, DisplayStatus, RenderMode
from tailview.reconcile import (
    NO_LOGS_MESSAGE,
    WAITING_MESSAGE,
    clear_display,
    fetch_failed,
    find_overlap,
    reconcile,
)


def _texts(lines) -> list[str]:
    return [line.text for line in lines]


def _blob(*lines: str) -> str:
    return "\n".join(lines) + "\n"


class TestFindOverlap:
    """Test overlap detection between consecutive snapshots."""

    def test_finds_previous_last_line(self) -> None:
        assert find_overlap(["a", "b", "c"], ["b", "c", "d"]) == 1

    def test_missing_line_returns_none(self) -> None:
        assert find_overlap(["a", "b", "c"], ["x", "y"]) is None

    def test_empty_previous_returns_none(self) -> None:
        assert find_overlap([], ["a"]) is None

    def test_prefers_occurrence_with_matching_history(self) -> None:
        """A repeated last line resolves to the occurrence preceded by the same lines."""
        assert find_overlap(["a", "b", "a"], ["a", "b", "a", "c"]) == 2

    def test_repeated_identical_lines(self) -> None:
        assert find_overlap(["x", "x"], ["x", "x", "x"]) == 1

    def test_equal_candidates_pick_first(self) -> None:
        """Without distinguishing history the first occurrence wins."""
        assert find_overlap(["q"], ["q", "r", "q", "s"]) == 0


class TestReconcileReplace:
    """Test the full-replace paths."""

    def test_first_fetch_replaces(self) -> None:
        result = reconcile(DisplayState(), _blob("a", "b", "c"), was_at_bottom=False)

        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["a", "b", "c"]
        assert result.instruction.auto_scroll is True
        assert result.state.needs_replace is False
        assert result.state.status == DisplayStatus.CONTENT
        assert result.state.sequence == 1

    def test_forced_reload_replaces(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        result = reconcile(first.state, _blob("a", "b", "c"), forced_reload=True)

        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["a", "b", "c"]

    def test_replace_is_bounded_to_tail_window(self) -> None:
        raw = _blob(*[f"line {i}" for i in range(10)])
        result = reconcile(DisplayState(), raw, tail_lines=3)

        assert _texts(result.state.lines) == ["line 7", "line 8", "line 9"]

    def test_after_empty_fetch_replaces(self) -> None:
        first = reconcile(DisplayState(), _blob("a"))
        empty = reconcile(first.state, "")
        result = reconcile(empty.state, _blob("a", "b"))

        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["a", "b"]

    def test_input_state_is_not_mutated(self) -> None:
        state = DisplayState()
        reconcile(state, _blob("a"))
        assert state.lines == ()
        assert state.sequence == 0


class TestReconcileAppend:
    """Test append-by-overlap."""

    def test_appends_only_new_suffix(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b", "c"))
        result = reconcile(first.state, _blob("a", "b", "c", "d", "e"), was_at_bottom=True)

        assert result.instruction.mode == RenderMode.APPEND
        assert _texts(result.instruction.lines) == ["d", "e"]
        assert result.instruction.auto_scroll is True
        assert _texts(result.state.lines) == ["a", "b", "c", "d", "e"]

    def test_appends_when_window_slides(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b", "c"), tail_lines=3)
        result = reconcile(first.state, _blob("b", "c", "d"), tail_lines=3)

        assert result.instruction.mode == RenderMode.APPEND
        assert _texts(result.instruction.lines) == ["d"]
        assert _texts(result.state.lines) == ["b", "c", "d"]

    def test_duplicate_last_line_does_not_reappend(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b", "a"))
        result = reconcile(first.state, _blob("a", "b", "a", "c"))

        assert _texts(result.instruction.lines) == ["c"]

    def test_no_auto_scroll_when_reader_scrolled_up(self) -> None:
        first = reconcile(DisplayState(), _blob("a"))
        result = reconcile(first.state, _blob("a", "b"), was_at_bottom=False)

        assert result.instruction.mode == RenderMode.APPEND
        assert result.instruction.auto_scroll is False

    def test_unchanged_snapshot_is_noop(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        result = reconcile(first.state, _blob("a", "b"))

        assert result.instruction.is_noop
        assert _texts(result.state.lines) == ["a", "b"]
        assert result.state.sequence == 2

    def test_cleaning_applies_before_comparison(self) -> None:
        """Differently decorated copies of the same line are treated as equal."""
        first = reconcile(DisplayState(), _blob("2025-01-01T00:00:00.1Z a", "2025-01-01T00:00:01.1Z b"))
        result = reconcile(first.state, _blob("\x1b[32mb\x1b[0m", "c"))

        assert result.instruction.mode == RenderMode.APPEND
        assert _texts(result.instruction.lines) == ["c"]


class TestReconcileRotation:
    """Test fallback when the overlap rotated out of the fetch window."""

    def test_lost_overlap_replaces(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b", "c"))
        result = reconcile(first.state, _blob("x", "y", "z"), was_at_bottom=False)

        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["x", "y", "z"]
        assert result.instruction.auto_scroll is False
        assert _texts(result.state.lines) == ["x", "y", "z"]


class TestEmptyAndFailure:
    """Test the no-logs and fetch failure display states."""

    def test_empty_result_is_distinct_state(self) -> None:
        first = reconcile(DisplayState(), _blob("a"))
        result = reconcile(first.state, None)

        assert result.instruction.mode == RenderMode.REPLACE
        assert result.instruction.status == DisplayStatus.EMPTY
        assert result.instruction.message == NO_LOGS_MESSAGE
        assert result.state.lines == ()
        assert result.state.status == DisplayStatus.EMPTY

    def test_snapshot_with_only_noise_is_empty(self) -> None:
        result = reconcile(DisplayState(), "\x1b[0m\n\n")
        assert result.state.status == DisplayStatus.EMPTY

    def test_fetch_failure_resets_state(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        failed = fetch_failed(first.state, "container not running")

        assert failed.instruction.status == DisplayStatus.ERROR
        assert failed.instruction.message == "container not running"
        assert failed.state.lines == ()
        assert failed.state.needs_replace is True

        result = reconcile(failed.state, _blob("a", "b", "c"))
        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["a", "b", "c"]


class TestManualClear:
    """Test the clear boundary filter."""

    def test_clear_shows_waiting_placeholder(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        cleared = clear_display(first.state)

        assert cleared.instruction.mode == RenderMode.REPLACE
        assert cleared.instruction.lines == ()
        assert cleared.instruction.status == DisplayStatus.WAITING
        assert cleared.instruction.message == WAITING_MESSAGE
        assert cleared.state.cleared_at == "b"
        assert cleared.state.needs_replace is True

    def test_waits_until_new_lines_after_boundary(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        cleared = clear_display(first.state)
        result = reconcile(cleared.state, _blob("a", "b"))

        assert result.instruction.is_noop
        assert result.state.status == DisplayStatus.WAITING
        assert result.state.cleared_at == "b"

    def test_boundary_rotated_out_shows_snapshot(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        cleared = clear_display(first.state)
        result = reconcile(cleared.state, _blob("x", "y"))

        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["x", "y"]
        assert result.state.cleared_at is None

    def test_forced_reload_discards_clear(self) -> None:
        first = reconcile(DisplayState(), _blob("a", "b"))
        cleared = clear_display(first.state)
        result = reconcile(cleared.state, _blob("a", "b"), forced_reload=True)

        assert _texts(result.instruction.lines) == ["a", "b"]
        assert result.state.cleared_at is None


class TestEndToEndScenario:
    """Fetch, append, clear, then resume after the boundary."""

    def test_fetch_append_clear_resume(self) -> None:
        state = DisplayState()

        result = reconcile(state, _blob("a", "b", "c"))
        assert result.instruction.mode == RenderMode.REPLACE
        assert _texts(result.instruction.lines) == ["a", "b", "c"]

        result = reconcile(result.state, _blob("b", "c", "d"))
        assert result.instruction.mode == RenderMode.APPEND
        assert _texts(result.instruction.lines) == ["d"]

        cleared = clear_display(result.state)
        result = reconcile(cleared.state, _blob("b", "c", "d", "e"))
        assert _texts(result.instruction.lines) == ["e"]
        assert _texts(result.state.lines) == ["e"]

        result = reconcile(result.state, _blob("c", "d", "e", "f"))
        assert result.instruction.mode == RenderMode.APPEND
        assert _texts(result.instruction.lines) == ["f"]
        assert _texts(result.state.lines) == ["e", "f"]
