"""Literal, case-insensitive search and highlighting over displayed log text."""

from __future__ import annotations

import html
import re

from tailview.models import HighlightResult, SearchState

HIGHLIGHT_CLASS = "log-search-highlight"
ACTIVE_CLASS = "log-search-highlight-active"


def find_matches(text: str, term: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of non-overlapping matches of *term*."""
    if not term or not text:
        return []
    pattern = re.compile(re.escape(term), re.IGNORECASE)
    return [match.span() for match in pattern.finditer(text)]


def select_index(prior_index: int, match_count: int) -> int:
    """Keep the prior selection valid for a new match count."""
    if match_count == 0:
        return -1
    if prior_index < 0:
        return 0
    return min(prior_index, match_count - 1)


def _mark(fragment: str, index: int, active: bool) -> str:
    classes = f"{HIGHLIGHT_CLASS} {ACTIVE_CLASS}" if active else HIGHLIGHT_CLASS
    return f'<mark class="{classes}" data-match-index="{index}">{html.escape(fragment)}</mark>'


def apply_highlight(text: str, term: str, prior_index: int = -1) -> HighlightResult:
    """Wrap every match of *term* in *text* with an indexed ``<mark>``.

    Text outside matches is HTML-escaped. The current match carries the
    active class so the renderer can scroll it into view.

    Args:
        text: Rendered (already cleaned) display text.
        term: Literal search term; empty disables highlighting.
        prior_index: Previously selected match, or -1 when there was none.
    """
    spans = find_matches(text, term)
    if not spans:
        return HighlightResult(highlighted_text=html.escape(text), match_count=0, current_index=-1)
    current = select_index(prior_index, len(spans))

    parts: list[str] = []
    cursor = 0
    for index, (start, end) in enumerate(spans):
        parts.append(html.escape(text[cursor:start]))
        parts.append(_mark(text[start:end], index, index == current))
        cursor = end
    parts.append(html.escape(text[cursor:]))
    return HighlightResult(
        highlighted_text="".join(parts),
        match_count=len(spans),
        current_index=current,
    )


def set_term(text: str, term: str) -> SearchState:
    """Start a new search; the selection restarts at the first match."""
    count = len(find_matches(text, term))
    return SearchState(term=term, match_count=count, current_index=select_index(-1, count))


def next_match(state: SearchState) -> SearchState:
    if not state.term or state.match_count == 0:
        return state
    return state.model_copy(update={"current_index": (state.current_index + 1) % state.match_count})


def previous_match(state: SearchState) -> SearchState:
    if not state.term or state.match_count == 0:
        return state
    index = (state.current_index - 1 + state.match_count) % state.match_count
    return state.model_copy(update={"current_index": index})


def clear_search(state: SearchState) -> SearchState:
    """Drop the term and selection; displayed text is untouched."""
    return SearchState()


def has_matches(state: SearchState) -> bool:
    """Whether previous/next navigation controls should be enabled."""
    return bool(state.term) and state.match_count > 0


def search_status(state: SearchState) -> str:
    """Short status label for the search box."""
    if not state.term:
        return "No search"
    if state.match_count == 0:
        return "0 matches"
    return f"Match {max(state.current_index, 0) + 1}/{state.match_count}"
