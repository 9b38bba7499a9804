"""Per-view owner of log display state, search state and the poll task."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from tailview.cleaning import is_near_bottom
from tailview.errors import FetchError
from tailview.models import (
    DisplayStatus,
    HighlightResult,
    LogViewState,
    ReconcileResult,
    RenderInstruction,
    RenderMode,
    SearchState,
)
from tailview.reconcile import clear_display, fetch_failed, reconcile
from tailview import search
from tailview.settings import settings

logger = structlog.get_logger(__name__)

LogFetch = Callable[[str, int], Awaitable[str | None]]
# Called with None as the instruction when only the search highlight changed.
RenderCallback = Callable[[RenderInstruction | None, HighlightResult], None]


class LogView:
    """Follow the log tail of one selected target.

    All mutation of the view's ``LogViewState`` goes through this object.
    Polling runs as an asyncio task owned by the view; selecting another
    target, deselecting or hiding the view cancels it immediately, and any
    fetch that completes for a superseded target is discarded.
    """

    def __init__(
        self,
        fetch: LogFetch,
        *,
        tail_lines: int | None = None,
        poll_interval: float | None = None,
        scroll_threshold: int | None = None,
        on_render: RenderCallback | None = None,
    ) -> None:
        self._fetch = fetch
        self.tail_lines = tail_lines or settings.tail_lines()
        self.poll_interval = poll_interval or settings.poll_interval_seconds()
        self.scroll_threshold = (
            scroll_threshold if scroll_threshold is not None else settings.scroll_threshold_px()
        )
        self._on_render = on_render
        self.state = LogViewState()
        self.highlight = HighlightResult(highlighted_text="", match_count=0, current_index=-1)
        self.last_instruction: RenderInstruction | None = None
        self.was_at_bottom = True
        self._visible = True
        self._generation = 0
        self._in_flight: int | None = None
        self._pending_forced = False
        self._poll_task: asyncio.Task | None = None

    @property
    def target(self) -> str | None:
        return self.state.target

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    # ------------------------------------------------------------------
    # Target lifecycle
    # ------------------------------------------------------------------

    async def select(self, target: str) -> RenderInstruction | None:
        """Switch to *target*: reset state, load from scratch, start polling."""
        self.stop_polling()
        self._generation += 1
        generation = self._generation
        self._pending_forced = False
        self.state = LogViewState(target=target, search=self.state.search)
        logger.info("Log target selected", target=target, generation=generation)
        with structlog.contextvars.bound_contextvars(target=target, generation=generation):
            instruction = await self.refresh(forced=True)
        if generation == self._generation and self._visible:
            self.start_polling()
        return instruction

    def deselect(self) -> RenderInstruction:
        """Stop following, drop all display state and blank the renderer."""
        self.stop_polling()
        self._generation += 1
        self._pending_forced = False
        if self.state.target is not None:
            logger.info("Log target deselected", target=self.state.target)
        self.state = LogViewState(search=self.state.search)
        self._rehighlight()
        instruction = RenderInstruction(mode=RenderMode.REPLACE, status=DisplayStatus.IDLE)
        self.last_instruction = instruction
        self._emit(instruction)
        return instruction

    def hide(self) -> None:
        self._visible = False
        self.stop_polling()

    def show(self) -> None:
        self._visible = True
        if self.state.target is not None:
            self.start_polling()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def start_polling(self) -> None:
        if self.is_polling or self.state.target is None:
            return
        self._poll_task = asyncio.create_task(self._poll_loop(self._generation))

    def stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self, generation: int) -> None:
        # Runs in its own task context, so the binding stays local to the loop.
        structlog.contextvars.bind_contextvars(target=self.state.target, generation=generation)
        while generation == self._generation:
            await asyncio.sleep(self.poll_interval)
            if generation != self._generation:
                return
            try:
                await self.refresh()
            except Exception:
                logger.exception("Log poll failed", target=self.state.target)

    async def refresh(self, forced: bool = False) -> RenderInstruction | None:
        """Fetch the tail once and reconcile it into the display.

        Returns None when nothing was applied: no target, a fetch for the
        current target is still outstanding, or the target changed while
        this fetch was running. A forced request that lands on an
        outstanding fetch is carried over to the next reconcile.
        """
        target = self.state.target
        if target is None:
            return None
        generation = self._generation
        if self._in_flight == generation:
            if forced:
                # Applied by whichever fetch for this target reconciles next.
                self._pending_forced = True
            logger.debug("Log fetch already in flight; skipping", target=target, forced=forced)
            return None
        self._in_flight = generation
        was_at_bottom = self.was_at_bottom
        try:
            try:
                raw = await self._fetch(target, self.tail_lines)
            except FetchError as exc:
                if generation != self._generation:
                    return None
                logger.warning("Log fetch failed", target=target, error=str(exc))
                return self._apply(fetch_failed(self.state.display, str(exc)))
            except Exception as exc:
                if generation != self._generation:
                    return None
                logger.exception("Log fetch raised", target=target)
                return self._apply(fetch_failed(self.state.display, str(exc)))
        finally:
            if self._in_flight == generation:
                self._in_flight = None

        if generation != self._generation:
            logger.debug("Discarding stale log fetch", target=target)
            return None
        forced = forced or self._pending_forced
        self._pending_forced = False
        return self._apply(
            reconcile(
                self.state.display,
                raw,
                forced_reload=forced,
                was_at_bottom=was_at_bottom,
                tail_lines=self.tail_lines,
            )
        )

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def clear(self) -> RenderInstruction:
        """Hide the current lines until newer output arrives."""
        return self._apply(clear_display(self.state.display))

    def update_scroll(self, scroll_height: float, scroll_top: float, client_height: float) -> None:
        self.was_at_bottom = is_near_bottom(
            scroll_height, scroll_top, client_height, self.scroll_threshold
        )

    def set_search_term(self, term: str) -> HighlightResult:
        self._set_search(search.set_term(self.state.display.text, term))
        return self.highlight

    def next_match(self) -> HighlightResult:
        self._set_search(search.next_match(self.state.search))
        return self.highlight

    def previous_match(self) -> HighlightResult:
        self._set_search(search.previous_match(self.state.search))
        return self.highlight

    def clear_search(self) -> HighlightResult:
        self._set_search(search.clear_search(self.state.search))
        return self.highlight

    @property
    def search_status(self) -> str:
        return search.search_status(self.state.search)

    @property
    def can_navigate(self) -> bool:
        """Whether previous/next match controls should be enabled."""
        return search.has_matches(self.state.search)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_search(self, state: SearchState) -> None:
        previous = self.state.search
        self.state = self.state.model_copy(update={"search": state})
        self._rehighlight()
        if self.state.search != previous:
            self._emit(None)

    def _rehighlight(self) -> None:
        current = self.state.search
        highlight = search.apply_highlight(
            self.state.display.text, current.term, current.current_index
        )
        self.highlight = highlight
        self.state = self.state.model_copy(
            update={
                "search": SearchState(
                    term=current.term,
                    match_count=highlight.match_count,
                    current_index=highlight.current_index,
                )
            }
        )

    def _apply(self, result: ReconcileResult) -> RenderInstruction:
        self.state = self.state.model_copy(update={"display": result.state})
        instruction = result.instruction
        if not instruction.is_noop:
            self._rehighlight()
            self.last_instruction = instruction
            self._emit(instruction)
        return instruction

    def _emit(self, instruction: RenderInstruction | None) -> None:
        if self._on_render is not None:
            self._on_render(instruction, self.highlight)
