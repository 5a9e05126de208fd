"""Search controller: wires query state, guard, pipeline and projector.

This is the one authoritative updater. Every pipeline event passes through
``_on_event`` into the projector, and projector effects are carried out here,
so the UI state only ever moves in dispatch order.
"""

import logging
from collections.abc import Callable

from planetscope.events.projector import SearchStateProjector, StateListener
from planetscope.models import PipelineEvent, Query, SearchError, UIState
from planetscope.search.pipeline import DEFAULT_DEBOUNCE_MS, RequestPipeline
from planetscope.search.query_state import PaginationGuard, QueryState
from planetscope.transports.base import SearchTransport

logger = logging.getLogger(__name__)


class SearchController:
    """Free-text search with pagination over a SearchTransport."""

    def __init__(
        self,
        transport: SearchTransport,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        abort_superseded: bool = True,
    ) -> None:
        self._state = QueryState()
        self._guard = PaginationGuard(self._state)
        self._pipeline = RequestPipeline(
            transport, debounce_ms=debounce_ms, abort_superseded=abort_superseded
        )
        self._projector = SearchStateProjector()
        self._closed = False
        self._close_callbacks: list[Callable[[], None]] = []

        self._pipeline.subscribe(self._on_event, replay=False)
        self._state.subscribe(self._pipeline.push)

    # -- inputs --

    def start(self) -> None:
        """Publish the initial query so the first page loads without input."""
        self._check_open()
        self._pipeline.push(self._state.query)

    def set_query(self, text: str) -> None:
        self._check_open()
        self._state.set_text(text)

    def set_page(self, page: int) -> None:
        self._check_open()
        self._state.set_page(page)

    def previous_page(self) -> None:
        self.set_page(self._state.page - 1)

    def next_page(self) -> None:
        self.set_page(self._state.page + 1)

    def go_to_page(self, page: int) -> None:
        self.set_page(page)

    # -- outputs --

    @property
    def query(self) -> Query:
        return self._state.query

    @property
    def state(self) -> UIState:
        return self._projector.state

    @property
    def results(self) -> list[str]:
        return self._projector.state.results

    @property
    def total_count(self) -> int:
        return self._projector.state.total_count

    @property
    def has_prev_page(self) -> bool:
        return self._projector.state.has_prev

    @property
    def has_next_page(self) -> bool:
        return self._projector.state.has_next

    @property
    def loading(self) -> bool:
        return self._projector.state.loading

    @property
    def error(self) -> SearchError | None:
        return self._projector.state.error

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(
        self,
        listener: StateListener,
        *,
        on_close: Callable[[], None] | None = None,
    ) -> Callable[[], None]:
        """Receive every UIState change, starting with the current one.

        ``on_close`` is called once when the controller closes, or right away
        if it already has.
        """
        unsubscribe_state = self._projector.subscribe(listener)
        if on_close is None:
            return unsubscribe_state
        if self._closed:
            on_close()
        else:
            self._close_callbacks.append(on_close)

        def unsubscribe() -> None:
            unsubscribe_state()
            if on_close in self._close_callbacks:
                self._close_callbacks.remove(on_close)

        return unsubscribe

    async def settle(self) -> None:
        """Wait for pending and in-flight requests, recovery dispatches included."""
        await self._pipeline.settle()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._pipeline.aclose()
        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            callback()

    # -- internals --

    def _check_open(self) -> None:
        if self._closed:
            raise ControllerClosedError()

    def _on_event(self, event: PipelineEvent) -> None:
        for effect in self._projector.project([event]):
            if effect == "reset_query":
                self._recover(event)

    def _recover(self, event: PipelineEvent) -> None:
        """Clear the search after a failed request so it is not re-issued."""
        error = self._projector.state.error
        logger.warning(
            "Search for %r page %d failed: %s; clearing query",
            event.query.text,
            event.query.page,
            error.message if error else "unknown error",
        )
        if self._closed:
            return
        self._state.set_text("")
        if self._state.page != 1:
            self._state.set_page(1)


class ControllerClosedError(Exception):
    def __init__(self) -> None:
        super().__init__("Search controller is closed")
