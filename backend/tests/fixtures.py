"""Shared test helpers: a scriptable transport and event builders."""

import asyncio
from uuid import uuid4

from planetscope.models import (
    PipelineEvent,
    Planet,
    Query,
    SearchError,
    SearchFailedPayload,
    SearchResult,
    SearchSucceededPayload,
)
from planetscope.transports.base import SearchTransport

# Short enough to keep the suite fast, long enough that back-to-back calls
# made without awaiting always land inside one window.
DEBOUNCE_MS = 20


async def wait_for_debounce(windows: float = 3) -> None:
    """Sleep for a few debounce windows so a pending dispatch fires."""
    await asyncio.sleep(DEBOUNCE_MS / 1000 * windows)


def make_result(
    *names: str,
    count: int | None = None,
    next: str | None = None,
    previous: str | None = None,
) -> SearchResult:
    """Create a SearchResult with one Planet per name."""
    return SearchResult(
        count=len(names) if count is None else count,
        next=next,
        previous=previous,
        items=[Planet(name=name) for name in names],
    )


class FakeTransport(SearchTransport):
    """Test transport with scripted responses and optional per-query gates.

    A gated query blocks inside ``search`` until its gate is released, which
    lets tests control the order in which outcomes arrive.
    """

    def __init__(
        self,
        responses: dict[tuple[str, int], SearchResult | Exception] | None = None,
    ) -> None:
        self.calls: list[tuple[str, int]] = []
        self.completed: list[tuple[str, int]] = []
        self._responses = responses or {}
        self._gates: dict[tuple[str, int], asyncio.Event] = {}

    @property
    def name(self) -> str:
        return "fake"

    def respond(self, text: str, page: int, response: SearchResult | Exception) -> None:
        self._responses[(text, page)] = response

    def hold(self, text: str, page: int) -> asyncio.Event:
        """Gate ``(text, page)``; set the returned event to let it finish."""
        gate = asyncio.Event()
        self._gates[(text, page)] = gate
        return gate

    async def search(self, text: str, page: int) -> SearchResult:
        key = (text, page)
        self.calls.append(key)
        gate = self._gates.get(key)
        if gate is not None:
            await gate.wait()
        self.completed.append(key)
        response = self._responses.get(key)
        if response is None:
            return make_result(f"{text or 'all'}-{page}")
        if isinstance(response, Exception):
            raise response
        return response


def _event(event_type, generation, query, payload) -> PipelineEvent:
    return PipelineEvent(
        event_id=str(uuid4()),
        generation=generation,
        event_type=event_type,
        query=query,
        payload=payload,
    )


def make_dispatched(generation: int, text: str = "", page: int = 1) -> PipelineEvent:
    """Create a SearchDispatched event for testing."""
    return _event("SearchDispatched", generation, Query(text=text, page=page), {})


def make_succeeded(
    generation: int,
    result: SearchResult,
    text: str = "",
    page: int = 1,
) -> PipelineEvent:
    """Create a SearchSucceeded event for testing."""
    payload = SearchSucceededPayload(result=result).model_dump()
    return _event("SearchSucceeded", generation, Query(text=text, page=page), payload)


def make_failed(
    generation: int,
    message: str = "boom",
    text: str = "",
    page: int = 1,
    status_code: int | None = None,
) -> PipelineEvent:
    """Create a SearchFailed event for testing."""
    error = SearchError(message=message, status_code=status_code)
    payload = SearchFailedPayload(error=error).model_dump()
    return _event("SearchFailed", generation, Query(text=text, page=page), payload)
