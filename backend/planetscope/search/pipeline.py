"""Debounced request pipeline: query snapshots in, pipeline events out.

Snapshots pass a distinct-consecutive filter, then a debounce timer. When the
timer fires the pending query is dispatched to the transport under a new
generation number. Outcomes are reported as events tagged with that
generation; deciding whether they are still current is left to the projector.
"""

import asyncio
import logging
from collections.abc import Callable
from uuid import uuid4

from pydantic import BaseModel

from planetscope.models import (
    PipelineEvent,
    PipelineEventType,
    Query,
    SearchDispatchedPayload,
    SearchError,
    SearchFailedPayload,
    SearchSucceededPayload,
)
from planetscope.transports.base import SearchTransport, TransportError

logger = logging.getLogger(__name__)

EventListener = Callable[[PipelineEvent], None]

DEFAULT_DEBOUNCE_MS = 500


class RequestPipeline:
    """Turns a stream of Query snapshots into at most one honored request."""

    def __init__(
        self,
        transport: SearchTransport,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        abort_superseded: bool = True,
    ) -> None:
        self._transport = transport
        self._delay = debounce_ms / 1000
        self._abort_superseded = abort_superseded
        self._listeners: list[EventListener] = []

        self._last_seen: Query | None = None
        self._pending: Query | None = None
        self._timer: asyncio.TimerHandle | None = None

        self._generation = 0
        self._sequence = 0
        self._in_flight: dict[int, asyncio.Task[None]] = {}

        # Retained for last-value replay
        self._last_dispatched: PipelineEvent | None = None
        self._last_outcome: PipelineEvent | None = None
        self._last_success: tuple[PipelineEvent, PipelineEvent] | None = None

        self._closed = False

    @property
    def generation(self) -> int:
        """Generation of the most recent dispatch (0 before the first one)."""
        return self._generation

    @property
    def pending(self) -> Query | None:
        """Query waiting for the debounce timer, if any."""
        return self._pending

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def subscribe(self, listener: EventListener, *, replay: bool = True) -> None:
        """Attach an event listener.

        With ``replay`` the listener first receives the last successful
        dispatch/outcome pair, then the newest dispatch (and its failure, if
        it failed) when that is more recent.
        """
        self._listeners.append(listener)
        if replay:
            for event in self._replay_events():
                listener(event)

    def push(self, query: Query) -> None:
        """Offer a new snapshot. Must be called from the running event loop."""
        if self._closed:
            logger.debug("Pipeline closed, ignoring %r", query)
            return
        if query == self._last_seen:
            logger.debug("Suppressed repeat of %r", query)
            return
        self._last_seen = query
        self._pending = query
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire)

    async def settle(self) -> None:
        """Wait until no dispatch is pending and no request is in flight."""
        loop = asyncio.get_running_loop()
        while self._timer is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*self._in_flight.values(), return_exceptions=True)
            elif self._timer is not None:
                await asyncio.sleep(max(self._timer.when() - loop.time(), 0))
            await asyncio.sleep(0)

    async def aclose(self) -> None:
        """Drop the pending dispatch and cancel every in-flight request."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
        tasks = list(self._in_flight.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -- internals --

    def _fire(self) -> None:
        self._timer = None
        query, self._pending = self._pending, None
        if query is not None:
            self._dispatch(query)

    def _dispatch(self, query: Query) -> None:
        self._generation += 1
        generation = self._generation

        if self._abort_superseded:
            for stale_generation, task in self._in_flight.items():
                logger.debug("Aborting superseded request %d", stale_generation)
                task.cancel()

        dispatched = self._make_event(
            "SearchDispatched", generation, query, SearchDispatchedPayload()
        )
        self._last_dispatched = dispatched
        self._last_outcome = None
        logger.debug("Dispatching %r as generation %d", query, generation)
        self._emit(dispatched)

        task = asyncio.get_running_loop().create_task(self._run(dispatched))
        self._in_flight[generation] = task
        task.add_done_callback(lambda _t: self._in_flight.pop(generation, None))

    async def _run(self, dispatched: PipelineEvent) -> None:
        query = dispatched.query
        generation = dispatched.generation
        try:
            result = await self._transport.search(query.text, query.page)
        except TransportError as e:
            error = SearchError(
                message=str(e), kind=type(e).__name__, status_code=e.status_code
            )
        except Exception as e:
            logger.exception(
                "Transport %s raised unexpectedly for %r", self._transport.name, query
            )
            error = SearchError(message=str(e) or type(e).__name__, kind=type(e).__name__)
        else:
            succeeded = self._make_event(
                "SearchSucceeded", generation, query, SearchSucceededPayload(result=result)
            )
            if self._last_success is None or self._last_success[0].generation < generation:
                self._last_success = (dispatched, succeeded)
            self._record_outcome(succeeded)
            self._emit(succeeded)
            return

        failed = self._make_event(
            "SearchFailed", generation, query, SearchFailedPayload(error=error)
        )
        self._record_outcome(failed)
        self._emit(failed)

    def _record_outcome(self, event: PipelineEvent) -> None:
        if event.generation == self._generation:
            self._last_outcome = event

    def _replay_events(self) -> list[PipelineEvent]:
        events: list[PipelineEvent] = []
        if self._last_success is not None:
            events.extend(self._last_success)
        latest = self._last_dispatched
        if latest is None:
            return events
        if self._last_success is None or latest.generation > self._last_success[0].generation:
            events.append(latest)
            if self._last_outcome is not None:
                events.append(self._last_outcome)
        return events

    def _make_event(
        self,
        event_type: PipelineEventType,
        generation: int,
        query: Query,
        payload: BaseModel,
    ) -> PipelineEvent:
        self._sequence += 1
        return PipelineEvent(
            event_id=str(uuid4()),
            generation=generation,
            event_type=event_type,
            query=query,
            payload=payload.model_dump(),
            sequence_num=self._sequence,
        )

    def _emit(self, event: PipelineEvent) -> None:
        logger.debug(
            "Event #%d %s: %s for generation %d",
            event.sequence_num, event.event_id, event.event_type, event.generation,
        )
        for listener in list(self._listeners):
            listener(event)
