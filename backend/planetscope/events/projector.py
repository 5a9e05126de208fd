"""Search state projector: projects pipeline events into UIState.

The read side of the controller. Each handler is a pure function of the
current state and one event, returning the next state and any effects the
controller has to carry out. Outcomes are applied only when their generation
matches the most recently dispatched one; anything older is dropped.
"""

import logging
from collections.abc import Callable
from typing import Literal

from planetscope.models import (
    PipelineEvent,
    SearchFailedPayload,
    SearchSucceededPayload,
    UIState,
)

logger = logging.getLogger(__name__)

Effect = Literal["reset_query"]
Transition = tuple[UIState, list[Effect]]
StateListener = Callable[[UIState], None]


def _handle_dispatched(state: UIState, event: PipelineEvent) -> Transition:
    """Keep the last good results visible while the new request loads."""
    return (
        state.model_copy(
            update={
                "status": "loading",
                "loading": True,
                "query": event.query,
                "generation": event.generation,
            }
        ),
        [],
    )


def _handle_succeeded(state: UIState, event: PipelineEvent) -> Transition:
    result = SearchSucceededPayload.model_validate(event.payload).result
    return (
        state.model_copy(
            update={
                "status": "ready",
                "loading": False,
                "error": None,
                "results": [planet.name for planet in result.items],
                "total_count": result.count,
                "has_prev": result.previous is not None,
                "has_next": result.next is not None,
            }
        ),
        [],
    )


def _handle_failed(state: UIState, event: PipelineEvent) -> Transition:
    error = SearchFailedPayload.model_validate(event.payload).error
    return (
        state.model_copy(update={"status": "errored", "loading": False, "error": error}),
        ["reset_query"],
    )


_HANDLERS: dict[str, Callable[[UIState, PipelineEvent], Transition]] = {
    "SearchDispatched": _handle_dispatched,
    "SearchSucceeded": _handle_succeeded,
    "SearchFailed": _handle_failed,
}


def is_stale(state: UIState, event: PipelineEvent) -> bool:
    """True for an outcome whose dispatch has since been superseded."""
    if event.event_type == "SearchDispatched":
        return event.generation <= state.generation
    return event.generation != state.generation


def apply_event(state: UIState, event: PipelineEvent) -> Transition:
    """Reducer: ``(state, event) -> (state, effects)``. Never mutates ``state``."""
    if is_stale(state, event):
        return state, []
    handler = _HANDLERS.get(event.event_type)
    if handler is None:
        logger.warning("Unknown pipeline event type %r, skipping", event.event_type)
        return state, []
    return handler(state, event)


class SearchStateProjector:
    """Holds the latest UIState and notifies listeners when it changes."""

    def __init__(self, initial: UIState | None = None) -> None:
        self._state = initial or UIState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> UIState:
        return self._state

    def project(self, events: list[PipelineEvent]) -> list[Effect]:
        """Project a batch of events. Returns the effects to carry out, in order."""
        effects: list[Effect] = []
        for event in events:
            if is_stale(self._state, event):
                logger.debug(
                    "Discarded stale %s %s for generation %d (active: %d)",
                    event.event_type, event.event_id, event.generation,
                    self._state.generation,
                )
                continue
            new_state, new_effects = apply_event(self._state, event)
            if new_state is self._state:
                continue
            self._state = new_state
            effects.extend(new_effects)
            for listener in list(self._listeners):
                listener(new_state)
        return effects

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Attach a listener; it receives the current state immediately.

        Returns a callable that detaches the listener.
        """
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
