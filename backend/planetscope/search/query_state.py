"""Query state and the pagination guard that keeps it consistent."""

from collections.abc import Callable

from planetscope.models import Query

QueryListener = Callable[[Query], None]
TextChangeListener = Callable[[str, str], None]


class QueryState:
    """The only mutable input state: current search text and page.

    Every mutation call publishes one snapshot to subscribers. Text-change
    observers run before that snapshot goes out, and page changes they make
    are folded into it.
    """

    def __init__(self, initial: Query | None = None) -> None:
        self._query = initial or Query()
        self._subscribers: list[QueryListener] = []
        self._text_observers: list[TextChangeListener] = []
        self._applying_text = False

    @property
    def query(self) -> Query:
        return self._query

    @property
    def text(self) -> str:
        return self._query.text

    @property
    def page(self) -> int:
        return self._query.page

    def subscribe(self, listener: QueryListener) -> None:
        self._subscribers.append(listener)

    def observe_text(self, observer: TextChangeListener) -> None:
        """Register for ``(old_text, new_text)`` notifications on real changes."""
        self._text_observers.append(observer)

    def set_text(self, text: str) -> None:
        old = self._query.text
        if text != old:
            self._applying_text = True
            try:
                self._query = self._query.model_copy(update={"text": text})
                for observer in list(self._text_observers):
                    observer(old, text)
            finally:
                self._applying_text = False
        self._publish()

    def set_page(self, page: int) -> None:
        """Set the page verbatim. Range checks are the caller's concern."""
        self._query = self._query.model_copy(update={"page": page})
        if not self._applying_text:
            self._publish()

    def _publish(self) -> None:
        snapshot = self._query
        for listener in list(self._subscribers):
            listener(snapshot)


class PaginationGuard:
    """Resets the page to 1 whenever the search text changes.

    Watches text changes only, so its own page write can never re-trigger it.
    """

    def __init__(self, state: QueryState) -> None:
        self._state = state
        state.observe_text(self._on_text_changed)

    def _on_text_changed(self, old: str, new: str) -> None:
        self._state.set_page(1)
