"""Abstract search transport interface and its error type."""

from abc import ABC, abstractmethod

from planetscope.models import SearchResult


class SearchTransport(ABC):
    """Abstract interface for the remote listing API."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport identifier (e.g., 'swapi')."""
        ...

    @abstractmethod
    async def search(self, text: str, page: int) -> SearchResult:
        """Fetch one page of results for ``text``. Raises TransportError."""
        ...

    async def aclose(self) -> None:
        """Release any held connections. Default: nothing to release."""


class TransportError(Exception):
    """Any network or remote failure. The only error kind the UI sees."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
