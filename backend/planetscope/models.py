"""Canonical data structures and pipeline event types for Planetscope.

Defined once here, referenced everywhere else. Event payloads carry the
type-specific content of each pipeline event; the PipelineEvent envelope wraps
them with the generation tag and the query they belong to.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Query and listing records
# ---------------------------------------------------------------------------


class Query(BaseModel):
    """One logical search: the text box contents and the page to show."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    page: int = 1


class Planet(BaseModel):
    """A single listing record. Only ``name`` is used by the projection."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    rotation_period: str | None = None
    orbital_period: str | None = None
    diameter: str | None = None
    climate: str | None = None
    gravity: str | None = None
    terrain: str | None = None
    surface_water: str | None = None
    population: str | None = None
    residents: list[str] = Field(default_factory=list)
    films: list[str] = Field(default_factory=list)
    created: str | None = None
    edited: str | None = None
    url: str | None = None


class SearchResult(BaseModel):
    """One page of listing results. ``next``/``previous`` are opaque cursors."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    count: int = Field(ge=0)
    next: str | None = None
    previous: str | None = None
    items: list[Planet] = Field(default_factory=list, alias="results")


class SearchError(BaseModel):
    """A transport failure as the UI sees it."""

    message: str
    kind: str = "TransportError"
    status_code: int | None = None


# ---------------------------------------------------------------------------
# Pipeline events: one payload per event type
# ---------------------------------------------------------------------------

PipelineEventType = Literal["SearchDispatched", "SearchSucceeded", "SearchFailed"]


class SearchDispatchedPayload(BaseModel):
    pass


class SearchSucceededPayload(BaseModel):
    result: SearchResult


class SearchFailedPayload(BaseModel):
    error: SearchError


class PipelineEvent(BaseModel):
    """Envelope for everything the request pipeline reports.

    ``generation`` increases by one per dispatch; outcomes are matched to
    their dispatch by it.
    """

    event_id: str
    generation: int
    event_type: PipelineEventType
    query: Query
    payload: dict[str, Any] = Field(default_factory=dict)
    sequence_num: int | None = None


# ---------------------------------------------------------------------------
# Derived UI state
# ---------------------------------------------------------------------------

SearchStatus = Literal["idle", "loading", "ready", "errored"]


class UIState(BaseModel):
    """Projection of pipeline events. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    status: SearchStatus = "idle"
    loading: bool = False
    results: list[str] = Field(default_factory=list)
    total_count: int = 0
    has_prev: bool = False
    has_next: bool = False
    error: SearchError | None = None
    query: Query | None = None  # the active (most recently dispatched) query
    generation: int = 0
