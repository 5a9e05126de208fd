"""Search API request/response schemas."""

from pydantic import BaseModel

from planetscope.models import Query, UIState


class SetQueryRequest(BaseModel):
    text: str


class SetPageRequest(BaseModel):
    page: int


class SearchStateResponse(BaseModel):
    query: Query
    state: UIState
