"""Search API routes: drive the controller and read its state."""

import asyncio
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from planetscope.models import UIState
from planetscope.search.controller import ControllerClosedError, SearchController
from planetscope.search.schemas import SearchStateResponse, SetPageRequest, SetQueryRequest

router = APIRouter(prefix="/api/search", tags=["search"])


def get_search_controller() -> SearchController:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("SearchController not initialized")


def _snapshot(controller: SearchController) -> SearchStateResponse:
    return SearchStateResponse(query=controller.query, state=controller.state)


def _closed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Search controller is closed",
    )


@router.get("/state")
async def get_state(
    controller: SearchController = Depends(get_search_controller),
) -> SearchStateResponse:
    return _snapshot(controller)


@router.put("/query")
async def set_query(
    request: SetQueryRequest,
    controller: SearchController = Depends(get_search_controller),
) -> SearchStateResponse:
    try:
        controller.set_query(request.text)
    except ControllerClosedError:
        raise _closed()
    return _snapshot(controller)


@router.put("/page")
async def go_to_page(
    request: SetPageRequest,
    controller: SearchController = Depends(get_search_controller),
) -> SearchStateResponse:
    try:
        controller.go_to_page(request.page)
    except ControllerClosedError:
        raise _closed()
    return _snapshot(controller)


@router.post("/page/next")
async def next_page(
    controller: SearchController = Depends(get_search_controller),
) -> SearchStateResponse:
    try:
        controller.next_page()
    except ControllerClosedError:
        raise _closed()
    return _snapshot(controller)


@router.post("/page/previous")
async def previous_page(
    controller: SearchController = Depends(get_search_controller),
) -> SearchStateResponse:
    try:
        controller.previous_page()
    except ControllerClosedError:
        raise _closed()
    return _snapshot(controller)


@router.get("/stream")
async def stream_state(
    controller: SearchController = Depends(get_search_controller),
) -> StreamingResponse:
    return StreamingResponse(
        _state_sse(controller),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


async def _state_sse(controller: SearchController) -> AsyncIterator[str]:
    """Async generator that yields one SSE ``state`` event per UIState change.

    The current state is sent first, so a client attaching late is not left
    without results. The stream ends once the controller closes.
    """
    queue: asyncio.Queue[UIState | None] = asyncio.Queue()
    unsubscribe = controller.subscribe(
        queue.put_nowait, on_close=lambda: queue.put_nowait(None)
    )
    try:
        while True:
            state = await queue.get()
            if state is None:
                break
            yield f"event: state\ndata: {state.model_dump_json()}\n\n"
    finally:
        unsubscribe()
