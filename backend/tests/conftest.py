"""Shared pytest fixtures for Planetscope tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from planetscope.main import app
from planetscope.search.controller import SearchController
from planetscope.search.router import get_search_controller
from tests.fixtures import DEBOUNCE_MS, FakeTransport


@pytest.fixture
def transport():
    """Scriptable transport; every query succeeds unless scripted otherwise."""
    return FakeTransport()


@pytest.fixture
async def controller(transport):
    """Controller over the fake transport with a short debounce."""
    ctrl = SearchController(transport, debounce_ms=DEBOUNCE_MS, abort_superseded=False)
    yield ctrl
    await ctrl.aclose()


@pytest.fixture
async def client(controller):
    """Async test client with the controller wired into the app."""
    app.dependency_overrides[get_search_controller] = lambda: controller
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
