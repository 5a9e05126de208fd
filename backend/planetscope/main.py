"""Planetscope FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planetscope.config import Settings
from planetscope.search.controller import SearchController
from planetscope.search.router import get_search_controller
from planetscope.search.router import router as search_router
from planetscope.transports.swapi import SwapiTransport

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage transport lifecycle and controller wiring."""
    # Load .env from backend/ directory
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    transport = SwapiTransport(base_url=settings.api_url, timeout=settings.http_timeout)
    controller = SearchController(
        transport,
        debounce_ms=settings.debounce_ms,
        abort_superseded=settings.abort_superseded,
    )
    app.dependency_overrides[get_search_controller] = lambda: controller
    controller.start()
    logger.info(
        "Search controller ready (%s, debounce %d ms)", settings.api_url, settings.debounce_ms
    )

    app.state.controller = controller
    yield

    await controller.aclose()
    await transport.aclose()
    app.dependency_overrides.pop(get_search_controller, None)


app = FastAPI(
    title="Planetscope",
    description="Debounced, paginated planet search over the Star Wars API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:4200"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
