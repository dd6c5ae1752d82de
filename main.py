"""
Mapa Solidário FastAPI Application

Main entry point for the Mapa Solidário application, serving the REST API
behind the interactive map of shelters, food distribution points, emergency
services and mental-health centres.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from logic.config import LOG_LEVEL, STORE_BACKEND, load_config
from logic.registry import LocationRegistry
from logic.store import MemoryDocumentStore, RemoteStore, SqlDocumentStore
from server.draft import router as draft_router
from server.locations import router as locations_router
from server.routes import router as routes_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_store(backend: str = STORE_BACKEND) -> RemoteStore:
    """Create the remote store named by ``STORE_BACKEND``.

    Args:
        backend: ``sql`` (default) or ``memory``.

    Returns:
        RemoteStore instance.
    """
    config = load_config()

    if backend == "memory":
        return MemoryDocumentStore(categories=config["default_categories"])

    from database import init_db

    init_db(default_categories=config["default_categories"])
    return SqlDocumentStore()


def create_app(store: Optional[RemoteStore] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        store: Remote store to use; built from the environment when omitted.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        registry = LocationRegistry(store or build_store())
        app.state.registry = registry
        await registry.load()
        logger.info(
            "Loaded %d categories and %d locations",
            len(registry.state.categories),
            len(registry.state.locations),
        )
        yield

    app = FastAPI(title="Mapa Solidário", lifespan=lifespan)

    # Include all routers
    app.include_router(routes_router)
    app.include_router(locations_router)
    app.include_router(draft_router)

    return app


app = create_app()
