"""
Application Entry Point

This module defines the FastAPI application, registers routers, configures
global exception handling and owns the lifecycle of the search engine
(catalog load, optional index prewarm, provider disposal).

Design Goals
------------
- Deterministic startup
- One SearchOrchestrator per process, created and disposed by the lifespan
- Test-friendly via create_app()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api import health_routes, resource_routes, search_routes
from .catalog.catalog import Catalog, CatalogError
from .catalog.loader import load_catalog
from .config import Settings, settings
from .core.errors import catalog_error_handler, unhandled_exception_handler
from .search.orchestrator import SearchOrchestrator

logger = logging.getLogger("mcp.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(
    config: Optional[Settings] = None,
    catalog: Optional[Catalog] = None,
    orchestrator: Optional[SearchOrchestrator] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    config : Optional[Settings]
        Settings override; defaults to the environment-derived settings.

    catalog : Optional[Catalog]
        Pre-built catalog; when omitted it is loaded from
        ``config.catalog_path`` at startup.

    orchestrator : Optional[SearchOrchestrator]
        Fully built orchestrator, mainly for tests.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    cfg = config or settings

    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting sdk-docs-mcp %s", __version__)

        engine = orchestrator
        if engine is None:
            engine = SearchOrchestrator(catalog or load_catalog(cfg.catalog_path), cfg)
        app.state.orchestrator = engine

        logger.info("Provider chain: %s", " -> ".join(engine.resolve_provider_chain()))

        prewarm_task = None
        if cfg.rag_prewarm:
            if cfg.rag_prewarm_block:
                await engine.prewarm()
            else:
                prewarm_task = asyncio.create_task(engine.prewarm())

        try:
            yield
        finally:
            logger.info("Shutting down sdk-docs-mcp")
            if prewarm_task is not None and not prewarm_task.done():
                prewarm_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await prewarm_task
            await engine.aclose()

    app = FastAPI(
        title="sdk-docs-mcp",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)
    app.include_router(resource_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
