from fastapi import Request

from ..catalog.catalog import Catalog
from ..config import Settings
from ..search.orchestrator import SearchOrchestrator


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


def get_catalog(request: Request) -> Catalog:
    return request.app.state.orchestrator.catalog


def get_settings(request: Request) -> Settings:
    return request.app.state.orchestrator.config
