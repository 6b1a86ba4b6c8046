from typing import Annotated

from fastapi import APIRouter, Depends

from ..search.orchestrator import SearchOrchestrator
from .dependencies import get_orchestrator

router = APIRouter(tags=["health"])


@router.get("/health")
def health(orchestrator: Annotated[SearchOrchestrator, Depends(get_orchestrator)]):
    return {
        "status": "ok",
        "catalog_entries": len(orchestrator.catalog),
        "provider_chain": orchestrator.resolve_provider_chain(),
        "providers_loaded": orchestrator.registry.loaded(),
    }
