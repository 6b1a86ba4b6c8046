"""
Resource and Policy Routes

Direct lookups by URI, the pinned ("always visible") listing and the
version policy. Full-content loading belongs to the presentation layer;
these routes only return references.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ..catalog.catalog import Catalog
from ..search.orchestrator import SearchOrchestrator
from .dependencies import get_catalog, get_orchestrator
from .models import ResourceRef, VersionCheckResponse

router = APIRouter(tags=["resources"])


@router.get("/resources/pinned", response_model=List[ResourceRef])
def pinned_resources(
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> List[ResourceRef]:
    return [ResourceRef.from_entry(entry) for entry in catalog.pinned()]


@router.get("/resources", response_model=ResourceRef)
def get_resource(
    catalog: Annotated[Catalog, Depends(get_catalog)],
    uri: str = Query(..., min_length=1),
) -> ResourceRef:
    entry = catalog.get(uri)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resource not found: {uri}",
        )
    return ResourceRef.from_entry(entry)


@router.get("/policy/version", response_model=VersionCheckResponse)
def check_version(
    orchestrator: Annotated[SearchOrchestrator, Depends(get_orchestrator)],
    product: Optional[str] = None,
    version: Optional[str] = None,
    query: Optional[str] = None,
    edition: Optional[str] = None,
    platform: Optional[str] = None,
) -> VersionCheckResponse:
    decision = orchestrator.gate.check(
        product=product,
        version=version,
        query=query,
        edition=edition,
        platform=platform,
    )
    return VersionCheckResponse(**decision.model_dump())


@router.get("/policy/version/text", response_class=PlainTextResponse)
def version_policy_text(
    orchestrator: Annotated[SearchOrchestrator, Depends(get_orchestrator)],
) -> str:
    return orchestrator.gate.build_policy_text()
