"""
Search Routes

Hybrid catalog search and sample suggestion endpoints. Both are thin
wrappers around the SearchOrchestrator; version refusals come back as a
normal response with ``ok=false`` and a redirect message.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from ..config import Settings
from ..search.orchestrator import SearchOrchestrator
from .dependencies import get_orchestrator, get_settings
from .models import ResourceRef, SampleSuggestionRequest, SearchRequest, SearchResponse

router = APIRouter(prefix="/search", tags=["search"])

NO_RESULTS_MESSAGE = "No results found."


@router.post(
    "/",
    response_model=SearchResponse,
    summary="Hybrid semantic/lexical catalog search",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    orchestrator: Annotated[SearchOrchestrator, Depends(get_orchestrator)],
    config: Annotated[Settings, Depends(get_settings)],
) -> SearchResponse:
    """
    Search the catalog.

    Parameters
    ----------
    req : SearchRequest
        Query text plus optional product / edition / platform / version
        scope, entry type and result limit. A blank query lists the scope.

    Returns
    -------
    SearchResponse
        ``ok=false`` with a message for refused legacy versions; otherwise
        ranked references, with a "no results" message when empty.
    """
    outcome = await orchestrator.search_resources(
        query=req.query,
        product=req.product,
        edition=req.edition,
        platform=req.platform,
        version=req.version,
        type=req.type,
        limit=req.limit,
    )

    if not outcome.ok:
        return SearchResponse(ok=False, message=outcome.message)

    results = [ResourceRef.from_hit(hit, config.rag_include_score) for hit in outcome.hits]
    return SearchResponse(
        ok=True,
        message=None if results else NO_RESULTS_MESSAGE,
        results=results,
    )


@router.post(
    "/samples",
    response_model=List[ResourceRef],
    summary="Suggest code samples for a scope",
)
async def suggest_samples(
    req: SampleSuggestionRequest,
    orchestrator: Annotated[SearchOrchestrator, Depends(get_orchestrator)],
) -> List[ResourceRef]:
    entries = await orchestrator.suggest_samples(
        query=req.query,
        product=req.product,
        edition=req.edition,
        platform=req.platform,
        limit=req.limit,
    )
    return [ResourceRef.from_entry(entry) for entry in entries]
