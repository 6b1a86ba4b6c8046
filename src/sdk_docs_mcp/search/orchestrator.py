"""
Search Orchestrator

Entry point for every catalog query.

Responsibilities
----------------
- Run the version policy gate before any search work
- Resolve the provider chain (primary, then fallback)
- Try providers in order; a failing provider is logged and skipped
- Treat a blank query as "list everything in scope"
- Sample suggestions and index prewarming
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.catalog import Catalog
from ..catalog.models import CatalogEntry, EntryType, ScopeFilters, SearchHit
from ..catalog.scope import edition_matches, platform_matches
from ..config import Settings, settings as default_settings
from ..policy.version_gate import VersionPolicyGate
from .registry import ProviderFactory, ProviderRegistry

logger = logging.getLogger("mcp.rag.search")

MAX_SEARCH_RESULTS = 50
MAX_SAMPLE_SUGGESTIONS = 10


class SearchOutcome(BaseModel):
    """Result of a gated search: a policy refusal or a (possibly empty) hit list."""

    ok: bool = True
    message: Optional[str] = None
    hits: List[SearchHit] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SearchOrchestrator:
    def __init__(
        self,
        catalog: Catalog,
        config: Optional[Settings] = None,
        gate: Optional[VersionPolicyGate] = None,
        registry: Optional[ProviderRegistry] = None,
        factories: Optional[Dict[str, ProviderFactory]] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or default_settings
        self.gate = gate or VersionPolicyGate(catalog.latest_majors())
        self.registry = registry or ProviderRegistry(catalog, self.config, factories)

    # ------------------------------------------------------------------
    # Provider chain
    # ------------------------------------------------------------------

    def resolve_provider_chain(self) -> List[str]:
        primary = self.config.rag_provider
        if primary == "auto":
            primary = "gemini" if self.config.has_gemini_key else "local"

        chain = [primary]
        fallback = self.config.rag_fallback
        if fallback and fallback != "none" and fallback != primary:
            chain.append(fallback)
        return chain

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: Optional[str] = None,
        product: Optional[str] = None,
        edition: Optional[str] = None,
        platform: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SearchHit]:
        """
        Ranked search across the provider chain.

        Never raises for provider failures: if every provider fails the
        result is an empty list.
        """
        filters = ScopeFilters.normalized(product, edition, platform, type)
        search_query = (query or "").strip()
        max_results = min(limit, MAX_SEARCH_RESULTS) if limit else None

        if not search_query:
            listed = [SearchHit(entry=e) for e in self.catalog.filter(filters)]
            return listed[:max_results] if max_results else listed

        last_error: Optional[Exception] = None
        for name in self.resolve_provider_chain():
            try:
                provider = await self.registry.get(name)
                return await provider.search(search_query, filters, max_results)
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Search provider %r failed (%s): %s",
                    name,
                    exc.__class__.__name__,
                    exc,
                )

        if last_error is not None:
            logger.error("All search providers failed: %s", last_error)
        return []

    async def search_resources(
        self,
        query: Optional[str] = None,
        product: Optional[str] = None,
        edition: Optional[str] = None,
        platform: Optional[str] = None,
        version: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SearchOutcome:
        """Version-gated search; a refusal never reaches the providers."""
        decision = self.gate.check(
            product=product,
            version=version,
            query=query,
            edition=edition,
            platform=platform,
        )
        if not decision.ok:
            return SearchOutcome(ok=False, message=decision.message)

        hits = await self.search(query, product, edition, platform, type, limit)
        return SearchOutcome(ok=True, hits=hits)

    async def suggest_samples(
        self,
        query: Optional[str] = None,
        product: Optional[str] = None,
        edition: Optional[str] = None,
        platform: Optional[str] = None,
        limit: int = 5,
    ) -> List[CatalogEntry]:
        """
        Suggest code samples for a scope.

        A query search restricted to samples comes first; without hits the
        samples in scope are listed in catalog order, widening to every
        sample of the product when the scope matches nothing.
        """
        filters = ScopeFilters.normalized(product, edition, platform, EntryType.SAMPLE.value)
        max_results = min(limit or 5, MAX_SAMPLE_SUGGESTIONS)
        search_query = (query or "").strip()

        if search_query:
            hits = await self.search(
                search_query,
                filters.product,
                filters.edition,
                filters.platform,
                EntryType.SAMPLE.value,
                max_results,
            )
            if hits:
                return [hit.entry for hit in hits]

        samples = [e for e in self.catalog if e.type is EntryType.SAMPLE]
        candidates = [
            e
            for e in samples
            if (not filters.product or e.product == filters.product)
            and edition_matches(filters.edition, e.edition)
            and platform_matches(filters.platform, e)
        ]
        if not candidates and filters.product:
            candidates = [e for e in samples if e.product == filters.product]

        seen = set()
        results: List[CatalogEntry] = []
        for entry in candidates:
            if entry.uri in seen:
                continue
            seen.add(entry.uri)
            results.append(entry)
            if len(results) >= max_results:
                break
        return results

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def prewarm(self) -> None:
        """Build the primary provider's index ahead of the first query."""
        if not self.config.rag_prewarm:
            return

        primary = self.resolve_provider_chain()[0]
        if primary == "lexical":
            return

        try:
            provider = await self.registry.get(primary)
            await provider.warm()
            logger.info("Prewarmed search provider %s", primary)
        except Exception as exc:
            logger.error("Prewarm of provider %r failed: %s", primary, exc)

    async def aclose(self) -> None:
        await self.registry.aclose()
