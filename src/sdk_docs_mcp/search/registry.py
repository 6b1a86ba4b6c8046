"""
Search Provider Registry

Owns the process-wide cache of constructed search providers. Each provider
is created lazily by a factory keyed by name, exactly once, even when
several queries ask for it concurrently.

One registry per orchestrator; ``aclose()`` disposes every provider it
built.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Protocol

from ..catalog.catalog import Catalog
from ..catalog.models import ScopeFilters, SearchHit
from ..config import Settings
from ..core.once import AsyncOnce
from ..embeddings.local import LocalEmbedder
from ..embeddings.remote import GeminiEmbedder
from .lexical import LexicalSearchProvider
from .vector import VectorSearchProvider

logger = logging.getLogger("mcp.rag.registry")


class SearchProvider(Protocol):
    name: str

    async def search(
        self,
        query: str,
        filters: ScopeFilters,
        limit: Optional[int] = None,
    ) -> List[SearchHit]:
        ...

    async def warm(self) -> None:
        ...


ProviderFactory = Callable[[Catalog, Settings], Awaitable[SearchProvider]]


class UnknownProviderError(ValueError):
    """Raised when a provider name has no registered factory."""


# ---------------------------------------------------------------------
# Built-in Factories
# ---------------------------------------------------------------------

async def _create_lexical(catalog: Catalog, config: Settings) -> SearchProvider:
    return LexicalSearchProvider(catalog)


async def _create_local(catalog: Catalog, config: Settings) -> SearchProvider:
    embedder = LocalEmbedder(config=config)
    return VectorSearchProvider(embedder, catalog, config, batch_size=1)


async def _create_gemini(catalog: Catalog, config: Settings) -> SearchProvider:
    embedder = GeminiEmbedder(config=config)
    return VectorSearchProvider(embedder, catalog, config, batch_size=embedder.batch_size)


DEFAULT_FACTORIES: Dict[str, ProviderFactory] = {
    "lexical": _create_lexical,
    "local": _create_local,
    "gemini": _create_gemini,
}


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------

class ProviderRegistry:
    def __init__(
        self,
        catalog: Catalog,
        config: Settings,
        factories: Optional[Dict[str, ProviderFactory]] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config
        self._factories: Dict[str, ProviderFactory] = dict(DEFAULT_FACTORIES)
        if factories:
            self._factories.update(factories)
        self._providers: Dict[str, AsyncOnce[SearchProvider]] = {}

    @property
    def names(self) -> List[str]:
        return sorted(self._factories)

    async def get(self, name: str) -> SearchProvider:
        """
        Get or create the provider registered under ``name``.

        Raises
        ------
        UnknownProviderError
            If no factory is registered for ``name``.
        Exception
            Whatever the factory raises, e.g. a missing credential.
        """
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownProviderError(f"Unknown search provider: {name}")

        once = self._providers.get(name)
        if once is None:
            once = AsyncOnce(lambda: factory(self.catalog, self.config))
            self._providers[name] = once
        return await once.get()

    def loaded(self) -> List[str]:
        return [name for name, once in self._providers.items() if once.done]

    async def aclose(self) -> None:
        for name, once in list(self._providers.items()):
            provider = once.peek()
            closer = getattr(provider, "aclose", None)
            if closer is None:
                continue
            try:
                await closer()
            except Exception:
                logger.exception("Failed to close search provider %s", name)
        self._providers.clear()
