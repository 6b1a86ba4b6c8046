"""
Vector Search Provider

Semantic search over the catalog for one embedding provider.

Responsibilities
----------------
- Build (or load from cache) the chunk vector index, once per provider
- Embed and normalize the query
- Rank every chunk by cosine similarity with a FAISS inner-product index
- Apply the minimum score and scope filters
- Deduplicate by entry URI, keeping each entry's best chunk
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import faiss
import numpy as np

from .. import __version__
from ..catalog.catalog import Catalog
from ..catalog.models import ScopeFilters, SearchHit
from ..catalog.scope import entry_matches_scope
from ..config import Settings
from ..core.once import AsyncOnce
from ..embeddings.base import EmbeddingProvider, embed_texts
from ..embeddings.cache import (
    CachedItem,
    VectorIndexCache,
    VectorIndexRecord,
    compute_cache_key,
)
from ..embeddings.chunker import build_embedding_items, normalize_text, truncate_text

logger = logging.getLogger("mcp.rag.vector")


class VectorIndexError(RuntimeError):
    """Raised when the in-memory vector index cannot answer a query."""


# ---------------------------------------------------------------------
# In-memory index
# ---------------------------------------------------------------------

@dataclass
class VectorIndex:
    items: List[CachedItem]
    vectors: List[List[float]]
    faiss_index: Optional[faiss.IndexFlatIP] = None

    @classmethod
    def from_record(cls, items: List[CachedItem], vectors: List[List[float]]) -> "VectorIndex":
        index = cls(items=items, vectors=vectors)
        if vectors:
            matrix = np.asarray(vectors, dtype="float32")
            if matrix.ndim != 2 or matrix.shape[1] == 0:
                raise VectorIndexError("Vector index has inconsistent dimensionality.")
            index.faiss_index = faiss.IndexFlatIP(matrix.shape[1])
            index.faiss_index.add(matrix)
        return index

    @property
    def dim(self) -> int:
        return self.faiss_index.d if self.faiss_index is not None else 0

    def __len__(self) -> int:
        return len(self.items)

    def score_all(self, query_vector: Sequence[float]) -> List[float]:
        """Cosine similarity of the query with every stored vector, in item order."""
        if self.faiss_index is None:
            return []
        if len(query_vector) != self.dim:
            raise VectorIndexError(
                f"Query dimension {len(query_vector)} does not match index dimension {self.dim}."
            )

        q = np.asarray([query_vector], dtype="float32")
        faiss.normalize_L2(q)
        scores, idxs = self.faiss_index.search(q, len(self.items))

        by_position = [0.0] * len(self.items)
        for score, idx in zip(scores[0], idxs[0]):
            if idx >= 0:
                by_position[int(idx)] = float(score)
        return by_position


def normalized_matrix(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Stack vectors into a float32 matrix scaled to unit rows; zero rows stay zero."""
    matrix = np.asarray(vectors, dtype="float32")
    if matrix.ndim != 2 or matrix.shape[1] == 0:
        raise VectorIndexError("Embeddings have inconsistent dimensionality.")
    faiss.normalize_L2(matrix)
    return matrix


# ---------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------

def build_index_signature(catalog: Catalog, config: Settings) -> str:
    """Signature over the catalog content and every chunking parameter."""
    return json.dumps(
        {
            "packageVersion": __version__,
            "catalog": catalog.signature(),
            "resourceCount": len(catalog),
            "chunkSize": config.rag_chunk_size,
            "chunkOverlap": config.rag_chunk_overlap,
            "maxChunksPerDoc": config.rag_max_chunks_per_doc,
            "maxTextChars": config.rag_max_text_chars,
        },
        sort_keys=True,
    )


class VectorSearchProvider:
    """
    Semantic search backed by one EmbeddingProvider.

    The index is built at most once per instance; concurrent first queries
    await the same build.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        catalog: Catalog,
        config: Settings,
        batch_size: int = 1,
        name: Optional[str] = None,
    ) -> None:
        self.embedder = embedder
        self.name = name or embedder.name
        self.model = embedder.model
        self.catalog = catalog
        self.config = config
        self.batch_size = max(1, batch_size)

        self.signature = build_index_signature(catalog, config)
        self.cache_key = compute_cache_key(self.name, self.model, self.signature)
        self.cache = VectorIndexCache(config.rag_cache_dir, self.name, self.model, self.cache_key)

        self._index_once: AsyncOnce[VectorIndex] = AsyncOnce(self._build_index)

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    async def _build_index(self) -> VectorIndex:
        if not self.config.rag_rebuild:
            cached = await asyncio.to_thread(self.cache.load)
            if cached is not None:
                try:
                    index = VectorIndex.from_record(cached.items, cached.vectors)
                except (ValueError, VectorIndexError) as exc:
                    logger.warning(
                        "Discarding unusable vector cache %s (%s); rebuilding",
                        self.cache.path,
                        exc,
                    )
                else:
                    logger.info(
                        "Loaded %d cached vectors for provider %s", len(cached.vectors), self.name
                    )
                    return index

        items = build_embedding_items(
            self.catalog,
            chunk_size=self.config.rag_chunk_size,
            chunk_overlap=self.config.rag_chunk_overlap,
            max_chunks_per_doc=self.config.rag_max_chunks_per_doc,
            max_text_chars=self.config.rag_max_text_chars,
        )
        logger.info("Embedding %d items with provider %s (%s)", len(items), self.name, self.model)

        vectors = await embed_texts([item.text for item in items], self.embedder, self.batch_size)
        normalized = normalized_matrix(vectors).tolist() if vectors else []

        record = VectorIndexRecord(
            cache_key=self.cache_key,
            meta={"provider": self.name, "model": self.model, "signature": self.signature},
            items=[CachedItem(id=item.item_id, uri=item.entry_uri) for item in items],
            vectors=normalized,
        )
        await asyncio.to_thread(self.cache.save, record)

        return VectorIndex.from_record(record.items, record.vectors)

    async def load_index(self) -> VectorIndex:
        return await self._index_once.get()

    async def warm(self) -> None:
        await self.load_index()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        filters: ScopeFilters,
        limit: Optional[int] = None,
    ) -> List[SearchHit]:
        prepared = truncate_text(normalize_text(query), self.config.rag_max_text_chars)
        if not prepared:
            return []

        index = await self.load_index()
        scores = index.score_all(await self.embedder.embed(prepared))

        min_score = self.config.rag_min_score
        best: Dict[str, SearchHit] = {}

        # Items are in catalog/chunk order, so the first chunk to reach a
        # score wins ties and the later stable sort keeps that order.
        for item, score in zip(index.items, scores):
            if min_score and score < min_score:
                continue
            entry = self.catalog.get(item.uri)
            if entry is None or not entry_matches_scope(entry, filters):
                continue
            existing = best.get(item.uri)
            if existing is None or score > existing.score:
                best[item.uri] = SearchHit(entry=entry, score=score)

        results = sorted(best.values(), key=lambda hit: -hit.score)
        if limit:
            return results[:limit]
        return results

    async def aclose(self) -> None:
        self._index_once.reset()
        closer = getattr(self.embedder, "aclose", None)
        if closer is not None:
            await closer()
