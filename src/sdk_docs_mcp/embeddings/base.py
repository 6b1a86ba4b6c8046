"""
Embedding Provider Interface

Every backend exposes ``embed(text)``; backends with a native batch
endpoint also expose ``embed_batch(texts)``. Callers depend only on this
protocol and on ``embed_texts``, which prefers the batch path and degrades
to one request per text when a batch fails.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence, runtime_checkable

logger = logging.getLogger("mcp.embedder")


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails."""


class EmbeddingConfigurationError(EmbeddingError):
    """Raised when a selected provider is missing required configuration."""


@runtime_checkable
class EmbeddingProvider(Protocol):
    name: str
    model: str

    async def embed(self, text: str) -> List[float]:
        ...


@runtime_checkable
class BatchEmbeddingProvider(EmbeddingProvider, Protocol):
    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        ...


async def embed_texts(
    texts: Sequence[str],
    embedder: EmbeddingProvider,
    batch_size: int = 1,
) -> List[List[float]]:
    """
    Embed ``texts`` in order.

    Batches are used when the provider supports them and ``batch_size > 1``.
    Any batch failure discards the partial batch results and re-embeds
    every text with single calls; errors from single calls propagate.
    """
    if not texts:
        return []

    embed_batch = getattr(embedder, "embed_batch", None)

    if embed_batch is not None and batch_size > 1:
        results: List[List[float]] = []
        try:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                vectors = await embed_batch(batch)
                if len(vectors) != len(batch):
                    raise EmbeddingError(
                        f"Batch returned {len(vectors)} vectors for {len(batch)} texts."
                    )
                results.extend(vectors)
            return results
        except Exception as exc:
            logger.warning(
                "Batch embedding failed (%s: %s); falling back to single requests",
                type(exc).__name__,
                exc,
            )

    return [await embedder.embed(text) for text in texts]
