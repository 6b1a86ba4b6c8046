"""
Local Embedding Backend

Wraps an on-device sentence-transformers model. Loading the model is the
expensive part, so it happens on first use, exactly once, and every later
call reuses the same instance.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from ..config import Settings, settings as default_settings
from ..core.once import AsyncOnce

logger = logging.getLogger("mcp.embedder.local")


class LocalEmbedder:
    """
    Deterministic embeddings from a local feature-extraction model.

    Inference runs off the event loop and is serialized, since a single
    model instance is shared by every query.
    """

    name = "local"

    def __init__(
        self,
        model: Optional[str] = None,
        cache_dir: Optional[str] = None,
        config: Optional[Settings] = None,
    ) -> None:
        cfg = config or default_settings
        self.model = model or cfg.rag_local_model
        self.cache_dir = cache_dir or cfg.rag_model_cache_dir
        self._model_once: AsyncOnce = AsyncOnce(self._load_model)
        self._lock = asyncio.Lock()

    async def _load_model(self):
        # Deferred import; sentence-transformers pulls in torch.
        from sentence_transformers import SentenceTransformer

        Path(self.cache_dir).mkdir(parents=True, exist_ok=True)
        logger.info("Loading local embedding model %s", self.model)
        return await asyncio.to_thread(
            SentenceTransformer,
            self.model,
            cache_folder=self.cache_dir,
        )

    async def embed(self, text: str) -> List[float]:
        model = await self._model_once.get()
        async with self._lock:
            vector = await asyncio.to_thread(
                model.encode,
                text,
                normalize_embeddings=True,
                convert_to_numpy=True,
            )
        return [float(x) for x in vector]

    async def aclose(self) -> None:
        self._model_once.reset()
