"""
Vector Index Cache

Persists chunk embeddings on disk so unchanged catalogs are never
re-embedded.

Key Properties
--------------
- One JSON file per (provider, model, cache key)
- A record is trusted only when its stored key equals the expected key
- Unreadable, malformed or mismatched files are cache misses, never errors
- Writes go to a temp file first and are moved into place atomically
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("mcp.rag.cache")

_UNSAFE_MODEL_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")


# ---------------------------------------------------------------------
# Record Schema
# ---------------------------------------------------------------------

class CachedItem(BaseModel):
    id: str
    uri: str

    model_config = ConfigDict(frozen=True)


class VectorIndexRecord(BaseModel):
    """On-disk representation of one provider's vector index."""

    cache_key: str = Field(..., alias="cacheKey")
    meta: Dict[str, Any] = Field(default_factory=dict)
    items: List[CachedItem]
    vectors: List[List[float]]

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------
# Key / Naming Helpers
# ---------------------------------------------------------------------

def compute_cache_key(provider: str, model: str, signature: str) -> str:
    meta = {"provider": provider, "model": model, "signature": signature}
    canonical = json.dumps(meta, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def cache_file_name(provider: str, model: Optional[str], cache_key: str) -> str:
    safe_model = _UNSAFE_MODEL_CHARS.sub("_", model or "default")[:32]
    return f"rag-{provider}-{safe_model}-{cache_key[:12]}.json"


# ---------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------

class VectorIndexCache:
    """
    File-backed cache for a single (provider, model, key) index.

    Parameters
    ----------
    cache_dir : str | Path
        Directory shared by every provider and model.

    provider : str
        Provider name, part of the file name.

    model : str
        Model identifier, sanitized into the file name.

    cache_key : str
        Expected key; also used for the file name prefix.
    """

    def __init__(self, cache_dir, provider: str, model: str, cache_key: str) -> None:
        self.cache_dir = Path(cache_dir)
        self.provider = provider
        self.model = model
        self.cache_key = cache_key
        self.path = self.cache_dir / cache_file_name(provider, model, cache_key)

    def load(self) -> Optional[VectorIndexRecord]:
        """Return the cached record, or None when absent or invalid."""
        if not self.path.exists():
            logger.debug("No vector cache at %s", self.path)
            return None

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable vector cache %s (%s)", self.path, type(exc).__name__)
            return None

        if not isinstance(raw, dict) or raw.get("cacheKey") != self.cache_key:
            logger.info("Vector cache key mismatch at %s; rebuilding", self.path)
            return None

        try:
            record = VectorIndexRecord.model_validate(raw)
        except ValueError as exc:
            logger.warning("Ignoring malformed vector cache %s (%s)", self.path, type(exc).__name__)
            return None

        if len(record.items) != len(record.vectors):
            logger.warning("Ignoring vector cache %s: item/vector count mismatch", self.path)
            return None

        dims = {len(vector) for vector in record.vectors}
        if len(dims) > 1 or 0 in dims:
            logger.warning("Ignoring vector cache %s: inconsistent vector dimensions", self.path)
            return None

        return record

    def save(self, record: VectorIndexRecord) -> None:
        """Persist ``record`` with a single atomic replace."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump(mode="json", by_alias=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".rag-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Saved %d vectors to %s", len(record.vectors), self.path)
