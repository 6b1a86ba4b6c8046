"""
Remote Embedding Client

This module implements the Gemini embeddings backend over HTTP. It is
responsible for:

- Single (``embedContent``) and batch (``batchEmbedContents``) requests
- Network and transport error isolation
- Strict response validation

The client is stateless apart from configuration and is safe to reuse
across queries. A missing API key is reported when the provider is
constructed, which only happens once the provider is actually selected.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import httpx

from ..config import Settings, settings as default_settings
from .base import EmbeddingConfigurationError, EmbeddingError

logger = logging.getLogger("mcp.embedder.gemini")


class GeminiEmbedder:
    """
    Asynchronous embedding generator for the Gemini embeddings API.

    This class performs no caching; the vector index cache sits above it.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        config: Optional[Settings] = None,
    ) -> None:
        """
        Initialize a GeminiEmbedder.

        Parameters
        ----------
        api_key : Optional[str]
            Override for the API key. Defaults to ``GEMINI_API_KEY``.

        model : Optional[str]
            Override for the model, e.g. ``models/gemini-embedding-001``.

        base_url : Optional[str]
            API root, without the ``/v1beta`` suffix.

        batch_size : Optional[int]
            Preferred number of texts per batch request.

        timeout : Optional[float]
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, mainly for tests.

        Raises
        ------
        EmbeddingConfigurationError
            If no API key is available.
        """
        cfg = config or default_settings

        if api_key is None and cfg.gemini_api_key is not None:
            api_key = cfg.gemini_api_key.get_secret_value()
        if not api_key:
            raise EmbeddingConfigurationError("GEMINI_API_KEY is required for gemini embeddings.")

        model = model or cfg.gemini_embed_model
        self.api_key = api_key
        self.model = model if model.startswith("models/") else f"models/{model}"
        self.base_url = (base_url or cfg.gemini_api_base_url).rstrip("/")
        self.batch_size = max(1, batch_size if batch_size is not None else cfg.gemini_embed_batch_size)
        self.timeout = timeout if timeout is not None else cfg.gemini_timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> List[float]:
        payload = {"content": {"parts": [{"text": text}]}}
        data = await self._post("embedContent", payload)
        return self._extract_single(data)

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        payload = {
            "requests": [
                {"model": self.model, "content": {"parts": [{"text": text}]}}
                for text in texts
            ]
        }
        data = await self._post("batchEmbedContents", payload)
        return self._extract_batch(data)

    async def aclose(self) -> None:
        """Nothing pooled; present for registry disposal symmetry."""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _post(self, method: str, payload: dict) -> Any:
        url = f"{self.base_url}/v1beta/{self.model}:{method}"
        headers = {"x-goog-api-key": self.api_key}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as exc:
                logger.error(
                    "Gemini %s request failed (%s): %s",
                    method,
                    type(exc).__name__,
                    str(exc),
                )
                raise EmbeddingError(f"Gemini {method} failed: {type(exc).__name__}") from exc

        if not response.is_success:
            detail = response.text[:500]
            raise EmbeddingError(f"Gemini {method} failed ({response.status_code}): {detail}")

        try:
            return response.json()
        except ValueError as exc:
            raise EmbeddingError(f"Gemini {method} returned invalid JSON.") from exc

    @staticmethod
    def _as_vector(value: Any) -> Optional[List[float]]:
        if isinstance(value, dict):
            value = value.get("values")
        if not isinstance(value, list) or not value:
            return None
        if not all(isinstance(x, (float, int)) for x in value):
            return None
        return [float(x) for x in value]

    @classmethod
    def _extract_single(cls, data: Any) -> List[float]:
        """
        Gemini returns ``{"embedding": {"values": [...]}}``; older payloads
        put the list directly under ``embedding`` or use ``embeddings[0]``.
        """
        vector = None
        if isinstance(data, dict):
            vector = cls._as_vector(data.get("embedding"))
            embeddings = data.get("embeddings")
            if vector is None and isinstance(embeddings, list) and embeddings:
                vector = cls._as_vector(embeddings[0])

        if vector is None:
            raise EmbeddingError("Gemini embedding response missing embedding values.")
        return vector

    @classmethod
    def _extract_batch(cls, data: Any) -> List[List[float]]:
        records = None
        if isinstance(data, dict):
            records = data.get("embeddings") or data.get("responses")

        if not isinstance(records, list):
            raise EmbeddingError("Gemini batch response missing embeddings.")

        vectors: List[List[float]] = []
        for index, record in enumerate(records):
            vector = cls._as_vector(record)
            if vector is None and isinstance(record, dict):
                vector = cls._as_vector(record.get("embedding"))
            if vector is None:
                raise EmbeddingError(f"Malformed embedding record at index {index}.")
            vectors.append(vector)
        return vectors
