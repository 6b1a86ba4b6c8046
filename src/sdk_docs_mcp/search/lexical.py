"""
Lexical Search Provider

Fuzzy matching over entry titles, summaries, tags and URIs. It has no
network or model dependency and is the terminal fallback of every
provider chain.
"""

from __future__ import annotations

import logging
from difflib import SequenceMatcher
from typing import List, Optional, Tuple

from ..catalog.catalog import Catalog
from ..catalog.models import CatalogEntry, ScopeFilters, SearchHit
from ..catalog.scope import entry_matches_scope

logger = logging.getLogger("mcp.rag.lexical")

DEFAULT_THRESHOLD = 0.35


def _ratio(a: str, b: str) -> float:
    return SequenceMatcher(None, a, b, autojunk=False).ratio()


def field_similarity(query: str, text: str) -> float:
    """
    Similarity in [0, 1] between a lower-cased query and a field.

    Substring hits score 1.0. Otherwise the score is the better of the
    whole query against same-width word windows of the field and the mean
    best match of each query token, which tolerates small misspellings.
    """
    if not query or not text:
        return 0.0
    if query in text:
        return 1.0

    words = text.split()
    q_words = query.split()
    if not words or not q_words:
        return 0.0

    width = len(q_words)
    window_best = max(
        _ratio(query, " ".join(words[i : i + width]))
        for i in range(max(1, len(words) - width + 1))
    )

    token_scores = []
    for token in q_words:
        if token in text:
            token_scores.append(1.0)
        else:
            token_scores.append(max(_ratio(token, word) for word in words))
    token_mean = sum(token_scores) / len(token_scores)

    return max(window_best, token_mean)


class LexicalSearchProvider:
    """
    Approximate string matching index built once over the catalog.

    ``threshold`` follows the usual fuzzy-search convention: 0 requires a
    perfect match, 1 matches anything. An entry is kept when its best field
    similarity is at least ``1 - threshold``.
    """

    name = "lexical"

    def __init__(self, catalog: Catalog, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.catalog = catalog
        self.min_similarity = 1.0 - threshold
        self._fields: List[Tuple[CatalogEntry, Tuple[str, ...]]] = [
            (entry, self._entry_fields(entry)) for entry in catalog
        ]

    @staticmethod
    def _entry_fields(entry: CatalogEntry) -> Tuple[str, ...]:
        fields = [entry.title.lower(), entry.summary.lower(), entry.uri.lower()]
        fields.extend(entry.tags)
        return tuple(f for f in fields if f)

    def score(self, query: str, fields: Tuple[str, ...]) -> float:
        return max((field_similarity(query, f) for f in fields), default=0.0)

    async def search(
        self,
        query: str,
        filters: ScopeFilters,
        limit: Optional[int] = None,
    ) -> List[SearchHit]:
        needle = " ".join(query.lower().split())
        if not needle:
            return []

        scored: List[SearchHit] = []
        for entry, fields in self._fields:
            similarity = self.score(needle, fields)
            if similarity >= self.min_similarity:
                scored.append(SearchHit(entry=entry, score=similarity))

        ranked = sorted(scored, key=lambda hit: -hit.score)
        results = [hit for hit in ranked if entry_matches_scope(hit.entry, filters)]
        logger.debug("Lexical query %r matched %d entries", needle, len(results))

        if limit:
            return results[:limit]
        return results

    async def warm(self) -> None:
        return None

    async def aclose(self) -> None:
        return None
