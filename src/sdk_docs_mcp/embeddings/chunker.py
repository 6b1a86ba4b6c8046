"""
Text Chunking

Splits long article bodies into bounded, overlapping character windows and
derives the EmbeddingItem list for a catalog.

Samples and short entries embed their title, summary and tags directly;
docs with a body embed one item per chunk, each prefixed with that base
text so every chunk still names what it belongs to.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List

from ..catalog.models import CatalogEntry, EmbeddingItem, EntryType

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: object) -> str:
    """Collapse whitespace runs to single spaces and strip."""
    return _WHITESPACE.sub(" ", str(text or "")).strip()


def truncate_text(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars]


def chunk_text(
    text: str,
    chunk_size: int,
    overlap: int = 0,
    max_chunks: int = 0,
) -> Iterator[str]:
    """
    Yield overlapping windows of ``chunk_size`` characters.

    Parameters
    ----------
    text : str
        Raw text; whitespace is normalized before splitting.

    chunk_size : int
        Window length. ``<= 0`` yields the whole normalized text once.

    overlap : int
        Characters shared by consecutive windows, clamped to
        ``[0, chunk_size - 1]``.

    max_chunks : int
        Stop after this many chunks even if text remains. ``<= 0`` means
        unbounded.
    """
    cleaned = normalize_text(text)
    if not cleaned:
        return

    if chunk_size <= 0:
        yield cleaned
        return

    overlap = min(max(0, overlap), chunk_size - 1)
    produced = 0
    start = 0
    length = len(cleaned)

    while start < length:
        end = min(start + chunk_size, length)
        chunk = cleaned[start:end].strip()
        if chunk:
            yield chunk
            produced += 1
        if end >= length:
            break
        if max_chunks > 0 and produced >= max_chunks:
            break
        start = end - overlap


def entry_base_text(entry: CatalogEntry) -> str:
    parts = [entry.title, entry.summary]
    if entry.tags:
        parts.append(", ".join(entry.tags))
    return normalize_text("\n".join(p for p in parts if p))


def build_embedding_items(
    entries: Iterable[CatalogEntry],
    chunk_size: int,
    chunk_overlap: int,
    max_chunks_per_doc: int,
    max_text_chars: int,
) -> List[EmbeddingItem]:
    items: List[EmbeddingItem] = []

    for entry in entries:
        base_text = entry_base_text(entry)
        if not base_text:
            continue

        if entry.type is EntryType.DOC and entry.embed_text:
            chunks = list(
                chunk_text(entry.embed_text, chunk_size, chunk_overlap, max_chunks_per_doc)
            )
            for index, chunk in enumerate(chunks):
                items.append(
                    EmbeddingItem(
                        item_id=f"{entry.id}#{index}",
                        entry_uri=entry.uri,
                        text=truncate_text(f"{base_text}\n\n{chunk}", max_text_chars),
                    )
                )
            if chunks:
                continue

        items.append(
            EmbeddingItem(
                item_id=entry.id,
                entry_uri=entry.uri,
                text=truncate_text(base_text, max_text_chars),
            )
        )

    return items
