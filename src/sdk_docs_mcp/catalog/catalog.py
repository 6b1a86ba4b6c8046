"""
Catalog Container

Read-only collection of CatalogEntry values, built once at startup from an
external discovery step and shared by every search provider.
"""

from __future__ import annotations

import hashlib
import json
from typing import Dict, Iterable, List, Optional, Tuple

from .models import CatalogEntry, ScopeFilters
from .scope import entry_matches_scope


class CatalogError(ValueError):
    """Raised when catalog entries violate identity invariants."""


class Catalog:
    """
    Immutable, ordered catalog of entries with URI lookup.

    Catalog order is the insertion order of the entries passed in; it is the
    order used for listing and for breaking ranking ties.
    """

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        self._entries: Tuple[CatalogEntry, ...] = tuple(entries)
        self._by_uri: Dict[str, CatalogEntry] = {}
        self._positions: Dict[str, int] = {}

        seen_ids = set()
        for position, entry in enumerate(self._entries):
            if entry.id in seen_ids:
                raise CatalogError(f"Duplicate catalog id: {entry.id}")
            if entry.uri in self._by_uri:
                raise CatalogError(f"Duplicate catalog uri: {entry.uri}")
            seen_ids.add(entry.id)
            self._by_uri[entry.uri] = entry
            self._positions[entry.uri] = position

        self._signature: Optional[str] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def get(self, uri: str) -> Optional[CatalogEntry]:
        """Return the entry for ``uri`` or None when it is unknown."""
        return self._by_uri.get(uri)

    def position(self, uri: str) -> int:
        return self._positions.get(uri, len(self._entries))

    def pinned(self) -> List[CatalogEntry]:
        return [entry for entry in self._entries if entry.pinned]

    def filter(self, filters: ScopeFilters) -> List[CatalogEntry]:
        return [entry for entry in self._entries if entry_matches_scope(entry, filters)]

    def latest_majors(self) -> Dict[str, int]:
        """Highest major version seen per product."""
        latest: Dict[str, int] = {}
        for entry in self._entries:
            if not entry.product or entry.major_version is None:
                continue
            if entry.major_version > latest.get(entry.product, -1):
                latest[entry.product] = entry.major_version
        return latest

    def latest_versions(self) -> Dict[str, Dict[str, str]]:
        """Version string per product and edition, taken from the newest major."""
        latest_majors = self.latest_majors()
        versions: Dict[str, Dict[str, str]] = {}
        for entry in self._entries:
            if not (entry.product and entry.edition and entry.version):
                continue
            if entry.major_version != latest_majors.get(entry.product):
                continue
            versions.setdefault(entry.product, {}).setdefault(entry.edition, entry.version)
        return versions

    def signature(self) -> str:
        """
        Deterministic content hash of the whole catalog.

        Any change to an entry that could change what gets embedded (text,
        tags, scope, ordering) produces a different signature.
        """
        if self._signature is None:
            digest = hashlib.sha256()
            for entry in self._entries:
                payload = entry.model_dump(mode="json", exclude={"pinned", "mime_type"})
                digest.update(json.dumps(payload, sort_keys=True).encode("utf-8"))
                digest.update(b"\n")
            self._signature = digest.hexdigest()
        return self._signature
