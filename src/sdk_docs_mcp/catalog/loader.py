"""
JSON catalog ingestion.

Discovery of samples and articles happens elsewhere; this module only reads
the pre-built entry list it produces. Both a bare list and an
``{"entries": [...]}`` envelope are accepted, with camelCase or snake_case
keys.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError

from .catalog import Catalog, CatalogError
from .models import CatalogEntry

logger = logging.getLogger("mcp.catalog")


def parse_entries(data: Any) -> List[CatalogEntry]:
    if isinstance(data, dict):
        data = data.get("entries")

    if not isinstance(data, list):
        raise CatalogError("Catalog must be a list of entries or {'entries': [...]}.")

    entries: List[CatalogEntry] = []
    for index, raw in enumerate(data):
        try:
            entries.append(CatalogEntry.model_validate(raw))
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog entry at index {index}: {exc}") from exc
    return entries


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load and validate a catalog file.

    A missing file yields an empty catalog so the service can still start
    and answer policy questions.
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        logger.warning("Catalog file not found at %s; starting with an empty catalog", catalog_path)
        return Catalog([])

    try:
        with catalog_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Failed to read catalog {catalog_path}: {type(exc).__name__}") from exc

    catalog = Catalog(parse_entries(data))
    logger.info("Loaded %d catalog entries from %s", len(catalog), catalog_path)
    return catalog
