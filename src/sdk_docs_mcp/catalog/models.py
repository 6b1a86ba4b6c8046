"""
Catalog Data Models

This module defines the canonical catalog schema: one CatalogEntry per
retrievable documentation article or code sample, the derived
EmbeddingItem used by the vector pipeline, and the request-side
ScopeFilters / SearchHit types.

Entries are immutable once created; the catalog is built once at startup
and only read afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .scope import normalize_edition, normalize_platform, normalize_product, parse_resource_uri


class EntryType(str, Enum):
    DOC = "doc"
    SAMPLE = "sample"
    INDEX = "index"
    POLICY = "policy"


_SCOPE_FIELDS = ("product", "edition", "platform", "version")


class CatalogEntry(BaseModel):
    """
    A single retrievable unit (documentation article or code sample).

    The URI is the handle callers use to fetch full content later; when it
    carries scope segments they must agree with the scope fields.
    """

    id: str = Field(..., min_length=1)
    uri: str = Field(..., min_length=1)
    type: EntryType

    product: Optional[str] = None
    edition: Optional[str] = None
    platform: Optional[str] = None
    version: Optional[str] = None
    major_version: Optional[int] = Field(default=None, ge=0)

    title: str = Field(..., min_length=1)
    summary: str = ""
    embed_text: Optional[str] = Field(
        default=None,
        description="Long-form body used only for semantic chunking.",
    )
    tags: Tuple[str, ...] = ()
    mime_type: str = "text/plain"
    pinned: bool = False

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _lower_tags(cls, v):
        if v is None:
            return ()
        return tuple(str(tag).strip().lower() for tag in v if str(tag).strip())

    @model_validator(mode="after")
    def _scope_matches_uri(self) -> "CatalogEntry":
        parsed = parse_resource_uri(self.uri)
        if parsed is None:
            raise ValueError(f"Invalid catalog URI '{self.uri}': missing scheme")

        for name in _SCOPE_FIELDS:
            value = getattr(self, name)
            if value is None or name not in parsed:
                continue
            if parsed[name] != value:
                raise ValueError(
                    f"Entry '{self.id}' has {name}={value!r} but URI segment is {parsed[name]!r}"
                )
        return self

    @property
    def has_scope(self) -> bool:
        return any(getattr(self, name) for name in _SCOPE_FIELDS)


class EmbeddingItem(BaseModel):
    """One text unit sent to an embedding provider."""

    item_id: str
    entry_uri: str
    text: str

    model_config = ConfigDict(frozen=True)


class ScopeFilters(BaseModel):
    """Normalized scope restriction applied to every search path."""

    product: str = ""
    edition: str = ""
    platform: str = ""
    type: str = "any"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def normalized(
        cls,
        product: Optional[str] = None,
        edition: Optional[str] = None,
        platform: Optional[str] = None,
        type: Optional[str] = None,
    ) -> "ScopeFilters":
        norm_product = normalize_product(product)
        norm_platform = normalize_platform(platform)
        return cls(
            product=norm_product,
            edition=normalize_edition(edition, norm_platform, norm_product),
            platform=norm_platform,
            type=(type or "any").strip().lower(),
        )


class SearchHit(BaseModel):
    """A ranked reference to a catalog entry."""

    entry: CatalogEntry
    score: Optional[float] = None

    model_config = ConfigDict(frozen=True)
