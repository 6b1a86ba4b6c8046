"""
API Models

Pydantic request/response schemas for the search, resource and policy
endpoints. Results carry references (URI, title, summary, scope), never
full content.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import CatalogEntry, SearchHit


# ---------------------------------------------------------------------
# Result Contracts
# ---------------------------------------------------------------------

class ResourceRef(BaseModel):
    """Reference form of a catalog entry returned to callers."""

    uri: str
    title: str
    summary: str = ""
    type: str
    product: Optional[str] = None
    edition: Optional[str] = None
    platform: Optional[str] = None
    version: Optional[str] = None
    mime_type: str = "text/plain"
    score: Optional[float] = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_entry(cls, entry: CatalogEntry, score: Optional[float] = None) -> "ResourceRef":
        return cls(
            uri=entry.uri,
            title=entry.title,
            summary=entry.summary,
            type=entry.type.value,
            product=entry.product,
            edition=entry.edition,
            platform=entry.platform,
            version=entry.version,
            mime_type=entry.mime_type,
            score=score,
        )

    @classmethod
    def from_hit(cls, hit: SearchHit, include_score: bool = False) -> "ResourceRef":
        return cls.from_entry(hit.entry, hit.score if include_score else None)


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    query: Optional[str] = None
    product: Optional[str] = None
    edition: Optional[str] = None
    platform: Optional[str] = None
    version: Optional[str] = None
    type: Optional[str] = Field(default=None, pattern="^(any|doc|sample|index|policy)$")
    limit: Optional[int] = Field(default=None, ge=1, le=50)

    model_config = ConfigDict(extra="forbid")


class SearchResponse(BaseModel):
    ok: bool
    message: Optional[str] = None
    results: List[ResourceRef] = Field(default_factory=list)


class SampleSuggestionRequest(BaseModel):
    query: Optional[str] = None
    product: Optional[str] = None
    edition: Optional[str] = None
    platform: Optional[str] = None
    limit: int = Field(default=5, ge=1, le=10)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------

class VersionCheckResponse(BaseModel):
    ok: bool
    message: Optional[str] = None
    latest_major: Optional[int] = None
