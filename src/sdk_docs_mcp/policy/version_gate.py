"""
Version Policy Gate

Only the latest major version of each product is served. Requests for an
older major are refused before any search work happens; where archived
documentation exists the refusal carries a link to it.

The gate is a pure function of its inputs plus two static tables (legacy
links) and the latest majors known to the catalog.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from ..catalog.scope import (
    infer_product_from_query,
    normalize_edition,
    normalize_platform,
    normalize_product,
)


# ---------------------------------------------------------------------
# Static Legacy Tables
# ---------------------------------------------------------------------

# major -> edition/platform -> link. None marks a known gap.
LEGACY_DBR_LINKS: Dict[str, Dict[str, Optional[str]]] = {
    "10": {
        "web": "https://www.dynamsoft.com/barcode-reader/docs/v10/web/programming/javascript/",
        "cpp": "https://www.dynamsoft.com/barcode-reader/docs/v10/server/programming/cplusplus/",
        "java": None,
        "dotnet": "https://www.dynamsoft.com/barcode-reader/docs/v10/server/programming/dotnet/",
        "python": "http://dynamsoft.com/barcode-reader/docs/v10/server/programming/python/",
        "android": "https://www.dynamsoft.com/barcode-reader/docs/v10/mobile/programming/android/",
        "ios": "https://www.dynamsoft.com/barcode-reader/docs/v10/mobile/programming/objectivec-swift/",
    },
    "9": {
        "web": "https://www.dynamsoft.com/barcode-reader/docs/v9/web/programming/javascript/",
        "cpp": "https://www.dynamsoft.com/barcode-reader/docs/v9/server/programming/cplusplus/",
        "java": "https://www.dynamsoft.com/barcode-reader/docs/v9/server/programming/java/",
        "dotnet": "https://www.dynamsoft.com/barcode-reader/docs/v9/server/programming/dotnet/",
        "python": "https://www.dynamsoft.com/barcode-reader/docs/v9/server/programming/python/",
        "android": "https://www.dynamsoft.com/barcode-reader/docs/v9/mobile/programming/android/",
        "ios": "https://www.dynamsoft.com/barcode-reader/docs/v9/mobile/programming/objectivec-swift/",
    },
}

LEGACY_DWT_LINKS: Dict[str, str] = {
    "18.5.1": "https://www.dynamsoft.com/web-twain/docs-archive/v18.5.1/info/api/",
    "18.4": "https://www.dynamsoft.com/web-twain/docs-archive/v18.4/info/api/",
    "18.3": "https://www.dynamsoft.com/web-twain/docs-archive/v18.3/info/api/",
    "18.1": "https://www.dynamsoft.com/web-twain/docs-archive/v18.1/info/api/",
    "18.0": "https://www.dynamsoft.com/web-twain/docs-archive/v18.0/info/api/",
    "17.3": "https://www.dynamsoft.com/web-twain/docs-archive/v17.3/info/api/",
    "17.2.1": "https://www.dynamsoft.com/web-twain/docs-archive/v17.2.1/info/api/",
    "17.1.1": "https://www.dynamsoft.com/web-twain/docs-archive/v17.1.1/info/api/",
    "17.0": "https://www.dynamsoft.com/web-twain/docs-archive/v17.0/info/api/",
    "16.2": "https://www.dynamsoft.com/web-twain/docs-archive/v16.2/info/api/",
    "16.1.1": "https://www.dynamsoft.com/web-twain/docs-archive/v16.1.1/info/api/",
}

# Oldest major with archived docs; products absent here have no legacy support.
OLDEST_SUPPORTED_MAJOR: Dict[str, int] = {"dbr": 9, "dwt": 16}

_DBR_LEGACY_LABELS = (
    ("web", "Web (JS)"),
    ("cpp", "Server/Desktop (C++)"),
    ("java", "Server/Desktop (Java)"),
    ("dotnet", "Server/Desktop (.NET)"),
    ("python", "Server/Desktop (Python)"),
    ("android", "Mobile (Android)"),
    ("ios", "Mobile (iOS)"),
)

_LEADING_NUMBER = re.compile(r"(\d+)")
_EXPLICIT_MAJOR = re.compile(r"(?:\bv|\bversion\s*)(\d{1,2})(?:\.\d+)?", re.IGNORECASE)
_PRODUCT_MAJOR = re.compile(r"(?:dbr|dwt|ddv)[^0-9]*(\d{1,2})(?:\.\d+)?", re.IGNORECASE)


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def parse_major_version(version: Optional[object]) -> Optional[int]:
    if version is None or version == "":
        return None
    match = _LEADING_NUMBER.search(str(version))
    return int(match.group(1)) if match else None


def detect_major_from_query(query: Optional[str]) -> Optional[int]:
    """Find "v10", "version 9" or "dbr 9" style major numbers in free text."""
    if not query:
        return None
    match = _EXPLICIT_MAJOR.search(query) or _PRODUCT_MAJOR.search(query)
    return int(match.group(1)) if match else None


def format_dbr_legacy_links(major: int) -> str:
    by_major = LEGACY_DBR_LINKS.get(str(major))
    if not by_major:
        return f"No legacy docs are available for DBR v{major}."

    lines = [f"Legacy docs for DBR v{major}:"]
    for key, label in _DBR_LEGACY_LABELS:
        lines.append(f"- {label}: {by_major.get(key) or 'Not available'}")
    return "\n".join(lines)


def get_legacy_link(
    product: str,
    version: Optional[str],
    edition: Optional[str] = None,
    platform: Optional[str] = None,
) -> Optional[str]:
    """Look up an archived-docs link for one product/version/scope."""
    if product == "dwt":
        return LEGACY_DWT_LINKS.get(version) if version else None

    if product != "dbr":
        return None

    major = parse_major_version(version)
    by_major = LEGACY_DBR_LINKS.get(str(major)) if major else None
    if not by_major:
        return None

    norm_platform = normalize_platform(platform)
    norm_edition = normalize_edition(edition, platform, product) or "web"

    if norm_edition == "mobile":
        return by_major.get(norm_platform) if norm_platform in ("android", "ios") else None
    if norm_edition == "web":
        return by_major.get("web")
    if norm_edition == "server" and norm_platform in ("python", "cpp", "java", "dotnet"):
        return by_major.get(norm_platform)
    return None


# ---------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------

class PolicyDecision(BaseModel):
    ok: bool
    message: Optional[str] = None
    latest_major: Optional[int] = None

    model_config = ConfigDict(frozen=True)


class VersionPolicyGate:
    """
    Decide whether a request may be served.

    Parameters
    ----------
    latest_majors : Mapping[str, int]
        Latest major per product, normally ``Catalog.latest_majors()``.
    """

    def __init__(self, latest_majors: Mapping[str, int]) -> None:
        self.latest_majors: Dict[str, int] = dict(latest_majors)

    def check(
        self,
        product: Optional[str] = None,
        version: Optional[str] = None,
        query: Optional[str] = None,
        edition: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> PolicyDecision:
        inferred = normalize_product(product) or infer_product_from_query(query)
        if not inferred:
            return PolicyDecision(ok=True)

        latest = self.latest_majors.get(inferred)
        requested = parse_major_version(version)
        if requested is None:
            requested = detect_major_from_query(query)

        if not requested or requested == latest:
            return PolicyDecision(ok=True, latest_major=latest)

        if latest is None:
            return PolicyDecision(ok=False, message="Unsupported version request.")

        label = inferred.upper()
        headline = f"This server only serves the latest major version of {label} (v{latest})."

        oldest = OLDEST_SUPPORTED_MAJOR.get(inferred)
        if oldest is None:
            return PolicyDecision(ok=False, message=headline, latest_major=latest)

        if requested < oldest:
            return PolicyDecision(
                ok=False,
                message=f"{headline} {label} versions prior to v{oldest} are not available.",
                latest_major=latest,
            )

        if inferred == "dbr":
            link = get_legacy_link("dbr", str(requested), edition, platform)
            note = f"Legacy docs: {link}" if link else format_dbr_legacy_links(requested)
        else:
            link = get_legacy_link(inferred, version, edition, platform)
            available = ", ".join(sorted(LEGACY_DWT_LINKS))
            note = f"Legacy docs: {link}" if link else f"Available archived {label} versions: {available}"

        return PolicyDecision(ok=False, message=f"{headline}\n{note}", latest_major=latest)

    def build_policy_text(self) -> str:
        """Markdown summary of the version policy."""
        lines = [
            "# Version Policy",
            "",
            "This server only serves the latest major versions of each product.",
            "",
        ]
        for product in sorted(self.latest_majors):
            lines.append(f"- {product.upper()} latest major: v{self.latest_majors[product]}")

        dbr_majors = ", ".join(f"v{m}" for m in sorted(LEGACY_DBR_LINKS, key=int))
        dwt_versions = ", ".join(sorted(LEGACY_DWT_LINKS)) or "none"
        lines.extend([
            "",
            "Legacy support:",
            f"- DBR {dbr_majors} docs are linked when requested.",
            f"- DWT archived docs available: {dwt_versions}.",
            "",
            "Requests for older major versions are refused with a helpful message.",
        ])
        return "\n".join(lines)
