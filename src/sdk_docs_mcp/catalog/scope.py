"""
Scope Normalization and Matching

This module turns loosely typed scope strings ("Web TWAIN", "reactjs",
"c#") into canonical product / edition / platform values and decides
whether a catalog entry falls inside a requested scope.

All alias knowledge lives in plain lookup tables so new aliases are data
changes, not code changes.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CatalogEntry, ScopeFilters


# ---------------------------------------------------------------------
# Alias Tables
# ---------------------------------------------------------------------

PRODUCT_ALIASES: Dict[str, str] = {
    "ddv": "ddv",
    "document viewer": "ddv",
    "document-viewer": "ddv",
    "dynamsoft document viewer": "ddv",
    "doc viewer": "ddv",
    "pdf viewer": "ddv",
    "dbr": "dbr",
    "barcode reader": "dbr",
    "barcode-reader": "dbr",
    "dynamsoft barcode reader": "dbr",
    "dwt": "dwt",
    "dynamic web twain": "dwt",
    "web twain": "dwt",
    "webtwain": "dwt",
}

PLATFORM_ALIASES: Dict[str, str] = {
    # Mobile
    "rn": "react-native",
    "reactnative": "react-native",
    "react native": "react-native",
    "react-native": "react-native",
    "ios": "ios",
    "swift": "ios",
    "objc": "ios",
    "objective-c": "ios",
    "android": "android",
    "kotlin": "android",
    "flutter": "flutter",
    "dart": "flutter",
    "maui": "maui",
    "dotnet maui": "maui",
    ".net maui": "maui",
    # Desktop / server
    "python": "python",
    "py": "python",
    "cpp": "cpp",
    "c++": "cpp",
    "cplusplus": "cpp",
    "java": "java",
    "dotnet": "dotnet",
    ".net": "dotnet",
    "c#": "dotnet",
    "csharp": "dotnet",
    # Web
    "web": "web",
    "javascript": "web",
    "js": "web",
    "typescript": "web",
    "ts": "web",
    # Web frameworks
    "angular": "angular",
    "angularjs": "angular",
    "react": "react",
    "reactjs": "react",
    "react.js": "react",
    "react-vite": "react",
    "vue": "vue",
    "vuejs": "vue",
    "next": "next",
    "nextjs": "next",
    "nuxt": "nuxt",
    "nuxtjs": "nuxt",
    "svelte": "svelte",
    "blazor": "blazor",
    "capacitor": "capacitor",
    "electron": "electron",
    "es6": "es6",
    "native-ts": "native-ts",
    "pwa": "pwa",
    "requirejs": "requirejs",
    "webview": "webview",
}

SERVER_PLATFORMS: FrozenSet[str] = frozenset({"python", "cpp", "java", "dotnet"})

MOBILE_PLATFORMS: FrozenSet[str] = frozenset({"android", "ios"})

WEB_FRAMEWORK_PLATFORMS: FrozenSet[str] = frozenset({
    "angular",
    "blazor",
    "capacitor",
    "electron",
    "es6",
    "native-ts",
    "next",
    "nuxt",
    "pwa",
    "react",
    "requirejs",
    "svelte",
    "vue",
    "webview",
})

# Tags that identify a framework on entries published under platform="web".
WEB_FRAMEWORK_TAG_ALIASES: Dict[str, Tuple[str, ...]] = {
    "react": ("react", "react-vite"),
}

# Products whose content only exists for the web edition.
WEB_ONLY_PRODUCTS: FrozenSet[str] = frozenset({"dwt", "ddv"})

_EDITION_ALIASES: Dict[str, str] = {
    "mobile": "mobile",
    "android": "mobile",
    "ios": "mobile",
    "web": "web",
    "javascript": "web",
    "js": "web",
    "typescript": "web",
    "ts": "web",
    "server": "server",
    "desktop": "server",
    "server/desktop": "server",
    "server-desktop": "server",
    "serverdesktop": "server",
    "python": "server",
    "py": "server",
    "java": "server",
    "c++": "server",
    "cpp": "server",
    "dotnet": "server",
    ".net": "server",
    "c#": "server",
    "csharp": "server",
}


# ---------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------

def normalize_product(product: Optional[str]) -> str:
    if not product:
        return ""
    value = product.strip().lower()
    return PRODUCT_ALIASES.get(value, value)


def normalize_platform(platform: Optional[str]) -> str:
    if not platform:
        return ""
    value = platform.strip().lower()
    return PLATFORM_ALIASES.get(value, value)


def is_web_framework_platform(platform: str) -> bool:
    return platform in WEB_FRAMEWORK_PLATFORMS


def is_web_platform(platform: str) -> bool:
    return platform == "web" or is_web_framework_platform(platform)


def normalize_edition(
    edition: Optional[str],
    platform: Optional[str] = None,
    product: Optional[str] = None,
) -> str:
    """
    Resolve the edition for a request.

    dwt and ddv only ship a web edition. Without an explicit edition the
    platform decides (mobile / web / server); unknown values pass through.
    """
    if product in WEB_ONLY_PRODUCTS:
        return "web"

    normalized_platform = normalize_platform(platform)

    if not edition:
        if normalized_platform in MOBILE_PLATFORMS:
            return "mobile"
        if is_web_platform(normalized_platform):
            return "web"
        if normalized_platform in SERVER_PLATFORMS:
            return "server"
        return ""

    value = edition.strip().lower()
    compact = "".join(value.split())
    return _EDITION_ALIASES.get(value) or _EDITION_ALIASES.get(compact) or value


def infer_product_from_query(query: Optional[str]) -> str:
    """Guess the product a free-text query is about, or return ""."""
    if not query:
        return ""
    text = query.lower()
    if any(k in text for k in ("ddv", "document viewer", "pdf viewer", "edit viewer")):
        return "ddv"
    if any(k in text for k in ("dwt", "web twain", "webtwain")):
        return "dwt"
    if any(k in text for k in ("dbr", "barcode reader", "barcode")):
        return "dbr"
    return ""


# ---------------------------------------------------------------------
# URI Parsing
# ---------------------------------------------------------------------

def parse_resource_uri(uri: str) -> Optional[Dict[str, object]]:
    """
    Split ``scheme://product/edition/platform/version/...`` into parts.

    Returns None for strings without a scheme. URIs with fewer than four
    path segments only carry ``scheme`` and ``parts``.
    """
    if not uri or "://" not in uri:
        return None

    scheme, rest = uri.split("://", 1)
    parts = [p for p in rest.split("/") if p]

    if len(parts) < 4:
        return {"scheme": scheme, "parts": parts}

    return {
        "scheme": scheme,
        "product": parts[0],
        "edition": parts[1],
        "platform": parts[2],
        "version": parts[3],
        "parts": parts,
    }


# ---------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------

def edition_matches(requested: str, entry_edition: Optional[str]) -> bool:
    if not requested:
        return True
    if requested == entry_edition:
        return True
    # Python samples are published under their own edition segment.
    return {requested, entry_edition} == {"server", "python"}


def platform_matches(requested: str, entry: "CatalogEntry") -> bool:
    if not requested:
        return True
    if requested == entry.platform:
        return True
    if requested == "web":
        return False

    if is_web_framework_platform(requested):
        if entry.platform == "web":
            aliases = WEB_FRAMEWORK_TAG_ALIASES.get(requested, (requested,))
            return any(alias in entry.tags for alias in aliases)
        return False

    return False


def entry_matches_scope(entry: "CatalogEntry", filters: "ScopeFilters") -> bool:
    if filters.product and entry.product != filters.product:
        return False
    if filters.edition and not edition_matches(filters.edition, entry.edition):
        return False
    if filters.platform and not platform_matches(filters.platform, entry):
        return False
    if filters.type != "any" and entry.type.value != filters.type:
        return False
    return True
