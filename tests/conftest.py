"""Shared fixtures: a small mixed catalog, isolated settings and stub embedders."""

import pytest

from sdk_docs_mcp.catalog.catalog import Catalog
from sdk_docs_mcp.catalog.models import CatalogEntry
from sdk_docs_mcp.config import Settings


DWT_BODY = (
    "Use AcquireImage to start scanning from a TWAIN source. "
    "Call SelectSourceAsync first to let the user pick a scanner, then "
    "AcquireImageAsync with PixelType and Resolution settings. " * 6
)


def build_entries():
    return [
        CatalogEntry(
            id="index",
            uri="doc://index",
            type="index",
            title="SDK Index",
            summary="Compact index of products, editions, versions, samples, and docs.",
            mime_type="application/json",
            tags=["index", "overview", "catalog"],
            pinned=True,
        ),
        CatalogEntry(
            id="version-policy",
            uri="doc://version-policy",
            type="policy",
            title="Version Policy",
            summary="Latest major versions only; legacy docs are linked for select versions.",
            mime_type="text/markdown",
            tags=["policy", "version", "support"],
            pinned=True,
        ),
        CatalogEntry(
            id="dwt-doc-0",
            uri="doc://dwt/web/web/19.0/AcquireImage-0",
            type="doc",
            product="dwt",
            edition="web",
            platform="web",
            version="19.0",
            major_version=19,
            title="AcquireImage",
            summary="Dynamic Web TWAIN > API > Acquisition",
            embed_text=DWT_BODY,
            mime_type="text/markdown",
            tags=["doc", "dwt", "api", "acquisition"],
        ),
        CatalogEntry(
            id="dbr-mobile-android-high-level-ScanSingleBarcode",
            uri="sample://dbr/mobile/android/11.0.0/high-level/ScanSingleBarcode",
            type="sample",
            product="dbr",
            edition="mobile",
            platform="android",
            version="11.0.0",
            major_version=11,
            title="ScanSingleBarcode (android, high-level)",
            summary="DBR mobile android high-level sample ScanSingleBarcode.",
            tags=["sample", "dbr", "mobile", "android", "high-level", "ScanSingleBarcode"],
        ),
        CatalogEntry(
            id="dbr-python-read_an_image",
            uri="sample://dbr/python/python/11.0.0/read_an_image",
            type="sample",
            product="dbr",
            edition="python",
            platform="python",
            version="11.0.0",
            major_version=11,
            title="Python sample: read_an_image",
            summary="DBR Python sample read_an_image.",
            mime_type="text/x-python",
            tags=["sample", "dbr", "python", "read_an_image"],
        ),
        CatalogEntry(
            id="dbr-web-frameworks-react-hooks",
            uri="sample://dbr/web/web/11.0.0/frameworks/react-hooks",
            type="sample",
            product="dbr",
            edition="web",
            platform="web",
            version="11.0.0",
            major_version=11,
            title="Web sample: react-hooks (frameworks)",
            summary="DBR web sample frameworks/react-hooks.",
            mime_type="text/html",
            tags=["sample", "dbr", "web", "frameworks", "react"],
        ),
        CatalogEntry(
            id="dbr-web-frameworks-vue",
            uri="sample://dbr/web/web/11.0.0/frameworks/vue",
            type="sample",
            product="dbr",
            edition="web",
            platform="web",
            version="11.0.0",
            major_version=11,
            title="Web sample: vue (frameworks)",
            summary="DBR web sample frameworks/vue.",
            mime_type="text/html",
            tags=["sample", "dbr", "web", "frameworks", "vue"],
        ),
        CatalogEntry(
            id="ddv-react-vite",
            uri="sample://ddv/web/web/3.0.0/react-vite",
            type="sample",
            product="ddv",
            edition="web",
            platform="web",
            version="3.0.0",
            major_version=3,
            title="DDV sample: react-vite",
            summary="Document Viewer sample react-vite.",
            tags=["sample", "ddv", "document-viewer", "web", "react-vite"],
        ),
        CatalogEntry(
            id="dwt-scan-basic-scan",
            uri="sample://dwt/web/web/19.0/scan/basic-scan",
            type="sample",
            product="dwt",
            edition="web",
            platform="web",
            version="19.0",
            major_version=19,
            title="DWT sample: basic-scan (scan)",
            summary="Dynamic Web TWAIN sample scan/basic-scan.",
            mime_type="text/html",
            tags=["sample", "dwt", "scan", "basic-scan"],
        ),
    ]


class KeywordEmbedder:
    """Two-dimensional stub: [1, 0] for texts containing the keyword, else [0, 1]."""

    name = "stub"

    def __init__(self, keyword="fox", model="stub-v1"):
        self.keyword = keyword
        self.model = model
        self.calls = 0

    async def embed(self, text):
        self.calls += 1
        return [1.0, 0.0] if self.keyword in text.lower() else [0.0, 1.0]


class FailingEmbedder:
    name = "broken"
    model = "broken-v1"

    def __init__(self):
        self.calls = 0

    async def embed(self, text):
        self.calls += 1
        raise RuntimeError("embedding backend unavailable")


@pytest.fixture
def entries():
    return build_entries()


@pytest.fixture
def catalog(entries):
    return Catalog(entries)


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "catalog_path": str(tmp_path / "catalog.json"),
            "rag_cache_dir": str(tmp_path / "cache"),
            "rag_model_cache_dir": str(tmp_path / "models"),
            "rag_provider": "local",
            "rag_fallback": "lexical",
            "gemini_api_key": None,
            "rag_min_score": 0.2,
            "rag_rebuild": False,
            "rag_prewarm": False,
        }
        values.update(overrides)
        return Settings(**values)

    return _make
