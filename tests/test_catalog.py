import json

import pytest
from pydantic import ValidationError

from sdk_docs_mcp.catalog.catalog import Catalog, CatalogError
from sdk_docs_mcp.catalog.loader import load_catalog
from sdk_docs_mcp.catalog.models import CatalogEntry, ScopeFilters
from sdk_docs_mcp.catalog.scope import (
    entry_matches_scope,
    infer_product_from_query,
    normalize_edition,
    normalize_platform,
    normalize_product,
    parse_resource_uri,
)


class TestCatalogEntry:
    def test_entries_are_immutable(self, entries):
        with pytest.raises(ValidationError):
            entries[0].title = "changed"

    def test_tags_are_lowercased(self, entries):
        sample = next(e for e in entries if e.id.endswith("ScanSingleBarcode"))
        assert "scansinglebarcode" in sample.tags

    def test_scope_must_match_uri_segments(self):
        with pytest.raises(ValidationError):
            CatalogEntry(
                id="bad",
                uri="sample://dbr/web/web/11.0.0/x",
                type="sample",
                product="dwt",
                title="Mismatch",
            )

    def test_type_is_closed_set(self):
        with pytest.raises(ValidationError):
            CatalogEntry(id="x", uri="doc://x", type="video", title="Nope")

    def test_camel_case_keys_accepted(self):
        entry = CatalogEntry.model_validate(
            {
                "id": "d",
                "uri": "doc://dwt/web/web/19.0/d",
                "type": "doc",
                "product": "dwt",
                "majorVersion": 19,
                "title": "D",
                "embedText": "body",
                "mimeType": "text/markdown",
            }
        )
        assert entry.major_version == 19
        assert entry.embed_text == "body"
        assert entry.mime_type == "text/markdown"


class TestCatalog:
    def test_duplicate_uri_rejected(self, entries):
        dup = entries[2].model_copy(update={"id": "other-id"})
        with pytest.raises(CatalogError):
            Catalog(entries + [dup])

    def test_duplicate_id_rejected(self, entries):
        dup = CatalogEntry(id=entries[0].id, uri="doc://elsewhere", type="doc", title="Dup")
        with pytest.raises(CatalogError):
            Catalog(entries + [dup])

    def test_lookup_and_not_found(self, catalog):
        assert catalog.get("doc://index").id == "index"
        assert catalog.get("doc://missing") is None

    def test_pinned(self, catalog):
        assert [e.id for e in catalog.pinned()] == ["index", "version-policy"]

    def test_latest_majors(self, catalog):
        assert catalog.latest_majors() == {"dwt": 19, "dbr": 11, "ddv": 3}

    def test_signature_is_deterministic_and_content_sensitive(self, entries):
        assert Catalog(entries).signature() == Catalog(build_copy(entries)).signature()

        changed = build_copy(entries)
        changed[2] = changed[2].model_copy(update={"embed_text": "different body"})
        assert Catalog(changed).signature() != Catalog(entries).signature()


def build_copy(entries):
    return [e.model_copy() for e in entries]


class TestLoader:
    def test_loads_envelope(self, tmp_path, entries):
        path = tmp_path / "catalog.json"
        payload = {"entries": [e.model_dump(mode="json", by_alias=True) for e in entries]}
        path.write_text(json.dumps(payload), encoding="utf-8")

        catalog = load_catalog(path)
        assert len(catalog) == len(entries)
        assert catalog.get("doc://version-policy").pinned is True

    def test_missing_file_gives_empty_catalog(self, tmp_path):
        assert len(load_catalog(tmp_path / "nope.json")) == 0

    def test_invalid_entry_raises(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(path)


class TestScopeNormalization:
    def test_product_aliases(self):
        assert normalize_product("Web TWAIN") == "dwt"
        assert normalize_product("document viewer") == "ddv"
        assert normalize_product("Barcode Reader") == "dbr"
        assert normalize_product(None) == ""

    def test_platform_aliases(self):
        assert normalize_platform("ReactJS") == "react"
        assert normalize_platform("react-vite") == "react"
        assert normalize_platform("c#") == "dotnet"
        assert normalize_platform("js") == "web"

    def test_edition_inference(self):
        assert normalize_edition(None, "android") == "mobile"
        assert normalize_edition(None, "react") == "web"
        assert normalize_edition(None, "java") == "server"
        assert normalize_edition("Server / Desktop") == "server"
        assert normalize_edition("mobile", "python", "dwt") == "web"

    def test_infer_product_from_query(self):
        assert infer_product_from_query("How do I open a PDF viewer?") == "ddv"
        assert infer_product_from_query("web twain acquire") == "dwt"
        assert infer_product_from_query("read a barcode") == "dbr"
        assert infer_product_from_query("hello") == ""

    def test_parse_resource_uri(self):
        parsed = parse_resource_uri("sample://dbr/mobile/android/11.0.0/high-level/X")
        assert parsed["product"] == "dbr"
        assert parsed["version"] == "11.0.0"
        assert parse_resource_uri("doc://index") == {"scheme": "doc", "parts": ["index"]}
        assert parse_resource_uri("not-a-uri") is None


class TestScopeMatching:
    def test_react_only_matches_react_tagged_web_entries(self, catalog):
        filters = ScopeFilters.normalized(platform="react")
        matched = [e for e in catalog if entry_matches_scope(e, filters)]

        assert [e.id for e in matched] == ["dbr-web-frameworks-react-hooks", "ddv-react-vite"]
        for entry in matched:
            assert entry.platform == "web"
            assert {"react", "react-vite"} & set(entry.tags)

    def test_no_scope_matches_everything(self, catalog):
        filters = ScopeFilters.normalized()
        assert len(catalog.filter(filters)) == len(catalog)

    def test_server_edition_matches_python_entries(self, catalog):
        filters = ScopeFilters.normalized(product="dbr", platform="python")
        assert [e.id for e in catalog.filter(filters)] == ["dbr-python-read_an_image"]

    def test_type_filter(self, catalog):
        filters = ScopeFilters.normalized(product="dwt", type="doc")
        assert [e.id for e in catalog.filter(filters)] == ["dwt-doc-0"]
