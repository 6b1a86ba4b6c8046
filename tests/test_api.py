from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from sdk_docs_mcp.api.dependencies import get_orchestrator
from sdk_docs_mcp.api.search_routes import NO_RESULTS_MESSAGE
from sdk_docs_mcp.catalog.models import SearchHit
from sdk_docs_mcp.main import create_app
from sdk_docs_mcp.search.orchestrator import SearchOrchestrator, SearchOutcome


@pytest.fixture
def client(catalog, make_settings):
    config = make_settings(rag_provider="lexical", rag_include_score=True)
    app = create_app(config=config, orchestrator=SearchOrchestrator(catalog, config))
    with TestClient(app) as c:
        yield c


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["catalog_entries"] == 9
    assert data["provider_chain"] == ["lexical"]


def test_search_returns_references_with_scores(client):
    response = client.post("/search/", json={"query": "AcquireImage"})
    assert response.status_code == 200

    data = response.json()
    assert data["ok"] is True
    first = data["results"][0]
    assert first["uri"] == "doc://dwt/web/web/19.0/AcquireImage-0"
    assert first["score"] == 1.0
    assert "embed_text" not in first


def test_search_without_results_has_message(client):
    data = client.post("/search/", json={"query": "qqqqqq"}).json()
    assert data == {"ok": True, "message": NO_RESULTS_MESSAGE, "results": []}


def test_search_refuses_legacy_version(client):
    data = client.post("/search/", json={"query": "scan", "product": "dwt", "version": "18.4"}).json()

    assert data["ok"] is False
    assert data["results"] == []
    assert "latest major version of DWT (v19)" in data["message"]


def test_search_validates_request(client):
    assert client.post("/search/", json={"query": "x", "limit": 0}).status_code == 422
    assert client.post("/search/", json={"query": "x", "type": "video"}).status_code == 422
    assert client.post("/search/", json={"query": "x", "unknown": 1}).status_code == 422


def test_blank_search_lists_scope(client):
    data = client.post("/search/", json={"product": "ddv"}).json()
    assert [r["uri"] for r in data["results"]] == ["sample://ddv/web/web/3.0.0/react-vite"]
    assert data["results"][0]["score"] is None


def test_suggest_samples(client):
    response = client.post("/search/samples", json={"product": "dbr", "platform": "python"})
    assert response.status_code == 200
    assert [r["uri"] for r in response.json()] == [
        "sample://dbr/python/python/11.0.0/read_an_image"
    ]


def test_pinned_resources(client):
    data = client.get("/resources/pinned").json()
    assert [r["uri"] for r in data] == ["doc://index", "doc://version-policy"]


def test_get_resource(client):
    response = client.get("/resources", params={"uri": "sample://dbr/web/web/11.0.0/frameworks/vue"})
    assert response.status_code == 200
    assert response.json()["title"] == "Web sample: vue (frameworks)"


def test_get_unknown_resource(client):
    response = client.get("/resources", params={"uri": "doc://missing"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Resource not found: doc://missing"


def test_policy_endpoints(client):
    data = client.get("/policy/version", params={"product": "dbr", "version": "9"}).json()
    assert data["ok"] is False
    assert data["latest_major"] == 11

    text = client.get("/policy/version/text")
    assert text.status_code == 200
    assert text.text.startswith("# Version Policy")


def test_unhandled_errors_are_generic(catalog, make_settings):
    class ExplodingOrchestrator(SearchOrchestrator):
        async def search_resources(self, *args, **kwargs):
            raise RuntimeError("secret internals")

    config = make_settings()
    app = create_app(config=config, orchestrator=ExplodingOrchestrator(catalog, config))

    with TestClient(app, raise_server_exceptions=False) as c:
        response = c.post("/search/", json={"query": "anything"})

    assert response.status_code == 500
    assert "secret internals" not in response.text
    assert response.json()["error"] == "internal_server_error"


def test_search_route_forwards_request_to_orchestrator(catalog, make_settings):
    config = make_settings()
    app = create_app(config=config, orchestrator=SearchOrchestrator(catalog, config))

    fake = MagicMock()
    fake.search_resources = AsyncMock(
        return_value=SearchOutcome(
            ok=True, hits=[SearchHit(entry=catalog.get("doc://index"), score=0.9)]
        )
    )
    app.dependency_overrides[get_orchestrator] = lambda: fake

    with TestClient(app) as c:
        response = c.post("/search/", json={"query": "idx", "product": "Barcode Reader", "limit": 3})

    fake.search_resources.assert_awaited_once_with(
        query="idx",
        product="Barcode Reader",
        edition=None,
        platform=None,
        version=None,
        type=None,
        limit=3,
    )
    result = response.json()["results"][0]
    assert result["uri"] == "doc://index"
    # scores are hidden unless RAG_INCLUDE_SCORE is set
    assert result["score"] is None
