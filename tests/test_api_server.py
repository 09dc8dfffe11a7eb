"""Tests for the Flask render API"""

import pytest

from compwatch.api_server import create_app
from compwatch.core.config import APIConfig, CompWatchConfig, GlossaryConfig
from conftest import SWOT_FULL_PT


@pytest.fixture
def client(store):
    app = create_app(CompWatchConfig(), store=store)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"
    assert response.get_json()["locales"] == ["en", "pt"]


def test_cors_enabled(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    # flask-cors answers a wildcard config with "*" or by echoing the origin, depending on release
    assert response.headers["Access-Control-Allow-Origin"] in {"*", "http://localhost:5173"}


def test_render_sanitizes_and_annotates(client):
    response = client.post("/api/render", json={
        "html": "<p>Our SWOT analysis</p><img src=x onerror=alert(1)>",
        "locale": "pt-BR",
    })
    data = response.get_json()

    assert response.status_code == 200
    assert data["locale"] == "pt"
    assert data["terms_annotated"] == 1
    assert SWOT_FULL_PT in data["html"]
    assert "onerror" not in data["html"]


def test_render_defaults_to_english(client):
    data = client.post("/api/render", json={"html": "<p>KPI</p>"}).get_json()
    assert data["locale"] == "en"
    assert "Key Performance Indicator" in data["html"]


@pytest.mark.parametrize("kwargs", [
    {"data": "not json", "content_type": "text/plain"},
    {"json": {"markup": "<p>x</p>"}},
    {"json": {"html": 42}},
    {"json": ["<p>x</p>"]},
])
def test_render_rejects_bad_requests(client, kwargs):
    response = client.post("/api/render", **kwargs)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_render_payload_limit(store):
    app = create_app(CompWatchConfig(api=APIConfig(max_payload_kb=1)), store=store)
    client = app.test_client()

    response = client.post("/api/render", json={"html": "<p>" + "a" * 2048 + "</p>"})
    assert response.status_code == 413


def test_render_internal_error(client, monkeypatch):
    from compwatch.core import render

    def explode(self, html, locale=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(render.RenderSurface, "render", explode)
    response = client.post("/api/render", json={"html": "<p>x</p>"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to render report"}


def test_sanitize_endpoint(client):
    response = client.post("/api/sanitize", json={"html": '<div onclick="x()">Click me</div><script>y()</script>'})
    assert response.status_code == 200
    assert response.get_json() == {"html": "<div>Click me</div>"}


def test_sanitize_requires_html(client):
    assert client.post("/api/sanitize", json={}).status_code == 400


def test_glossary_listing_falls_back_to_english(client):
    data = client.get("/api/glossary/xx").get_json()
    assert data["locale"] == "en"
    assert [t["term"] for t in data["terms"]][:2] == ["SWOT", "ROI"]
    assert set(data["terms"][0]) == {"term", "full", "definition"}


def test_glossary_search(client):
    data = client.get("/api/glossary/en/search?q=market").get_json()
    assert data["query"] == "market"
    assert data["terms"][0]["term"] == "Market"


def test_glossary_search_requires_query(client):
    assert client.get("/api/glossary/en/search").status_code == 400


def test_create_app_fails_on_bad_glossary_dir(tmp_path):
    config = CompWatchConfig(glossary=GlossaryConfig(glossary_dir=str(tmp_path / "missing")))
    with pytest.raises(RuntimeError, match="Failed to initialize"):
        create_app(config)


def test_default_locale_from_environment_applies_to_bundled_glossaries(monkeypatch):
    monkeypatch.delenv("COMPWATCH_GLOSSARY_DIR", raising=False)
    monkeypatch.setenv("COMPWATCH_DEFAULT_LOCALE", "pt")
    client = create_app(CompWatchConfig()).test_client()

    data = client.get("/api/glossary/ja").get_json()
    assert data["locale"] == "pt"
    assert SWOT_FULL_PT in {term["full"] for term in data["terms"]}


def test_supported_locales_limit_bundled_glossaries(monkeypatch):
    monkeypatch.delenv("COMPWATCH_GLOSSARY_DIR", raising=False)
    monkeypatch.delenv("COMPWATCH_DEFAULT_LOCALE", raising=False)
    config = CompWatchConfig(glossary=GlossaryConfig(supported_locales=["en", "pt"]))
    client = create_app(config).test_client()

    assert client.get("/health").get_json()["locales"] == ["en", "pt"]
    assert client.get("/api/glossary/de").get_json()["locale"] == "en"
