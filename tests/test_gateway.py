"""Tests for the relay gateway: trending proxy and static files."""

from __future__ import annotations

import io
import json
import urllib.error
import urllib.parse
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gamedash.catalog.store import CatalogAggregator
from gamedash.config import Settings
from gamedash.gateway.static import content_type_for, resolve_path
from gamedash.main import create_app

from .conftest import FakeResponse, TruncatedResponse, UpstreamRecorder


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text("<html>dashboard</html>", encoding="utf-8")
    (root / "app.js").write_text("console.log('hi');", encoding="utf-8")
    (root / "styles.css").write_text("body {}", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n")
    (root / "assets").mkdir()
    return root


@pytest.fixture
def client(docroot: Path, aggregator: CatalogAggregator) -> TestClient:
    settings = Settings(api_key="secret", static_root=docroot, autoload=False)
    return TestClient(create_app(settings, aggregator))


class TestTrendingProxy:
    def test_pass_through(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        body = b'{"next": null, "results": [{"id": 1, "name": "Halo"}],   "odd spacing": true}'
        upstream.responses.append(FakeResponse(body))

        response = client.get("/trending")

        assert response.status_code == 200
        assert response.content == body
        assert response.headers["access-control-allow-origin"] == "*"
        query = urllib.parse.parse_qs(urllib.parse.urlsplit(upstream[0]).query)
        assert query == {"key": ["secret"], "ordering": ["-rating"], "page_size": ["20"]}

    def test_upstream_status_relayed(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        body = b'{"error": "The key parameter is not provided"}'
        upstream.responses.append(urllib.error.HTTPError(
            "https://api.rawg.io/api/games", 401, "Unauthorized", None, io.BytesIO(body)
        ))
        response = client.get("/trending")
        assert response.status_code == 401
        assert response.content == body
        assert response.headers["access-control-allow-origin"] == "*"

    def test_transport_failure(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        upstream.responses.append(urllib.error.URLError("timed out"))
        response = client.get("/trending")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch from RAWG API"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_truncated_upstream_body(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        upstream.responses.append(TruncatedResponse())
        response = client.get("/trending")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch from RAWG API"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_not_cached(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        upstream.responses.append(FakeResponse(b'{"results": []}'))
        upstream.responses.append(FakeResponse(b'{"results": [1]}'))
        assert client.get("/trending").content == b'{"results": []}'
        assert client.get("/trending").content == b'{"results": [1]}'
        assert len(upstream) == 2

    def test_other_methods_fall_through(self, client: TestClient, upstream: UpstreamRecorder) -> None:
        response = client.post("/trending")
        assert response.status_code == 404
        assert len(upstream) == 0


class TestStaticFiles:
    def test_root_serves_index(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "<html>dashboard</html>"
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.parametrize(
        "path, content_type",
        [
            ("/app.js", "text/javascript"),
            ("/styles.css", "text/css"),
            ("/logo.png", "application/octet-stream"),
        ],
    )
    def test_mime_types(self, client: TestClient, path: str, content_type: str) -> None:
        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(content_type)

    def test_missing_file(self, client: TestClient) -> None:
        response = client.get("/missing.html")
        assert response.status_code == 404
        assert response.text == "<h1>404 - File Not Found</h1>"

    def test_directory_is_server_error(self, client: TestClient) -> None:
        response = client.get("/assets")
        assert response.status_code == 500
        assert response.text.startswith("Server Error:")

    def test_query_string_ignored(self, client: TestClient) -> None:
        assert client.get("/app.js?v=3").status_code == 200


class TestStaticHelpers:
    def test_content_type_case_insensitive(self) -> None:
        assert content_type_for(Path("INDEX.HTML")) == "text/html"
        assert content_type_for(Path("data.json")) == "application/json"

    def test_resolve_default_document(self, tmp_path: Path) -> None:
        assert resolve_path(tmp_path, "/") == (tmp_path / "index.html").resolve()
        assert resolve_path(tmp_path, "", "home.html") == (tmp_path / "home.html").resolve()

    def test_resolve_rejects_escape(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            resolve_path(tmp_path / "site", "../secret.txt")


def test_dashboard_routes_take_precedence(client: TestClient) -> None:
    response = client.get("/api/dashboard")
    assert response.status_code == 200
    assert json.loads(response.text)["pagination"]["current_page"] == 1
