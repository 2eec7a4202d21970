import re
import time

import pytest
from fastapi.testclient import TestClient

from main import create_app
from kvshortener.dependencies import get_url_service
from kvshortener.exceptions import DataStoreError, GenerationExhaustedError
from kvshortener.storage import SQLiteKeyValueStore
from kvshortener.storage import keys
from kvshortener.storage.codec import encode_uint64

CODE_RE = re.compile(r"^[-_A-Za-z0-9]{4,}$")


def shorten(client: TestClient, url: bytes) -> str:
    response = client.post("/set", content=url)
    assert response.status_code == 200
    short_url = response.text
    assert short_url.startswith("http://testserver/")
    return short_url.rsplit("/", 1)[1]


def wait_for_stat(client: TestClient, short_code: str, expected: str, timeout: float = 5.0) -> str:
    """Hits are applied asynchronously; poll the stat page until they land"""
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/{short_code}/stat").text
        if expected in body or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


class FailingURLService:
    """Service whose every operation fails with the given error"""

    def __init__(self, error):
        self.error = error

    def short_url(self, short_code):
        return f"http://testserver/{short_code}"

    async def create_short_url(self, long_url):
        raise self.error

    async def get_long_url(self, short_code):
        raise self.error

    async def get_long_url_for_redirect(self, short_code):
        raise self.error

    async def get_url_stats(self, short_code):
        raise self.error


class TestURLShortener:
    """Test the plain text interface"""

    def test_index_page(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http://testserver/set -- POST URL to shorten" in response.text
        assert "http://testserver/<shortened_URL>/stat -- get stats for the URL" in response.text

    def test_shorten_redirect_and_stat(self, client: TestClient):
        """Test the full flow: set, follow, count"""
        short_code = shorten(client, b"https://example.com/page")
        assert CODE_RE.match(short_code)
        assert len(short_code) == 4

        response = client.get(f"/{short_code}", follow_redirects=False)
        assert response.status_code == 308
        assert response.headers["location"] == "https://example.com/page"

        body = wait_for_stat(client, short_code, "Overall hits: 1<br>")
        assert f"Shortened URL: http://testserver/{short_code}<br>" in body
        assert "Real URL: https://example.com/page<br>" in body
        assert "Overall hits: 1<br>" in body
        assert "Weekly hits: 1<br>" in body
        assert "24h hits: 1<br>" in body

    def test_fresh_code_has_zero_hits(self, client: TestClient):
        short_code = shorten(client, b"https://example.com/")

        response = client.get(f"/{short_code}/stat")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Overall hits: 0<br>" in response.text
        assert "Weekly hits: 0<br>" in response.text
        assert "24h hits: 0<br>" in response.text

    def test_stat_does_not_count_as_hit(self, client: TestClient):
        short_code = shorten(client, b"https://example.com/")

        client.get(f"/{short_code}/stat")
        client.get(f"/{short_code}/stat")

        assert "Overall hits: 0<br>" in client.get(f"/{short_code}/stat").text

    def test_body_is_stored_verbatim(self, client: TestClient):
        """Test that the target is not validated or normalized"""
        short_code = shorten(client, b"not even a url")

        assert "Real URL: not even a url<br>" in client.get(f"/{short_code}/stat").text

    def test_stat_page_escapes_target(self, client: TestClient):
        short_code = shorten(client, b"https://example.com/?q=<script>")

        body = client.get(f"/{short_code}/stat").text

        assert "<script>" not in body
        assert "&lt;script&gt;" in body

    def test_codes_are_distinct(self, client: TestClient):
        codes = {shorten(client, f"https://example.com/{i}".encode()) for i in range(25)}

        assert len(codes) == 25

    def test_empty_body(self, client: TestClient):
        response = client.post("/set", content=b"")

        assert response.status_code == 400
        assert response.text == "Empty URL"

    def test_redirect_unknown_code(self, client: TestClient):
        response = client.get("/abcd1234", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "URL not found"

    def test_stat_unknown_code(self, client: TestClient):
        response = client.get("/abcd1234/stat")

        assert response.status_code == 404
        assert response.text == "URL not found"

    def test_code_too_short(self, client: TestClient):
        """Test that paths outside the code pattern are not routed as codes"""
        assert client.get("/abc", follow_redirects=False).status_code == 404
        assert client.get("/abc/stat").status_code == 404

    def test_code_with_invalid_symbols(self, client: TestClient):
        assert client.get("/abcd.html", follow_redirects=False).status_code == 404

    def test_unknown_code_is_not_counted(self, client: TestClient):
        client.get("/abcd1234", follow_redirects=False)

        assert client.app.state.worker.processed_count == 0
        assert client.app.state.queue.dropped == 0


class TestRouting:
    """Every code the generator can produce must reach the code routes"""

    @pytest.mark.parametrize("short_code", ["docs", "redoc", "openapi", "stat", "urls"])
    def test_codes_named_like_app_pages(self, client: TestClient, short_code: str):
        with client.app.state.store.update("seeding") as txn:
            txn.set(keys.url_key(short_code), b"https://example.com/" + short_code.encode())

        response = client.get(f"/{short_code}", follow_redirects=False)
        assert response.status_code == 308
        assert response.headers["location"] == f"https://example.com/{short_code}"

        body = wait_for_stat(client, short_code, "Overall hits: 1<br>")
        assert f"Real URL: https://example.com/{short_code}<br>" in body
        assert "Overall hits: 1<br>" in body

    def test_no_static_route_shadows_a_code(self, client: TestClient):
        """Test that fixed paths never start with a segment shaped like a code"""
        for route in client.app.routes:
            first_segment = route.path.lstrip("/").split("/", 1)[0]
            if first_segment.startswith("{"):
                continue
            assert not CODE_RE.match(first_segment), route.path

    def test_docs_served_under_api(self, client: TestClient):
        assert client.get("/api/v1/docs").status_code == 200
        assert client.get("/api/v1/redoc").status_code == 200
        assert client.get("/api/v1/openapi.json").status_code == 200


class TestServerFailures:
    """Core failures map to 500 Server failure"""

    def test_generation_exhausted(self, client: TestClient):
        client.app.dependency_overrides[get_url_service] = lambda: FailingURLService(
            GenerationExhaustedError("Could not generate unique short code after 80 attempts")
        )

        response = client.post("/set", content=b"https://example.com/")

        assert response.status_code == 500
        assert response.text == "Server failure"

    def test_store_failure_on_redirect(self, client: TestClient):
        client.app.dependency_overrides[get_url_service] = lambda: FailingURLService(
            DataStoreError("Key-value store failure while getting shortened url")
        )

        response = client.get("/abcd", follow_redirects=False)

        assert response.status_code == 500
        assert response.text == "Server failure"

    def test_store_failure_on_stat(self, client: TestClient):
        client.app.dependency_overrides[get_url_service] = lambda: FailingURLService(
            DataStoreError("Key-value store failure while reading URL stats")
        )

        response = client.get("/abcd/stat")

        assert response.status_code == 500
        assert response.text == "Server failure"


class TestJSONAPI:
    """Test the JSON interface"""

    def test_create_short_url(self, client: TestClient):
        url_data = {"long_url": "https://www.google.com/"}

        response = client.post("/api/v1/urls/", json=url_data)
        assert response.status_code == 201

        data = response.json()
        assert CODE_RE.match(data["short_code"])
        assert data["short_url"] == f"http://testserver/{data['short_code']}"
        assert data["long_url"] == url_data["long_url"]

    def test_invalid_url(self, client: TestClient):
        response = client.post("/api/v1/urls/", json={"long_url": "not-a-valid-url"})

        assert response.status_code == 422

    def test_get_url_info(self, client: TestClient):
        create_response = client.post("/api/v1/urls/", json={"long_url": "https://www.google.com/"})
        short_code = create_response.json()["short_code"]

        response = client.get(f"/api/v1/urls/{short_code}")
        assert response.status_code == 200

        data = response.json()
        assert data["short_code"] == short_code
        assert data["long_url"] == "https://www.google.com/"

    def test_get_nonexistent_url(self, client: TestClient):
        response = client.get("/api/v1/urls/nonexistent")

        assert response.status_code == 404
        assert response.json()["detail"] == "Short URL not found"

    def test_stats_after_redirects(self, client: TestClient):
        create_response = client.post("/api/v1/urls/", json={"long_url": "https://www.github.com/"})
        short_code = create_response.json()["short_code"]

        for _ in range(3):
            assert client.get(f"/{short_code}", follow_redirects=False).status_code == 308
        wait_for_stat(client, short_code, "Overall hits: 3<br>")

        response = client.get(f"/api/v1/urls/{short_code}/stats")
        assert response.status_code == 200

        data = response.json()
        assert data["short_code"] == short_code
        assert data["long_url"] == "https://www.github.com/"
        assert data["total_hits"] == 3
        assert data["weekly_hits"] == 3
        assert data["daily_hits"] == 3

    def test_stats_nonexistent(self, client: TestClient):
        response = client.get("/api/v1/urls/nonexistent/stats")

        assert response.status_code == 404

    def test_both_interfaces_share_codes(self, client: TestClient):
        short_code = shorten(client, b"https://example.com/shared")

        response = client.get(f"/api/v1/urls/{short_code}")

        assert response.json()["long_url"] == "https://example.com/shared"


class TestStartup:
    """Test state loaded when the application starts"""

    def test_persisted_code_length_is_used(self, test_settings):
        store = SQLiteKeyValueStore(db_path=test_settings.store_path)
        with store.update("seeding") as txn:
            txn.set(keys.code_length_key(), encode_uint64(6))
        store.close()

        with TestClient(create_app(test_settings)) as client:
            short_code = shorten(client, b"https://example.com/")

        assert len(short_code) == 6

    def test_mappings_survive_restart(self, test_settings):
        with TestClient(create_app(test_settings)) as client:
            short_code = shorten(client, b"https://example.com/durable")
            client.get(f"/{short_code}", follow_redirects=False)
            wait_for_stat(client, short_code, "Overall hits: 1<br>")

        with TestClient(create_app(test_settings)) as client:
            response = client.get(f"/{short_code}", follow_redirects=False)
            assert response.headers["location"] == "https://example.com/durable"
            assert "Overall hits:" in client.get(f"/{short_code}/stat").text

    def test_unopenable_store_aborts_startup(self, test_settings, tmp_path):
        test_settings.store_path = str(tmp_path)
        app = create_app(test_settings)

        with pytest.raises(DataStoreError):
            with TestClient(app):
                pass
