"""Tests for share card API endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import PNG_SIGNATURE, SAMPLE_BODIES
from sharecards.api.share import (
    router,
    set_capture_engine,
    set_device_policy,
    set_generation_service,
)
from sharecards.errors import CaptureError, CrossOriginImageError, GenerationError
from sharecards.services.delivery import DevicePolicy
from sharecards.services.generation import GenerationService
from sharecards.workers.dom import CaptureDocument

FAKE_PNG = PNG_SIGNATURE + b"card"

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
DESKTOP = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 Chrome/131.0 Safari/537.36"


@pytest.fixture
def generation_service(tmp_path):
    """Real tree building, stubbed rendering."""
    service = GenerationService(fetcher=MagicMock(), fonts=MagicMock(), background_dir=tmp_path)
    service.generate = AsyncMock(return_value=FAKE_PNG)
    return service


@pytest.fixture
def capture_engine():
    engine = MagicMock()
    engine.capture = AsyncMock(return_value=FAKE_PNG)
    return engine


@pytest.fixture
def client(generation_service, capture_engine):
    """Create a test client with the share router."""
    app = FastAPI()
    app.include_router(router)

    set_generation_service(generation_service)
    set_capture_engine(capture_engine)
    set_device_policy(DevicePolicy())

    return TestClient(app)


class TestGenerate:
    """Tests for POST /share/generate."""

    def test_returns_png(self, client, generation_service):
        response = client.post("/share/generate", json=SAMPLE_BODIES["history"])
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "no-store"
        assert response.content == FAKE_PNG

        request = generation_service.generate.await_args.args[0]
        assert request.type.value == "history"
        assert len(request.data.recent_tracks) == 5
        assert request.data.total_tracks == 12

    def test_unknown_card_type(self, client):
        response = client.post("/share/generate", json={"type": "wrapped", "data": {}})
        assert response.status_code == 422

    def test_invalid_payload(self, client):
        body = {"type": "sonic-aura", "data": {"moodSentence": "x", "moodColor": "sleepy"}}
        response = client.post("/share/generate", json=body)
        assert response.status_code == 422

    def test_render_failure(self, client, generation_service):
        generation_service.generate.side_effect = GenerationError("Failed to render history card")
        response = client.post("/share/generate", json=SAMPLE_BODIES["history"])
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to render history card"


class TestCustomTheme:
    """Custom theme colors are checked before any card is built."""

    @pytest.mark.parametrize("path", ["/share/generate", "/share/preview", "/share/layout"])
    def test_unpaintable_colors_rejected(self, client, path):
        body = {**SAMPLE_BODIES["dashboard"], "theme": {"from": "red", "to": "blue", "glow": "soft"}}
        response = client.post(path, json=body)
        assert response.status_code == 422

    def test_paintable_custom_theme(self, client):
        body = {**SAMPLE_BODIES["dashboard"], "theme": {"from": "#ff0000", "to": "#0000ff", "glow": "rgba(255, 0, 0, 0.4)"}}
        response = client.post("/share/layout", json=body)
        assert response.status_code == 200
        assert response.json()["violations"] == []


class TestLayout:
    """Tests for POST /share/layout."""

    def test_tree_and_violations(self, client):
        response = client.post("/share/layout", json=SAMPLE_BODIES["concerts"])
        assert response.status_code == 200
        data = response.json()
        assert data["violations"] == []
        assert data["tree"]["type"] == "div"


class TestPreview:
    """Tests for POST /share/preview."""

    def test_animated_by_default(self, client):
        response = client.post("/share/preview", json=SAMPLE_BODIES["sonic-aura"])
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<main id="share-card">' in response.text
        assert "@keyframes" in response.text

    def test_static(self, client):
        body = {**SAMPLE_BODIES["podcasts"], "locale": "pt-BR"}
        response = client.post("/share/preview?animated=false", json=body)
        assert "@keyframes" not in response.text
        assert 'lang="pt-BR"' in response.text


class TestCapture:
    """Tests for POST /share/capture."""

    def test_returns_png(self, client, capture_engine):
        response = client.post("/share/capture", json=SAMPLE_BODIES["dashboard"])
        assert response.status_code == 200
        assert response.content == FAKE_PNG

        document = capture_engine.capture.await_args.args[0]
        assert isinstance(document, CaptureDocument)
        assert (document.width, document.height) == (360, 640)

    def test_cross_origin_refused(self, client, capture_engine):
        capture_engine.capture.side_effect = CrossOriginImageError(["https://evil.example/x.png"])
        response = client.post("/share/capture", json=SAMPLE_BODIES["dashboard"])
        assert response.status_code == 422
        assert "evil.example" in response.json()["detail"]

    def test_browser_failure(self, client, capture_engine):
        capture_engine.capture.side_effect = CaptureError("Capture failed: Target closed")
        response = client.post("/share/capture", json=SAMPLE_BODIES["dashboard"])
        assert response.status_code == 502


class TestDelivery:
    """Tests for POST /share/delivery."""

    def test_mobile_with_file_share(self, client):
        response = client.post("/share/delivery", json={
            "cardType": "history",
            "userAgent": IPHONE,
            "maxTouchPoints": 5,
            "hasShareApi": True,
            "canShareFiles": True,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "native-share"
        assert data["caption"] == "Check out my music on MyScrobble.fm"
        assert data["filename"].startswith("myscrobble-history-")
        assert data["filename"].endswith(".png")

    def test_desktop_downloads(self, client):
        response = client.post("/share/delivery", json={
            "cardType": "top-charts",
            "userAgent": DESKTOP,
            "hasShareApi": True,
            "canShareFiles": True,
        })
        data = response.json()
        assert data["method"] == "download"
        assert data["caption"] is None
