"""Tests for the headless generation service."""

import io
from typing import Dict, Iterable, List

import pytest
from PIL import Image

from conftest import PNG_SIGNATURE, make_request
from sharecards.errors import GenerationError
from sharecards.services.generation import BACKGROUND_URL_PREFIX, GenerationService
from sharecards.workers.fonts import FontBook


class FakeFetcher:
    """Serves a solid tile for every URL and records what was asked for."""

    def __init__(self):
        self.requested: List[str] = []

    async def fetch_all(self, urls: Iterable[str]) -> Dict[str, Image.Image]:
        urls = list(urls)
        self.requested.extend(urls)
        return {url: Image.new("RGBA", (64, 64), (255, 0, 255, 255)) for url in urls}


@pytest.fixture(scope="module")
def fonts():
    return FontBook()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def service(tmp_path, fetcher, fonts):
    return GenerationService(fetcher=fetcher, fonts=fonts, background_dir=tmp_path)


def _decode(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png))


class TestDescribe:
    @pytest.mark.parametrize("name", ["dashboard", "concerts", "sonic-aura"])
    def test_no_violations(self, service, name):
        description = service.describe(make_request(name))
        assert description["violations"] == []
        assert description["tree"]["props"]["style"]["width"] == 1080


class TestBackgroundFile:
    def test_missing(self, service):
        assert service.background_file(make_request("podcasts")) is None

    def test_aura_uses_mood(self, service, tmp_path):
        (tmp_path / "bg-share-card-aura-chill.png").write_bytes(b"x")
        assert service.background_file(make_request("sonic-aura")).name == "bg-share-card-aura-chill.png"

    def test_tree_references_installed_background(self, service, tmp_path):
        (tmp_path / "bg-share-card-podcasts.png").write_bytes(b"x")
        root, _, _ = service.build_tree(make_request("podcasts"))
        assert root.find("background-image")[0].src == BACKGROUND_URL_PREFIX + "bg-share-card-podcasts.png"

        drawn, _, _ = service.build_tree(make_request("podcasts"), use_background_image=False)
        assert not drawn.find("background-image")


class TestGenerate:
    @pytest.mark.asyncio
    async def test_png_at_export_size(self, service):
        png = await service.generate(make_request("dashboard"))
        assert png.startswith(PNG_SIGNATURE)
        assert _decode(png).size == (1080, 1920)

    @pytest.mark.asyncio
    async def test_same_request_same_bytes(self, service):
        request = make_request("podcasts")
        assert await service.generate(request) == await service.generate(request)

    @pytest.mark.asyncio
    async def test_fetches_artwork(self, service, fetcher):
        request = make_request("dashboard", data={
            "nowPlaying": {"trackName": "Song", "artistName": "Band", "albumImage": "https://i.scdn.co/image/np"},
        })
        await service.generate(request)
        assert fetcher.requested == ["https://i.scdn.co/image/np"]

    @pytest.mark.asyncio
    async def test_installed_background_painted(self, service, fetcher, tmp_path):
        Image.new("RGB", (1080, 1920), (0, 128, 255)).save(tmp_path / "bg-share-card-podcasts.png")
        png = await service.generate(make_request("podcasts"))
        assert _decode(png).convert("RGBA").getpixel((2, 2)) == (0, 128, 255, 255)
        assert not any(url.startswith(BACKGROUND_URL_PREFIX) for url in fetcher.requested)

    @pytest.mark.asyncio
    async def test_unreadable_background_falls_back(self, service, tmp_path):
        (tmp_path / "bg-share-card-podcasts.png").write_bytes(b"not a png")
        png = await service.generate(make_request("podcasts"))
        assert _decode(png).size == (1080, 1920)

    @pytest.mark.asyncio
    async def test_render_failure_raises(self, service, monkeypatch):
        def broken(root, images):
            raise ValueError("bad font")

        monkeypatch.setattr(service, "render", broken)
        with pytest.raises(GenerationError, match="bad font") as exc_info:
            await service.generate(make_request("history"))
        assert exc_info.value.status_code == 500
