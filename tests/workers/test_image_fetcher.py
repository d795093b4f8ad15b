"""Tests for artwork fetching and caching."""

import base64
import io

import httpx
import pytest
from PIL import Image

from sharecards.workers.image_fetcher import ImageFetcher, decode_data_url


def _png_bytes(color=(255, 0, 0, 255), size=(4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def _fetcher(tmp_path, handler) -> ImageFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageFetcher(cache_dir=tmp_path / "cache", timeout=1.0, client=client)


class TestDecodeDataUrl:
    def test_base64(self):
        raw = _png_bytes()
        url = "data:image/png;base64," + base64.b64encode(raw).decode()
        assert decode_data_url(url) == raw

    def test_percent_encoded(self):
        assert decode_data_url("data:text/plain,a%20b") == b"a b"

    def test_malformed(self):
        assert decode_data_url("data:image/png;base64") is None


class TestImageFetcher:
    @pytest.mark.asyncio
    async def test_data_url_decoded(self, tmp_path):
        fetcher = _fetcher(tmp_path, lambda request: httpx.Response(500))
        url = "data:image/png;base64," + base64.b64encode(_png_bytes((0, 255, 0, 255))).decode()
        image = await fetcher.fetch(url)
        assert image.mode == "RGBA"
        assert image.getpixel((0, 0)) == (0, 255, 0, 255)

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self, tmp_path):
        fetcher = _fetcher(tmp_path, lambda request: httpx.Response(500))
        assert await fetcher.fetch("file:///etc/passwd") is None
        assert await fetcher.fetch("") is None

    @pytest.mark.asyncio
    async def test_download_is_cached(self, tmp_path):
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200, content=_png_bytes(), headers={"content-type": "image/png"})

        fetcher = _fetcher(tmp_path, handler)
        url = "https://i.scdn.co/image/abc"

        first = await fetcher.fetch(url)
        second = await fetcher.fetch(url)

        assert first.getpixel((0, 0)) == (255, 0, 0, 255)
        assert second.getpixel((0, 0)) == (255, 0, 0, 255)
        assert calls == [url]
        assert fetcher.cache_path(url).exists()

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self, tmp_path):
        fetcher = _fetcher(tmp_path, lambda request: httpx.Response(404))
        assert await fetcher.fetch("https://i.scdn.co/image/gone") is None

    @pytest.mark.asyncio
    async def test_undecodable_body_returns_none(self, tmp_path):
        fetcher = _fetcher(tmp_path, lambda request: httpx.Response(200, content=b"not an image"))
        assert await fetcher.fetch("https://i.scdn.co/image/bad") is None

    @pytest.mark.asyncio
    async def test_fetch_all_skips_failures(self, tmp_path):
        def handler(request):
            if request.url.path.endswith("ok"):
                return httpx.Response(200, content=_png_bytes())
            return httpx.Response(500)

        fetcher = _fetcher(tmp_path, handler)
        images = await fetcher.fetch_all([
            "https://img.test/ok",
            "https://img.test/ok",
            "https://img.test/broken",
            "",
        ])
        assert list(images) == ["https://img.test/ok"]
