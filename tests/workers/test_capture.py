"""Tests for the DOM capture engine, with a fake browser."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from conftest import PNG_SIGNATURE
from sharecards.errors import CaptureError, CrossOriginImageError
from sharecards.workers.capture import CARD_SELECTOR, CaptureEngine, is_capturable, origin_of
from sharecards.workers.dom import CaptureDocument

ALLOWED = ["https://i.scdn.co"]


def _fake_browser(png: bytes = PNG_SIGNATURE + b"card"):
    locator = MagicMock()
    locator.screenshot = AsyncMock(return_value=png)
    page = MagicMock()
    page.set_content = AsyncMock()
    page.route = AsyncMock()
    page.locator = MagicMock(return_value=locator)
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser, context, page


def _engine(browser, on_cross_origin="raise") -> CaptureEngine:
    return CaptureEngine(
        browser_factory=AsyncMock(return_value=browser),
        allowed_origins=ALLOWED,
        on_cross_origin=on_cross_origin,
        scale=3,
    )


class TestOrigins:
    def test_origin_of(self):
        assert origin_of("https://i.scdn.co/image/abc") == "https://i.scdn.co"
        assert origin_of("/share-images/bg.png") == ""

    def test_capturable(self):
        assert is_capturable("data:image/png;base64,AAAA", ALLOWED)
        assert is_capturable("/share-images/bg.png", ALLOWED)
        assert is_capturable("https://i.scdn.co/image/abc", ALLOWED)
        assert not is_capturable("https://evil.example/x.png", ALLOWED)


class TestCaptureEngine:
    @pytest.mark.asyncio
    async def test_screenshots_card_at_scale(self):
        browser, context, page = _fake_browser()
        engine = _engine(browser)
        document = CaptureDocument(html="<main id='share-card'></main>", image_urls=["https://i.scdn.co/image/a"])

        png = await engine.capture(document)

        assert png.startswith(PNG_SIGNATURE)
        browser.new_context.assert_awaited_once_with(
            viewport={"width": 360, "height": 640},
            device_scale_factor=3,
        )
        page.locator.assert_called_once_with(CARD_SELECTOR)
        page.route.assert_not_awaited()
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cross_origin_raises(self):
        browser, _, _ = _fake_browser()
        engine = _engine(browser, on_cross_origin="raise")
        document = CaptureDocument(html="", image_urls=["https://evil.example/x.png"])

        with pytest.raises(CrossOriginImageError) as exc_info:
            await engine.capture(document)

        assert exc_info.value.urls == ["https://evil.example/x.png"]
        browser.new_context.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cross_origin_blank_installs_route_guard(self):
        browser, _, page = _fake_browser()
        engine = _engine(browser, on_cross_origin="blank")
        document = CaptureDocument(html="", image_urls=["https://evil.example/x.png"])

        await engine.capture(document)

        page.route.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_route_guard(self):
        engine = _engine(MagicMock(), on_cross_origin="blank")
        allowed = MagicMock()
        allowed.request.url = "https://i.scdn.co/image/a"
        allowed.continue_ = AsyncMock()
        denied = MagicMock()
        denied.request.url = "https://evil.example/x.png"
        denied.abort = AsyncMock()

        await engine._guard(allowed)
        await engine._guard(denied)

        allowed.continue_.assert_awaited_once()
        denied.abort.assert_awaited_once_with("blockedbyclient")

    @pytest.mark.asyncio
    async def test_browser_failure_becomes_capture_error(self):
        browser, context, page = _fake_browser()
        page.set_content.side_effect = PlaywrightError("Target closed")
        engine = _engine(browser)

        with pytest.raises(CaptureError, match="Target closed"):
            await engine.capture(CaptureDocument(html=""))

        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_started_once_and_closed(self):
        browser, _, _ = _fake_browser()
        factory = AsyncMock(return_value=browser)
        engine = CaptureEngine(browser_factory=factory, allowed_origins=ALLOWED)

        await engine.capture(CaptureDocument(html=""))
        await engine.capture(CaptureDocument(html=""))
        await engine.close()

        factory.assert_awaited_once()
        browser.close.assert_awaited_once()
