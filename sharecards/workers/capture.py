"""Client capture engine: static DOM markup -> PNG through headless Chromium.

The desktop fallback path. The page is laid out at 360x640 and screenshotted
with a device scale factor of 3, so the bitmap is 1080x1920. Images from
origins outside `settings.capture_allowed_origins` would taint the canvas in
a browser; here they either abort the capture or are blocked at the network
layer and render blank, depending on `settings.capture_on_cross_origin`.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional
from urllib.parse import urlparse

from loguru import logger
from playwright.async_api import Browser, Route, async_playwright
from playwright.async_api import Error as PlaywrightError

from sharecards.config import settings
from sharecards.errors import CaptureError, CrossOriginImageError
from sharecards.workers.dom import CaptureDocument

BrowserFactory = Callable[[], Awaitable[Browser]]

CARD_SELECTOR = "#share-card"
_LAUNCH_ARGS = ["--disable-dev-shm-usage", "--disable-gpu", "--font-render-hinting=none"]


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}" if parsed.scheme and parsed.netloc else ""


def is_capturable(url: str, allowed_origins: Iterable[str]) -> bool:
    """data: URLs and same-document paths always are; others need an allowed origin."""
    if url.startswith("data:"):
        return True
    origin = origin_of(url)
    if not origin:
        return True
    return origin in set(allowed_origins)


class CaptureEngine:
    """Renders capture documents with a shared, lazily started browser."""

    def __init__(
        self,
        browser_factory: Optional[BrowserFactory] = None,
        allowed_origins: Optional[List[str]] = None,
        on_cross_origin: Optional[str] = None,
        scale: Optional[int] = None,
    ):
        self._browser_factory = browser_factory
        self.allowed_origins = list(allowed_origins if allowed_origins is not None else settings.capture_allowed_origins)
        self.on_cross_origin = on_cross_origin or settings.capture_on_cross_origin
        self.scale = scale or settings.capture_scale
        self._browser: Optional[Browser] = None
        self._playwright = None
        self._lock = asyncio.Lock()

    async def _launch(self) -> Browser:
        self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(headless=True, args=_LAUNCH_ARGS)

    async def _ensure_browser(self) -> Browser:
        if self._browser is not None:
            return self._browser
        async with self._lock:
            if self._browser is None:
                factory = self._browser_factory or self._launch
                self._browser = await factory()
                logger.info("Capture browser started")
            return self._browser

    def blocked_urls(self, urls: Iterable[str]) -> List[str]:
        return [url for url in urls if not is_capturable(url, self.allowed_origins)]

    async def capture(self, document: CaptureDocument, scale: Optional[int] = None) -> bytes:
        """Screenshot the card element.

        Args:
            document: Static markup and the image URLs it embeds
            scale: Device scale factor (defaults to the configured one)

        Returns:
            PNG bytes at (width x scale, height x scale)

        Raises:
            CrossOriginImageError: Disallowed images with `on_cross_origin="raise"`
            CaptureError: The browser failed to render or screenshot
        """
        scale = scale or self.scale
        blocked = self.blocked_urls(document.image_urls)
        if blocked:
            if self.on_cross_origin == "raise":
                raise CrossOriginImageError(blocked)
            logger.warning(f"Blanking {len(blocked)} cross-origin image(s) in capture")

        try:
            browser = await self._ensure_browser()
            context = await browser.new_context(
                viewport={"width": document.width, "height": document.height},
                device_scale_factor=scale,
            )
            try:
                page = await context.new_page()
                if blocked:
                    await page.route("**/*", self._guard)
                await page.set_content(document.html, wait_until="networkidle")
                png = await page.locator(CARD_SELECTOR).screenshot(type="png")
            finally:
                await context.close()
        except PlaywrightError as e:
            logger.error(f"Capture failed: {e}")
            raise CaptureError(f"Capture failed: {e}") from e

        logger.info(f"Captured card at {scale}x ({len(png)} bytes)")
        return png

    async def _guard(self, route: Route) -> None:
        if is_capturable(route.request.url, self.allowed_origins):
            await route.continue_()
        else:
            await route.abort("blockedbyclient")

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
