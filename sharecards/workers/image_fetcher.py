"""Image fetching for the headless path.

Card payloads carry public artwork URLs. They are fetched concurrently,
cached on disk by URL hash, and decoded to RGBA. A failed fetch yields
None and the card draws a themed placeholder instead.
"""

import asyncio
import base64
import binascii
import hashlib
import io
from pathlib import Path
from typing import Dict, Iterable, Optional
from urllib.parse import unquote_to_bytes

import httpx
from loguru import logger
from PIL import Image, UnidentifiedImageError

from sharecards.config import settings

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Accept": "image/*",
}
_MAX_RETRY_AFTER = 5  # seconds


def decode_data_url(url: str) -> Optional[bytes]:
    """Payload of a `data:` URL, or None if it is malformed."""
    try:
        header, payload = url.split(",", 1)
    except ValueError:
        return None
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError):
            return None
    return unquote_to_bytes(payload)


def _open(raw: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image.convert("RGBA")


class ImageFetcher:
    """Async downloader with a per-URL disk cache."""

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.cache_dir = cache_dir or settings.image_cache_dir
        self.timeout = timeout if timeout is not None else settings.image_fetch_timeout
        self._client = client

    def cache_path(self, url: str) -> Path:
        url_hash = hashlib.md5(url.encode()).hexdigest()
        return self.cache_dir / f"{url_hash}.png"

    async def fetch(self, url: str) -> Optional[Image.Image]:
        """Fetch one image.

        Args:
            url: http(s) or data: URL

        Returns:
            RGBA image, or None on any failure
        """
        if not url:
            return None

        if url.startswith("data:"):
            raw = decode_data_url(url)
            if raw is None:
                logger.warning("Malformed data URL in card payload")
                return None
            try:
                return _open(raw)
            except (UnidentifiedImageError, OSError) as e:
                logger.warning(f"Undecodable data URL image: {e}")
                return None

        if not url.startswith(("http://", "https://")):
            logger.warning(f"Unsupported image URL scheme: {url[:40]}")
            return None

        cache_path = self.cache_path(url)
        if cache_path.exists():
            try:
                return await asyncio.to_thread(lambda: _open(cache_path.read_bytes()))
            except (UnidentifiedImageError, OSError) as e:
                logger.debug(f"Discarding unreadable cache entry {cache_path.name}: {e}")

        try:
            raw = await self._download(url)
            image = _open(raw)
        except (httpx.HTTPError, UnidentifiedImageError, OSError) as e:
            logger.warning(f"Failed to download image {url}: {e}")
            return None

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(image.save, cache_path, "PNG")
            logger.debug(f"Cached image: {url} -> {cache_path}")
        except OSError as e:
            logger.warning(f"Could not cache image {url}: {e}")
        return image

    async def _download(self, url: str) -> bytes:
        if self._client is not None:
            return await self._get(self._client, url)
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, headers=_HEADERS) as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        response = await client.get(url)

        # Handle rate limiting with one retry
        if response.status_code == 429:
            try:
                retry_after = min(int(response.headers.get("Retry-After", 1)), _MAX_RETRY_AFTER)
            except ValueError:
                retry_after = 1
            logger.info(f"Rate limited, waiting {retry_after}s: {url}")
            await asyncio.sleep(retry_after)
            response = await client.get(url)

        response.raise_for_status()
        return response.content

    async def fetch_all(self, urls: Iterable[str]) -> Dict[str, Image.Image]:
        """Fetch distinct URLs concurrently; failures are left out of the result."""
        unique = list(dict.fromkeys(url for url in urls if url))
        results = await asyncio.gather(*(self.fetch(url) for url in unique))
        images = {url: image for url, image in zip(unique, results) if image is not None}
        if unique:
            logger.info(f"Fetched {len(images)}/{len(unique)} card images")
        return images
