"""Headless generation service: GenerationRequest -> 1080x1920 PNG."""

import asyncio
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from PIL import Image, UnidentifiedImageError

from sharecards.config import settings
from sharecards.errors import GenerationError
from sharecards.models.share import ColorTheme, GenerationRequest, Mood, SonicAuraData
from sharecards.services.locale import CardLabels, labels_for
from sharecards.services.themes import resolve_theme
from sharecards.workers.background import background_filename
from sharecards.workers.dom import image_sources
from sharecards.workers.fonts import FontBook
from sharecards.workers.headless import check_constraints, compile_tree
from sharecards.workers.image_fetcher import ImageFetcher
from sharecards.workers.layout import EXPORT_HEIGHT, EXPORT_WIDTH, Stack
from sharecards.workers.layout_engine import LayoutEngine
from sharecards.workers.rasterizer import Rasterizer, encode_png
from sharecards.workers.templates import build_card

BACKGROUND_URL_PREFIX = "/share-images/"


class GenerationService:
    """Builds, lays out and rasterizes cards server-side."""

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        fonts: Optional[FontBook] = None,
        background_dir: Optional[Path] = None,
    ):
        self.fetcher = fetcher or ImageFetcher()
        self.fonts = fonts or FontBook(settings.fonts_dir)
        self.background_dir = background_dir if background_dir is not None else settings.background_images_dir

    # ============ Tree building ============

    def background_file(self, request: GenerationRequest) -> Optional[Path]:
        """Pre-rendered backdrop for this card, if one is installed."""
        mood: Optional[Mood] = None
        if isinstance(request.data, SonicAuraData):
            mood = request.data.mood_color
        path = self.background_dir / background_filename(request.type, mood)
        return path if path.is_file() else None

    def build_tree(self, request: GenerationRequest, use_background_image: bool = True) -> Tuple[Stack, ColorTheme, CardLabels]:
        """Resolve theme and labels server-side and build the card tree."""
        theme = resolve_theme(request.type, request.theme, request.data)
        labels = labels_for(request.type, request.data, request.locale)
        background_src = None
        if use_background_image:
            background = self.background_file(request)
            if background is not None:
                background_src = BACKGROUND_URL_PREFIX + background.name
        root = build_card(request.type, request.data, theme, labels, background_src=background_src)
        return root, theme, labels

    def describe(self, request: GenerationRequest) -> Dict[str, Any]:
        """Headless element tree plus its constraint violations."""
        root, _, _ = self.build_tree(request)
        tree = compile_tree(root)
        return {"tree": tree, "violations": check_constraints(tree)}

    # ============ Rendering ============

    def render(self, root: Stack, images: Dict[str, Image.Image]) -> bytes:
        """Lay out, paint and encode. CPU-bound; call off the event loop."""
        LayoutEngine(self.fonts).layout(root, EXPORT_WIDTH, EXPORT_HEIGHT)
        canvas = Rasterizer(self.fonts, images).render(root, EXPORT_WIDTH, EXPORT_HEIGHT)
        return encode_png(canvas)

    async def _load_background(self, path: Path) -> Optional[Image.Image]:
        try:
            return await asyncio.to_thread(lambda: Image.open(path).convert("RGBA"))
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Unreadable background image {path}: {e}")
            return None

    async def generate(self, request: GenerationRequest) -> bytes:
        """Render `request` to PNG bytes.

        Args:
            request: Card type, payload, optional theme and locale

        Returns:
            PNG bytes (1080x1920)

        Raises:
            GenerationError: If the card could not be laid out or painted
        """
        started = time.monotonic()
        root, _, _ = self.build_tree(request)

        urls = [src for src in image_sources(root) if not src.startswith(BACKGROUND_URL_PREFIX)]
        images = await self.fetcher.fetch_all(urls)

        background = self.background_file(request)
        if background is not None:
            bitmap = await self._load_background(background)
            if bitmap is not None:
                images[BACKGROUND_URL_PREFIX + background.name] = bitmap
            else:
                # Fall back to the drawn backdrop
                root, _, _ = self.build_tree(request, use_background_image=False)

        try:
            png = await asyncio.to_thread(self.render, root, images)
        except Exception as e:
            logger.exception(f"Failed to render {request.type.value} card: {e}")
            raise GenerationError(f"Failed to render {request.type.value} card: {e}") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"Generated {request.type.value} card ({len(png)} bytes, "
            f"{len(images)}/{len(urls)} images) in {elapsed_ms:.0f}ms"
        )
        return png
