"""Rendering workers: card trees, compilers, layout, raster and capture."""

from .layout_engine import LayoutEngine
from .rasterizer import Rasterizer
from .fonts import FontBook
from .image_fetcher import ImageFetcher
from .capture import CaptureEngine

__all__ = [
    "LayoutEngine",
    "Rasterizer",
    "FontBook",
    "ImageFetcher",
    "CaptureEngine",
]
