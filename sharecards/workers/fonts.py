"""Font lookup and text measurement for the headless rasterizer."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger
from PIL import ImageFont

from sharecards.workers.layout import Text

# Weight buckets -> candidate files (project fonts dir first, then macOS, then Linux)
_WEIGHT_FILES = {
    "regular": ["Inter-Regular.ttf", "Inter-Regular.otf"],
    "medium": ["Inter-Medium.ttf", "Inter-Medium.otf"],
    "bold": ["Inter-Bold.ttf", "Inter-Bold.otf"],
    "black": ["Inter-ExtraBold.ttf", "Inter-Black.ttf", "Inter-ExtraBold.otf"],
}
_SYSTEM_FONTS = {
    "regular": [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    ],
    "bold": [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    ],
}


def weight_bucket(weight: int) -> str:
    if weight >= 800:
        return "black"
    if weight >= 600:
        return "bold"
    if weight >= 500:
        return "medium"
    return "regular"


class FontBook:
    """Loads and caches fonts per (weight bucket, size)."""

    def __init__(self, fonts_dir: Optional[Path] = None):
        self.fonts_dir = fonts_dir
        self._cache: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}
        self._paths: Dict[str, Optional[str]] = {}
        for bucket in _WEIGHT_FILES:
            self._paths[bucket] = self._resolve_path(bucket)
        found = {bucket: path for bucket, path in self._paths.items() if path}
        if found:
            logger.debug(f"Fonts resolved: {found}")
        else:
            logger.warning("No TrueType fonts found, using Pillow's bundled default font")

    def _candidates(self, bucket: str) -> List[str]:
        candidates = []
        if self.fonts_dir:
            candidates += [str(self.fonts_dir / name) for name in _WEIGHT_FILES[bucket]]
        system_bucket = "regular" if bucket in ("regular", "medium") else "bold"
        return candidates + _SYSTEM_FONTS[system_bucket]

    def _resolve_path(self, bucket: str) -> Optional[str]:
        """First candidate file that FreeType can open."""
        for path in self._candidates(bucket):
            try:
                ImageFont.truetype(path, 12)
                return path
            except OSError:
                continue
        return None

    def font(self, weight: int, size: int) -> ImageFont.FreeTypeFont:
        bucket = weight_bucket(weight)
        key = (bucket, size)
        if key not in self._cache:
            path = self._paths.get(bucket)
            if path:
                self._cache[key] = ImageFont.truetype(path, size)
            else:
                self._cache[key] = ImageFont.load_default(size=size)
        return self._cache[key]

    def font_for(self, node: Text) -> ImageFont.FreeTypeFont:
        return self.font(node.weight, node.size)

    # TextMeasurer
    def line_width(self, text: str, node: Text) -> float:
        font = self.font_for(node)
        spacing = node.letter_spacing * node.size * max(len(text) - 1, 0)
        return font.getlength(text) + spacing
