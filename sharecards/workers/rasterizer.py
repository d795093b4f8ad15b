"""Pillow painter for laid-out card trees.

Paints nodes in document order onto a 1080x1920 RGBA canvas. Gradients are
computed with numpy in premultiplied space, which is how browsers blend
through `transparent` stops.
"""

import io
import math
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw

from sharecards.workers.fonts import FontBook
from sharecards.workers.layout import (
    EXPORT_HEIGHT,
    EXPORT_WIDTH,
    NOISE_SEED,
    Box,
    ConicGradient,
    Fill,
    Glow,
    LinearGradient,
    Node,
    Noise,
    RadialGradient,
    Rect,
    Solid,
    Text,
    glow_discs,
)
from sharecards.workers.layout import Image as ImageNode
from sharecards.workers.layout_engine import line_height_px

# ============ Fills ============

def _interpolate(t: np.ndarray, stops) -> np.ndarray:
    """Map t (0..1) through color stops, premultiplied."""
    t = np.clip(t, 0.0, 1.0)
    offsets = [offset for offset, _ in stops]
    alphas = np.array([color[3] / 255.0 for _, color in stops])
    out = np.empty(t.shape + (4,), dtype=np.float64)
    alpha = np.interp(t, offsets, alphas)
    for channel in range(3):
        premultiplied = [color[channel] * (color[3] / 255.0) for _, color in stops]
        value = np.interp(t, offsets, premultiplied)
        out[..., channel] = np.divide(value, alpha, out=np.zeros_like(value), where=alpha > 0)
    out[..., 3] = alpha * 255.0
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    return xs + 0.5, ys + 0.5


def paint_fill(fill: Fill, width: int, height: int) -> Image.Image:
    """Render a fill into a width x height RGBA image."""
    if isinstance(fill, Solid):
        return Image.new("RGBA", (width, height), fill.color)

    xs, ys = _grid(width, height)
    if isinstance(fill, LinearGradient):
        angle = math.radians(fill.angle)
        dx, dy = math.sin(angle), -math.cos(angle)
        length = abs(width * dx) + abs(height * dy) or 1.0
        t = ((xs - width / 2) * dx + (ys - height / 2) * dy) / length + 0.5
    elif isinstance(fill, RadialGradient):
        cx, cy = fill.center[0] * width, fill.center[1] * height
        radius = max(
            math.hypot(cx - corner_x, cy - corner_y)
            for corner_x in (0, width)
            for corner_y in (0, height)
        ) or 1.0
        t = np.hypot(xs - cx, ys - cy) / radius
    elif isinstance(fill, ConicGradient):
        cx, cy = fill.center[0] * width, fill.center[1] * height
        degrees = np.degrees(np.arctan2(xs - cx, -(ys - cy)))
        t = np.mod(degrees - fill.start_angle, 360.0) / 360.0
    else:
        raise TypeError(f"Unsupported fill: {fill!r}")
    return Image.fromarray(_interpolate(t, fill.stops), "RGBA")


def _rounded_mask(width: int, height: int, radius: int) -> Image.Image:
    mask = Image.new("L", (width, height), 0)
    radius = min(radius, width // 2, height // 2)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return mask


def _apply_mask(patch: Image.Image, mask: Image.Image) -> Image.Image:
    alpha = ImageChops.multiply(patch.getchannel("A"), mask)
    patch.putalpha(alpha)
    return patch


def noise_texture(width: int, height: int, strength: float) -> Image.Image:
    """Seeded grain, identical on every call."""
    rng = np.random.default_rng(NOISE_SEED)
    grain = rng.integers(0, 256, size=(height, width), dtype=np.uint8)
    alpha = np.full((height, width), round(255 * strength), dtype=np.uint8)
    return Image.fromarray(np.dstack([grain, grain, grain, alpha]), "RGBA")


def cover(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale and center-crop to fill width x height (object-fit: cover)."""
    aspect = image.width / image.height
    if aspect >= width / height:
        new_h = height
        new_w = max(width, round(height * aspect))
    else:
        new_w = width
        new_h = max(height, round(width / aspect))
    resized = image.convert("RGBA").resize((new_w, new_h), Image.LANCZOS)
    x_off = (new_w - width) // 2
    y_off = (new_h - height) // 2
    return resized.crop((x_off, y_off, x_off + width, y_off + height))


# ============ Painter ============

class Rasterizer:
    """Paints a laid-out tree. Image nodes are looked up in `images` by src."""

    def __init__(self, fonts: FontBook, images: Optional[Dict[str, Image.Image]] = None):
        self.fonts = fonts
        self.images = images or {}

    def render(self, root: Node, width: int = EXPORT_WIDTH, height: int = EXPORT_HEIGHT) -> Image.Image:
        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._paint(root, canvas)
        return canvas

    def _composite(self, canvas: Image.Image, patch: Image.Image, x: int, y: int) -> None:
        """alpha_composite clipped to the canvas (Pillow rejects negative offsets)."""
        left, top = max(x, 0), max(y, 0)
        right = min(x + patch.width, canvas.width)
        bottom = min(y + patch.height, canvas.height)
        if right <= left or bottom <= top:
            return
        cropped = patch.crop((left - x, top - y, right - x, bottom - y))
        canvas.alpha_composite(cropped, dest=(left, top))

    def _paint(self, node: Node, canvas: Image.Image) -> None:
        frame = node.frame
        if frame is None or frame.width <= 0 or frame.height <= 0:
            return

        if isinstance(node, Glow):
            self._paint_glow(node, canvas)
        elif isinstance(node, Noise):
            self._composite(canvas, noise_texture(frame.width, frame.height, node.strength), frame.x, frame.y)
        elif isinstance(node, ImageNode):
            self._paint_image(node, canvas)
        elif node.fill is not None:
            self._paint_box(node.fill, node.radius, canvas, frame.x, frame.y, frame.width, frame.height)

        if node.border is not None:
            self._paint_border(node, canvas)
        if isinstance(node, Text):
            self._paint_text(node, canvas)
        if isinstance(node, Box):
            for child in node.children:
                self._paint(child, canvas)

    def _paint_box(self, fill: Fill, radius: int, canvas: Image.Image, x: int, y: int, w: int, h: int) -> None:
        patch = paint_fill(fill, w, h)
        if radius:
            patch = _apply_mask(patch, _rounded_mask(w, h, radius))
        self._composite(canvas, patch, x, y)

    def _paint_border(self, node: Node, canvas: Image.Image) -> None:
        frame = node.frame
        overlay = Image.new("RGBA", (frame.width, frame.height), (0, 0, 0, 0))
        radius = min(node.radius, frame.width // 2, frame.height // 2)
        ImageDraw.Draw(overlay).rounded_rectangle(
            (0, 0, frame.width - 1, frame.height - 1),
            radius=radius,
            outline=node.border.color,
            width=node.border.width,
        )
        self._composite(canvas, overlay, frame.x, frame.y)

    def _paint_glow(self, node: Glow, canvas: Image.Image) -> None:
        """Stacked radial discs of decreasing size and increasing opacity."""
        frame = node.frame
        for size, dx, dy, disc in glow_discs(frame.width, frame.height, node.color):
            patch = _apply_mask(paint_fill(disc, size, size), _rounded_mask(size, size, size // 2))
            self._composite(canvas, patch, frame.x + dx, frame.y + dy)

    def _paint_image(self, node: ImageNode, canvas: Image.Image) -> None:
        frame = node.frame
        bitmap = self.images.get(node.src) if node.src else None
        if bitmap is not None:
            patch = cover(bitmap, frame.width, frame.height)
            if node.radius:
                patch = _apply_mask(patch, _rounded_mask(frame.width, frame.height, node.radius))
            self._composite(canvas, patch, frame.x, frame.y)
            return

        # Themed placeholder: fill plus a centered glyph
        fill = node.placeholder_fill or node.fill or Solid((229, 231, 235, 255))
        self._paint_box(fill, node.radius, canvas, frame.x, frame.y, frame.width, frame.height)
        if node.placeholder:
            glyph = Text(
                content=node.placeholder,
                size=max(12, round(min(frame.width, frame.height) * 0.3)),
                color=node.placeholder_color,
                text_align="center",
            )
            glyph.lines = [node.placeholder]
            glyph_h = line_height_px(glyph)
            glyph.frame = Rect(frame.x, frame.y + (frame.height - glyph_h) // 2, frame.width, glyph_h)
            self._paint_text(glyph, canvas)

    def _paint_text(self, node: Text, canvas: Image.Image) -> None:
        """Draw wrapped lines through an L-mode coverage mask.

        Gradient text fill is unsupported here, so emphasised text is drawn
        opaque in `node.color`.
        """
        font = self.fonts.font_for(node)
        frame = node.frame
        line_h = line_height_px(node)
        ascent, descent = font.getmetrics()
        baseline_pad = (line_h - (ascent + descent)) / 2
        spacing = node.letter_spacing * node.size
        bleed = node.size  # room for glyph overhang

        mask = Image.new("L", (frame.width + 2 * bleed, max(frame.height, line_h * len(node.lines)) + 2 * bleed), 0)
        draw = ImageDraw.Draw(mask)
        for index, line in enumerate(node.lines):
            line_w = self.fonts.line_width(line, node)
            if node.text_align == "center":
                x = (frame.width - line_w) / 2
            elif node.text_align == "right":
                x = frame.width - line_w
            else:
                x = 0
            x += bleed
            y = bleed + index * line_h + baseline_pad
            if spacing:
                for char in line:
                    draw.text((x, y), char, font=font, fill=255)
                    x += font.getlength(char) + spacing
            else:
                draw.text((x, y), line, font=font, fill=255)

        r, g, b, a = node.color
        patch = Image.new("RGBA", mask.size, (r, g, b, 0))
        patch.putalpha(mask.point(lambda value: value * a // 255))
        self._composite(canvas, patch, frame.x - bleed, frame.y - bleed)


def encode_png(image: Image.Image) -> bytes:
    """PNG bytes without metadata, so equal pixels give equal bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=False)
    return buffer.getvalue()
