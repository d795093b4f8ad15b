"""DOM compiler: card tree -> HTML at preview scale (360x640).

Every pixel value is divided by PREVIEW_SCALE here and nowhere else. The
browser-only effects live in this module: gradient text fill, blurred
glows, an SVG grain and (for the live preview) blob animation.
"""

import html
from dataclasses import dataclass, field
from typing import Dict, List

from sharecards.workers.background import animated_background_css
from sharecards.workers.layout import (
    NOISE_SEED,
    PREVIEW_HEIGHT,
    PREVIEW_SCALE,
    PREVIEW_WIDTH,
    Align,
    Box,
    ConicGradient,
    Edges,
    Fill,
    Glow,
    Image,
    Justify,
    LinearGradient,
    Node,
    Noise,
    RadialGradient,
    Solid,
    Text,
    css_color,
)

FONT_STACK = '-apple-system, BlinkMacSystemFont, "Segoe UI", Inter, Roboto, sans-serif'

_ALIGN = {
    Align.START: "flex-start",
    Align.CENTER: "center",
    Align.END: "flex-end",
    Align.STRETCH: "stretch",
}
_JUSTIFY = {
    Justify.START: "flex-start",
    Justify.CENTER: "center",
    Justify.END: "flex-end",
    Justify.BETWEEN: "space-between",
}

BASE_CSS = f"""
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
html, body {{ width: {PREVIEW_WIDTH}px; height: {PREVIEW_HEIGHT}px; overflow: hidden; background: #FAFBFC; }}
body {{ font-family: {FONT_STACK}; color: #0a0a0a; -webkit-font-smoothing: antialiased; }}
img {{ display: block; object-fit: cover; }}
""".strip()


def px(value: float, scale: int = PREVIEW_SCALE) -> str:
    """Export pixels to a CSS length at preview scale."""
    scaled = round(value / scale, 3)
    return f"{scaled:g}px"


def _edges(value: Edges, scale: int) -> str:
    return " ".join(px(v, scale) for v in (value.top, value.right, value.bottom, value.left))


def _stops(stops) -> str:
    return ", ".join(f"{css_color(color)} {round(offset * 100, 2):g}%" for offset, color in stops)


def css_fill(fill: Fill) -> str:
    """CSS `background` value for a fill."""
    if isinstance(fill, Solid):
        return css_color(fill.color)
    if isinstance(fill, LinearGradient):
        return f"linear-gradient({fill.angle:g}deg, {_stops(fill.stops)})"
    if isinstance(fill, RadialGradient):
        cx, cy = (round(v * 100, 2) for v in fill.center)
        return f"radial-gradient(circle farthest-corner at {cx:g}% {cy:g}%, {_stops(fill.stops)})"
    if isinstance(fill, ConicGradient):
        cx, cy = (round(v * 100, 2) for v in fill.center)
        return f"conic-gradient(from {fill.start_angle:g}deg at {cx:g}% {cy:g}%, {_stops(fill.stops)})"
    raise TypeError(f"Unsupported fill: {fill!r}")


def _noise_svg() -> str:
    """Seeded fractal-noise tile as a CSS url()."""
    svg = (
        "<svg xmlns='http://www.w3.org/2000/svg' width='200' height='200'>"
        "<filter id='n'><feTurbulence type='fractalNoise' baseFrequency='0.9' numOctaves='3' "
        f"seed='{NOISE_SEED}' stitchTiles='stitch'/></filter>"
        "<rect width='100%' height='100%' filter='url(#n)'/></svg>"
    )
    return "url(\"data:image/svg+xml;utf8," + svg.replace("#", "%23").replace('"', "'") + "\")"


def _style(props: Dict[str, str]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in props.items())


class DomCompiler:
    """Walks a card tree and emits markup."""

    def __init__(self, scale: int = PREVIEW_SCALE):
        self.scale = scale

    def _px(self, value: float) -> str:
        return px(value, self.scale)

    def _box_style(self, node: Node) -> Dict[str, str]:
        # Every element is positioned so overlays paint in document order
        style: Dict[str, str] = {"position": "absolute" if node.is_absolute else "relative"}
        if node.is_absolute:
            for side in ("top", "left", "right", "bottom"):
                value = getattr(node.position, side)
                if value is not None:
                    style[side] = self._px(value)
        if node.width is not None:
            style["width"] = self._px(node.width)
        if node.height is not None:
            style["height"] = self._px(node.height)
        if node.width is not None or node.height is not None:
            style["flex-shrink"] = "0"
        if node.grow:
            style["flex-grow"] = f"{node.grow:g}"
            style["min-width"] = "0"
        if node.margin != Edges():
            style["margin"] = _edges(node.margin, self.scale)
        if node.padding != Edges():
            style["padding"] = _edges(node.padding, self.scale)
        if node.fill is not None and not isinstance(node, (Text, Image)):
            style["background"] = css_fill(node.fill)
        if node.radius:
            style["border-radius"] = self._px(node.radius) if node.radius < 999 else "9999px"
            style["overflow"] = "hidden"
        if node.border is not None:
            style["border"] = f"{self._px(node.border.width)} solid {css_color(node.border.color)}"
        return style

    def compile(self, node: Node) -> str:
        if isinstance(node, Text):
            return self._text(node)
        if isinstance(node, Image):
            return self._image(node)
        if isinstance(node, Glow):
            return self._glow(node)
        if isinstance(node, Noise):
            return self._noise(node)
        return self._box(node)

    def _attrs(self, node: Node, style: Dict[str, str]) -> str:
        attrs = []
        if node.role:
            attrs.append(f'data-role="{html.escape(node.role)}"')
            if node.role.startswith("blob-"):
                attrs.append(f'class="sc-{html.escape(node.role)}"')
        attrs.append(f'style="{html.escape(_style(style))}"')
        return " ".join(attrs)

    def _box(self, node: Node) -> str:
        style = self._box_style(node)
        style["display"] = "flex"
        if isinstance(node, Box):
            style["flex-direction"] = node.direction.value
            if node.gap:
                style["gap"] = self._px(node.gap)
            style["align-items"] = _ALIGN[node.align]
            style["justify-content"] = _JUSTIFY[node.justify]
        children = "".join(self.compile(child) for child in node.children)
        return f"<div {self._attrs(node, style)}>{children}</div>"

    def _text(self, node: Text) -> str:
        style = self._box_style(node)
        style.update({
            "font-size": self._px(node.size),
            "font-weight": str(node.weight),
            "line-height": f"{node.line_height:g}",
            "color": css_color(node.color),
            "text-align": node.text_align,
        })
        if node.letter_spacing:
            style["letter-spacing"] = f"{node.letter_spacing:g}em"
        if node.uppercase:
            style["text-transform"] = "uppercase"
        if node.max_lines:
            style.update({
                "display": "-webkit-box",
                "-webkit-line-clamp": str(node.max_lines),
                "-webkit-box-orient": "vertical",
                "overflow": "hidden",
                "overflow-wrap": "anywhere",
            })
        if node.emphasis is not None:
            style.update({
                "background": css_fill(node.emphasis),
                "-webkit-background-clip": "text",
                "background-clip": "text",
                "-webkit-text-fill-color": "transparent",
            })
        return f"<p {self._attrs(node, style)}>{html.escape(node.content)}</p>"

    def _image(self, node: Image) -> str:
        style = self._box_style(node)
        if node.src:
            if node.fill is not None:
                style["background"] = css_fill(node.fill)
            return (
                f'<img src="{html.escape(node.src)}" alt="{html.escape(node.alt)}" crossorigin="anonymous" '
                f'width="{round((node.width or 0) / self.scale)}" height="{round((node.height or 0) / self.scale)}" '
                f"{self._attrs(node, style)}>"
            )
        # Placeholder: themed tile with a centered glyph
        fill = node.placeholder_fill or node.fill
        if fill is not None:
            style["background"] = css_fill(fill)
        style.update({"display": "flex", "align-items": "center", "justify-content": "center"})
        glyph_size = self._px(max(12, round(min(node.width or 0, node.height or 0) * 0.3)))
        glyph = (
            f'<span style="font-size: {glyph_size}; color: {css_color(node.placeholder_color)}">'
            f"{html.escape(node.placeholder)}</span>"
        ) if node.placeholder else ""
        return f"<div {self._attrs(node, style)}>{glyph}</div>"

    def _glow(self, node: Glow) -> str:
        style = self._box_style(node)
        style.update({
            "border-radius": "50%",
            "background": css_color(node.color),
            "filter": f"blur({self._px(node.blur)})",
        })
        return f"<div {self._attrs(node, style)}></div>"

    def _noise(self, node: Noise) -> str:
        style = self._box_style(node)
        style.update({
            "background-image": _noise_svg(),
            "opacity": f"{node.strength:g}",
            "pointer-events": "none",
        })
        return f"<div {self._attrs(node, style)}></div>"


def render_fragment(root: Node, scale: int = PREVIEW_SCALE) -> str:
    """Markup for a tree without the surrounding document."""
    return DomCompiler(scale).compile(root)


def render_markup(root: Node, animated: bool = False, lang: str = "en", scale: int = PREVIEW_SCALE) -> str:
    """Standalone HTML document for a card tree.

    `animated=True` adds the blob keyframes for the live preview; the static
    document is what the capture engine renders.
    """
    css = BASE_CSS
    if animated:
        css += "\n" + animated_background_css(scale)
    return (
        "<!DOCTYPE html>"
        f'<html lang="{html.escape(lang)}"><head><meta charset="utf-8">'
        f'<meta name="viewport" content="width={PREVIEW_WIDTH}, initial-scale=1">'
        f"<style>{css}</style></head>"
        f'<body><main id="share-card">{render_fragment(root, scale)}</main></body></html>'
    )


@dataclass
class CaptureDocument:
    """Static markup plus the image URLs it references."""
    html: str
    image_urls: List[str] = field(default_factory=list)
    width: int = PREVIEW_WIDTH
    height: int = PREVIEW_HEIGHT


def image_sources(root: Node) -> List[str]:
    """Distinct image URLs in document order."""
    urls: List[str] = []
    for node in root.walk():
        if isinstance(node, Image) and node.src and node.src not in urls:
            urls.append(node.src)
    return urls


def capture_document(root: Node, lang: str = "en") -> CaptureDocument:
    return CaptureDocument(html=render_markup(root, animated=False, lang=lang), image_urls=image_sources(root))
