"""Headless compiler: card tree -> satori-style element dictionaries.

The output is the contract the rasterizer renders against: every element is
`display: flex`, every length is an integer pixel at 1080x1920, emphasised
text is opaque, glows are stacked radial discs and images carry a
cross-origin marker. `check_constraints` reports anything that breaks it.
"""

from typing import Any, Dict, List, Optional

from sharecards.workers.layout import (
    NOISE_SEED,
    Box,
    Edges,
    Fill,
    Glow,
    Image,
    Node,
    Noise,
    Solid,
    Text,
    css_color,
    glow_discs,
)
from sharecards.workers.dom import css_fill

Element = Dict[str, Any]

_ALIGN = {"start": "flex-start", "center": "center", "end": "flex-end", "stretch": "stretch"}
_JUSTIFY = {"start": "flex-start", "center": "center", "end": "flex-end", "between": "space-between"}

# Style keys that must hold integer pixels
LENGTH_KEYS = frozenset({
    "width", "height", "top", "left", "right", "bottom", "gap",
    "marginTop", "marginRight", "marginBottom", "marginLeft",
    "paddingTop", "paddingRight", "paddingBottom", "paddingLeft",
    "fontSize", "borderRadius", "borderWidth", "letterSpacing",
})
FORBIDDEN_KEYS = frozenset({"aspectRatio", "filter", "backgroundClip", "WebkitBackgroundClip", "WebkitTextFillColor"})


def _edge_style(prefix: str, value: Edges) -> Dict[str, int]:
    if value == Edges():
        return {}
    return {
        f"{prefix}Top": value.top,
        f"{prefix}Right": value.right,
        f"{prefix}Bottom": value.bottom,
        f"{prefix}Left": value.left,
    }


def _background(fill: Fill) -> Dict[str, str]:
    if isinstance(fill, Solid):
        return {"backgroundColor": css_color(fill.color)}
    return {"backgroundImage": css_fill(fill)}


def _element(kind: str, style: Dict[str, Any], children: Any = None, **props) -> Element:
    return {"type": kind, "props": {"style": style, "children": children if children is not None else [], **props}}


def _base_style(node: Node) -> Dict[str, Any]:
    style: Dict[str, Any] = {"display": "flex", "position": "absolute" if node.is_absolute else "relative"}
    if node.is_absolute:
        for side in ("top", "left", "right", "bottom"):
            value = getattr(node.position, side)
            if value is not None:
                style[side] = int(value)
    if node.width is not None:
        style["width"] = int(node.width)
    if node.height is not None:
        style["height"] = int(node.height)
    if node.width is not None or node.height is not None:
        style["flexShrink"] = 0
    if node.grow:
        style["flexGrow"] = node.grow
    style.update(_edge_style("margin", node.margin))
    style.update(_edge_style("padding", node.padding))
    if node.fill is not None and not isinstance(node, (Text, Image)):
        style.update(_background(node.fill))
    if node.radius:
        style["borderRadius"] = int(node.radius)
        style["overflow"] = "hidden"
    if node.border is not None:
        style.update({
            "borderWidth": int(node.border.width),
            "borderStyle": "solid",
            "borderColor": css_color(node.border.color),
        })
    return style


def compile_node(node: Node) -> Element:
    """One element (with its subtree)."""
    style = _base_style(node)

    if isinstance(node, Text):
        style.update({
            "fontSize": int(node.size),
            "fontWeight": node.weight,
            "lineHeight": node.line_height,
            # Gradient text fill is unsupported: draw it opaque in its leading color
            "color": css_color(node.color),
        })
        if node.letter_spacing:
            style["letterSpacing"] = round(node.letter_spacing * node.size)
        if node.text_align != "left":
            style["textAlign"] = node.text_align
            style["justifyContent"] = "center" if node.text_align == "center" else "flex-end"
        if node.max_lines:
            style["lineClamp"] = node.max_lines
        return _element("div", style, node.display_text)

    if isinstance(node, Image):
        if node.src:
            style["objectFit"] = "cover"
            return _element(
                "img",
                style,
                src=node.src,
                alt=node.alt,
                width=int(node.width or 0),
                height=int(node.height or 0),
                crossOrigin="anonymous",
            )
        fill = node.placeholder_fill or node.fill
        if fill is not None:
            style.update(_background(fill))
        style.update({"alignItems": "center", "justifyContent": "center"})
        glyph_size = max(12, round(min(node.width or 0, node.height or 0) * 0.3))
        glyph = _element("div", {"display": "flex", "fontSize": glyph_size, "color": css_color(node.placeholder_color)}, node.placeholder)
        return _element("div", style, [glyph] if node.placeholder else [])

    if isinstance(node, Glow):
        width, height = node.width or 0, node.height or 0
        discs = [
            _element("div", {
                "display": "flex",
                "position": "absolute",
                "top": dy,
                "left": dx,
                "width": size,
                "height": size,
                "borderRadius": size // 2,
                "backgroundImage": css_fill(fill),
            })
            for size, dx, dy, fill in glow_discs(width, height, node.color)
        ]
        return _element("div", style, discs)

    if isinstance(node, Noise):
        style["opacity"] = node.strength
        return _element("div", style, noiseSeed=NOISE_SEED)

    if isinstance(node, Box):
        style["flexDirection"] = node.direction.value
        if node.gap:
            style["gap"] = int(node.gap)
        style["alignItems"] = _ALIGN[node.align.value]
        style["justifyContent"] = _JUSTIFY[node.justify.value]
    return _element("div", style, [compile_node(child) for child in node.children])


def compile_tree(root: Node) -> Element:
    """Element dictionary for a whole card."""
    return compile_node(root)


# ============ Constraint checking ============

def _check_element(element: Element, path: str, violations: List[str]) -> None:
    props = element.get("props", {})
    style = props.get("style", {})

    if style.get("display") != "flex":
        violations.append(f"{path}: display must be flex, got {style.get('display')!r}")
    for key, value in style.items():
        if key in FORBIDDEN_KEYS:
            violations.append(f"{path}: unsupported style {key}")
        elif key in LENGTH_KEYS and (isinstance(value, bool) or not isinstance(value, int)):
            violations.append(f"{path}: {key} must be integer pixels, got {value!r}")

    if element.get("type") == "img":
        if not props.get("src"):
            violations.append(f"{path}: img without src")
        if props.get("crossOrigin") != "anonymous":
            violations.append(f"{path}: img without crossOrigin marker")
        for key in ("width", "height"):
            if not isinstance(props.get(key), int):
                violations.append(f"{path}: img {key} must be integer pixels")

    children = props.get("children")
    if isinstance(children, list):
        for index, child in enumerate(children):
            _check_element(child, f"{path}/{child.get('type', '?')}[{index}]", violations)


def check_constraints(tree: Element, root_path: Optional[str] = None) -> List[str]:
    """Every way `tree` breaks the headless contract; empty when it is valid."""
    violations: List[str] = []
    _check_element(tree, root_path or tree.get("type", "root"), violations)
    return violations
