"""Layout-intent model shared by every card renderer.

A card is authored once as a tree of typed nodes sized in integer pixels at
the export resolution (1080x1920). The DOM compiler divides by
PREVIEW_SCALE at its boundary; the headless compiler and the rasterizer use
the values as they are.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

EXPORT_WIDTH = 1080
EXPORT_HEIGHT = 1920
PREVIEW_SCALE = 3
PREVIEW_WIDTH = EXPORT_WIDTH // PREVIEW_SCALE  # 360
PREVIEW_HEIGHT = EXPORT_HEIGHT // PREVIEW_SCALE  # 640

# Grain is seeded so every render of a card is identical
NOISE_SEED = 1080

RGBA = Tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)

_NAMED_COLORS = {
    "transparent": TRANSPARENT,
    "white": (255, 255, 255, 255),
    "black": (0, 0, 0, 255),
}
_RGBA_RE = re.compile(r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)")


def parse_color(value: Union[str, RGBA]) -> RGBA:
    """Parse `#rgb`, `#rrggbb`, `#rrggbbaa`, `rgb()`/`rgba()` or a named color."""
    if isinstance(value, tuple):
        return value
    text = value.strip().lower()
    if text in _NAMED_COLORS:
        return _NAMED_COLORS[text]
    match = _RGBA_RE.fullmatch(text)
    if match:
        r, g, b, a = match.groups()
        alpha = round(float(a) * 255) if a is not None else 255
        return (int(float(r)), int(float(g)), int(float(b)), alpha)
    hex_part = text.lstrip("#")
    if len(hex_part) == 3:
        hex_part = "".join(c * 2 for c in hex_part)
    if len(hex_part) not in (6, 8):
        raise ValueError(f"Unsupported color: {value!r}")
    r, g, b = (int(hex_part[i:i + 2], 16) for i in (0, 2, 4))
    a = int(hex_part[6:8], 16) if len(hex_part) == 8 else 255
    return (r, g, b, a)


def with_alpha(color: Union[str, RGBA], alpha: float) -> RGBA:
    """Same color with its alpha replaced (0.0 - 1.0)."""
    r, g, b, _ = parse_color(color)
    return (r, g, b, max(0, min(255, round(alpha * 255))))


def css_color(color: RGBA) -> str:
    """CSS form: `#rrggbb` when opaque, `rgba(...)` otherwise."""
    r, g, b, a = color
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"rgba({r}, {g}, {b}, {round(a / 255, 3)})"


# ============ Fills ============

Stop = Tuple[float, RGBA]  # offset 0.0 - 1.0, color


@dataclass(frozen=True)
class Solid:
    color: RGBA


@dataclass(frozen=True)
class LinearGradient:
    """CSS linear-gradient; 0deg points up, 90deg points right."""
    angle: float
    stops: Tuple[Stop, ...]


@dataclass(frozen=True)
class RadialGradient:
    """Circular gradient sized to the farthest corner."""
    stops: Tuple[Stop, ...]
    center: Tuple[float, float] = (0.5, 0.5)


@dataclass(frozen=True)
class ConicGradient:
    stops: Tuple[Stop, ...]
    start_angle: float = 0.0
    center: Tuple[float, float] = (0.5, 0.5)


Fill = Union[Solid, LinearGradient, RadialGradient, ConicGradient]


def gradient(angle: float, *colors: Union[str, RGBA]) -> LinearGradient:
    """Evenly spaced linear gradient."""
    step = 1 / (len(colors) - 1)
    return LinearGradient(angle, tuple((i * step, parse_color(c)) for i, c in enumerate(colors)))


# ============ Geometry ============

@dataclass(frozen=True)
class Edges:
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom


NO_EDGES = Edges()


def edges(*values: int) -> Edges:
    """CSS shorthand: 1, 2, 3 or 4 values."""
    if len(values) == 1:
        return Edges(values[0], values[0], values[0], values[0])
    if len(values) == 2:
        return Edges(values[0], values[1], values[0], values[1])
    if len(values) == 3:
        return Edges(values[0], values[1], values[2], values[1])
    return Edges(*values)


@dataclass(frozen=True)
class Offset:
    """Absolute placement inside the parent box."""
    top: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None
    bottom: Optional[int] = None


@dataclass(frozen=True)
class Border:
    width: int
    color: RGBA


@dataclass
class Rect:
    x: int
    y: int
    width: int
    height: int


class Direction(str, Enum):
    ROW = "row"
    COLUMN = "column"


class Align(str, Enum):
    START = "start"
    CENTER = "center"
    END = "end"
    STRETCH = "stretch"


class Justify(str, Enum):
    START = "start"
    CENTER = "center"
    END = "end"
    BETWEEN = "between"


# ============ Nodes ============

@dataclass(kw_only=True, eq=False)
class Node:
    """Base node. `frame` is filled in by the layout engine."""
    width: Optional[int] = None
    height: Optional[int] = None
    margin: Edges = NO_EDGES
    padding: Edges = NO_EDGES
    grow: float = 0
    fill: Optional[Fill] = None
    radius: int = 0
    border: Optional[Border] = None
    position: Optional[Offset] = None
    role: str = ""
    frame: Optional[Rect] = field(default=None, repr=False)

    @property
    def children(self) -> List["Node"]:
        return []

    @property
    def is_absolute(self) -> bool:
        return self.position is not None

    def walk(self) -> Iterator["Node"]:
        """Depth-first, document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, role: str) -> List["Node"]:
        return [node for node in self.walk() if node.role == role]


@dataclass(kw_only=True, eq=False)
class Box(Node):
    direction: Direction = Direction.COLUMN
    gap: int = 0
    align: Align = Align.STRETCH
    justify: Justify = Justify.START
    items: List[Node] = field(default_factory=list)

    @property
    def children(self) -> List[Node]:
        return self.items


@dataclass(kw_only=True, eq=False)
class Row(Box):
    direction: Direction = Direction.ROW


@dataclass(kw_only=True, eq=False)
class Stack(Box):
    direction: Direction = Direction.COLUMN


@dataclass(kw_only=True, eq=False)
class Text(Node):
    """A run of text.

    `emphasis` is a gradient text fill. Engines without gradient text draw
    the text opaque in `color` instead, so `color` must be set to the
    gradient's leading color.
    """
    content: str
    size: int
    weight: int = 400
    color: RGBA = (10, 10, 10, 255)
    emphasis: Optional[LinearGradient] = None
    text_align: str = "left"
    max_lines: Optional[int] = None
    line_height: float = 1.2
    letter_spacing: float = 0.0  # em
    uppercase: bool = False
    lines: List[str] = field(default_factory=list, repr=False)

    @property
    def display_text(self) -> str:
        return self.content.upper() if self.uppercase else self.content


@dataclass(kw_only=True, eq=False)
class Image(Node):
    """A bitmap reference. Falls back to `placeholder_fill` plus a glyph."""
    src: str = ""
    alt: str = ""
    placeholder: str = "♪"
    placeholder_fill: Optional[Fill] = None
    placeholder_color: RGBA = (255, 255, 255, 230)


@dataclass(kw_only=True, eq=False)
class Glow(Node):
    """Soft light disc. DOM blurs it; headless stacks radial discs."""
    color: RGBA
    blur: int


# Headless stand-in for a blur: (relative diameter, relative opacity) per disc
GLOW_DISCS = ((1.0, 0.35), (0.78, 0.5), (0.56, 0.7), (0.36, 0.9))


def glow_discs(width: int, height: int, color: RGBA) -> List[Tuple[int, int, int, RadialGradient]]:
    """(size, dx, dy, fill) for each disc, offsets relative to the glow's box."""
    base_alpha = color[3] / 255.0
    discs = []
    for scale, opacity in GLOW_DISCS:
        size = max(1, round(min(width, height) * scale))
        fill = RadialGradient(stops=(
            (0.0, with_alpha(color, base_alpha * opacity)),
            (0.7, with_alpha(color, 0.0)),
        ))
        discs.append((size, (width - size) // 2, (height - size) // 2, fill))
    return discs


@dataclass(kw_only=True, eq=False)
class Noise(Node):
    """Film-grain texture over the whole node."""
    strength: float = 0.035


@dataclass(kw_only=True, eq=False)
class Spacer(Node):
    grow: float = 1


@dataclass(kw_only=True, eq=False)
class Badge(Row):
    """Pill-shaped label."""
    label: str = ""
    label_size: int = 30
    label_weight: int = 600
    label_color: RGBA = (255, 255, 255, 255)
    radius: int = 999
    align: Align = Align.CENTER

    def __post_init__(self):
        if not self.items:
            self.items = [
                Text(
                    content=self.label,
                    size=self.label_size,
                    weight=self.label_weight,
                    color=self.label_color,
                    role="badge-label",
                )
            ]


def texts(root: Node) -> List[str]:
    """Every text run in document order."""
    return [node.content for node in root.walk() if isinstance(node, Text)]
