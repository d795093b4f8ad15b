"""Building blocks shared by the card templates.

Sizes are export pixels (1080x1920). Hex-alpha tints follow the CSS
`#rrggbbaa` convention, so `tint(theme.from_, 0x15)` is the familiar
`${from}15`.
"""

from typing import List, Optional

from sharecards.config import settings
from sharecards.models.share import ColorTheme
from sharecards.workers.background import Variant, static_background
from sharecards.workers.layout import (
    EXPORT_HEIGHT,
    EXPORT_WIDTH,
    RGBA,
    Align,
    Badge,
    Border,
    Fill,
    Image,
    Justify,
    LinearGradient,
    Node,
    Solid,
    Stack,
    Text,
    edges,
    gradient,
    parse_color,
    with_alpha,
)

INK = parse_color("#0a0a0a")
DARK = parse_color("#2a2a2a")
MUTED = parse_color("#6a6a6a")
SUBTLE = parse_color("#8a8a8a")
FAINT = parse_color("#bbbbbb")
PAPER = parse_color("#FAFBFC")

# Placeholder glyphs per artwork kind
TRACK_GLYPH = "♪"
ALBUM_GLYPH = "◎"
PODCAST_GLYPH = "♫"
ARTIST_GLYPH = "★"


def tint(color: str, alpha_byte: int) -> RGBA:
    """`color` with a CSS hex alpha (0x00-0xff)."""
    return with_alpha(color, alpha_byte / 255)


def accent_gradient(theme: ColorTheme, alpha_byte: Optional[int] = None) -> LinearGradient:
    """The 135deg from -> to gradient used for pills, emphasis and placeholders."""
    if alpha_byte is None:
        return gradient(135, theme.from_, theme.to)
    return gradient(135, tint(theme.from_, alpha_byte), tint(theme.to, alpha_byte))


def clip(text: str, limit: int) -> str:
    """Hard character cap with a trailing `...`."""
    return text[:limit] + "..." if len(text) > limit else text


def section_label(text: str, theme: ColorTheme, margin_bottom: int, size: int = 33) -> Text:
    """Small uppercase accent heading at the top of a card."""
    return Text(
        role="section-label",
        content=text,
        size=size,
        weight=600,
        color=parse_color(theme.from_),
        uppercase=True,
        letter_spacing=0.2,
        text_align="center",
        margin=edges(0, 0, margin_bottom, 0),
    )


def artwork(
    src: Optional[str],
    size: int,
    theme: ColorTheme,
    radius: int = 24,
    glyph: str = TRACK_GLYPH,
    role: str = "artwork",
    alt: str = "",
    placeholder_fill: Optional[Fill] = None,
    placeholder_color: Optional[RGBA] = None,
    **kwargs,
) -> Image:
    """Square artwork with a themed placeholder when the image is missing."""
    return Image(
        role=role,
        src=src or "",
        alt=alt,
        width=size,
        height=size,
        radius=radius,
        fill=Solid(tint(theme.from_, 0x15)),
        placeholder=glyph,
        placeholder_fill=placeholder_fill or accent_gradient(theme, 0x20),
        placeholder_color=placeholder_color or with_alpha(theme.from_, 0.9),
        **kwargs,
    )


def pill(label: str, theme: ColorTheme, solid: bool = False, size: int = 39, weight: int = 500, role: str = "pill", **kwargs) -> Badge:
    """Rounded label. `solid` pills carry the accent gradient with white text."""
    kwargs.setdefault("padding", edges(30, 60))
    if solid:
        return Badge(
            role=role,
            label=label,
            label_size=size,
            label_weight=weight,
            label_color=(255, 255, 255, 255),
            fill=accent_gradient(theme),
            **kwargs,
        )
    return Badge(
        role=role,
        label=label,
        label_size=size,
        label_weight=weight,
        label_color=parse_color(theme.from_),
        fill=Solid(tint(theme.from_, 0x10)),
        border=Border(3, tint(theme.from_, 0x20)),
        **kwargs,
    )


def centered_body(items: List[Node]) -> Stack:
    """Body that centers its content on both axes."""
    return Stack(role="body", grow=1, align=Align.CENTER, justify=Justify.CENTER, items=items)


def top_body(items: List[Node]) -> Stack:
    """Body that stacks content from the top, full width."""
    return Stack(role="body", grow=1, items=items)


def footer(theme: ColorTheme, brand: str) -> Stack:
    return Stack(
        role="footer",
        align=Align.CENTER,
        padding=edges(72, 96, 120),
        items=[
            Node(
                role="footer-divider",
                width=180,
                height=3,
                margin=edges(0, 0, 48, 0),
                fill=LinearGradient(90, (
                    (0.0, with_alpha(theme.from_, 0.0)),
                    (0.5, tint(theme.from_, 0x40)),
                    (1.0, with_alpha(theme.from_, 0.0)),
                )),
            ),
            Text(role="brand", content=brand, size=39, weight=500, color=SUBTLE, letter_spacing=0.05),
        ],
    )


def card_frame(
    body: Stack,
    theme: ColorTheme,
    variant: Variant = Variant.DEFAULT,
    background_src: Optional[str] = None,
    brand: Optional[str] = None,
) -> Stack:
    """Full 1080x1920 card: backdrop, padded content, branded footer."""
    return Stack(
        role="card",
        width=EXPORT_WIDTH,
        height=EXPORT_HEIGHT,
        fill=Solid(PAPER),
        items=[
            *static_background(theme, variant, background_src),
            Stack(role="content", grow=1, padding=edges(144, 96, 72), items=[body]),
            footer(theme, brand or settings.brand_name),
        ],
    )
