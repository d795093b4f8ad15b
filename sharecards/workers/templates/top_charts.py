"""Top-charts card.

Artists and tracks render as a ranked list (circular images for artists).
Albums get an editorial layout instead: the #1 album as a hero cover with a
vinyl disc peeking out behind it, then #2-#5 in a 2x2 grid.
"""

from typing import List, Optional

from sharecards.models.share import ChartItem, ChartKind, ColorTheme, TopChartsData
from sharecards.services.locale import TopChartsLabels
from sharecards.workers.background import Variant
from sharecards.workers.layout import (
    Align,
    Border,
    Justify,
    Node,
    Offset,
    Row,
    Solid,
    Stack,
    Text,
    edges,
    gradient,
    parse_color,
)
from sharecards.workers.templates.base import (
    ALBUM_GLYPH,
    ARTIST_GLYPH,
    DARK,
    INK,
    SUBTLE,
    TRACK_GLYPH,
    accent_gradient,
    artwork,
    card_frame,
    clip,
    section_label,
    tint,
    top_body,
)

GRID_NAME_LIMIT = 16
GRID_SUBTITLE_LIMIT = 18
VINYL_DARK = "#1a1a1a"


def _header(title: str, time_range: str, theme: ColorTheme, margin_bottom: int) -> Stack:
    return Stack(
        role="header",
        align=Align.CENTER,
        margin=edges(0, 0, margin_bottom, 0),
        items=[
            section_label(title, theme, margin_bottom=24),
            Text(role="time-range", content=time_range, size=39, color=SUBTLE),
        ],
    )


# ============ Ranked list ============

def chart_row(index: int, item: ChartItem, kind: ChartKind, theme: ColorTheme) -> Row:
    """One ranked row; #1 gets a larger image, a tinted row and a bigger rank."""
    first = index == 0
    accent = parse_color(theme.from_)
    size = 168 if first else 132
    circular = kind == ChartKind.ARTISTS
    info: List[Node] = [
        Text(role="item-name", content=item.name, size=45 if first else 39, weight=600, color=INK, max_lines=1),
    ]
    if item.subtitle:
        info.append(Text(
            role="item-subtitle",
            content=item.subtitle,
            size=33,
            weight=500 if first else 400,
            color=accent if first else parse_color("#7a7a7a"),
            max_lines=1,
        ))
    return Row(
        role="chart-row",
        align=Align.CENTER,
        gap=42,
        padding=edges(24, 36),
        radius=42,
        fill=Solid(tint(theme.from_, 0x08)) if first else None,
        border=Border(3, tint(theme.from_, 0x15)) if first else None,
        items=[
            Text(
                role="rank",
                content=str(index + 1),
                width=78,
                size=60 if first else 45,
                weight=800,
                color=accent if first else parse_color("#c0c0c0"),
                text_align="center",
            ),
            artwork(
                item.image,
                size,
                theme,
                radius=size // 2 if circular else 24,
                glyph=ARTIST_GLYPH if circular else TRACK_GLYPH,
                alt=item.name,
            ),
            Stack(role="item-info", grow=1, gap=6, items=info),
        ],
    )


def _ranked(data: TopChartsData, theme: ColorTheme, t: TopChartsLabels) -> Stack:
    rows = Stack(
        role="chart-list",
        gap=18,
        items=[chart_row(i, item, data.kind, theme) for i, item in enumerate(data.items)],
    )
    return top_body([_header(t.title, data.time_range, theme, margin_bottom=72), rows])


# ============ Album layout ============

def vinyl_disc(theme: ColorTheme) -> Row:
    """Record with grooves and a themed label, positioned to peek out behind the cover."""
    spindle = Node(role="vinyl-spindle", width=20, height=20, radius=10, fill=Solid(parse_color(VINYL_DARK)))
    label = Row(
        role="vinyl-label",
        width=100,
        height=100,
        radius=50,
        fill=accent_gradient(theme, 0x40),
        align=Align.CENTER,
        justify=Justify.CENTER,
        items=[spindle],
    )
    inner_groove = Row(
        role="vinyl-groove",
        width=280,
        height=280,
        radius=140,
        border=Border(2, parse_color("#3a3a3a")),
        align=Align.CENTER,
        justify=Justify.CENTER,
        items=[label],
    )
    outer_groove = Row(
        role="vinyl-groove",
        width=340,
        height=340,
        radius=170,
        border=Border(2, parse_color("#444444")),
        align=Align.CENTER,
        justify=Justify.CENTER,
        items=[inner_groove],
    )
    return Row(
        role="vinyl",
        width=380,
        height=380,
        radius=190,
        position=Offset(top=20, left=100),
        fill=gradient(135, VINYL_DARK, "#333333", VINYL_DARK),
        align=Align.CENTER,
        justify=Justify.CENTER,
        items=[outer_groove],
    )


def _hero(item: ChartItem, theme: ColorTheme) -> Stack:
    cover = Row(
        role="hero-cover",
        width=400,
        height=400,
        margin=edges(0, 0, 36, 0),
        items=[
            vinyl_disc(theme),
            artwork(
                item.image,
                400,
                theme,
                radius=12,
                glyph=ALBUM_GLYPH,
                role="hero-artwork",
                alt=item.name,
                placeholder_fill=accent_gradient(theme),
                placeholder_color=(255, 255, 255, 235),
            ),
        ],
    )
    info: List[Node] = [
        Text(
            role="hero-name",
            content=item.name,
            width=700,
            size=54,
            weight=800,
            color=INK,
            text_align="center",
            max_lines=2,
            margin=edges(0, 0, 12, 0),
        ),
    ]
    if item.subtitle:
        info.append(Text(role="hero-subtitle", content=item.subtitle, size=36, weight=500, color=parse_color(theme.from_), max_lines=1))
    return Stack(
        role="hero",
        align=Align.CENTER,
        margin=edges(0, 0, 60, 0),
        items=[
            Text(
                role="hero-rank",
                content="1",
                size=280,
                weight=900,
                line_height=1.0,
                color=tint(theme.from_, 0x12),
                position=Offset(top=-40, left=-60),
            ),
            cover,
            Stack(role="hero-info", align=Align.CENTER, items=info),
        ],
    )


def _grid_cell(item: ChartItem, theme: ColorTheme) -> Stack:
    items: List[Node] = [
        artwork(
            item.image,
            180,
            theme,
            radius=12,
            glyph=ALBUM_GLYPH,
            role="grid-artwork",
            alt=item.name,
            margin=edges(0, 0, 16, 0),
            placeholder_fill=accent_gradient(theme, 0x30),
        ),
        Text(
            role="grid-name",
            content=clip(item.name, GRID_NAME_LIMIT),
            size=26,
            weight=600,
            color=DARK,
            text_align="center",
            margin=edges(0, 0, 6, 0),
        ),
    ]
    if item.subtitle:
        items.append(Text(
            role="grid-subtitle",
            content=clip(item.subtitle, GRID_SUBTITLE_LIMIT),
            size=22,
            color=parse_color("#888888"),
            text_align="center",
        ))
    return Stack(role="grid-cell", width=200, align=Align.CENTER, items=items)


def _album_grid(items: List[ChartItem], theme: ColorTheme) -> Stack:
    rows = [
        Row(role="grid-row", gap=40, justify=Justify.CENTER, items=[_grid_cell(item, theme) for item in items[i:i + 2]])
        for i in range(0, len(items), 2)
    ]
    return Stack(role="album-grid", gap=32, margin=edges(24, 0, 0, 0), align=Align.CENTER, items=rows)


def _albums(data: TopChartsData, theme: ColorTheme, t: TopChartsLabels) -> Stack:
    hero, *rest = data.items
    items: List[Node] = [
        _header(t.title, data.time_range, theme, margin_bottom=48),
        _hero(hero, theme),
    ]
    if rest:
        items.append(_album_grid(rest, theme))
    return Stack(role="body", grow=1, align=Align.CENTER, items=items)


def build(
    data: TopChartsData,
    theme: ColorTheme,
    t: TopChartsLabels,
    background_src: Optional[str] = None,
) -> Stack:
    if data.kind == ChartKind.ALBUMS and data.items:
        body = _albums(data, theme, t)
    else:
        body = _ranked(data, theme, t)
    return card_frame(body, theme, Variant.VIBRANT, background_src)
