"""Podcasts card: a featured show over library totals."""

from typing import List, Optional

from sharecards.models.share import ColorTheme, PodcastsData, ShowSnapshot
from sharecards.services.locale import PodcastsLabels
from sharecards.workers.background import Variant
from sharecards.workers.layout import Align, Justify, Node, Row, Stack, Text, edges, parse_color
from sharecards.workers.templates.base import (
    INK,
    PODCAST_GLYPH,
    SUBTLE,
    accent_gradient,
    artwork,
    card_frame,
    centered_body,
    section_label,
)


def _featured(show: ShowSnapshot, theme: ColorTheme, t: PodcastsLabels) -> List[Node]:
    return [
        artwork(
            show.image,
            480,
            theme,
            radius=72,
            glyph=PODCAST_GLYPH,
            role="show-artwork",
            alt=show.name,
            margin=edges(0, 0, 84, 0),
            placeholder_fill=accent_gradient(theme, 0x25),
        ),
        Text(
            role="show-name",
            content=show.name,
            size=66,
            weight=800,
            color=INK,
            text_align="center",
            max_lines=2,
            margin=edges(0, 48, 30, 48),
        ),
        Text(
            role="publisher",
            content=show.publisher,
            size=42,
            weight=500,
            color=parse_color(theme.from_),
            max_lines=1,
            margin=edges(0, 0, 24, 0),
        ),
        Text(
            role="episode-count",
            content=f"{show.episode_count} {t.episodes}",
            size=36,
            color=parse_color("#7a7a7a"),
            margin=edges(0, 0, 108, 0),
        ),
    ]


def _total(value: int, caption: str, theme: ColorTheme, role: str, emphasised: bool) -> Stack:
    number = Text(
        role=f"{role}-value",
        content=str(value),
        size=120,
        weight=800,
        line_height=1.0,
        color=parse_color(theme.from_) if emphasised else INK,
        emphasis=accent_gradient(theme) if emphasised else None,
    )
    return Stack(
        role=role,
        align=Align.CENTER,
        items=[
            number,
            Text(
                role=f"{role}-caption",
                content=caption,
                size=33,
                weight=500,
                color=SUBTLE,
                uppercase=True,
                letter_spacing=0.08,
                margin=edges(24, 0, 0, 0),
            ),
        ],
    )


def build(
    data: PodcastsData,
    theme: ColorTheme,
    t: PodcastsLabels,
    background_src: Optional[str] = None,
) -> Stack:
    items: List[Node] = [section_label(t.my_podcasts, theme, margin_bottom=96)]
    if data.featured_show:
        items += _featured(data.featured_show, theme, t)
    items.append(Row(
        role="totals",
        gap=144,
        justify=Justify.CENTER,
        items=[
            _total(data.total_shows, t.shows, theme, "total-shows", emphasised=True),
            _total(data.total_episodes, t.saved_episodes, theme, "total-episodes", emphasised=False),
        ],
    ))
    return card_frame(centered_body(items), theme, Variant.VIBRANT, background_src)
