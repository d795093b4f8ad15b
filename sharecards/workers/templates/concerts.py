"""Concerts card: the next show, or an empty state when there is none."""

from typing import List, Optional

from sharecards.models.share import ColorTheme, ConcertsData, ConcertSnapshot
from sharecards.services.locale import ConcertsLabels
from sharecards.workers.background import Variant
from sharecards.workers.layout import Align, Border, Node, Stack, Text, edges, parse_color
from sharecards.workers.templates.base import (
    ARTIST_GLYPH,
    DARK,
    INK,
    MUTED,
    SUBTLE,
    artwork,
    card_frame,
    centered_body,
    pill,
    section_label,
    tint,
)

ARTIST_IMAGE_SIZE = 420


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _next_show(concert: ConcertSnapshot, upcoming_count: int, theme: ColorTheme, t: ConcertsLabels) -> List[Node]:
    items: List[Node] = [
        section_label(t.next_show, theme, margin_bottom=72),
        pill(t.days_text, theme, solid=True, weight=700, role="days-badge", margin=edges(0, 0, 84, 0)),
    ]
    if concert.artist_image:
        items.append(artwork(
            concert.artist_image,
            ARTIST_IMAGE_SIZE,
            theme,
            radius=ARTIST_IMAGE_SIZE // 2,
            glyph=ARTIST_GLYPH,
            role="artist-image",
            alt=concert.artist_name,
            border=Border(9, tint(theme.from_, 0x25)),
            margin=edges(0, 0, 84, 0),
        ))
    items += [
        Text(
            role="artist-name",
            content=concert.artist_name,
            size=84,
            weight=800,
            line_height=1.1,
            color=INK,
            text_align="center",
            max_lines=2,
            margin=edges(0, 0, 60, 0),
        ),
        Stack(
            role="venue",
            gap=18,
            align=Align.CENTER,
            items=[
                Text(role="venue-name", content=concert.venue, size=45, weight=600, color=DARK, text_align="center", max_lines=2),
                Text(role="city", content=concert.city, size=42, weight=500, color=parse_color(theme.from_)),
                Text(role="date", content=_capitalize(t.date_text), size=39, color=SUBTLE, margin=edges(24, 0, 0, 0)),
            ],
        ),
    ]
    if upcoming_count > 1:
        items.append(pill(
            f"+{upcoming_count - 1} {t.more_shows}",
            theme,
            role="more-shows",
            margin=edges(96, 0, 0, 0),
        ))
    return items


def build(
    data: ConcertsData,
    theme: ColorTheme,
    t: ConcertsLabels,
    background_src: Optional[str] = None,
) -> Stack:
    if data.next_concert is None:
        empty = Text(role="empty-state", content=t.no_concerts, size=54, color=MUTED, text_align="center")
        return card_frame(centered_body([empty]), theme, Variant.DEFAULT, background_src)
    items = _next_show(data.next_concert, data.upcoming_count, theme, t)
    return card_frame(centered_body(items), theme, Variant.VIBRANT, background_src)
