"""Recent-history card: the last five tracks, newest first."""

from typing import Optional

from sharecards.models.share import ColorTheme, HistoryData, TrackSnapshot
from sharecards.services.locale import HistoryLabels
from sharecards.workers.background import Variant
from sharecards.workers.layout import Align, Border, Row, Solid, Stack, Text, edges, parse_color
from sharecards.workers.templates.base import (
    FAINT,
    INK,
    MUTED,
    SUBTLE,
    TRACK_GLYPH,
    artwork,
    card_frame,
    section_label,
    tint,
    top_body,
)


def track_row(index: int, track: TrackSnapshot, theme: ColorTheme) -> Row:
    """One ranked row; the first row is highlighted."""
    first = index == 0
    accent = parse_color(theme.from_)
    return Row(
        role="track-row",
        align=Align.CENTER,
        gap=42,
        padding=edges(30, 42),
        radius=42,
        fill=Solid(tint(theme.from_, 0x08)) if first else None,
        border=Border(3, tint(theme.from_, 0x15)) if first else None,
        items=[
            Text(
                role="rank",
                content=str(index + 1),
                width=54,
                size=39,
                weight=700,
                color=accent if first else FAINT,
                text_align="center",
            ),
            artwork(track.album_image, 156 if first else 132, theme, radius=24, glyph=TRACK_GLYPH, alt=track.track_name),
            Stack(
                role="track-info",
                grow=1,
                gap=6,
                items=[
                    Text(
                        role="track-name",
                        content=track.track_name,
                        size=42 if first else 39,
                        weight=600,
                        color=INK,
                        max_lines=1,
                    ),
                    Text(
                        role="artist-name",
                        content=track.artist_name,
                        size=33,
                        weight=500 if first else 400,
                        color=accent if first else MUTED,
                        max_lines=1,
                    ),
                ],
            ),
        ],
    )


def build(
    data: HistoryData,
    theme: ColorTheme,
    t: HistoryLabels,
    background_src: Optional[str] = None,
) -> Stack:
    header = Stack(
        role="header",
        align=Align.CENTER,
        margin=edges(0, 0, 84, 0),
        items=[
            section_label(t.recent_vibes, theme, margin_bottom=24),
            Text(role="subtitle", content=f"{data.total_tracks} {t.tracks_recently}", size=39, color=SUBTLE),
        ],
    )
    rows = Stack(
        role="track-list",
        gap=18,
        items=[track_row(i, track, theme) for i, track in enumerate(data.recent_tracks)],
    )
    return card_frame(top_body([header, rows]), theme, Variant.SUBTLE, background_src)
