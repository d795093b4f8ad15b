"""Dashboard card: what is playing right now, or listening stats."""

from typing import List, Optional

from sharecards.models.share import ColorTheme, DashboardData, ListeningStats, TrackSnapshot
from sharecards.services.locale import DashboardLabels, format_listening_time, format_number
from sharecards.workers.background import Variant
from sharecards.workers.layout import Align, Box, Glow, Justify, Node, Offset, Row, Stack, Text, edges, parse_color
from sharecards.workers.templates.base import (
    INK,
    MUTED,
    SUBTLE,
    TRACK_GLYPH,
    accent_gradient,
    artwork,
    card_frame,
    centered_body,
    section_label,
)

ART_SIZE = 660


def _now_playing(track: TrackSnapshot, theme: ColorTheme, t: DashboardLabels) -> List[Node]:
    art = Box(
        role="now-playing-art",
        width=ART_SIZE,
        height=ART_SIZE,
        margin=edges(0, 0, 120, 0),
        items=[
            Glow(
                role="art-glow",
                width=ART_SIZE,
                height=ART_SIZE,
                position=Offset(top=72, left=0),
                color=parse_color(theme.glow),
                blur=120,
            ),
            artwork(track.album_image, ART_SIZE, theme, radius=48, glyph=TRACK_GLYPH, alt=track.track_name),
        ],
    )
    return [
        section_label(t.now_playing, theme, margin_bottom=96),
        art,
        Text(
            role="track-name",
            content=track.track_name,
            size=78,
            weight=700,
            color=INK,
            text_align="center",
            max_lines=2,
            margin=edges(0, 48, 36, 48),
        ),
        Text(
            role="artist-name",
            content=track.artist_name,
            size=51,
            weight=500,
            color=parse_color(theme.from_),
            text_align="center",
            max_lines=1,
        ),
    ]


def _stat(value: str, caption: str, role: str) -> Stack:
    return Stack(
        role=role,
        align=Align.CENTER,
        items=[
            Text(role=f"{role}-value", content=value, size=108, weight=700, color=INK),
            Text(
                role=f"{role}-caption",
                content=caption,
                size=33,
                color=SUBTLE,
                uppercase=True,
                letter_spacing=0.08,
                margin=edges(24, 0, 0, 0),
            ),
        ],
    )


def _stats(stats: ListeningStats, theme: ColorTheme, t: DashboardLabels) -> List[Node]:
    rows: List[Node] = []
    if stats.total_minutes > 0:
        rows.append(Stack(
            role="time-listened",
            align=Align.CENTER,
            items=[
                Text(
                    role="time-listened-value",
                    content=format_listening_time(stats.total_minutes),
                    size=168,
                    weight=800,
                    line_height=1.0,
                    color=parse_color(theme.from_),
                    emphasis=accent_gradient(theme),
                ),
                Text(
                    role="time-listened-caption",
                    content=t.time_listened,
                    size=36,
                    weight=500,
                    color=MUTED,
                    uppercase=True,
                    letter_spacing=0.1,
                    margin=edges(36, 0, 0, 0),
                ),
            ],
        ))

    secondary: List[Node] = []
    if stats.total_tracks > 0:
        secondary.append(_stat(format_number(stats.total_tracks, t.thousands_separator), t.tracks_played, "tracks-played"))
    secondary.append(_stat(format_number(stats.unique_artists, t.thousands_separator), t.artists, "unique-artists"))
    rows.append(Row(role="secondary-stats", gap=144, justify=Justify.CENTER, items=secondary))

    return [
        section_label(t.my_stats, theme, margin_bottom=144),
        Stack(role="stats", gap=120, align=Align.CENTER, items=rows),
    ]


def build(
    data: DashboardData,
    theme: ColorTheme,
    t: DashboardLabels,
    background_src: Optional[str] = None,
) -> Stack:
    """Now playing wins over stats; with neither the card says so."""
    if data.now_playing:
        items = _now_playing(data.now_playing, theme, t)
    elif data.stats:
        items = _stats(data.stats, theme, t)
    else:
        items = [Text(role="empty-state", content=t.no_data, size=54, color=MUTED, text_align="center")]
    return card_frame(centered_body(items), theme, Variant.DEFAULT, background_src)
