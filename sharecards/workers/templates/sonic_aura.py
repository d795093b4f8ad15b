"""Sonic-aura card: a glossy mood orb, the mood sentence and its tags.

The orb is four stacked circles and their order is the look: a soft glow,
a conic ring, a glossy radial core and a small highlight on top.
"""

from typing import List, Optional

from sharecards.models.share import ColorTheme, SonicAuraData
from sharecards.services.locale import SonicAuraLabels
from sharecards.workers.background import Variant
from sharecards.workers.layout import (
    Align,
    Box,
    ConicGradient,
    Glow,
    Justify,
    Node,
    Offset,
    RadialGradient,
    Row,
    Stack,
    Text,
    edges,
    parse_color,
    with_alpha,
)
from sharecards.workers.templates.base import DARK, card_frame, centered_body, pill, section_label, tint

ORB_SIZE = 360
TAGS_PER_ROW = 3


def aura_orb(theme: ColorTheme) -> Box:
    """glow -> conic ring -> radial core -> highlight, back to front."""
    return Box(
        role="orb",
        width=ORB_SIZE,
        height=ORB_SIZE,
        margin=edges(0, 0, 48, 0),
        items=[
            Glow(
                role="orb-glow",
                width=ORB_SIZE + 60,
                height=ORB_SIZE + 60,
                position=Offset(top=-30, left=-30),
                color=with_alpha(theme.from_, 0.35),
                blur=90,
            ),
            Node(
                role="orb-ring",
                width=ORB_SIZE - 24,
                height=ORB_SIZE - 24,
                radius=(ORB_SIZE - 24) // 2,
                position=Offset(top=12, left=12),
                fill=ConicGradient(
                    stops=(
                        (0.0, with_alpha(theme.from_, 0.7)),
                        (0.5, with_alpha(theme.to, 0.7)),
                        (1.0, with_alpha(theme.from_, 0.7)),
                    ),
                    start_angle=180,
                ),
            ),
            Node(
                role="orb-core",
                width=ORB_SIZE - 96,
                height=ORB_SIZE - 96,
                radius=(ORB_SIZE - 96) // 2,
                position=Offset(top=48, left=48),
                fill=RadialGradient(
                    stops=(
                        (0.0, parse_color("#ffffff")),
                        (0.35, tint(theme.from_, 0x90)),
                        (1.0, tint(theme.to, 0x80)),
                    ),
                    center=(0.35, 0.35),
                ),
            ),
            Node(
                role="orb-highlight",
                width=96,
                height=60,
                radius=30,
                position=Offset(top=72, left=108),
                fill=RadialGradient(stops=(
                    (0.0, with_alpha("#ffffff", 0.6)),
                    (1.0, with_alpha("#ffffff", 0.0)),
                )),
            ),
        ],
    )


def _tags(tags: List[str], theme: ColorTheme) -> Stack:
    rows = [
        Row(
            role="tag-row",
            gap=30,
            justify=Justify.CENTER,
            items=[
                pill(tag, theme, size=33, weight=600, role="mood-tag", padding=edges(15, 24))
                for tag in tags[i:i + TAGS_PER_ROW]
            ],
        )
        for i in range(0, len(tags), TAGS_PER_ROW)
    ]
    return Stack(role="mood-tags", gap=30, align=Align.CENTER, items=rows)


def build(
    data: SonicAuraData,
    theme: ColorTheme,
    t: SonicAuraLabels,
    background_src: Optional[str] = None,
) -> Stack:
    """`theme` is already the mood's palette."""
    items: List[Node] = [
        section_label(t.sonic_aura, theme, margin_bottom=96),
        aura_orb(theme),
    ]
    if data.emoji:
        items.append(Text(role="emoji", content=data.emoji, size=132, margin=edges(0, 0, 24, 0)))
    items.append(Text(
        role="mood-sentence",
        content=f"“{data.mood_sentence}”",
        size=42,
        weight=500,
        color=DARK,
        line_height=1.5,
        text_align="center",
        margin=edges(0, 72, 72, 72),
    ))
    if data.mood_tags:
        items.append(_tags(data.mood_tags, theme))
    return card_frame(centered_body(items), theme, Variant.VIBRANT, background_src)
