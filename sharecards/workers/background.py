"""Decorative backdrop behind every card.

A vertical base gradient, a diagonal theme wash, a cluster of soft blobs and
a low-opacity grain. The blob table below is the single source for both
variants: the static one (capture and headless) and the animated one
(live preview). Every animation keyframe starts and ends at the identity
transform, so a preview at rest matches the static render.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sharecards.models.share import ColorTheme, Mood, ShareCardType
from sharecards.workers.layout import (
    EXPORT_HEIGHT,
    EXPORT_WIDTH,
    PREVIEW_SCALE,
    Image,
    LinearGradient,
    Node,
    Noise,
    Offset,
    RadialGradient,
    parse_color,
    with_alpha,
)

BASE_TOP = "#FAFBFC"
BASE_BOTTOM = "#F0F1F3"


class Variant(str, Enum):
    DEFAULT = "default"
    VIBRANT = "vibrant"
    SUBTLE = "subtle"


INTENSITY = {Variant.DEFAULT: 0.7, Variant.VIBRANT: 1.0, Variant.SUBTLE: 0.5}


@dataclass(frozen=True)
class Blob:
    """One soft disc. Position is the normalized center on the card."""
    cx: float
    cy: float
    diameter: int  # px at export scale
    color_role: str  # "from" | "to"
    opacity: float  # at intensity 1.0
    # Motion (animated variant only)
    period: float  # seconds
    delay: float  # seconds, negative starts mid-cycle
    drift: Tuple[int, int]  # px at export scale
    scale: float
    rotate: float  # degrees


BLOBS: Tuple[Blob, ...] = (
    Blob(cx=0.722, cy=0.156, diameter=1000, color_role="from", opacity=0.12,
         period=19.0, delay=0.0, drift=(-60, 45), scale=1.08, rotate=12),
    Blob(cx=0.185, cy=0.896, diameter=800, color_role="to", opacity=0.10,
         period=23.0, delay=-7.0, drift=(50, -60), scale=1.12, rotate=-10),
    Blob(cx=0.50, cy=0.50, diameter=600, color_role="from", opacity=0.06,
         period=29.0, delay=-13.0, drift=(40, 30), scale=0.92, rotate=8),
    Blob(cx=0.15, cy=0.22, diameter=420, color_role="to", opacity=0.05,
         period=17.0, delay=-4.0, drift=(30, 50), scale=1.15, rotate=-14),
)


def blob_color(blob: Blob, theme: ColorTheme) -> str:
    return theme.from_ if blob.color_role == "from" else theme.to


def blob_node(index: int, blob: Blob, theme: ColorTheme, intensity: float) -> Node:
    """Radial-gradient disc; used as-is by both variants."""
    color = blob_color(blob, theme)
    half = blob.diameter // 2
    return Node(
        role=f"blob-{index}",
        width=blob.diameter,
        height=blob.diameter,
        radius=half,
        position=Offset(
            top=round(blob.cy * EXPORT_HEIGHT) - half,
            left=round(blob.cx * EXPORT_WIDTH) - half,
        ),
        fill=RadialGradient(stops=(
            (0.0, with_alpha(color, blob.opacity * intensity)),
            (0.7, with_alpha(color, 0.0)),
        )),
    )


def static_background(
    theme: ColorTheme,
    variant: Variant = Variant.DEFAULT,
    image_src: Optional[str] = None,
) -> List[Node]:
    """Backdrop nodes for a full card, frozen at rest.

    With `image_src` the pre-rendered backdrop bitmap replaces the drawn one.
    """
    full = dict(width=EXPORT_WIDTH, height=EXPORT_HEIGHT, position=Offset(top=0, left=0))
    if image_src:
        return [Image(role="background-image", src=image_src, placeholder="", **full)]

    intensity = INTENSITY[variant]
    nodes: List[Node] = [
        Node(
            role="background-base",
            fill=LinearGradient(180, ((0.0, parse_color(BASE_TOP)), (1.0, parse_color(BASE_BOTTOM)))),
            **full,
        ),
        Node(
            role="background-wash",
            fill=LinearGradient(160, (
                (0.0, with_alpha(theme.from_, 0.03)),
                (0.4, with_alpha(theme.from_, 0.0)),
                (1.0, with_alpha(theme.to, 0.02)),
            )),
            **full,
        ),
    ]
    nodes += [blob_node(i, blob, theme, intensity) for i, blob in enumerate(BLOBS)]
    nodes.append(Noise(role="background-noise", **full))
    return nodes


# ============ Animation ============

def blob_transform(blob: Blob, t: float) -> Tuple[float, float, float, float]:
    """(dx, dy, scale, rotate) of a blob `t` seconds into the animation.

    Mirrors the CSS keyframes: a smooth loop that is the identity at the
    start of each period.
    """
    phase = ((t - blob.delay) % blob.period) / blob.period
    wave = (1 - math.cos(2 * math.pi * phase)) / 2  # 0 -> 1 -> 0
    sway = math.sin(2 * math.pi * phase)
    dx = blob.drift[0] * wave
    dy = blob.drift[1] * sway
    scale = 1 + (blob.scale - 1) * wave
    rotate = blob.rotate * sway
    return dx, dy, scale, rotate


def _fmt(value: float) -> str:
    return f"{round(value, 2) + 0.0:g}"  # no "-0"


def blob_keyframes_css(scale: int = PREVIEW_SCALE) -> str:
    """One @keyframes rule per blob, in preview pixels."""
    rules = []
    for index, blob in enumerate(BLOBS):
        steps = []
        for percent in (0, 25, 50, 75, 100):
            dx, dy, s, r = blob_transform(blob, blob.delay + blob.period * percent / 100)
            steps.append(
                f"{percent}% {{ transform: translate({_fmt(dx / scale)}px, {_fmt(dy / scale)}px) "
                f"scale({_fmt(s)}) rotate({_fmt(r)}deg); }}"
            )
        rules.append(f"@keyframes sc-blob-{index} {{ {' '.join(steps)} }}")
    return "\n".join(rules)


def blob_animation(index: int) -> str:
    """CSS `animation` value for blob `index`."""
    blob = BLOBS[index]
    return f"sc-blob-{index} {_fmt(blob.period)}s ease-in-out {_fmt(blob.delay)}s infinite"


def animated_background_css(scale: int = PREVIEW_SCALE) -> str:
    """Stylesheet that sets the static blob nodes in motion.

    The DOM compiler tags each blob element with the class `sc-blob-<i>`.
    """
    rules = [blob_keyframes_css(scale)]
    rules += [
        f".sc-blob-{index} {{ animation: {blob_animation(index)}; will-change: transform; }}"
        for index in range(len(BLOBS))
    ]
    rules.append("@media (prefers-reduced-motion: reduce) { [class^=\"sc-blob-\"] { animation: none; } }")
    return "\n".join(rules)


# ============ Pre-rendered backdrops ============

def background_filename(card_type: ShareCardType, mood: Optional[Mood] = None) -> str:
    """File name of the pre-rendered backdrop for a card."""
    if card_type == ShareCardType.SONIC_AURA:
        return f"bg-share-card-aura-{(mood or Mood.ENERGETIC).value}.png"
    slug = "top" if card_type == ShareCardType.TOP_CHARTS else card_type.value
    return f"bg-share-card-{slug}.png"
