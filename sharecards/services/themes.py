"""Theme resolution: card type or mood to a {from, to, glow} color triple."""

from functools import singledispatch
from typing import Optional, Union

from sharecards.models.share import (
    CardPayload,
    ColorTheme,
    Mood,
    ShareCardType,
    SonicAuraData,
    ThemeName,
)

THEMES: dict[ThemeName, ColorTheme] = {
    ThemeName.GREEN: ColorTheme(from_="#1DB954", to="#14B8A6", glow="rgba(29, 185, 84, 0.4)"),
    ThemeName.PURPLE: ColorTheme(from_="#8B5CF6", to="#EC4899", glow="rgba(139, 92, 246, 0.4)"),
    ThemeName.PINK: ColorTheme(from_="#EC4899", to="#8B5CF6", glow="rgba(236, 72, 153, 0.4)"),
    ThemeName.TEAL: ColorTheme(from_="#14B8A6", to="#8B5CF6", glow="rgba(20, 184, 166, 0.4)"),
    ThemeName.DYNAMIC: ColorTheme(from_="#8B5CF6", to="#EC4899", glow="rgba(139, 92, 246, 0.4)"),
}

CARD_TYPE_THEMES: dict[ShareCardType, ThemeName] = {
    ShareCardType.DASHBOARD: ThemeName.GREEN,
    ShareCardType.HISTORY: ThemeName.GREEN,
    ShareCardType.TOP_CHARTS: ThemeName.PURPLE,
    ShareCardType.CONCERTS: ThemeName.PINK,
    ShareCardType.SONIC_AURA: ThemeName.DYNAMIC,
    ShareCardType.PODCASTS: ThemeName.TEAL,
}

MOOD_THEMES: dict[Mood, ColorTheme] = {
    Mood.ENERGETIC: ColorTheme(from_="#EC4899", to="#F59E0B", glow="rgba(236, 72, 153, 0.4)"),
    Mood.CHILL: ColorTheme(from_="#3B82F6", to="#14B8A6", glow="rgba(59, 130, 246, 0.4)"),
    Mood.MELANCHOLIC: ColorTheme(from_="#8B5CF6", to="#6366F1", glow="rgba(139, 92, 246, 0.4)"),
    Mood.NOSTALGIC: ColorTheme(from_="#F59E0B", to="#EF4444", glow="rgba(245, 158, 11, 0.4)"),
    Mood.EXPERIMENTAL: ColorTheme(from_="#8B5CF6", to="#EC4899", glow="rgba(139, 92, 246, 0.4)"),
}

# Every enum member must be mapped; an unmapped member fails at import.
assert set(THEMES) == set(ThemeName), "unmapped ThemeName"
assert set(CARD_TYPE_THEMES) == set(ShareCardType), "unmapped ShareCardType"
assert set(MOOD_THEMES) == set(Mood), "unmapped Mood"


@singledispatch
def theme_for(key) -> ColorTheme:
    """Default theme for a card type, a mood, or a theme name."""
    raise TypeError(f"No theme for {key!r}")


@theme_for.register
def _(key: ShareCardType) -> ColorTheme:
    return THEMES[CARD_TYPE_THEMES[key]]


@theme_for.register
def _(key: Mood) -> ColorTheme:
    return MOOD_THEMES[key]


@theme_for.register
def _(key: ThemeName) -> ColorTheme:
    return THEMES[key]


def resolve_theme(
    card_type: ShareCardType,
    override: Optional[Union[ThemeName, ColorTheme]] = None,
    data: Optional[CardPayload] = None,
) -> ColorTheme:
    """Pick the colors a card is drawn with.

    An explicit ColorTheme always wins. The sonic-aura card ignores theme
    names and derives its colors from the mood, because its whole palette
    is the mood. Other cards use the named override, else their default.
    """
    if isinstance(override, ColorTheme):
        return override
    if card_type == ShareCardType.SONIC_AURA and isinstance(data, SonicAuraData):
        return theme_for(data.mood_color)
    if override is not None:
        return theme_for(ThemeName(override))
    return theme_for(card_type)
