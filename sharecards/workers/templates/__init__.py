"""Card templates, one builder per card type.

Every builder takes `(data, theme, t, background_src=None)` and returns the
full 1080x1920 layout tree. The same tree feeds the DOM compiler, the
headless compiler and the rasterizer.
"""

from typing import Callable, Dict, Optional

from sharecards.models.share import CardPayload, ColorTheme, PAYLOAD_MODELS, ShareCardType
from sharecards.services.locale import CardLabels
from sharecards.workers.layout import Stack
from sharecards.workers.templates import concerts, dashboard, history, podcasts, sonic_aura, top_charts

TemplateBuilder = Callable[..., Stack]

TEMPLATES: Dict[ShareCardType, TemplateBuilder] = {
    ShareCardType.DASHBOARD: dashboard.build,
    ShareCardType.HISTORY: history.build,
    ShareCardType.TOP_CHARTS: top_charts.build,
    ShareCardType.CONCERTS: concerts.build,
    ShareCardType.SONIC_AURA: sonic_aura.build,
    ShareCardType.PODCASTS: podcasts.build,
}

assert set(TEMPLATES) == set(ShareCardType), "unmapped ShareCardType"


def build_card(
    card_type: ShareCardType,
    data: CardPayload,
    theme: ColorTheme,
    t: CardLabels,
    background_src: Optional[str] = None,
) -> Stack:
    """Layout tree for one card.

    Raises:
        TypeError: If `data` is not the payload model for `card_type`.
    """
    card_type = ShareCardType(card_type)
    expected = PAYLOAD_MODELS[card_type]
    if not isinstance(data, expected):
        raise TypeError(f"{card_type.value} card needs {expected.__name__}, got {type(data).__name__}")
    return TEMPLATES[card_type](data, theme, t, background_src=background_src)
