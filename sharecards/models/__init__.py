"""Data models for share cards."""

from .share import (
    MAX_LIST_ITEMS,
    MOOD_SENTENCE_LIMIT,
    ChartItem,
    ChartKind,
    ColorTheme,
    ConcertSnapshot,
    ConcertsData,
    DashboardData,
    GenerationRequest,
    HistoryData,
    ListeningStats,
    Mood,
    PAYLOAD_MODELS,
    PodcastsData,
    ShareCardType,
    ShareData,
    ShowSnapshot,
    SonicAuraData,
    ThemeName,
    TopChartsData,
    TrackSnapshot,
    share_data_adapter,
)
from .delivery import DeliveryMethod, DeliveryPlan, DeliveryRequest, DeliveryResult, DeviceProfile

__all__ = [
    "MAX_LIST_ITEMS",
    "MOOD_SENTENCE_LIMIT",
    "ChartItem",
    "ChartKind",
    "ColorTheme",
    "ConcertSnapshot",
    "ConcertsData",
    "DashboardData",
    "GenerationRequest",
    "HistoryData",
    "ListeningStats",
    "Mood",
    "PAYLOAD_MODELS",
    "PodcastsData",
    "ShareCardType",
    "ShareData",
    "ShowSnapshot",
    "SonicAuraData",
    "ThemeName",
    "TopChartsData",
    "TrackSnapshot",
    "share_data_adapter",
    "DeliveryMethod",
    "DeliveryPlan",
    "DeliveryRequest",
    "DeliveryResult",
    "DeviceProfile",
]
