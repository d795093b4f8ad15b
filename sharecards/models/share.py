"""Share card data models.

Every payload is an immutable snapshot of data the dashboard already fetched.
Lists are cut to the card's slot count here, so templates never paginate or
slice defensively.
"""

import hashlib
import json
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_LIST_ITEMS = 5
MOOD_SENTENCE_LIMIT = 205
_ELLIPSIS = "..."


class ShareCardType(str, Enum):
    """Semantic share contexts, one card layout each."""
    DASHBOARD = "dashboard"
    HISTORY = "history"
    TOP_CHARTS = "top-charts"
    CONCERTS = "concerts"
    SONIC_AURA = "sonic-aura"
    PODCASTS = "podcasts"


class ThemeName(str, Enum):
    """Named color themes."""
    GREEN = "green"
    PURPLE = "purple"
    PINK = "pink"
    TEAL = "teal"
    DYNAMIC = "dynamic"  # sonic-aura: resolved from the mood


class Mood(str, Enum):
    """Sonic aura mood categories."""
    ENERGETIC = "energetic"
    CHILL = "chill"
    MELANCHOLIC = "melancholic"
    NOSTALGIC = "nostalgic"
    EXPERIMENTAL = "experimental"


class ChartKind(str, Enum):
    """What a top-charts card ranks."""
    ARTISTS = "artists"
    TRACKS = "tracks"
    ALBUMS = "albums"


class ShareModel(BaseModel):
    """Base for wire models: camelCase JSON, snake_case attributes, immutable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ColorTheme(BaseModel):
    """A {from, to, glow} color triple."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: str = Field(alias="from")
    to: str
    glow: str

    @field_validator("from_", "to", "glow")
    @classmethod
    def _paintable(cls, v: str) -> str:
        """Reject colors the renderers cannot paint (hex, rgb()/rgba(), a few names)."""
        # Imported here: the workers package imports this module
        from sharecards.workers.layout import parse_color

        parse_color(v)
        return v


def _first(values: dict, *keys: str) -> Any:
    """Return the first present key (wire alias or attribute name)."""
    for key in keys:
        if key in values:
            return values[key]
    return None


def _truncate_list(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return list(v)[:MAX_LIST_ITEMS]
    return v


# ============ Payloads ============

class TrackSnapshot(ShareModel):
    """A played track with its album art."""
    track_name: str
    artist_name: str
    album_image: str = ""


class ListeningStats(ShareModel):
    """Aggregate listening numbers."""
    total_minutes: int = Field(default=0, ge=0)
    total_tracks: int = Field(default=0, ge=0)
    unique_artists: int = Field(default=0, ge=0)


class DashboardData(ShareModel):
    """Either a now-playing fact or aggregate stats, never both."""
    now_playing: Optional[TrackSnapshot] = None
    stats: Optional[ListeningStats] = None

    @model_validator(mode="before")
    @classmethod
    def _now_playing_wins(cls, values: Any) -> Any:
        if isinstance(values, dict):
            now_playing = _first(values, "nowPlaying", "now_playing")
            if now_playing and values.get("stats") is not None:
                logger.debug("Dashboard payload has nowPlaying and stats; dropping stats")
                values = {k: v for k, v in values.items() if k != "stats"}
        return values


class HistoryData(ShareModel):
    """Recently played tracks, most recent first."""
    recent_tracks: List[TrackSnapshot] = Field(default_factory=list)
    total_tracks: int = Field(default=0, ge=0)  # Count before truncation

    @model_validator(mode="before")
    @classmethod
    def _count_before_truncation(cls, values: Any) -> Any:
        if isinstance(values, dict) and _first(values, "totalTracks", "total_tracks") is None:
            tracks = _first(values, "recentTracks", "recent_tracks") or []
            values = {**values, "totalTracks": len(tracks)}
        return values

    @field_validator("recent_tracks", mode="before")
    @classmethod
    def _truncate(cls, v: Any) -> Any:
        return _truncate_list(v)


class ChartItem(ShareModel):
    """One ranked chart entry."""
    name: str
    subtitle: Optional[str] = None
    image: str = ""


class TopChartsData(ShareModel):
    """Ranked artists, tracks or albums for a time range."""
    kind: ChartKind = Field(validation_alias=AliasChoices("kind", "type"))
    time_range: str = ""
    items: List[ChartItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _truncate(cls, v: Any) -> Any:
        return _truncate_list(v)


class ConcertSnapshot(ShareModel):
    """The next upcoming show."""
    artist_name: str
    artist_image: Optional[str] = None
    venue: str = ""
    city: str = ""
    date: str  # ISO 8601
    days_until: int = Field(ge=0)


class ConcertsData(ShareModel):
    """Next concert (if any) plus the number of upcoming shows."""
    next_concert: Optional[ConcertSnapshot] = None
    upcoming_count: int = Field(default=0, ge=0)


class SonicAuraData(ShareModel):
    """Mood analysis of recent listening."""
    mood_sentence: str
    mood_tags: List[str] = Field(default_factory=list)
    mood_color: Mood = Mood.ENERGETIC
    emoji: Optional[str] = None

    @field_validator("mood_sentence", mode="before")
    @classmethod
    def _bound_sentence(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v) > MOOD_SENTENCE_LIMIT:
            return v[:MOOD_SENTENCE_LIMIT - len(_ELLIPSIS)] + _ELLIPSIS
        return v

    @field_validator("mood_tags", mode="before")
    @classmethod
    def _truncate(cls, v: Any) -> Any:
        return _truncate_list(v)


class ShowSnapshot(ShareModel):
    """A saved podcast show."""
    name: str
    publisher: str = ""
    image: str = ""
    episode_count: int = Field(default=0, ge=0)


class PodcastsData(ShareModel):
    """Featured show plus saved show/episode totals."""
    featured_show: Optional[ShowSnapshot] = None
    total_shows: int = Field(default=0, ge=0)
    total_episodes: int = Field(default=0, ge=0)


CardPayload = Union[DashboardData, HistoryData, TopChartsData, ConcertsData, SonicAuraData, PodcastsData]

PAYLOAD_MODELS: dict[ShareCardType, type[ShareModel]] = {
    ShareCardType.DASHBOARD: DashboardData,
    ShareCardType.HISTORY: HistoryData,
    ShareCardType.TOP_CHARTS: TopChartsData,
    ShareCardType.CONCERTS: ConcertsData,
    ShareCardType.SONIC_AURA: SonicAuraData,
    ShareCardType.PODCASTS: PodcastsData,
}


# ============ ShareData (tagged union) ============

class DashboardShare(ShareModel):
    type: Literal["dashboard"] = "dashboard"
    data: DashboardData


class HistoryShare(ShareModel):
    type: Literal["history"] = "history"
    data: HistoryData


class TopChartsShare(ShareModel):
    type: Literal["top-charts"] = "top-charts"
    data: TopChartsData


class ConcertsShare(ShareModel):
    type: Literal["concerts"] = "concerts"
    data: ConcertsData


class SonicAuraShare(ShareModel):
    type: Literal["sonic-aura"] = "sonic-aura"
    data: SonicAuraData


class PodcastsShare(ShareModel):
    type: Literal["podcasts"] = "podcasts"
    data: PodcastsData


ShareData = Annotated[
    Union[DashboardShare, HistoryShare, TopChartsShare, ConcertsShare, SonicAuraShare, PodcastsShare],
    Field(discriminator="type"),
]

share_data_adapter: TypeAdapter = TypeAdapter(ShareData)


# ============ Generation request ============

class GenerationRequest(ShareModel):
    """Request body of the generation endpoint and the cache key tuple."""
    type: ShareCardType
    data: CardPayload
    theme: Optional[Union[ThemeName, ColorTheme]] = None
    locale: str = "en"

    @model_validator(mode="before")
    @classmethod
    def _payload_for_type(cls, values: Any) -> Any:
        """Validate `data` against the payload model selected by `type`."""
        if not isinstance(values, dict):
            return values
        try:
            model = PAYLOAD_MODELS[ShareCardType(values.get("type"))]
        except ValueError:
            return values  # Reported by field validation of `type`
        payload = values.get("data")
        if not isinstance(payload, model):
            values = {**values, "data": model.model_validate(payload if payload is not None else {})}
        return values

    @property
    def share_data(self) -> Union[DashboardShare, HistoryShare, TopChartsShare, ConcertsShare, SonicAuraShare, PodcastsShare]:
        """The request as a ShareData variant."""
        return share_data_adapter.validate_python({"type": self.type.value, "data": self.data})

    def canonical_json(self) -> str:
        """Stable JSON form: sorted keys, wire aliases."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            sort_keys=True,
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def cache_key(self) -> str:
        """Content address of this request. Equal inputs give equal keys."""
        return hashlib.sha256(self.canonical_json().encode("utf-8")).hexdigest()
