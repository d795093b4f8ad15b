"""Localized card labels.

Locale negotiation happens upstream; this module is handed a locale tag and
turns it into display strings. Templates never look strings up themselves:
they receive the small per-card label bundle built by `labels_for`.
"""

from datetime import date, datetime
from typing import Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from sharecards.models.share import (
    CardPayload,
    ChartKind,
    ConcertsData,
    ShareCardType,
    TopChartsData,
)

DEFAULT_LOCALE = "en"


class LocalizedStrings(BaseModel):
    """Every display string the share pipeline needs for one locale."""
    model_config = ConfigDict(frozen=True)

    locale: str
    now_playing: str
    my_stats: str
    time_listened: str
    tracks_played: str
    artists: str
    no_data: str
    recent_vibes: str
    tracks_recently: str
    top_artists: str
    top_tracks: str
    top_albums: str
    next_show: str
    today: str
    tomorrow: str
    in_days: str  # "{days}" placeholder
    more_shows: str
    no_concerts: str
    sonic_aura: str
    my_podcasts: str
    episodes: str
    shows: str
    saved_episodes: str
    # Share panel
    generating: str
    share_button: str
    download_button: str
    generation_failed: str
    # Calendar
    weekdays: tuple[str, ...]  # Monday first
    months: tuple[str, ...]
    thousands_separator: str


_STRINGS: dict[str, LocalizedStrings] = {
    "en": LocalizedStrings(
        locale="en",
        now_playing="Now Playing",
        my_stats="My Stats",
        time_listened="Time Listened",
        tracks_played="Tracks Played",
        artists="Artists",
        no_data="No data available",
        recent_vibes="My Recent Vibes",
        tracks_recently="tracks recently",
        top_artists="My Top Artists",
        top_tracks="My Top Tracks",
        top_albums="My Top Albums",
        next_show="My Next Show",
        today="Today!",
        tomorrow="Tomorrow!",
        in_days="In {days} days",
        more_shows="more shows",
        no_concerts="No upcoming concerts",
        sonic_aura="My Sonic Aura",
        my_podcasts="My Podcasts",
        episodes="episodes",
        shows="Shows",
        saved_episodes="Saved Episodes",
        generating="Generating...",
        share_button="Share",
        download_button="Download Image",
        generation_failed="Failed to generate image, please try again",
        weekdays=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
        months=(
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ),
        thousands_separator=",",
    ),
    "pt-BR": LocalizedStrings(
        locale="pt-BR",
        now_playing="Ouvindo Agora",
        my_stats="Minhas Estatísticas",
        time_listened="Tempo Ouvindo",
        tracks_played="Músicas",
        artists="Artistas",
        no_data="Nenhum dado disponível",
        recent_vibes="Minhas Vibes Recentes",
        tracks_recently="músicas recentemente",
        top_artists="Meus Top Artistas",
        top_tracks="Minhas Top Músicas",
        top_albums="Meus Top Álbuns",
        next_show="Meu Próximo Show",
        today="Hoje!",
        tomorrow="Amanhã!",
        in_days="Em {days} dias",
        more_shows="mais shows",
        no_concerts="Nenhum show próximo",
        sonic_aura="Minha Aura Sônica",
        my_podcasts="Meus Podcasts",
        episodes="episódios",
        shows="Shows",
        saved_episodes="Episódios Salvos",
        generating="Gerando...",
        share_button="Compartilhar",
        download_button="Baixar Imagem",
        generation_failed="Falha ao gerar a imagem, tente novamente",
        weekdays=("segunda-feira", "terça-feira", "quarta-feira", "quinta-feira", "sexta-feira", "sábado", "domingo"),
        months=(
            "janeiro", "fevereiro", "março", "abril", "maio", "junho",
            "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
        ),
        thousands_separator=".",
    ),
}

SUPPORTED_LOCALES = tuple(_STRINGS)


def strings_for(locale: Optional[str]) -> LocalizedStrings:
    """Display strings for a locale tag, falling back to English."""
    if locale in _STRINGS:
        return _STRINGS[locale]
    # "pt", "pt-PT" and friends share the Brazilian strings
    if locale and locale.split("-")[0].lower() == "pt":
        return _STRINGS["pt-BR"]
    if locale:
        logger.debug(f"No strings for locale {locale!r}, using {DEFAULT_LOCALE}")
    return _STRINGS[DEFAULT_LOCALE]


# ============ Formatting ============

def format_number(value: int, separator: str) -> str:
    """Group thousands the way the locale does."""
    return f"{value:,}".replace(",", separator)


def format_listening_time(total_minutes: int) -> str:
    """`2h 5m` or `45m`."""
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def format_days_until(days_until: int, strings: LocalizedStrings) -> str:
    if days_until == 0:
        return strings.today
    if days_until == 1:
        return strings.tomorrow
    return strings.in_days.replace("{days}", str(days_until))


def parse_iso_date(value: str) -> Optional[date]:
    """Date part of an ISO 8601 string; None if it does not parse."""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None


def format_long_date(value: Union[str, date], strings: LocalizedStrings) -> str:
    """`Saturday, March 14` / `sábado, 14 de março`."""
    day = parse_iso_date(value) if isinstance(value, str) else value
    if day is None:
        return value if isinstance(value, str) else ""
    weekday = strings.weekdays[day.weekday()]
    month = strings.months[day.month - 1]
    if strings.locale == "pt-BR":
        return f"{weekday}, {day.day} de {month}"
    return f"{weekday}, {month} {day.day}"


# ============ Per-card label bundles ============

class CardLabels(BaseModel):
    """Fixed-shape label bundle handed to a template."""
    model_config = ConfigDict(frozen=True)


class DashboardLabels(CardLabels):
    now_playing: str
    my_stats: str
    time_listened: str
    tracks_played: str
    artists: str
    no_data: str
    thousands_separator: str = ","


class HistoryLabels(CardLabels):
    recent_vibes: str
    tracks_recently: str


class TopChartsLabels(CardLabels):
    title: str


class ConcertsLabels(CardLabels):
    next_show: str
    days_text: str
    date_text: str
    more_shows: str
    no_concerts: str


class SonicAuraLabels(CardLabels):
    sonic_aura: str


class PodcastsLabels(CardLabels):
    my_podcasts: str
    episodes: str
    shows: str
    saved_episodes: str


_CHART_TITLES = {
    ChartKind.ARTISTS: "top_artists",
    ChartKind.TRACKS: "top_tracks",
    ChartKind.ALBUMS: "top_albums",
}


def labels_for(card_type: ShareCardType, data: CardPayload, locale: Optional[str]) -> CardLabels:
    """Build the label bundle for one card, already localized."""
    s = strings_for(locale)

    if card_type == ShareCardType.DASHBOARD:
        return DashboardLabels(
            now_playing=s.now_playing,
            my_stats=s.my_stats,
            time_listened=s.time_listened,
            tracks_played=s.tracks_played,
            artists=s.artists,
            no_data=s.no_data,
            thousands_separator=s.thousands_separator,
        )
    if card_type == ShareCardType.HISTORY:
        return HistoryLabels(recent_vibes=s.recent_vibes, tracks_recently=s.tracks_recently)
    if card_type == ShareCardType.TOP_CHARTS:
        kind = data.kind if isinstance(data, TopChartsData) else ChartKind.ARTISTS
        return TopChartsLabels(title=getattr(s, _CHART_TITLES[kind]))
    if card_type == ShareCardType.CONCERTS:
        days_text = date_text = ""
        if isinstance(data, ConcertsData) and data.next_concert:
            days_text = format_days_until(data.next_concert.days_until, s)
            date_text = format_long_date(data.next_concert.date, s)
        return ConcertsLabels(
            next_show=s.next_show,
            days_text=days_text,
            date_text=date_text,
            more_shows=s.more_shows,
            no_concerts=s.no_concerts,
        )
    if card_type == ShareCardType.SONIC_AURA:
        return SonicAuraLabels(sonic_aura=s.sonic_aura)
    if card_type == ShareCardType.PODCASTS:
        return PodcastsLabels(
            my_podcasts=s.my_podcasts,
            episodes=s.episodes,
            shows=s.shows,
            saved_episodes=s.saved_episodes,
        )
    raise ValueError(f"Unknown card type: {card_type}")
