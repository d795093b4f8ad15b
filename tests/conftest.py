"""Shared sample payloads for share-card tests."""

import pytest

from sharecards.models.share import GenerationRequest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

SAMPLE_BODIES = {
    "dashboard": {
        "type": "dashboard",
        "data": {"stats": {"totalMinutes": 3245, "totalTracks": 1280, "uniqueArtists": 342}},
    },
    "history": {
        "type": "history",
        "data": {
            "recentTracks": [
                {"trackName": f"Track {i}", "artistName": f"Artist {i}", "albumImage": ""}
                for i in range(1, 13)
            ],
        },
    },
    "top-charts": {
        "type": "top-charts",
        "data": {
            "kind": "artists",
            "timeRange": "short_term",
            "items": [{"name": f"Artist {i}"} for i in range(1, 6)],
        },
    },
    "concerts": {
        "type": "concerts",
        "data": {
            "nextConcert": {
                "artistName": "Caribou",
                "venue": "Primavera Sound",
                "city": "Barcelona",
                "date": "2026-06-04T20:00:00Z",
                "daysUntil": 12,
            },
            "upcomingCount": 3,
        },
    },
    "sonic-aura": {
        "type": "sonic-aura",
        "data": {
            "moodSentence": "Late nights and neon reflections.",
            "moodTags": ["nocturnal", "synthwave", "restless"],
            "moodColor": "chill",
            "emoji": "🌙",
        },
    },
    "podcasts": {
        "type": "podcasts",
        "data": {
            "featuredShow": {"name": "Song Exploder", "publisher": "Hrishikesh Hirway", "episodeCount": 250},
            "totalShows": 12,
            "totalEpisodes": 84,
        },
    },
}


def make_request(name: str, **overrides) -> GenerationRequest:
    return GenerationRequest.model_validate({**SAMPLE_BODIES[name], **overrides})


@pytest.fixture
def sample_requests():
    return {name: make_request(name) for name in SAMPLE_BODIES}


@pytest.fixture
def dashboard_request():
    return make_request("dashboard")
