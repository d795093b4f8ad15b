#!/usr/bin/env python3
"""Render every card type headlessly and as preview HTML, side by side.

Writes `<type>.png` (headless generation) and `<type>.html` (static DOM
variant) for each sample payload so the two paths can be compared by eye
or with an image-diff tool.

Usage:
    python scripts/render_samples.py [output_dir] [--locale pt-BR] [--animated]

Options:
    --locale LOCALE    Label locale (default: en)
    --animated         Write animated preview HTML instead of the static variant
"""

import argparse
import asyncio
from pathlib import Path

from loguru import logger

from sharecards.models.share import GenerationRequest
from sharecards.services.generation import GenerationService
from sharecards.workers.dom import render_markup

SAMPLES = {
    "dashboard-now-playing": {
        "type": "dashboard",
        "data": {"nowPlaying": {"trackName": "Midnight City", "artistName": "M83", "albumImage": ""}},
    },
    "dashboard-stats": {
        "type": "dashboard",
        "data": {"stats": {"totalMinutes": 3245, "totalTracks": 1280, "uniqueArtists": 342}},
    },
    "history": {
        "type": "history",
        "data": {
            "recentTracks": [
                {"trackName": "Everything In Its Right Place", "artistName": "Radiohead"},
                {"trackName": "Genesis", "artistName": "Grimes"},
                {"trackName": "Nightcall", "artistName": "Kavinsky"},
                {"trackName": "Digital Love", "artistName": "Daft Punk"},
                {"trackName": "Teardrop", "artistName": "Massive Attack"},
                {"trackName": "Windowlicker", "artistName": "Aphex Twin"},
            ],
        },
    },
    "top-artists": {
        "type": "top-charts",
        "theme": "purple",
        "data": {
            "kind": "artists",
            "timeRange": "short_term",
            "items": [{"name": name} for name in ("Björk", "Caribou", "Four Tet", "Floating Points", "Jamie xx")],
        },
    },
    "top-albums": {
        "type": "top-charts",
        "data": {
            "kind": "albums",
            "items": [
                {"name": "Kid A", "subtitle": "Radiohead"},
                {"name": "Discovery", "subtitle": "Daft Punk"},
                {"name": "Mezzanine", "subtitle": "Massive Attack"},
                {"name": "Selected Ambient Works 85-92", "subtitle": "Aphex Twin"},
                {"name": "In Colour", "subtitle": "Jamie xx"},
            ],
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
    "concerts-empty": {"type": "concerts", "data": {"upcomingCount": 0}},
    "sonic-aura": {
        "type": "sonic-aura",
        "data": {
            "moodSentence": "Late nights, neon reflections and a pulse that never quite settles.",
            "moodTags": ["nocturnal", "synthwave", "restless", "cinematic"],
            "moodColor": "experimental",
            "emoji": "🌌",
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


async def render_all(output_dir: Path, locale: str, animated: bool) -> int:
    """Render every sample. Returns the number of failures."""
    service = GenerationService()
    output_dir.mkdir(parents=True, exist_ok=True)
    failures = 0

    for name, body in SAMPLES.items():
        request = GenerationRequest.model_validate({**body, "locale": locale})

        root, _, _ = service.build_tree(request, use_background_image=False)
        (output_dir / f"{name}.html").write_text(
            render_markup(root, animated=animated, lang=request.locale),
            encoding="utf-8",
        )

        try:
            png = await service.generate(request)
        except Exception as e:
            logger.error(f"{name}: {e}")
            failures += 1
            continue
        (output_dir / f"{name}.png").write_bytes(png)
        print(f"Rendered {name} ({len(png)} bytes)")

    return failures


def main():
    parser = argparse.ArgumentParser(description="Render sample share cards")
    parser.add_argument("output_dir", nargs="?", default="samples", type=Path)
    parser.add_argument("--locale", default="en")
    parser.add_argument("--animated", action="store_true")
    args = parser.parse_args()

    failures = asyncio.run(render_all(args.output_dir, args.locale, args.animated))
    print(f"\nDone: {len(SAMPLES) - failures}/{len(SAMPLES)} samples in {args.output_dir}")
    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
