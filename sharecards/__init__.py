"""MyScrobble share cards - story-format image generation."""

__version__ = "0.4.0"
