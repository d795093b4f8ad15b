"""Configuration settings for the share-card service.

Story-format (1080x1920) share images for MyScrobble moments.
"""

import json
from pathlib import Path
from typing import List, Literal, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    fonts_dir: Path = Path("fonts")
    background_images_dir: Path = Path("public/share-images")  # Optional pre-rendered backdrops
    downloads_dir: Path = Path("downloads")

    @property
    def image_cache_dir(self) -> Path:
        """Path to the downloaded card image cache."""
        return self.data_dir / "share" / "images"

    # Branding
    product_slug: str = "myscrobble"  # Used in exported file names
    brand_name: str = "MyScrobble.fm"  # Footer text on every card
    share_caption: str = "Check out my music on MyScrobble.fm"

    # Generation settings
    generation_endpoint: str = "http://localhost:8000/share/generate"
    generation_timeout: float = 15.0  # seconds, client side
    image_fetch_timeout: float = 10.0  # seconds per card image

    # Capture settings (DOM-to-raster fallback)
    capture_scale: int = 3
    capture_allowed_origins: List[str] = [
        "https://i.scdn.co",
        "https://mosaic.scdn.co",
        "https://image-cdn-ak.spotifycdn.com",
    ]
    capture_on_cross_origin: Literal["blank", "raise"] = "blank"

    # Locale
    default_locale: str = "en"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Frontend settings
    frontend_url: str = "http://localhost:3000"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @field_validator("cors_origins", "capture_allowed_origins", mode="before")
    @classmethod
    def parse_origin_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse origin lists from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, treat as comma-separated list
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

# Ensure directories exist
settings.data_dir.mkdir(parents=True, exist_ok=True)
