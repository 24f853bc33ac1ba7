"""Environment-driven settings for the theme index jobs."""

import os
from dataclasses import dataclass
from typing import Optional

from theme_gallery.infrastructure.rest_client import GitHubRestClient


DEFAULT_OUTPUT_PATH = os.path.join("public", "themes.json")
DEFAULT_THUMBNAIL_BASE_URL = (
    "https://raw.githubusercontent.com/typora/theme.typora.io/gh-pages/media/thumbnails/"
)


@dataclass(frozen=True)
class Settings:
    github_token: Optional[str]
    output_path: str = DEFAULT_OUTPUT_PATH
    contents_url: str = GitHubRestClient.CONTENTS_URL
    thumbnail_base_url: str = DEFAULT_THUMBNAIL_BASE_URL
    request_timeout: float = 30.0
    stats_batch_size: int = 50
    fetch_chunk_size: int = 15
    refresh_batch_size: int = 5
    refresh_delay_seconds: float = 1.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            output_path=os.getenv("THEMES_OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
            contents_url=os.getenv("THEMES_CONTENTS_URL", GitHubRestClient.CONTENTS_URL),
            thumbnail_base_url=os.getenv("THEMES_THUMBNAIL_BASE_URL", DEFAULT_THUMBNAIL_BASE_URL),
            request_timeout=float(os.getenv("GITHUB_REQUEST_TIMEOUT", "30")),
            stats_batch_size=int(os.getenv("STATS_BATCH_SIZE", "50")),
            fetch_chunk_size=int(os.getenv("DESCRIPTOR_FETCH_CHUNK_SIZE", "15")),
            refresh_batch_size=int(os.getenv("REFRESH_BATCH_SIZE", "5")),
            refresh_delay_seconds=float(os.getenv("REFRESH_DELAY_SECONDS", "1.0")),
        )
