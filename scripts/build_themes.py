#!/usr/bin/env python3
"""Script to build the theme gallery index (themes.json) from the theme repository."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv

from theme_gallery.config import Settings
from theme_gallery.infrastructure.github_client import GitHubGraphQLClient
from theme_gallery.infrastructure.rest_client import GitHubRestClient
from theme_gallery.infrastructure.artifact_store import ArtifactStore
from theme_gallery.application.stats_enricher import StatsEnricher
from theme_gallery.application.index_builder import ThemeIndexService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Fetch, group and enrich theme descriptors, then write the artifact."""
    load_dotenv()
    settings = Settings.from_env()

    # GraphQL requires authentication, so there is no anonymous fallback here
    if not settings.github_token:
        logger.error("GITHUB_TOKEN is required for GraphQL fetching.")
        return 1

    rest_client = GitHubRestClient(
        token=settings.github_token,
        contents_url=settings.contents_url,
        timeout=settings.request_timeout,
    )
    graphql_client = GitHubGraphQLClient(
        token=settings.github_token,
        timeout=settings.request_timeout,
    )
    enricher = StatsEnricher(graphql_client, batch_size=settings.stats_batch_size)
    service = ThemeIndexService(
        rest_client,
        enricher,
        ArtifactStore(settings.output_path),
        thumbnail_base_url=settings.thumbnail_base_url,
        fetch_chunk_size=settings.fetch_chunk_size,
    )

    try:
        service.run()
        return 0
    except Exception as e:
        logger.error(f"Theme index build failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
