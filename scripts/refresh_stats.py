#!/usr/bin/env python3
"""Script to re-fetch missing or failed repository stats in an existing themes.json."""

import argparse
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv

from theme_gallery.config import Settings
from theme_gallery.infrastructure.rest_client import GitHubRestClient
from theme_gallery.infrastructure.artifact_store import ArtifactStore
from theme_gallery.application.stats_enricher import StatsEnricher

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main(argv=None):
    """Refresh stats through the REST API, one repository at a time."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--all", action="store_true", help="Refresh every repository, not only stale ones")
    args = parser.parse_args(argv)

    load_dotenv()
    settings = Settings.from_env()
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not found. Using unauthenticated requests (limited rate).")

    store = ArtifactStore(settings.output_path)
    try:
        groups = store.load()
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Cannot read {store.path}: {e}")
        return 1

    rest_client = GitHubRestClient(token=settings.github_token, timeout=settings.request_timeout)
    enricher = StatsEnricher(
        rest_client=rest_client,
        refresh_batch_size=settings.refresh_batch_size,
        refresh_delay=settings.refresh_delay_seconds,
    )

    try:
        refreshed = enricher.refresh(groups, only_stale=not args.all)
        store.write(groups)
        logger.info(f"Refreshed stats for {refreshed} repositories")
        return 0
    except Exception as e:
        logger.error(f"Stats refresh failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
