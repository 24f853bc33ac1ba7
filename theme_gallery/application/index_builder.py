"""Application service for building the theme index artifact."""

import logging
from typing import List, Optional

from theme_gallery.application.batching import run_batches
from theme_gallery.application.stats_enricher import StatsEnricher
from theme_gallery.domain.grouping import group_descriptors
from theme_gallery.domain.references import build_descriptor
from theme_gallery.domain.theme import ThemeDescriptor, ThemeGroup
from theme_gallery.infrastructure.artifact_store import ArtifactStore
from theme_gallery.infrastructure.rest_client import ContentFile, GitHubRestClient

logger = logging.getLogger(__name__)


class ThemeIndexService:
    """Service for fetching theme descriptors, grouping them and writing the artifact."""

    FETCH_CHUNK_SIZE = 15  # Concurrent raw downloads

    def __init__(
        self,
        rest_client: GitHubRestClient,
        stats_enricher: StatsEnricher,
        artifact_store: ArtifactStore,
        thumbnail_base_url: str,
        fetch_chunk_size: int = FETCH_CHUNK_SIZE,
    ):
        """
        Initialize theme index service.

        Args:
            rest_client: Client for the descriptor listing and raw files
            stats_enricher: Service attaching repository stats to groups
            artifact_store: Destination of the built index
            thumbnail_base_url: Base URL for relative thumbnail references
            fetch_chunk_size: Descriptor downloads in flight at once
        """
        self.rest_client = rest_client
        self.stats_enricher = stats_enricher
        self.artifact_store = artifact_store
        self.thumbnail_base_url = thumbnail_base_url
        self.fetch_chunk_size = fetch_chunk_size

    def _fetch_descriptor(self, file: ContentFile) -> Optional[ThemeDescriptor]:
        try:
            text = self.rest_client.fetch_text(file.download_url)
            return build_descriptor(file.name, text, self.thumbnail_base_url)
        except Exception as e:
            logger.error(f"Error processing {file.name}: {e}")
            return None

    def fetch_descriptors(self) -> List[ThemeDescriptor]:
        """
        List and download every theme descriptor.

        A listing failure propagates; a single file that cannot be fetched
        or parsed is logged and skipped.

        Returns:
            Descriptors in listing order
        """
        logger.info("Fetching theme list...")
        files = self.rest_client.list_descriptor_files()
        logger.info(f"Found {len(files)} theme files.")

        results = run_batches(files, self.fetch_chunk_size, self._fetch_descriptor)
        descriptors = [descriptor for descriptor in results if descriptor is not None]

        skipped = len(files) - len(descriptors)
        if skipped:
            logger.warning(f"Skipped {skipped} theme files that could not be processed")
        return descriptors

    def build(self) -> List[ThemeGroup]:
        """Fetch, group and enrich the theme index without writing it."""
        descriptors = self.fetch_descriptors()
        logger.info(f"Parsed {len(descriptors)} themes. Grouping by repo or author...")

        groups = group_descriptors(descriptors)
        logger.info(f"Built {len(groups)} groups")

        logger.info("Fetching repository stats via GraphQL...")
        enriched = self.stats_enricher.enrich(groups)
        logger.info(f"Attached stats to {enriched} groups")
        return groups

    def run(self) -> List[ThemeGroup]:
        """
        Build the theme index and replace the artifact with it.

        Returns:
            Groups written to the artifact
        """
        groups = self.build()
        self.artifact_store.write(groups)
        return groups
