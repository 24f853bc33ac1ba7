"""Application service attaching live GitHub stats to theme groups."""

import logging
import threading
import time
from typing import Callable, List, Optional

from theme_gallery.application.batching import RetryPolicy, chunked, run_batches
from theme_gallery.domain.grouping import is_stats_eligible
from theme_gallery.domain.theme import RepoStats, ThemeGroup
from theme_gallery.infrastructure.github_client import GitHubGraphQLClient
from theme_gallery.infrastructure.rest_client import GitHubRestClient

logger = logging.getLogger(__name__)


def rate_limit_retry_policy(has_token: bool, max_attempts: int = 3, backoff_seconds: float = 2.0) -> RetryPolicy:
    """
    Retry rate-limited lookups, and only when a token is configured.

    Without a token a retry hits the same anonymous quota; not-found and
    generic failures are never retried.
    """
    def should_retry(outcome: object) -> bool:
        return has_token and isinstance(outcome, RepoStats) and outcome.is_rate_limit

    return RetryPolicy(
        max_attempts=max_attempts,
        backoff_seconds=backoff_seconds,
        retry_predicate=should_retry,
    )


class StatsEnricher:
    """Service for fetching repository stats in bulk and refreshing them one by one."""

    BATCH_SIZE = 50  # Aliases per GraphQL query
    REFRESH_BATCH_SIZE = 5
    REFRESH_DELAY_SECONDS = 1.0

    def __init__(
        self,
        graphql_client: Optional[GitHubGraphQLClient] = None,
        rest_client: Optional[GitHubRestClient] = None,
        batch_size: int = BATCH_SIZE,
        refresh_batch_size: int = REFRESH_BATCH_SIZE,
        refresh_delay: float = REFRESH_DELAY_SECONDS,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize stats enricher.

        Args:
            graphql_client: Client for bulk aliased queries
            rest_client: Client for single-repository lookups (refresh only)
            batch_size: Repositories per bulk query
            refresh_batch_size: Concurrent single lookups per refresh batch
            refresh_delay: Seconds between refresh batches
            retry_policy: Retry policy for single lookups
            sleep: Sleep function (injectable for tests)
        """
        self.graphql_client = graphql_client
        self.rest_client = rest_client
        self.batch_size = batch_size
        self.refresh_batch_size = refresh_batch_size
        self.refresh_delay = refresh_delay
        if retry_policy is None:
            has_token = bool(rest_client is not None and rest_client.token)
            retry_policy = rate_limit_retry_policy(has_token)
        self.retry_policy = retry_policy
        self.sleep = sleep

    def enrich(self, groups: List[ThemeGroup]) -> int:
        """
        Attach stats to every stats-eligible group using bulk queries.

        Batches run strictly one after another. A batch whose query fails
        leaves its groups without stats; the next batch still runs.

        Args:
            groups: All groups of the index; ineligible ones are skipped

        Returns:
            Number of groups that received stats
        """
        if self.graphql_client is None:
            raise ValueError("Bulk enrichment requires a GraphQL client")

        eligible = [group for group in groups if is_stats_eligible(group)]
        logger.info(f"Identified {len(eligible)} unique repositories to fetch.")

        enriched = 0
        processed = 0
        for batch in chunked(eligible, self.batch_size):
            processed += len(batch)
            try:
                result = self.graphql_client.fetch_repository_stats([group.identity for group in batch])
            except Exception as e:
                logger.error(f"Batch fetch failed: {e}")
                continue

            if result.errors:
                # Renamed or deleted repositories come back as partial data plus errors
                logger.warning(f"GraphQL errors: {', '.join(result.errors)}")

            for group, stats in zip(batch, result.stats):
                group.stats = stats if stats is not None else RepoStats.not_found()
                enriched += 1

            logger.info(
                f"Fetched stats for batch {processed}/{len(eligible)}. "
                f"API calls remaining: {result.remaining}"
            )

        return enriched

    def _lookup(self, group: ThemeGroup) -> RepoStats:
        return self.retry_policy.run(
            lambda: self.rest_client.get_repository_stats(group.repo_owner, group.repo_name),
            sleep=self.sleep,
        )

    def refresh(
        self,
        groups: List[ThemeGroup],
        only_stale: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Re-fetch stats one repository at a time.

        Args:
            groups: Groups of the index
            only_stale: Refresh only groups without stats or with errored stats
            cancel_event: Stops the refresh before the next batch when set

        Returns:
            Number of groups refreshed
        """
        if self.rest_client is None:
            raise ValueError("Refreshing stats requires a REST client")

        targets = [
            group for group in groups
            if is_stats_eligible(group)
            and (not only_stale or group.stats is None or group.stats.is_stale)
        ]
        logger.info(f"Refreshing stats for {len(targets)} repositories")

        results = run_batches(
            targets,
            self.refresh_batch_size,
            self._lookup,
            inter_batch_delay=self.refresh_delay,
            cancel_event=cancel_event,
            sleep=self.sleep,
        )
        for group, stats in zip(targets, results):
            group.stats = stats

        rate_limited = sum(1 for stats in results if stats.is_rate_limit)
        if rate_limited:
            logger.warning(f"{rate_limited} repositories still rate limited")
        return len(results)
