"""GitHub GraphQL API client for bulk repository stats, with rate limiting and retry logic."""

import json
import time
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Sequence

import requests

from theme_gallery.domain.theme import RepoStats, RepositoryIdentity

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitExceeded(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded (HTTP 403/429 or RATE_LIMITED)."""
    pass


@dataclass
class StatsBatch:
    """
    Result of one aliased bulk stats query.

    ``stats[i]`` belongs to the i-th requested repository and is None when
    GitHub returned nothing for its alias.
    """

    stats: List[Optional[RepoStats]]
    errors: List[str] = field(default_factory=list)
    remaining: Optional[int] = None


REPOSITORY_FIELDS = """
            stargazers { totalCount }
            pushedAt
            updatedAt
            description
            licenseInfo { spdxId name }
            issues(states: OPEN) { totalCount }
"""


def alias_for(index: int) -> str:
    return f"repo{index}"


def build_stats_query(identities: Sequence[RepositoryIdentity]) -> str:
    """
    Build one query with an aliased ``repository`` lookup per identity.

    Owner and name are embedded as JSON string literals, which are valid
    GraphQL strings, so odd characters in a descriptor link cannot break
    the query.
    """
    parts = []
    for index, identity in enumerate(identities):
        parts.append(
            f"{alias_for(index)}: repository(owner: {json.dumps(identity.owner)}, "
            f"name: {json.dumps(identity.name)}) {{{REPOSITORY_FIELDS}}}"
        )
    parts.append("rateLimit { cost remaining resetAt }")
    return "query {\n" + "\n".join(parts) + "\n}"


def parse_repository_node(node: Dict[str, Any]) -> RepoStats:
    """
    Convert an aliased ``repository`` node into stats.

    A node without a star count is treated as a failed lookup rather than
    as a repository with zero stars.
    """
    stargazers = node.get("stargazers") or {}
    stars = stargazers.get("totalCount")
    if stars is None:
        return RepoStats.failed()

    license_info = node.get("licenseInfo") or {}
    issues = node.get("issues") or {}
    return RepoStats(
        stars=stars,
        last_commit_at=node.get("pushedAt") or node.get("updatedAt") or "",
        description=node.get("description"),
        license=license_info.get("spdxId") or license_info.get("name"),
        open_issues=issues.get("totalCount"),
        error=False,
    )


def _is_rate_limit_error(error: Dict[str, Any]) -> bool:
    return error.get("type") == "RATE_LIMITED" or "rate limit" in error.get("message", "").lower()


class GitHubGraphQLClient:
    """Client for GitHub GraphQL API with rate limiting and retry mechanisms."""

    # Authenticated GraphQL requests get 5,000 points per hour. A 50-repository
    # aliased query costs a single point, so batching is far cheaper than REST.

    GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
    USER_AGENT = "Typora-Theme-Gallery-Builder"
    MAX_RETRIES = 5
    RETRY_DELAY_SECONDS = 1
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub GraphQL client.

        Args:
            token: GitHub personal access token. If None, uses GITHUB_TOKEN env var.
            timeout: Per-request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN")

        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Content-Type": "application/json",
            "User-Agent": self.USER_AGENT,
        }

        if self.token:
            self.headers["Authorization"] = f"bearer {self.token}"

    def _execute_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query with retry logic.

        Partial results are normal for aliased queries: the full response
        body, ``data`` and ``errors`` alike, is returned to the caller.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            GraphQL response body

        Raises:
            RateLimitExceeded: If rate limit is exceeded
            GitHubAPIError: If authentication fails or retries run out
            requests.RequestException: If request fails after retries
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        for attempt in range(self.MAX_RETRIES):
            try:
                response = self.session.post(
                    self.GRAPHQL_ENDPOINT,
                    json=payload,
                    headers=self.headers,
                    timeout=self.timeout
                )

                if response.status_code == 200:
                    body = response.json()
                    errors = body.get("errors") or []

                    # A rate-limited query comes back as 200 with no data at all
                    if errors and not body.get("data") and any(_is_rate_limit_error(e) for e in errors):
                        messages = [err.get("message", "") for err in errors]
                        raise RateLimitExceeded(f"Rate limit exceeded: {messages}")

                    return body

                elif response.status_code == 401:
                    raise GitHubAPIError("Authentication failed. Check your GitHub token.", 401)
                elif response.status_code in (403, 429):
                    remaining = int(response.headers.get("X-RateLimit-Remaining", 0))
                    reset_time = int(response.headers.get("X-RateLimit-Reset", 0))

                    if remaining == 0 and attempt < self.MAX_RETRIES - 1:
                        wait_time = max(reset_time - int(time.time()), 0) + 10
                        logger.warning(f"Rate limit exceeded. Waiting {wait_time} seconds...")
                        time.sleep(wait_time)
                        continue
                    raise RateLimitExceeded(
                        f"Rate limited or forbidden: {response.status_code}", response.status_code
                    )

                else:
                    response.raise_for_status()

            except requests.exceptions.RequestException as e:
                if attempt < self.MAX_RETRIES - 1:
                    delay = self.RETRY_DELAY_SECONDS * (2 ** attempt)  # Exponential backoff
                    logger.warning(f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. Retrying in {delay}s...")
                    time.sleep(delay)
                else:
                    raise

        raise GitHubAPIError("Max retries exceeded")

    def fetch_repository_stats(self, identities: Sequence[RepositoryIdentity]) -> StatsBatch:
        """
        Fetch stats for many repositories in a single aliased query.

        Args:
            identities: Repositories to look up (one alias each)

        Returns:
            StatsBatch aligned with ``identities``
        """
        if not identities:
            return StatsBatch(stats=[])

        body = self._execute_query(build_stats_query(identities))
        data = body.get("data") or {}
        errors = [err.get("message", "") for err in body.get("errors") or []]

        stats: List[Optional[RepoStats]] = []
        for index in range(len(identities)):
            node = data.get(alias_for(index))
            stats.append(parse_repository_node(node) if node else None)

        rate_limit = data.get("rateLimit") or {}
        return StatsBatch(stats=stats, errors=errors, remaining=rate_limit.get("remaining"))
