"""GitHub REST client: descriptor listing, raw descriptor content, single repository stats."""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Dict, Any

import requests

from theme_gallery.domain.theme import RepoStats
from theme_gallery.infrastructure.github_client import GitHubAPIError, RateLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentFile:
    """One entry of a GitHub directory listing."""

    name: str
    download_url: str


class GitHubRestClient:
    """Client for the GitHub REST API and raw file downloads."""

    API_ROOT = "https://api.github.com"
    CONTENTS_URL = (
        "https://api.github.com/repos/typora/theme.typora.io/contents/_posts/theme?ref=gh-pages"
    )
    DESCRIPTOR_EXTENSION = ".md"
    USER_AGENT = "Typora-Theme-Gallery-Builder"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        token: Optional[str] = None,
        contents_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: GitHub token for a higher request quota. If None, uses GITHUB_TOKEN env var.
            contents_url: Directory-listing endpoint of the descriptor index
            timeout: Per-request timeout in seconds
            session: Optional requests session
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN")

        self.token = token
        self.contents_url = contents_url or self.CONTENTS_URL
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT,
        }
        if self.token:
            self.headers["Authorization"] = f"token {self.token}"

    def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        response = self.session.get(url, headers=headers, timeout=self.timeout)
        if response.status_code in (403, 429):
            raise RateLimitExceeded(f"Rate limit exceeded for {url}", response.status_code)
        if not 200 <= response.status_code < 300:
            raise GitHubAPIError(f"Status Code: {response.status_code} for {url}", response.status_code)
        return response

    def list_descriptor_files(self) -> List[ContentFile]:
        """
        List descriptor files in the theme index.

        Returns:
            Markdown files of the listing, in listing order

        Raises:
            RateLimitExceeded: On HTTP 403/429
            GitHubAPIError: On any other non-2xx status or a non-array listing
            requests.RequestException: On transport failure
        """
        payload: Any = self._get(self.contents_url, headers=self.headers).json()
        if not isinstance(payload, list):
            raise GitHubAPIError(f"Unexpected listing payload from {self.contents_url}")

        return [
            ContentFile(name=entry["name"], download_url=entry["download_url"])
            for entry in payload
            if entry.get("name", "").endswith(self.DESCRIPTOR_EXTENSION) and entry.get("download_url")
        ]

    def fetch_text(self, url: str) -> str:
        """Download raw descriptor content."""
        return self._get(url, headers={"User-Agent": self.USER_AGENT}).text

    def get_repository_stats(self, owner: str, name: str) -> RepoStats:
        """
        Fetch stats for one repository.

        Never raises: rate limits, missing repositories and any other failure
        come back as flagged RepoStats.
        """
        url = f"{self.API_ROOT}/repos/{owner}/{name}"
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)

            if response.status_code in (403, 429):
                return RepoStats.rate_limited()
            # Not found is not an error: retrying will not help
            if response.status_code == 404:
                return RepoStats.not_found()
            if not 200 <= response.status_code < 300:
                logger.warning(f"GitHub {response.status_code} for {owner}/{name}")
                return RepoStats.failed()

            data = response.json()
            if not isinstance(data, dict):
                logger.warning(f"Unexpected stats payload for {owner}/{name}")
                return RepoStats.failed()

            license_info = data.get("license") or {}
            return RepoStats(
                stars=data.get("stargazers_count") or 0,
                last_commit_at=data.get("pushed_at") or data.get("updated_at") or "",
                license=license_info.get("spdx_id") or license_info.get("name"),
                open_issues=data.get("open_issues_count"),
                description=data.get("description"),
                error=False,
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Stats lookup failed for {owner}/{name}: {e}")
            return RepoStats.failed()
