"""Domain entities for theme descriptors, repository groups and their stats."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


UNKNOWN_OWNER = "unknown"
AUTHOR_GROUP_PREFIX = "author/"
STANDALONE_GROUP_PREFIX = "standalone/"


@dataclass(frozen=True)
class RepositoryIdentity:
    """Canonical (owner, name) pair of a GitHub repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class ThemeDescriptor:
    """Immutable theme entry parsed from one descriptor file."""

    id: str
    file_name: str
    title: str
    author: Optional[str] = None
    homepage: Optional[str] = None
    download: Optional[str] = None
    thumbnail: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    repo_owner: Optional[str] = None
    repo_name: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the artifact's camelCase theme record."""
        data: Dict[str, Any] = dict(self.extra)
        data.update({
            "id": self.id,
            "fileName": self.file_name,
            "title": self.title,
        })
        optional = {
            "author": self.author,
            "homepage": self.homepage,
            "download": self.download,
            "thumbnail": self.thumbnail,
            "description": self.description,
            "category": self.category,
            "repoOwner": self.repo_owner,
            "repoName": self.repo_name,
        }
        for key, value in optional.items():
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThemeDescriptor":
        known = {
            "id", "fileName", "title", "author", "homepage", "download",
            "thumbnail", "description", "category", "repoOwner", "repoName",
        }
        return cls(
            id=data["id"],
            file_name=data.get("fileName", data["id"]),
            title=data["title"],
            author=data.get("author"),
            homepage=data.get("homepage"),
            download=data.get("download"),
            thumbnail=data.get("thumbnail"),
            description=data.get("description"),
            category=data.get("category"),
            repo_owner=data.get("repoOwner"),
            repo_name=data.get("repoName"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class RepoStats:
    """
    Popularity/activity snapshot for a repository.

    Exactly one of these holds: normal data, ``is_not_found``, or ``error``.
    ``is_rate_limit`` is only ever set together with ``error``.
    """

    stars: int
    last_commit_at: str
    license: Optional[str] = None
    open_issues: Optional[int] = None
    description: Optional[str] = None
    error: bool = False
    is_rate_limit: bool = False
    is_not_found: bool = False

    @classmethod
    def not_found(cls) -> "RepoStats":
        return cls(stars=0, last_commit_at="", is_not_found=True, error=False)

    @classmethod
    def rate_limited(cls) -> "RepoStats":
        return cls(stars=0, last_commit_at="", error=True, is_rate_limit=True)

    @classmethod
    def failed(cls) -> "RepoStats":
        return cls(stars=0, last_commit_at="", error=True)

    @property
    def is_stale(self) -> bool:
        """True when the snapshot is an error that a later lookup could fix."""
        return self.error

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "stars": self.stars,
            "lastCommitAt": self.last_commit_at,
        }
        if self.license is not None:
            data["license"] = self.license
        if self.open_issues is not None:
            data["openIssues"] = self.open_issues
        if self.description is not None:
            data["description"] = self.description
        data["error"] = self.error
        if self.is_rate_limit:
            data["isRateLimit"] = True
        if self.is_not_found:
            data["isNotFound"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepoStats":
        return cls(
            stars=int(data.get("stars") or 0),
            last_commit_at=data.get("lastCommitAt") or "",
            license=data.get("license"),
            open_issues=data.get("openIssues"),
            description=data.get("description"),
            error=bool(data.get("error", False)),
            is_rate_limit=bool(data.get("isRateLimit", False)),
            is_not_found=bool(data.get("isNotFound", False)),
        )


@dataclass
class ThemeGroup:
    """
    One row of the artifact: themes attributed to the same repository,
    author, or standalone entry.

    Stats are attached after grouping, so unlike the other entities this one
    is mutable.
    """

    id: str
    repo_owner: str
    repo_name: str
    themes: List[ThemeDescriptor] = field(default_factory=list)
    stats: Optional[RepoStats] = None
    loading_stats: bool = False

    @property
    def identity(self) -> RepositoryIdentity:
        return RepositoryIdentity(owner=self.repo_owner, name=self.repo_name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "repoOwner": self.repo_owner,
            "repoName": self.repo_name,
            "themes": [theme.to_dict() for theme in self.themes],
            "loadingStats": self.loading_stats,
        }
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThemeGroup":
        stats = data.get("stats")
        return cls(
            id=data["id"],
            repo_owner=data["repoOwner"],
            repo_name=data["repoName"],
            themes=[ThemeDescriptor.from_dict(item) for item in data.get("themes", [])],
            stats=RepoStats.from_dict(stats) if stats else None,
            loading_stats=bool(data.get("loadingStats", False)),
        )
