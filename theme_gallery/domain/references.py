"""Resolution of repository links, thumbnails and titles for theme descriptors."""

import re
from typing import Dict, Optional
from urllib.parse import urlsplit

from theme_gallery.domain.frontmatter import parse_frontmatter
from theme_gallery.domain.theme import RepositoryIdentity, ThemeDescriptor


GITHUB_HOSTS = ("github.com", "www.github.com")

DESCRIPTOR_FIELDS = (
    "title", "author", "homepage", "download", "thumbnail", "description", "category",
)

# Keys the theme record derives itself; front matter cannot override them.
RESERVED_KEYS = DESCRIPTOR_FIELDS + ("id", "fileName", "repoOwner", "repoName")

_DATE_PREFIX = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}-")
_MD_SUFFIX = re.compile(r"\.md$", re.IGNORECASE)


def resolve_repository(url: Optional[str]) -> Optional[RepositoryIdentity]:
    """
    Resolve a GitHub URL into its (owner, name) identity.

    Anything that is not a well-formed github.com URL with at least two
    path segments is unresolved; no partial identity is ever guessed.
    Deep links such as ``/owner/repo/releases/tag/v1`` resolve to the
    repository itself.
    """
    if not url:
        return None

    clean_url = url.strip().rstrip("/")
    if clean_url.endswith(".git"):
        clean_url = clean_url[:-4]

    try:
        parts = urlsplit(clean_url)
        hostname = parts.hostname
    except ValueError:
        return None

    if not parts.scheme or hostname not in GITHUB_HOSTS:
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < 2:
        return None
    return RepositoryIdentity(owner=segments[0], name=segments[1])


def normalize_thumbnail(thumbnail: Optional[str], base_url: str) -> Optional[str]:
    """Prefix relative thumbnail references with the media base URL."""
    if not thumbnail:
        return None
    if thumbnail.startswith("http"):
        return thumbnail
    if thumbnail.startswith("/"):
        thumbnail = thumbnail[1:]
    return f"{base_url}{thumbnail}"


def title_from_filename(file_name: str) -> str:
    # 2024-03-19-keepstyle.md -> keepstyle
    return _DATE_PREFIX.sub("", _MD_SUFFIX.sub("", file_name))


def build_descriptor(file_name: str, text: str, thumbnail_base_url: str) -> ThemeDescriptor:
    """
    Build a theme descriptor from a raw descriptor document.

    The repository identity comes from the homepage, falling back to the
    download link when the homepage does not resolve.

    Args:
        file_name: Descriptor file name, also used as the theme id
        text: Raw document text
        thumbnail_base_url: Base URL for relative thumbnail references

    Returns:
        Parsed and resolved descriptor
    """
    frontmatter = parse_frontmatter(text)
    fields: Dict[str, Optional[str]] = {
        key: (frontmatter.get(key) or None) for key in DESCRIPTOR_FIELDS
    }

    identity = resolve_repository(fields["homepage"]) or resolve_repository(fields["download"])

    return ThemeDescriptor(
        id=file_name,
        file_name=file_name,
        title=fields["title"] or title_from_filename(file_name),
        author=fields["author"],
        homepage=fields["homepage"],
        download=fields["download"],
        thumbnail=normalize_thumbnail(fields["thumbnail"], thumbnail_base_url),
        description=fields["description"],
        category=fields["category"],
        repo_owner=identity.owner if identity else None,
        repo_name=identity.name if identity else None,
        extra={k: v for k, v in frontmatter.items() if k not in RESERVED_KEYS},
    )
