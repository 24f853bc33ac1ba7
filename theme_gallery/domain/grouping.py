"""Grouping of theme descriptors into repository-level groups."""

from typing import Dict, Iterable, List

from theme_gallery.domain.theme import (
    AUTHOR_GROUP_PREFIX,
    STANDALONE_GROUP_PREFIX,
    UNKNOWN_OWNER,
    ThemeDescriptor,
    ThemeGroup,
)


DEFAULT_AUTHOR_REPO_NAME = "themes"


def group_key(descriptor: ThemeDescriptor) -> tuple[str, str, str]:
    """
    Return ``(group_id, owner, name)`` for a descriptor.

    Tiers, first match wins:
    1. resolved GitHub repository -> ``owner/name``
    2. declared author -> ``author/<author>``
    3. anything else -> ``standalone/<descriptor id>``
    """
    if descriptor.repo_owner and descriptor.repo_name:
        return (
            f"{descriptor.repo_owner}/{descriptor.repo_name}",
            descriptor.repo_owner,
            descriptor.repo_name,
        )

    if descriptor.author:
        return (
            f"{AUTHOR_GROUP_PREFIX}{descriptor.author}",
            descriptor.author,
            descriptor.repo_name or DEFAULT_AUTHOR_REPO_NAME,
        )

    return (
        f"{STANDALONE_GROUP_PREFIX}{descriptor.id}",
        UNKNOWN_OWNER,
        descriptor.title,
    )


def group_descriptors(descriptors: Iterable[ThemeDescriptor]) -> List[ThemeGroup]:
    """Cluster descriptors into groups, keeping first-seen order throughout."""
    groups: Dict[str, ThemeGroup] = {}
    for descriptor in descriptors:
        group_id, owner, name = group_key(descriptor)
        group = groups.get(group_id)
        if group is None:
            group = ThemeGroup(id=group_id, repo_owner=owner, repo_name=name or UNKNOWN_OWNER)
            groups[group_id] = group
        group.themes.append(descriptor)
    return list(groups.values())


def is_stats_eligible(group: ThemeGroup) -> bool:
    """Only groups keyed by a resolved repository can be looked up on GitHub."""
    return (
        group.repo_owner != UNKNOWN_OWNER
        and not group.id.startswith(AUTHOR_GROUP_PREFIX)
        and not group.id.startswith(STANDALONE_GROUP_PREFIX)
    )
