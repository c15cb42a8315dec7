# SPDX-License-Identifier: MIT
"""Version retention policy.

Given every known version of one package, decide which versions fall outside
the configured quotas. The policy is a pure function; deleting the versions it
returns is up to the caller.
"""

from collections import defaultdict
from typing import Callable, Hashable, Iterable, Optional, TypeVar

from depot_version import Version

from ..config import RetentionConfig

K = TypeVar("K", bound=Hashable)


def _group(versions: Iterable[Version], key: Callable[[Version], K]) -> dict[K, list[Version]]:
    groups: dict[K, list[Version]] = defaultdict(list)
    for version in versions:
        groups[key(version)].append(version)
    return groups


def _newest_groups(groups: dict[K, list[Version]], limit: Optional[int]) -> list[list[Version]]:
    """Return the ``limit`` groups with the highest keys, or all when unlimited."""
    ordered = [groups[key] for key in sorted(groups, reverse=True)]
    if limit:
        return ordered[:limit]
    return ordered


def _newest(versions: list[Version], limit: Optional[int]) -> list[Version]:
    ordered = sorted(versions, reverse=True)
    if limit:
        return ordered[:limit]
    return ordered


def find_prunable_versions(versions: Iterable[Version], options: RetentionConfig) -> list[Version]:
    """Return the versions that exceed the retention quotas.

    Versions are partitioned by major, then minor, then patch number (a fourth
    revision component stays within its patch group), and only the newest
    groups within each quota are kept. Within a kept patch group, pre-release
    versions are partitioned by their first release label (case-insensitive)
    and only the newest ``max_prerelease_versions`` of each label are kept.
    Stable versions are never affected by the pre-release quota.

    Args:
        versions: Every known version of one package
        options: Retention quotas; None or 0 disables a tier

    Returns:
        Versions to delete, in ascending order
    """
    all_versions = list(versions)
    keep: set[Version] = set()

    majors = _group(all_versions, lambda v: v.major)
    for major_group in _newest_groups(majors, options.max_major_versions):
        minors = _group(major_group, lambda v: v.minor)
        for minor_group in _newest_groups(minors, options.max_minor_versions):
            patches = _group(minor_group, lambda v: v.patch)
            for patch_group in _newest_groups(patches, options.max_patch_versions):
                keep.update(v for v in patch_group if not v.is_prerelease)

                labels = _group(
                    (v for v in patch_group if v.is_prerelease),
                    lambda v: v.release_labels[0].lower(),
                )
                for label_group in labels.values():
                    keep.update(_newest(label_group, options.max_prerelease_versions))

    return sorted(v for v in all_versions if v not in keep)
