# SPDX-License-Identifier: MIT
"""Helpers for turning upstream metadata into transient package rows."""

import re
from datetime import UTC, datetime
from typing import Any, Optional

from depot_version import try_parse_version_range

from ..db.models import PackageDependency, TargetFramework
from ..search.frameworks import get_short_folder_name

_AUTHOR_SEPARATORS = re.compile(r"[,;\t\n\r]")
_TAG_SEPARATORS = re.compile(r"[\s;,]+")


def split_authors(authors: Any) -> list[str]:
    """Split an author string (or list) into trimmed names."""
    if not authors:
        return []
    if isinstance(authors, list):
        return [str(a).strip() for a in authors if str(a).strip()]
    return [a.strip() for a in _AUTHOR_SEPARATORS.split(str(authors)) if a.strip()]


def split_tags(tags: Any) -> list[str]:
    """Split a tag string (or list) into individual tags."""
    if not tags:
        return []
    if isinstance(tags, list):
        return [str(t).strip() for t in tags if str(t).strip()]
    return [t for t in _TAG_SEPARATORS.split(str(tags)) if t]


def normalize_range(version_range: Optional[str]) -> Optional[str]:
    if not version_range:
        return None
    parsed = try_parse_version_range(version_range)
    return parsed.to_normalized_string() if parsed is not None else version_range


def dependency_group(
    target_framework: Optional[str], dependencies: list[tuple[Optional[str], Optional[str]]]
) -> list[PackageDependency]:
    """Build the rows of one dependency group.

    An empty group becomes a single row with no id and no range, recording that
    the framework is supported without dependencies.
    """
    framework = get_short_folder_name(target_framework) if target_framework else None
    if not dependencies:
        return [PackageDependency(id=None, version_range=None, target_framework=framework)]
    return [
        PackageDependency(
            id=dependency_id,
            version_range=normalize_range(version_range),
            target_framework=framework,
        )
        for dependency_id, version_range in dependencies
    ]


def target_frameworks(dependencies: list[PackageDependency]) -> list[TargetFramework]:
    monikers = dict.fromkeys(d.target_framework for d in dependencies if d.target_framework)
    return [TargetFramework(moniker=moniker) for moniker in monikers]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as a UTC-aware datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
