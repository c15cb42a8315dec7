# SPDX-License-Identifier: MIT
"""Version comparison following SemVer 2.0.0 precedence.

Pre-release labels compare case-insensitively; numeric labels compare
numerically and sort below alphanumeric ones. Build metadata is ignored.
"""

from __future__ import annotations

from typing import Iterable, Union

from .semver import Version, parse_version


def _coerce(version: Union[str, Version]) -> Version:
    return parse_version(version) if isinstance(version, str) else version


def compare_versions(version1: Union[str, Version], version2: Union[str, Version]) -> int:
    """Compare two versions.

    Args:
        version1: First version (string or Version object)
        version2: Second version (string or Version object)

    Returns:
        -1 if version1 < version2
        0 if version1 == version2
        1 if version1 > version2

    Raises:
        InvalidVersionError: If either version string is invalid

    Examples:
        >>> compare_versions("1.0", "1.0.0")
        0
        >>> compare_versions("1.0.0-rc.1", "1.0.0")
        -1
        >>> compare_versions("1.0.0-beta.11", "1.0.0-beta.2")
        1
    """
    key1 = _coerce(version1).precedence_key()
    key2 = _coerce(version2).precedence_key()
    if key1 == key2:
        return 0
    return -1 if key1 < key2 else 1


def version_key(version: Union[str, Version]) -> tuple:
    """Return a sort key for a version, suitable for sorting.

    Examples:
        >>> sorted(["1.0.0", "2.0.0", "1.0.0-alpha"], key=version_key)
        ['1.0.0-alpha', '1.0.0', '2.0.0']
    """
    return _coerce(version).precedence_key()


def max_version(versions: Iterable[Union[str, Version]]) -> Version | None:
    """Return the highest version, or None for an empty iterable."""
    parsed = [_coerce(v) for v in versions]
    if not parsed:
        return None
    return max(parsed)
