# SPDX-License-Identifier: MIT
"""Package version parsing for Depot.

Accepts the loose version format used by package manifests:

- One to four numeric components: 1, 1.2, 1.2.3, 1.2.3.4
- Optional pre-release labels: -alpha, -beta.2, -rc.1
- Optional build metadata: +build, +sha.5114f85

Missing minor/patch components default to zero, so "1.2" and "1.2.0" are the
same version. Build metadata never takes part in equality or ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional

VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+)"
    r"(?:\.(?P<patch>\d+)"
    r"(?:\.(?P<revision>\d+))?)?)?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<buildmetadata>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

SEMVER1 = 1
SEMVER2 = 2


class InvalidVersionError(Exception):
    """Raised when a version string cannot be parsed."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        self.message = message or f"Invalid package version: {version}"
        super().__init__(self.message)


def _label_key(label: str) -> tuple[int, int, str]:
    # Numeric identifiers sort below alphanumeric ones and compare as numbers.
    if label.isdigit():
        return (0, int(label), "")
    return (1, 0, label.lower())


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """Represents a parsed package version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        revision: Fourth version component, zero when absent
        prerelease: Optional pre-release labels (e.g., "beta.2", "rc")
        build: Optional build metadata (ignored for equality and ordering)
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        return self.to_full_string()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence_key() == other.precedence_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __hash__(self) -> int:
        return hash(self.precedence_key())

    def precedence_key(self) -> tuple:
        """Return a tuple ordering versions by SemVer 2.0.0 precedence.

        A release sorts after every pre-release of the same numbers. Pre-release
        labels compare left to right and a longer label list wins a tie.
        """
        numbers = (self.major, self.minor, self.patch, self.revision)
        if not self.prerelease:
            return (*numbers, 1, ())
        return (*numbers, 0, tuple(_label_key(label) for label in self.release_labels))

    @property
    def is_prerelease(self) -> bool:
        """Return True if this is a pre-release version."""
        return bool(self.prerelease)

    @property
    def release_labels(self) -> tuple[str, ...]:
        """Return the dot-separated pre-release labels."""
        if not self.prerelease:
            return ()
        return tuple(self.prerelease.split("."))

    @property
    def has_metadata(self) -> bool:
        return bool(self.build)

    @property
    def semver_level(self) -> int:
        """Return 2 when the version needs SemVer 2.0.0 aware clients, else 1."""
        if len(self.release_labels) > 1 or self.has_metadata:
            return SEMVER2
        return SEMVER1

    def to_normalized_string(self) -> str:
        """Return the normalized form: three components, revision only when set."""
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            version += f".{self.revision}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        return version

    def to_full_string(self) -> str:
        """Return the normalized form including build metadata."""
        version = self.to_normalized_string()
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(version_string: str) -> Version:
    """Parse a version string into a Version object.

    Args:
        version_string: A string such as "1.0", "1.2.3-beta.1" or "2.0.0.1+build"

    Returns:
        A Version object with parsed components

    Raises:
        InvalidVersionError: If the string is not a valid package version

    Examples:
        >>> parse_version("1.2")
        Version(major=1, minor=2, patch=0, revision=0, prerelease=None, build=None)

        >>> parse_version("1.0.0-beta.1+sha.1234").to_normalized_string()
        '1.0.0-beta.1'
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    version_string = version_string.strip()
    if not version_string:
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = VERSION_PATTERN.match(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        revision=int(match.group("revision") or 0),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )


def try_parse_version(version_string: str) -> Optional[Version]:
    """Parse a version string, returning None instead of raising."""
    try:
        return parse_version(version_string)
    except InvalidVersionError:
        return None


def is_valid_version(version_string: str) -> bool:
    """Check if a string is a valid package version.

    Examples:
        >>> is_valid_version("1.0")
        True
        >>> is_valid_version("1.0.0.0.0")
        False
    """
    if not isinstance(version_string, str):
        return False
    return VERSION_PATTERN.match(version_string.strip()) is not None
