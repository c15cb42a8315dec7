# SPDX-License-Identifier: MIT
"""Dependency version ranges in interval notation.

Supported forms:

- ``1.0``          minimum version, inclusive
- ``[1.0]``        exact version
- ``[1.0,2.0)``    inclusive minimum, exclusive maximum
- ``(,3.0]``       no minimum, inclusive maximum
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .semver import InvalidVersionError, Version, parse_version


@dataclass(frozen=True, slots=True)
class VersionRange:
    """An interval of versions.

    Attributes:
        min_version: Lower bound, or None for unbounded
        max_version: Upper bound, or None for unbounded
        include_min: Whether the lower bound itself satisfies the range
        include_max: Whether the upper bound itself satisfies the range
    """

    min_version: Optional[Version] = None
    max_version: Optional[Version] = None
    include_min: bool = True
    include_max: bool = False

    def satisfies(self, version: Version) -> bool:
        """Return True if the version falls inside this range."""
        if self.min_version is not None:
            if version < self.min_version:
                return False
            if version == self.min_version and not self.include_min:
                return False
        if self.max_version is not None:
            if version > self.max_version:
                return False
            if version == self.max_version and not self.include_max:
                return False
        return True

    def to_normalized_string(self) -> str:
        """Return the range in normalized interval notation.

        Examples:
            >>> parse_version_range("1.0").to_normalized_string()
            '[1.0.0, )'
            >>> parse_version_range("[1.0]").to_normalized_string()
            '[1.0.0]'
        """
        if (
            self.min_version is not None
            and self.min_version == self.max_version
            and self.include_min
            and self.include_max
        ):
            return f"[{self.min_version.to_normalized_string()}]"

        left = "[" if self.include_min and self.min_version is not None else "("
        right = "]" if self.include_max and self.max_version is not None else ")"
        low = self.min_version.to_normalized_string() if self.min_version is not None else ""
        high = self.max_version.to_normalized_string() if self.max_version is not None else ""
        return f"{left}{low}, {high}{right}"

    def __str__(self) -> str:
        return self.to_normalized_string()


def parse_version_range(range_string: str) -> VersionRange:
    """Parse a version range string.

    Raises:
        InvalidVersionError: If the range or one of its bounds is malformed
    """
    text = (range_string or "").strip()
    if not text:
        raise InvalidVersionError(range_string or "", "Version range cannot be empty")

    if text[0] not in "[(":
        return VersionRange(min_version=parse_version(text), include_min=True)

    if len(text) < 3 or text[-1] not in ")]":
        raise InvalidVersionError(text, f"Invalid version range: {text}")

    include_min = text[0] == "["
    include_max = text[-1] == "]"
    body = text[1:-1]

    if "," not in body:
        # Exact match: only "[x]" is meaningful.
        if not (include_min and include_max):
            raise InvalidVersionError(text, f"Invalid version range: {text}")
        exact = parse_version(body)
        return VersionRange(exact, exact, True, True)

    parts = body.split(",")
    if len(parts) != 2:
        raise InvalidVersionError(text, f"Invalid version range: {text}")

    low_text, high_text = (part.strip() for part in parts)
    min_version = parse_version(low_text) if low_text else None
    max_version = parse_version(high_text) if high_text else None

    if min_version is None and max_version is None:
        raise InvalidVersionError(text, f"Version range has no bounds: {text}")
    if min_version is not None and max_version is not None and max_version < min_version:
        raise InvalidVersionError(text, f"Version range upper bound is below lower bound: {text}")

    return VersionRange(
        min_version=min_version,
        max_version=max_version,
        include_min=include_min and min_version is not None,
        include_max=include_max and max_version is not None,
    )


def try_parse_version_range(range_string: Optional[str]) -> Optional[VersionRange]:
    """Parse a version range, returning None instead of raising."""
    if range_string is None:
        return None
    try:
        return parse_version_range(range_string)
    except InvalidVersionError:
        return None
