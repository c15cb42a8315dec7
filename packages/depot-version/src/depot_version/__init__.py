# SPDX-License-Identifier: MIT
"""Package version parsing, comparison and ranges for Depot.

Example:
    >>> from depot_version import parse_version, compare_versions
    >>>
    >>> version = parse_version("1.2-beta.1+build.456")
    >>> version.to_normalized_string()
    '1.2.0-beta.1'
    >>> version.semver_level
    2
    >>>
    >>> compare_versions("1.0.0", "2.0.0")
    -1
"""

__version__ = "0.1.0"

from .semver import (
    SEMVER1,
    SEMVER2,
    VERSION_PATTERN,
    InvalidVersionError,
    Version,
    is_valid_version,
    parse_version,
    try_parse_version,
)
from .compare import (
    compare_versions,
    max_version,
    version_key,
)
from .ranges import (
    VersionRange,
    parse_version_range,
    try_parse_version_range,
)

__all__ = [
    # Version parsing
    "Version",
    "parse_version",
    "try_parse_version",
    "is_valid_version",
    "InvalidVersionError",
    "VERSION_PATTERN",
    "SEMVER1",
    "SEMVER2",
    # Version comparison
    "compare_versions",
    "version_key",
    "max_version",
    # Version ranges
    "VersionRange",
    "parse_version_range",
    "try_parse_version_range",
]
