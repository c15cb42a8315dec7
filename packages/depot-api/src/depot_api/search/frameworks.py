# SPDX-License-Identifier: MIT
"""Target framework names and compatibility.

Frameworks are stored as lower-case short folder names (``net472``,
``netstandard2.0``, ``net8.0``). Compatibility is resolved from a fixed table
of the framework families packages commonly target.
"""

from __future__ import annotations

import re
from typing import Optional

_LONG_FORM = re.compile(
    r"^\.?(?P<family>netframework|netstandard|netcoreapp)"
    r"(?:,version=)?v?(?P<version>\d+(?:\.\d+)*)?$",
    re.IGNORECASE,
)
_SHORT_FORM = re.compile(
    r"^(?P<family>netstandard|netcoreapp|net)(?P<version>\d+(?:\.\d+)*)(?P<platform>-[a-z0-9.]+)?$"
)

NET_FRAMEWORK_VERSIONS = [
    "net11", "net20", "net35", "net40", "net403", "net45", "net451", "net452",
    "net46", "net461", "net462", "net47", "net471", "net472", "net48", "net481",
]
NET_STANDARD_VERSIONS = [
    "1.0", "1.1", "1.2", "1.3", "1.4", "1.5", "1.6", "2.0", "2.1",
]
NET_CORE_APP_VERSIONS = ["1.0", "1.1", "2.0", "2.1", "2.2", "3.0", "3.1"]
NET_VERSIONS = ["5.0", "6.0", "7.0", "8.0", "9.0", "10.0"]

# Highest .NET Standard version each .NET Framework version implements.
_FRAMEWORK_STANDARD = {
    "net45": "1.1",
    "net451": "1.2",
    "net452": "1.2",
    "net46": "1.3",
    "net461": "2.0",
    "net462": "2.0",
    "net47": "2.0",
    "net471": "2.0",
    "net472": "2.0",
    "net48": "2.0",
    "net481": "2.0",
}


def _version_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


def _two_part(version: str) -> str:
    parts = version.split(".")
    while len(parts) < 2:
        parts.append("0")
    return ".".join(parts)


def get_short_folder_name(framework: str) -> str:
    """Convert a framework name to its lower-case short folder name.

    Examples:
        >>> get_short_folder_name(".NETFramework4.7.2")
        'net472'
        >>> get_short_folder_name(".NETStandard,Version=v2.0")
        'netstandard2.0'
        >>> get_short_folder_name("net8.0")
        'net8.0'
    """
    name = framework.strip()
    match = _LONG_FORM.match(name)
    if not match:
        return name.lower()

    family = match.group("family").lower()
    version = match.group("version") or "0.0"
    if family == "netframework":
        return "net" + version.replace(".", "").rstrip("0").ljust(2, "0")
    if family == "netcoreapp" and _version_tuple(version)[0] >= 5:
        return f"net{_two_part(version)}"
    return f"{family}{_two_part(version)}"


def _standard_up_to(maximum: Optional[str]) -> list[str]:
    if maximum is None:
        return []
    limit = _version_tuple(maximum)
    return [f"netstandard{v}" for v in NET_STANDARD_VERSIONS if _version_tuple(v) <= limit]


def _core_standard(version: tuple[int, ...]) -> str:
    if version[0] < 2:
        return "1.6"
    if version[0] == 2:
        return "2.0"
    return "2.1"


class FrameworkCompatibilityService:
    """Resolves which package frameworks a consuming framework can use."""

    def find_all_compatible_frameworks(self, framework: str) -> list[str]:
        """Return the monikers of every framework compatible with ``framework``.

        The result always contains the framework itself and ``any``.
        """
        short = get_short_folder_name(framework)
        compatible = [short]

        match = _SHORT_FORM.match(short)
        if match:
            family = match.group("family")
            version = match.group("version")
            platform = match.group("platform")

            if family == "netstandard":
                compatible += _standard_up_to(version)
            elif family == "netcoreapp":
                target = _version_tuple(version)
                compatible += [
                    f"netcoreapp{v}" for v in NET_CORE_APP_VERSIONS if _version_tuple(v) <= target
                ]
                compatible += _standard_up_to(_core_standard(target))
            elif "." in version and _version_tuple(version)[0] >= 5:
                target = _version_tuple(version)
                for v in NET_VERSIONS:
                    if _version_tuple(v) <= target:
                        compatible.append(f"net{v}")
                        if platform:
                            compatible.append(f"net{v}{platform}")
                compatible += [f"netcoreapp{v}" for v in NET_CORE_APP_VERSIONS]
                compatible += _standard_up_to("2.1")
            elif short in NET_FRAMEWORK_VERSIONS:
                index = NET_FRAMEWORK_VERSIONS.index(short)
                compatible += NET_FRAMEWORK_VERSIONS[: index + 1]
                compatible += _standard_up_to(_FRAMEWORK_STANDARD.get(short))

        compatible.append("any")
        return list(dict.fromkeys(compatible))
