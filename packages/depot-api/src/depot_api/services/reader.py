# SPDX-License-Identifier: MIT
"""Read package archives into catalog rows.

A package is a zip archive with a ``<id>.nuspec`` manifest at its root. Only
the manifest and the paths of the other entries are inspected.
"""

import re
import zipfile
import zlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from depot_version import InvalidVersionError, parse_version, try_parse_version_range

from ..db.models import Package, PackageDependency, PackageType, TargetFramework
from ..search.frameworks import get_short_folder_name

PACKAGE_ID_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*$")
MAX_PACKAGE_ID_LENGTH = 100
# Width of the version columns in the catalog.
MAX_VERSION_LENGTH = 64

# Folders whose second path segment is a target framework.
_FRAMEWORK_FOLDERS = ("lib", "ref", "build", "buildtransitive", "tools")
_TAG_SEPARATORS = re.compile(r"[\s,;]+")

# Version range used for dependencies that do not declare one.
ALL_VERSIONS_RANGE = "(, )"

# Raised by zipfile for corrupt, encrypted or unsupported entries.
_ZIP_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError)


class InvalidPackageError(Exception):
    """Raised when uploaded content cannot be read as a package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass
class PackageArchive:
    """A package read from an archive, ready to be indexed.

    Attributes:
        package: Unsaved catalog row
        content: The raw archive bytes
        nuspec: The manifest bytes
        readme: Embedded readme, if the manifest declares one
        icon: Embedded icon, if the manifest declares one
    """

    package: Package
    content: bytes
    nuspec: bytes
    readme: Optional[bytes] = None
    icon: Optional[bytes] = None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _children(element: Optional[ET.Element], name: str) -> list[ET.Element]:
    if element is None:
        return []
    return [child for child in element if _local_name(child.tag) == name]


def _text(metadata: ET.Element, name: str) -> Optional[str]:
    element = _child(metadata, name)
    if element is None or element.text is None:
        return None
    value = element.text.strip()
    return value or None


def _read_member(archive: zipfile.ZipFile, name: str) -> bytes:
    try:
        return archive.read(name)
    except _ZIP_ERRORS as e:
        raise InvalidPackageError(f"Corrupt archive entry '{name}': {e}") from e


def _read_entry(archive: zipfile.ZipFile, path: str, kind: str) -> bytes:
    wanted = path.replace("\\", "/").lstrip("/").lower()
    for name in archive.namelist():
        if name.lower() == wanted:
            return _read_member(archive, name)
    raise InvalidPackageError(f"The {kind} file '{path}' declared by the manifest is missing")


def _find_nuspec(archive: zipfile.ZipFile) -> str:
    for name in archive.namelist():
        if "/" not in name and name.lower().endswith(".nuspec"):
            return name
    raise InvalidPackageError("Package has no manifest (.nuspec) at its root")


def _parse_dependencies(metadata: ET.Element) -> list[PackageDependency]:
    dependencies_element = _child(metadata, "dependencies")
    if dependencies_element is None:
        return []

    def _dependency(element: ET.Element, framework: Optional[str]) -> PackageDependency:
        version = element.get("version")
        version_range = try_parse_version_range(version) if version else None
        if version_range is not None:
            range_text = version_range.to_normalized_string()
        else:
            range_text = version or ALL_VERSIONS_RANGE
        return PackageDependency(
            id=element.get("id"),
            version_range=range_text,
            target_framework=framework,
        )

    dependencies = []
    for element in _children(dependencies_element, "dependency"):
        dependencies.append(_dependency(element, None))

    for group in _children(dependencies_element, "group"):
        target = group.get("targetFramework")
        framework = get_short_folder_name(target) if target else None
        entries = _children(group, "dependency")
        if not entries:
            # Supported framework without dependencies.
            dependencies.append(
                PackageDependency(id=None, version_range=None, target_framework=framework)
            )
            continue
        dependencies.extend(_dependency(entry, framework) for entry in entries)

    return dependencies


def _parse_package_types(metadata: ET.Element) -> list[PackageType]:
    types_element = _child(metadata, "packageTypes")
    package_types = [
        PackageType(name=element.get("name"), version=element.get("version"))
        for element in _children(types_element, "packageType")
        if element.get("name")
    ]
    return package_types or [PackageType(name="Dependency", version=None)]


def _parse_target_frameworks(
    archive: zipfile.ZipFile, dependencies: list[PackageDependency]
) -> list[TargetFramework]:
    monikers: dict[str, None] = {}
    for dependency in dependencies:
        if dependency.target_framework:
            monikers[dependency.target_framework] = None

    for name in archive.namelist():
        segments = name.split("/")
        if len(segments) >= 3 and segments[0].lower() in _FRAMEWORK_FOLDERS and segments[1]:
            monikers[get_short_folder_name(segments[1])] = None

    return [TargetFramework(moniker=moniker) for moniker in monikers]


def read_package(content: bytes) -> PackageArchive:
    """Read a package archive.

    Args:
        content: The uploaded archive bytes

    Returns:
        The parsed package and its embedded files

    Raises:
        InvalidPackageError: If the archive, manifest, id or version is invalid
    """
    try:
        archive = zipfile.ZipFile(BytesIO(content), "r")
    except _ZIP_ERRORS as e:
        raise InvalidPackageError(f"Package is not a valid zip archive: {e}") from e

    with archive:
        nuspec_name = _find_nuspec(archive)
        nuspec = _read_member(archive, nuspec_name)

        try:
            root = ET.fromstring(nuspec)
        except ET.ParseError as e:
            raise InvalidPackageError(f"Invalid manifest XML: {e}") from e

        metadata = _child(root, "metadata") if _local_name(root.tag) == "package" else None
        if metadata is None:
            raise InvalidPackageError("Manifest has no <metadata> element")

        package_id = _text(metadata, "id")
        if not package_id:
            raise InvalidPackageError("Manifest is missing the package id")
        if len(package_id) > MAX_PACKAGE_ID_LENGTH or not PACKAGE_ID_PATTERN.match(package_id):
            raise InvalidPackageError(f"Invalid package id: {package_id}")

        version_text = _text(metadata, "version")
        if not version_text:
            raise InvalidPackageError("Manifest is missing the package version")
        try:
            version = parse_version(version_text)
        except InvalidVersionError as e:
            raise InvalidPackageError(e.message) from e
        forms = (version_text, version.to_full_string(), version.to_normalized_string())
        if any(len(form) > MAX_VERSION_LENGTH for form in forms):
            raise InvalidPackageError(
                f"Package version is longer than {MAX_VERSION_LENGTH} characters: {version_text}"
            )

        readme_path = _text(metadata, "readme")
        icon_path = _text(metadata, "icon")
        readme = _read_entry(archive, readme_path, "readme") if readme_path else None
        icon = _read_entry(archive, icon_path, "icon") if icon_path else None

        authors = _text(metadata, "authors") or ""
        tags = _text(metadata, "tags") or ""
        repository = _child(metadata, "repository")
        dependencies = _parse_dependencies(metadata)

        package = Package(
            id=package_id,
            version=version,
            authors=[a.strip() for a in authors.split(",") if a.strip()],
            description=_text(metadata, "description"),
            has_readme=readme is not None,
            has_embedded_icon=icon is not None,
            release_notes=_text(metadata, "releaseNotes"),
            language=_text(metadata, "language"),
            min_client_version=metadata.get("minClientVersion"),
            require_license_acceptance=(
                (_text(metadata, "requireLicenseAcceptance") or "").lower() == "true"
            ),
            summary=_text(metadata, "summary"),
            title=_text(metadata, "title"),
            icon_url=_text(metadata, "iconUrl"),
            license_url=_text(metadata, "licenseUrl"),
            project_url=_text(metadata, "projectUrl"),
            repository_url=repository.get("url") if repository is not None else None,
            repository_type=repository.get("type") if repository is not None else None,
            tags=[t for t in _TAG_SEPARATORS.split(tags) if t],
            dependencies=dependencies,
            package_types=_parse_package_types(metadata),
            target_frameworks=_parse_target_frameworks(archive, dependencies),
        )
        package.original_version = version_text

    return PackageArchive(
        package=package,
        content=content,
        nuspec=nuspec,
        readme=readme,
        icon=icon,
    )
