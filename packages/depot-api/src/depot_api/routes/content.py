# SPDX-License-Identifier: MIT
"""Package content endpoints: version lists, archives, manifests, readmes and icons."""

from typing import Annotated, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Header, Response

from depot_version import Version, try_parse_version

from ..auth import require_read_access
from ..checksum import compute_etag, compute_sha256, matches_if_none_match
from ..dependencies import get_content_service
from ..middleware.errors import PackageNotFoundError, VersionNotFoundError
from ..models.responses import PackageVersionsResponse
from ..services.content import PackageContentService

router = APIRouter(dependencies=[Depends(require_read_access)])

IfNoneMatch = Annotated[Optional[str], Header()]

_IMAGE_SIGNATURES = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
]


def detect_image_content_type(data: bytes) -> str:
    """Guess an icon's media type from its leading bytes."""
    for signature, media_type in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return media_type
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def _not_modified(etag: str) -> Response:
    return Response(status_code=304, headers={"ETag": etag})


async def _serve(
    kind: str,
    package_id: str,
    version: str,
    if_none_match: Optional[str],
    load: Callable[[Version], Awaitable[Optional[bytes]]],
    media_type: Optional[str],
) -> Response:
    """Serve one file of a package version with a strong ETag.

    Unparseable versions are reported as missing.
    """
    parsed = try_parse_version(version)
    if parsed is None:
        raise VersionNotFoundError(package_id, version)

    etag = compute_etag(kind, package_id.lower(), parsed.to_normalized_string().lower())
    if matches_if_none_match(if_none_match, etag):
        return _not_modified(etag)

    data = await load(parsed)
    if data is None:
        raise VersionNotFoundError(package_id, version)

    return Response(
        content=data,
        media_type=media_type or detect_image_content_type(data),
        headers={"ETag": etag, "X-Checksum-SHA256": compute_sha256(data)},
    )


@router.get("/v3/package/{package_id}/index.json")
async def get_package_versions(
    package_id: str,
    content: Annotated[PackageContentService, Depends(get_content_service)],
    if_none_match: IfNoneMatch = None,
) -> Response:
    """List the versions of a package, including mirrored upstream versions."""
    versions = await content.get_package_versions_or_none(package_id)
    if versions is None:
        raise PackageNotFoundError(package_id)

    body = PackageVersionsResponse(versions=versions).model_dump_json()
    etag = compute_etag(body)
    if matches_if_none_match(if_none_match, etag):
        return _not_modified(etag)
    return Response(content=body, media_type="application/json", headers={"ETag": etag})


@router.get("/v3/package/{package_id}/{version}/readme")
async def download_readme(
    package_id: str,
    version: str,
    content: Annotated[PackageContentService, Depends(get_content_service)],
    if_none_match: IfNoneMatch = None,
) -> Response:
    return await _serve(
        "readme",
        package_id,
        version,
        if_none_match,
        lambda v: content.get_package_readme_or_none(package_id, v),
        "text/markdown",
    )


@router.get("/v3/package/{package_id}/{version}/icon")
async def download_icon(
    package_id: str,
    version: str,
    content: Annotated[PackageContentService, Depends(get_content_service)],
    if_none_match: IfNoneMatch = None,
) -> Response:
    return await _serve(
        "icon",
        package_id,
        version,
        if_none_match,
        lambda v: content.get_package_icon_or_none(package_id, v),
        None,
    )


@router.get("/v3/package/{package_id}/{version}/{filename}")
async def download_package_file(
    package_id: str,
    version: str,
    filename: str,
    content: Annotated[PackageContentService, Depends(get_content_service)],
    if_none_match: IfNoneMatch = None,
) -> Response:
    """Download a package archive (``.nupkg``) or its manifest (``.nuspec``).

    Each archive download increments the version's download count.
    """
    if filename.lower().endswith(".nuspec"):
        return await _serve(
            "nuspec",
            package_id,
            version,
            if_none_match,
            lambda v: content.get_package_manifest_or_none(package_id, v),
            "text/xml",
        )
    if filename.lower().endswith(".nupkg"):
        return await _serve(
            "package",
            package_id,
            version,
            if_none_match,
            lambda v: content.get_package_content_or_none(package_id, v),
            "application/octet-stream",
        )
    raise VersionNotFoundError(package_id, version)
