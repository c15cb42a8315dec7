# SPDX-License-Identifier: MIT
"""Package publish, delete and relist endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from depot_version import try_parse_version

from ..auth import require_api_key
from ..config import APIConfig
from ..dependencies import get_config, get_deletion_service, get_indexing_service
from ..middleware.errors import (
    InvalidPackageUploadError,
    InvalidRequestError,
    PackageExistsError,
    PackageTooLargeError,
    VersionNotFoundError,
)
from ..services.deletion import PackageDeletionService
from ..services.indexing import IndexingResult, PackageIndexingService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])


def _remote(request: Request) -> str:
    return request.client.host if request.client else "-"


async def _read_upload(request: Request, config: APIConfig) -> bytes:
    """Read the pushed package from a multipart form or the raw body.

    Raises:
        InvalidRequestError: If the request carries no package
        PackageTooLargeError: If the package exceeds the configured limit
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = next((value for _, value in form.multi_items() if not isinstance(value, str)), None)
        if upload is None:
            raise InvalidRequestError("The request does not contain a package")
        if upload.size is not None and upload.size > config.max_package_size_bytes:
            raise PackageTooLargeError(config.max_package_size_mib)
        content = await upload.read()
    else:
        content = await request.body()

    if not content:
        raise InvalidRequestError("The request does not contain a package")
    if len(content) > config.max_package_size_bytes:
        raise PackageTooLargeError(config.max_package_size_mib)
    return content


@router.put("/api/v2/package", status_code=201)
async def push_package(
    request: Request,
    config: Annotated[APIConfig, Depends(get_config)],
    indexer: Annotated[PackageIndexingService, Depends(get_indexing_service)],
) -> Response:
    """Push a package.

    Returns 201 when the package was indexed, 400 when it is invalid and 409
    when the version already exists and may not be overwritten.
    """
    try:
        content = await _read_upload(request, config)
    except (InvalidRequestError, PackageTooLargeError) as e:
        logger.warning(
            "AUDIT package_upload_failed reason=%s ip=%s", e.code.lower(), _remote(request)
        )
        raise

    result = await indexer.index(content)
    if result == IndexingResult.INVALID_PACKAGE:
        logger.info("AUDIT package_upload_failed reason=invalid_package ip=%s", _remote(request))
        raise InvalidPackageUploadError()
    if result == IndexingResult.PACKAGE_ALREADY_EXISTS:
        logger.info("AUDIT package_upload_failed reason=already_exists ip=%s", _remote(request))
        raise PackageExistsError()

    logger.info("AUDIT package_upload_succeeded ip=%s", _remote(request))
    return Response(status_code=201)


@router.delete("/api/v2/package/{package_id}/{version}", status_code=204)
async def delete_package(
    package_id: str,
    version: str,
    request: Request,
    deletion: Annotated[PackageDeletionService, Depends(get_deletion_service)],
) -> Response:
    """Unlist or delete a package version, depending on the deletion behavior."""
    parsed = try_parse_version(version)
    if parsed is None or not await deletion.try_delete_package(package_id, parsed):
        logger.info(
            "AUDIT package_delete_not_found package_id=%s package_version=%s ip=%s",
            package_id,
            version,
            _remote(request),
        )
        raise VersionNotFoundError(package_id, version)

    logger.info(
        "AUDIT package_delete_succeeded package_id=%s package_version=%s ip=%s",
        package_id,
        parsed.to_normalized_string(),
        _remote(request),
    )
    return Response(status_code=204)


@router.post("/api/v2/package/{package_id}/{version}")
async def relist_package(
    package_id: str,
    version: str,
    request: Request,
    deletion: Annotated[PackageDeletionService, Depends(get_deletion_service)],
) -> Response:
    """Relist an unlisted package version."""
    parsed = try_parse_version(version)
    if parsed is None or not await deletion.try_relist_package(package_id, parsed):
        logger.info(
            "AUDIT package_relist_not_found package_id=%s package_version=%s ip=%s",
            package_id,
            version,
            _remote(request),
        )
        raise VersionNotFoundError(package_id, version)

    logger.info(
        "AUDIT package_relist_succeeded package_id=%s package_version=%s ip=%s",
        package_id,
        parsed.to_normalized_string(),
        _remote(request),
    )
    return Response(status_code=200)
