# SPDX-License-Identifier: MIT
"""Package metadata (registration) endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from depot_version import try_parse_version

from ..auth import require_read_access
from ..dependencies import get_metadata_service
from ..middleware.errors import PackageNotFoundError, VersionNotFoundError
from ..models.registration import (
    RegistrationIndexPage,
    RegistrationIndexResponse,
    RegistrationLeafResponse,
)
from ..services.metadata import PackageMetadataService

router = APIRouter(dependencies=[Depends(require_read_access)])

MetadataService = Annotated[PackageMetadataService, Depends(get_metadata_service)]


@router.get(
    "/v3/registration/{package_id}/index.json",
    response_model=RegistrationIndexResponse,
    response_model_exclude_none=True,
)
async def get_registration_index(
    package_id: str, metadata: MetadataService
) -> RegistrationIndexResponse:
    """Get every version of a package, inlined or split into pages."""
    index = await metadata.get_registration_index_or_none(package_id)
    if index is None:
        raise PackageNotFoundError(package_id)
    return index


@router.get(
    "/v3/registration/{package_id}/page/{lower}/{upper}.json",
    response_model=RegistrationIndexPage,
    response_model_exclude_none=True,
)
async def get_registration_page(
    package_id: str, lower: str, upper: str, metadata: MetadataService
) -> RegistrationIndexPage:
    """Get the versions of a package between two versions, inclusive."""
    lower_version = try_parse_version(lower)
    upper_version = try_parse_version(upper)
    if lower_version is None or upper_version is None:
        raise PackageNotFoundError(package_id)

    page = await metadata.get_registration_page_or_none(package_id, lower_version, upper_version)
    if page is None:
        raise PackageNotFoundError(package_id)
    return page


@router.get(
    "/v3/registration/{package_id}/{version}.json",
    response_model=RegistrationLeafResponse,
    response_model_exclude_none=True,
)
async def get_registration_leaf(
    package_id: str, version: str, metadata: MetadataService
) -> RegistrationLeafResponse:
    parsed = try_parse_version(version)
    if parsed is None:
        raise VersionNotFoundError(package_id, version)

    leaf = await metadata.get_registration_leaf_or_none(package_id, parsed)
    if leaf is None:
        raise VersionNotFoundError(package_id, version)
    return leaf
