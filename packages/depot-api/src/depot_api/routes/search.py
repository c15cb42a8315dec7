# SPDX-License-Identifier: MIT
"""Search, autocomplete and dependents endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ..auth import require_read_access
from ..dependencies import get_search_service
from ..models.search import AutocompleteResponse, DependentsResponse, SearchResponse
from ..search.service import AutocompleteRequest, SearchRequest, SearchService, VersionsRequest

router = APIRouter(dependencies=[Depends(require_read_access)])

Search = Annotated[SearchService, Depends(get_search_service)]


def _includes_semver2(semver_level: Optional[str]) -> bool:
    return semver_level == "2.0.0"


@router.get(
    "/v3/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
async def search_packages(
    search: Search,
    q: Optional[str] = Query(None, description="Search terms, tag: and author: clauses"),
    skip: int = Query(0, ge=0),
    take: int = Query(20, ge=0, le=1000),
    prerelease: bool = Query(False),
    semver_level: Optional[str] = Query(None, alias="semVerLevel"),
    package_type: Optional[str] = Query(None, alias="packageType"),
    framework: Optional[str] = Query(None),
) -> SearchResponse:
    """Search packages by id, tags and authors.

    Example: ``q=tag:json author:"Jane Doe" parser``
    """
    return await search.search(
        SearchRequest(
            query=q,
            include_prerelease=prerelease,
            include_semver2=_includes_semver2(semver_level),
            package_type=package_type,
            framework=framework,
            skip=skip,
            take=take,
        )
    )


@router.get("/v3/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    search: Search,
    q: Optional[str] = Query(None),
    package_id: Optional[str] = Query(None, alias="id"),
    skip: int = Query(0, ge=0),
    take: int = Query(20, ge=0, le=1000),
    prerelease: bool = Query(False),
    semver_level: Optional[str] = Query(None, alias="semVerLevel"),
    package_type: Optional[str] = Query(None, alias="packageType"),
) -> AutocompleteResponse:
    """Autocomplete package ids, or list the versions of ``id`` when given."""
    if package_id:
        return await search.list_package_versions(
            VersionsRequest(
                package_id=package_id,
                include_prerelease=prerelease,
                include_semver2=_includes_semver2(semver_level),
            )
        )

    return await search.autocomplete(
        AutocompleteRequest(
            query=q,
            include_prerelease=prerelease,
            include_semver2=_includes_semver2(semver_level),
            package_type=package_type,
            skip=skip,
            take=take,
        )
    )


@router.get("/v3/dependents", response_model=DependentsResponse, response_model_exclude_none=True)
async def dependents(
    search: Search,
    package_id: str = Query(..., alias="packageId"),
) -> DependentsResponse:
    """List up to 20 packages that depend on a package."""
    return await search.find_dependents(package_id)
