# SPDX-License-Identifier: MIT
"""Service index endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..auth import require_read_access
from ..dependencies import get_urls
from ..models.responses import ServiceIndexResource, ServiceIndexResponse
from ..services.urls import UrlGenerator

router = APIRouter(dependencies=[Depends(require_read_access)])


def _resources(url: str, name: str, *versions: str) -> list[ServiceIndexResource]:
    return [ServiceIndexResource(url=url, type=f"{name}/{version}") for version in versions]


@router.get(
    "/v3/index.json",
    response_model=ServiceIndexResponse,
    response_model_exclude_none=True,
)
async def get_service_index(urls: Annotated[UrlGenerator, Depends(get_urls)]) -> ServiceIndexResponse:
    """List the resources this registry serves."""
    resources = [
        *_resources(urls.package_publish(), "PackagePublish", "2.0.0"),
        *_resources(urls.search(), "SearchQueryService", "3.0.0-beta", "3.0.0-rc", "3.5.0"),
        *_resources(
            urls.registrations_base(),
            "RegistrationsBaseUrl",
            "3.0.0-rc",
            "3.0.0-beta",
            "3.4.0",
            "3.6.0",
        ),
        *_resources(urls.package_base_address(), "PackageBaseAddress", "3.0.0"),
        *_resources(urls.autocomplete(), "SearchAutocompleteService", "3.0.0-rc", "3.0.0-beta"),
    ]
    return ServiceIndexResponse(resources=resources)
