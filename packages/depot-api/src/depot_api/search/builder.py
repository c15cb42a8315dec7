# SPDX-License-Identifier: MIT
"""Search, autocomplete and dependents response documents."""

from typing import Sequence

from ..models.registration import PackageTypeItem
from ..models.search import (
    AutocompleteResponse,
    DependentResult,
    DependentsResponse,
    SearchResponse,
    SearchResult,
    SearchResultVersion,
)
from ..services.registration import PackageRegistration
from ..services.urls import UrlGenerator


class SearchResponseBuilder:
    """Summarizes grouped package versions into search responses."""

    def __init__(self, urls: UrlGenerator):
        self.urls = urls

    def build_search(self, registrations: Sequence[PackageRegistration]) -> SearchResponse:
        results = []
        for registration in registrations:
            versions = sorted(registration.packages, key=lambda p: p.parsed_version)
            latest = versions[-1]
            latest_version = latest.parsed_version

            if latest.has_embedded_icon:
                icon_url = self.urls.package_icon(latest.id, latest_version)
            else:
                icon_url = latest.icon_url

            results.append(
                SearchResult(
                    id=latest.id,
                    version=latest.version,
                    description=latest.description,
                    authors=list(latest.authors or []),
                    icon_url=icon_url,
                    license_url=latest.license_url,
                    project_url=latest.project_url,
                    registration_index_url=self.urls.registration_index(latest.id),
                    summary=latest.summary,
                    tags=list(latest.tags or []),
                    title=latest.title,
                    total_downloads=sum(p.downloads for p in versions),
                    package_types=[PackageTypeItem(name=t.name) for t in latest.package_types],
                    versions=[
                        SearchResultVersion(
                            registration_leaf_url=self.urls.registration_leaf(
                                p.id, p.parsed_version
                            ),
                            version=p.version,
                            downloads=p.downloads,
                        )
                        for p in versions
                    ],
                )
            )

        return SearchResponse(total_hits=len(results), data=results)

    def build_autocomplete(self, data: Sequence[str]) -> AutocompleteResponse:
        return AutocompleteResponse(total_hits=len(data), data=list(data))

    def build_dependents(self, dependents: Sequence[DependentResult]) -> DependentsResponse:
        return DependentsResponse(total_hits=len(dependents), data=list(dependents))
