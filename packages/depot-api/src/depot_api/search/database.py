# SPDX-License-Identifier: MIT
"""Search service that queries the catalog database directly.

Structural filters (listed, prerelease, SemVer 2.0.0, package type, target
framework and the free-text id match) run in SQL. Tag and author clauses can't
be expressed as set-oriented SQL filters, so when a query carries them the
candidates are streamed in a fixed order and filtered here, with skip and take
counted against the filtered matches.
"""

import logging
from typing import Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from depot_version import parse_version

from ..db.models import Package, PackageDependency, PackageType, TargetFramework
from ..models.search import AutocompleteResponse, DependentResult, DependentsResponse, SearchResponse
from ..services.registration import PackageRegistration
from .builder import SearchResponseBuilder
from .frameworks import FrameworkCompatibilityService
from .query import SearchQuery, has_all_authors, has_all_tags, parse_search_query
from .service import AutocompleteRequest, SearchRequest, SearchService, VersionsRequest

logger = logging.getLogger(__name__)

MAX_DEPENDENTS = 20


def _apply_filters(
    query: Select,
    include_prerelease: bool,
    include_semver2: bool,
    package_type: Optional[str] = None,
    frameworks: Optional[list[str]] = None,
) -> Select:
    query = query.where(Package.listed.is_(True))
    if not include_prerelease:
        query = query.where(Package.is_prerelease.is_(False))
    if not include_semver2:
        query = query.where(Package.semver_level != 2)
    if package_type:
        query = query.where(Package.package_types.any(PackageType.name == package_type))
    if frameworks is not None:
        query = query.where(Package.target_frameworks.any(TargetFramework.moniker.in_(frameworks)))
    return query


def _apply_text_query(query: Select, text_query: Optional[str]) -> Select:
    if not text_query:
        return query
    return query.where(Package.normalized_id.contains(text_query.lower(), autoescape=True))


class DatabaseSearchService(SearchService):
    """Searches the package catalog.

    Attributes:
        session: Database session queries run in.
        frameworks: Resolves compatible frameworks for the framework filter.
        builder: Builds response documents from matched packages.
    """

    def __init__(
        self,
        session: AsyncSession,
        frameworks: FrameworkCompatibilityService,
        builder: SearchResponseBuilder,
    ) -> None:
        self.session = session
        self.frameworks = frameworks
        self.builder = builder

    async def search(self, request: SearchRequest) -> SearchResponse:
        frameworks = self._compatible_frameworks_or_none(request.framework)
        parsed = parse_search_query(request.query)

        def filtered(query: Select) -> Select:
            return _apply_filters(
                query,
                request.include_prerelease,
                request.include_semver2,
                request.package_type,
                frameworks,
            )

        candidates = filtered(_apply_text_query(select(Package.normalized_id), parsed.text_query))
        if parsed.has_clauses:
            selected = await self._filtered_ids(
                candidates,
                parsed,
                (Package.normalized_id, Package.key),
                request.skip,
                request.take,
            )
        else:
            selected = await self._paged_ids(
                candidates,
                (Package.normalized_id,),
                request.skip,
                request.take,
            )

        if not selected:
            return self.builder.build_search([])

        # Every matching version is needed to pick the latest one.
        result = await self.session.execute(
            filtered(select(Package).where(Package.normalized_id.in_(list(selected))))
        )
        grouped: dict[str, list[Package]] = {package_id: [] for package_id in selected}
        for package in result.scalars().all():
            grouped[package.normalized_id].append(package)

        registrations = [
            PackageRegistration(package_id=packages[0].id, packages=packages)
            for packages in grouped.values()
            if packages
        ]
        return self.builder.build_search(registrations)

    async def autocomplete(self, request: AutocompleteRequest) -> AutocompleteResponse:
        parsed = parse_search_query(request.query)
        candidates = _apply_filters(
            _apply_text_query(select(Package.normalized_id), parsed.text_query),
            request.include_prerelease,
            request.include_semver2,
            request.package_type,
        )

        if parsed.has_clauses:
            selected = await self._filtered_ids(
                candidates,
                parsed,
                (Package.downloads.desc(), Package.normalized_id, Package.key),
                request.skip,
                request.take,
            )
        else:
            selected = await self._paged_ids(
                candidates,
                (func.max(Package.downloads).desc(), Package.normalized_id),
                request.skip,
                request.take,
            )

        return self.builder.build_autocomplete(list(selected.values()))

    async def list_package_versions(self, request: VersionsRequest) -> AutocompleteResponse:
        query = _apply_filters(
            select(Package.normalized_version).where(
                Package.normalized_id == request.package_id.lower()
            ),
            request.include_prerelease,
            request.include_semver2,
        )
        result = await self.session.execute(query)
        versions = sorted(result.scalars().all(), key=parse_version)
        return self.builder.build_autocomplete(versions)

    async def find_dependents(self, package_id: str) -> DependentsResponse:
        query = (
            select(Package)
            .where(
                Package.listed.is_(True),
                Package.dependencies.any(func.lower(PackageDependency.id) == package_id.lower()),
            )
            .order_by(Package.downloads.desc(), Package.normalized_id, Package.key)
        )
        result = await self.session.execute(query)

        dependents: dict[str, DependentResult] = {}
        for package in result.scalars().all():
            if package.normalized_id in dependents:
                continue
            dependents[package.normalized_id] = DependentResult(
                id=package.id,
                description=package.description,
                total_downloads=package.downloads,
            )
            if len(dependents) >= MAX_DEPENDENTS:
                break

        return self.builder.build_dependents(list(dependents.values()))

    def _compatible_frameworks_or_none(self, framework: Optional[str]) -> Optional[list[str]]:
        if framework is None:
            return None
        return self.frameworks.find_all_compatible_frameworks(framework)

    async def _paged_ids(
        self,
        candidates: Select,
        order_by: tuple,
        skip: int,
        take: int,
    ) -> dict[str, str]:
        """Page over distinct ids in SQL.

        Returns:
            Display ids keyed by normalized id, in result order
        """
        if take <= 0:
            return {}

        query = (
            candidates.with_only_columns(Package.normalized_id, func.min(Package.id))
            .group_by(Package.normalized_id)
            .order_by(*order_by)
            .offset(max(skip, 0))
            .limit(take)
        )
        result = await self.session.execute(query)
        return {normalized_id: package_id for normalized_id, package_id in result.all()}

    async def _filtered_ids(
        self,
        candidates: Select,
        parsed: SearchQuery,
        order_by: tuple,
        skip: int,
        take: int,
    ) -> dict[str, str]:
        """Stream candidates and apply tag and author clauses.

        Each id is judged by the first row seen for it in ``order_by`` order,
        so the order must be total for paging to be reproducible.

        Returns:
            Display ids keyed by normalized id, in result order
        """
        if take <= 0:
            return {}

        query = candidates.with_only_columns(
            Package.normalized_id, Package.id, Package.tags, Package.authors
        ).order_by(*order_by)

        selected: dict[str, str] = {}
        seen: set[str] = set()
        matched = 0

        stream = await self.session.stream(query)
        try:
            async for normalized_id, package_id, tags, authors in stream:
                if normalized_id in seen:
                    continue
                seen.add(normalized_id)

                if not has_all_tags(tags, parsed.tags) or not has_all_authors(
                    authors, parsed.authors
                ):
                    continue

                matched += 1
                if matched <= skip:
                    continue

                selected[normalized_id] = package_id
                if len(selected) >= take:
                    break
        finally:
            await stream.close()

        logger.debug(
            "Tag/author search scanned %d ids, matched %d, returned %d",
            len(seen),
            matched,
            len(selected),
        )
        return selected
