# SPDX-License-Identifier: MIT
"""Tests for the database-backed search service."""

import pytest
import pytest_asyncio

from depot_api.search.builder import SearchResponseBuilder
from depot_api.search.database import MAX_DEPENDENTS, DatabaseSearchService
from depot_api.search.frameworks import FrameworkCompatibilityService
from depot_api.search.indexer import SearchIndexer
from depot_api.search.reindex import SearchReindexService
from depot_api.search.service import AutocompleteRequest, SearchRequest, VersionsRequest
from depot_api.services.urls import UrlGenerator


@pytest.fixture
def search(test_session) -> DatabaseSearchService:
    return DatabaseSearchService(
        test_session,
        FrameworkCompatibilityService(),
        SearchResponseBuilder(UrlGenerator("http://test")),
    )


@pytest_asyncio.fixture
async def seeded(test_session, package_factory):
    """A small catalog covering every filter."""
    test_session.add_all(
        [
            package_factory(
                "Contoso.Widgets",
                "1.0.0",
                downloads=10,
                tags=["ui"],
                frameworks=["net472"],
                dependencies=[("Contoso.Core", "[1.0.0, )", "net472")],
            ),
            package_factory(
                "Contoso.Widgets",
                "1.1.0",
                downloads=3,
                tags=["ui"],
                frameworks=["net472"],
                dependencies=[("Contoso.Core", "[1.0.0, )", "net472")],
            ),
            package_factory("Contoso.Widgets", "2.0.0-beta", tags=["ui"], frameworks=["net472"]),
            package_factory(
                "Contoso.Gadgets",
                "1.0.0",
                downloads=50,
                tags=["beta", "tools"],
                authors=["Jane Doe", "Bob Smith"],
                frameworks=["netstandard2.0"],
                package_types=["DotnetTool"],
                dependencies=[("contoso.core", "[2.0.0, )", "netstandard2.0")],
            ),
            package_factory("Fabrikam.Semver", "1.0.0+build.1", downloads=5),
            package_factory("Hidden.Package", "1.0.0", listed=False, downloads=100),
        ]
    )
    await test_session.commit()


@pytest.mark.asyncio
class TestSearch:
    """Tests for package search."""

    async def test_default_filters(self, search, seeded):
        response = await search.search(SearchRequest())

        assert response.total_hits == 2
        assert [r.id for r in response.data] == ["Contoso.Gadgets", "Contoso.Widgets"]
        widgets = response.data[1]
        assert widgets.version == "1.1.0"
        assert [v.version for v in widgets.versions] == ["1.0.0", "1.1.0"]
        assert widgets.total_downloads == 13

    async def test_include_prerelease(self, search, seeded):
        response = await search.search(SearchRequest(include_prerelease=True))
        widgets = next(r for r in response.data if r.id == "Contoso.Widgets")
        assert widgets.version == "2.0.0-beta"

    async def test_include_semver2(self, search, seeded):
        response = await search.search(SearchRequest(include_semver2=True))
        assert "Fabrikam.Semver" in [r.id for r in response.data]

    async def test_unlisted_never_returned(self, search, seeded):
        response = await search.search(
            SearchRequest(query="hidden", include_prerelease=True, include_semver2=True)
        )
        assert response.data == []

    async def test_text_query_matches_id(self, search, seeded):
        response = await search.search(SearchRequest(query="GADG"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets"]

    async def test_text_query_wildcards_escaped(self, search, seeded):
        response = await search.search(SearchRequest(query="%"))
        assert response.data == []

    async def test_package_type(self, search, seeded):
        response = await search.search(SearchRequest(package_type="DotnetTool"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets"]

    async def test_framework_compatibility(self, search, seeded):
        response = await search.search(SearchRequest(framework="net48"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets", "Contoso.Widgets"]

        response = await search.search(SearchRequest(framework="netstandard2.0"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets"]

    async def test_tag_clause(self, search, seeded):
        response = await search.search(SearchRequest(query="tag:beta"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets"]

    async def test_author_clause(self, search, seeded):
        response = await search.search(SearchRequest(query="author:smith"))
        assert [r.id for r in response.data] == ["Contoso.Gadgets"]

    async def test_clauses_combined_with_text(self, search, seeded):
        response = await search.search(SearchRequest(query="tag:ui widgets"))
        assert [r.id for r in response.data] == ["Contoso.Widgets"]

        response = await search.search(SearchRequest(query="tag:ui gadgets"))
        assert response.data == []

    async def test_paging(self, search, seeded):
        first = await search.search(SearchRequest(take=1))
        second = await search.search(SearchRequest(skip=1, take=1))
        assert [r.id for r in first.data] == ["Contoso.Gadgets"]
        assert [r.id for r in second.data] == ["Contoso.Widgets"]

    async def test_take_zero(self, search, seeded):
        response = await search.search(SearchRequest(take=0))
        assert response.total_hits == 0

    async def test_embedded_icon_url(self, search, test_session, package_factory):
        test_session.add(package_factory("Iconic", "1.0.0", has_embedded_icon=True))
        await test_session.commit()

        response = await search.search(SearchRequest())
        assert response.data[0].icon_url == "http://test/v3/package/iconic/1.0.0/icon"


@pytest.mark.asyncio
class TestTagPaging:
    """Skip and take count packages that satisfy the tag clauses."""

    async def test_skip_counts_filtered_matches(self, search, test_session, package_factory):
        test_session.add_all(
            [
                package_factory("A.Package", "1.0.0", tags=["common"]),
                package_factory("B.Package", "1.0.0", tags=["other"]),
                package_factory("C.Package", "1.0.0", tags=["common"]),
                package_factory("D.Package", "1.0.0", tags=["other"]),
                package_factory("E.Package", "1.0.0", tags=["common"]),
            ]
        )
        await test_session.commit()

        pages = [
            await search.search(SearchRequest(query="tag:common", skip=skip, take=1))
            for skip in range(4)
        ]

        assert [[r.id for r in page.data] for page in pages] == [
            ["A.Package"],
            ["C.Package"],
            ["E.Package"],
            [],
        ]


@pytest.mark.asyncio
class TestAutocomplete:
    """Tests for id autocomplete and version listing."""

    async def test_ordered_by_downloads(self, search, seeded):
        response = await search.autocomplete(AutocompleteRequest())
        assert response.data == ["Contoso.Gadgets", "Contoso.Widgets"]
        assert response.total_hits == 2

    async def test_query(self, search, seeded):
        response = await search.autocomplete(AutocompleteRequest(query="widg"))
        assert response.data == ["Contoso.Widgets"]

    async def test_tag_clause(self, search, seeded):
        response = await search.autocomplete(AutocompleteRequest(query="tag:ui"))
        assert response.data == ["Contoso.Widgets"]

    async def test_take_zero(self, search, seeded):
        response = await search.autocomplete(AutocompleteRequest(take=0))
        assert response.data == []

    async def test_list_versions(self, search, seeded):
        response = await search.list_package_versions(VersionsRequest("CONTOSO.WIDGETS"))
        assert response.data == ["1.0.0", "1.1.0"]

        response = await search.list_package_versions(
            VersionsRequest("contoso.widgets", include_prerelease=True)
        )
        assert response.data == ["1.0.0", "1.1.0", "2.0.0-beta"]

    async def test_list_versions_unknown(self, search, seeded):
        response = await search.list_package_versions(VersionsRequest("nope"))
        assert response.total_hits == 0


@pytest.mark.asyncio
class TestDependents:
    """Tests for reverse dependency lookup."""

    async def test_dependents(self, search, seeded):
        response = await search.find_dependents("Contoso.Core")

        assert [d.id for d in response.data] == ["Contoso.Gadgets", "Contoso.Widgets"]
        widgets = response.data[1]
        assert widgets.total_downloads == 10

    async def test_no_dependents(self, search, seeded):
        response = await search.find_dependents("Contoso.Widgets")
        assert response.total_hits == 0

    async def test_dependents_capped(self, search, test_session, package_factory):
        test_session.add_all(
            [
                package_factory(f"Consumer{i:02d}", "1.0.0", dependencies=[("Lib", "1.0", None)])
                for i in range(MAX_DEPENDENTS + 5)
            ]
        )
        await test_session.commit()

        response = await search.find_dependents("lib")
        assert response.total_hits == MAX_DEPENDENTS


class RecordingIndexer(SearchIndexer):
    def __init__(self):
        self.indexed: list[str] = []

    async def index(self, package) -> None:
        self.indexed.append(f"{package.id} {package.normalized_version}")


@pytest.mark.asyncio
class TestReindex:
    async def test_reindex_all_rows(self, catalog, seeded):
        indexer = RecordingIndexer()
        count = await SearchReindexService(catalog, indexer, batch_size=2).reindex()

        assert count == 6
        assert len(indexer.indexed) == 6
        assert "Hidden.Package 1.0.0" in indexer.indexed

    async def test_batch_size_validated(self, catalog):
        with pytest.raises(ValueError):
            SearchReindexService(catalog, RecordingIndexer(), batch_size=0)
