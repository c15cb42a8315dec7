# SPDX-License-Identifier: MIT
"""Tests for search query parsing."""

import pytest
from hypothesis import given, settings, strategies as st

from depot_api.search.query import (
    SearchQuery,
    has_all_authors,
    has_all_tags,
    parse_search_query,
    tokenize_query,
)


# =============================================================================
# Strategies for generating test data
# =============================================================================

words = st.from_regex(r"[A-Za-z0-9.]{1,12}", fullmatch=True)


class TestTokenizeQuery:
    def test_plain_words(self):
        assert tokenize_query("  contoso   widgets ") == ["contoso", "widgets"]

    def test_prefixed_tokens(self):
        assert tokenize_query('tag:beta author:"Jane Doe" widgets') == [
            "tag:beta",
            "author:Jane Doe",
            "widgets",
        ]

    def test_space_after_prefix(self):
        assert tokenize_query("tag: ui") == ["tag:ui"]

    def test_prefix_case_insensitive(self):
        assert tokenize_query("TAG:ui Author:jane") == ["tag:ui", "author:jane"]

    def test_unterminated_quote(self):
        assert tokenize_query('author:"Jane Doe') == ["author:Jane Doe"]


class TestParseSearchQuery:
    def test_mixed_query(self):
        parsed = parse_search_query('tag:beta author:"Jane Doe" widgets')
        assert parsed == SearchQuery(text_query="widgets", tags=("beta",), authors=("Jane Doe",))
        assert parsed.has_clauses

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_query(self, text):
        parsed = parse_search_query(text)
        assert parsed == SearchQuery()
        assert not parsed.has_clauses

    def test_text_terms_joined(self):
        assert parse_search_query("contoso   widgets").text_query == "contoso widgets"

    def test_clause_only_query(self):
        parsed = parse_search_query("tag:ui")
        assert parsed.text_query is None
        assert parsed.tags == ("ui",)

    def test_empty_clause_values_dropped(self):
        parsed = parse_search_query('tag:"" author:"" widgets')
        assert parsed.tags == ()
        assert parsed.authors == ()

    def test_duplicates_removed_case_insensitively(self):
        parsed = parse_search_query("tag:UI tag:ui tag:tools")
        assert parsed.tags == ("UI", "tools")

    @given(terms=st.lists(words, min_size=1, max_size=5))
    @settings(max_examples=100)
    def test_plain_terms_preserved(self, terms: list[str]):
        """Queries without clauses keep every term in order."""
        parsed = parse_search_query(" ".join(terms))
        assert parsed.text_query == " ".join(terms)
        assert not parsed.has_clauses


class TestClauseMatching:
    def test_tags_required(self):
        assert has_all_tags(["UI", "Tools"], ["ui", "tools"])
        assert not has_all_tags(["ui"], ["ui", "tools"])
        assert not has_all_tags([], ["ui"])
        assert not has_all_tags(None, ["ui"])

    def test_tags_match_whole_values(self):
        assert not has_all_tags(["uikit"], ["ui"])

    def test_no_tags_required(self):
        assert has_all_tags(None, [])

    def test_author_fragments(self):
        assert has_all_authors(["Jane Doe", "Bob"], ["jane"])
        assert has_all_authors(["Jane Doe", "Bob"], ["doe", "bob"])
        assert not has_all_authors(["Jane Doe"], ["alice"])
        assert not has_all_authors([], ["jane"])

    def test_no_authors_required(self):
        assert has_all_authors(None, [])
