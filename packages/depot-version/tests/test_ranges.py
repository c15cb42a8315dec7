# SPDX-License-Identifier: MIT
"""Unit tests for dependency version ranges."""

import pytest

from depot_version import (
    InvalidVersionError,
    parse_version,
    parse_version_range,
    try_parse_version_range,
)


class TestParseVersionRange:
    """Tests for parse_version_range function."""

    def test_bare_version_is_inclusive_minimum(self):
        r = parse_version_range("1.0")
        assert r.min_version == parse_version("1.0.0")
        assert r.max_version is None
        assert r.include_min is True
        assert r.to_normalized_string() == "[1.0.0, )"

    def test_exact_version(self):
        r = parse_version_range("[1.2.3]")
        assert r.satisfies(parse_version("1.2.3"))
        assert not r.satisfies(parse_version("1.2.4"))
        assert r.to_normalized_string() == "[1.2.3]"

    def test_half_open_interval(self):
        r = parse_version_range("[1.0,2.0)")
        assert r.satisfies(parse_version("1.0.0"))
        assert r.satisfies(parse_version("1.9.9"))
        assert not r.satisfies(parse_version("2.0.0"))
        assert r.to_normalized_string() == "[1.0.0, 2.0.0)"

    def test_no_minimum(self):
        r = parse_version_range("(,3.0]")
        assert r.min_version is None
        assert r.satisfies(parse_version("0.0.1"))
        assert r.satisfies(parse_version("3.0.0"))
        assert r.to_normalized_string() == "(, 3.0.0]"

    def test_exclusive_minimum(self):
        r = parse_version_range("(1.0, )")
        assert not r.satisfies(parse_version("1.0.0"))
        assert r.satisfies(parse_version("1.0.1"))

    def test_prerelease_below_release_minimum(self):
        r = parse_version_range("1.0.0")
        assert not r.satisfies(parse_version("1.0.0-beta"))

    @pytest.mark.parametrize(
        "invalid",
        ["", "[", "[1.0", "(1.0)", "[,]", "[2.0,1.0]", "[1.0,2.0,3.0]", "[x]"],
    )
    def test_invalid_ranges(self, invalid):
        with pytest.raises(InvalidVersionError):
            parse_version_range(invalid)

    def test_try_parse(self):
        assert try_parse_version_range(None) is None
        assert try_parse_version_range("nope") is None
        assert try_parse_version_range("[1.0, )") is not None
