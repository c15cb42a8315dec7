# SPDX-License-Identifier: MIT
"""Tests for target framework names and compatibility."""

import pytest

from depot_api.search.frameworks import FrameworkCompatibilityService, get_short_folder_name


class TestGetShortFolderName:
    @pytest.mark.parametrize(
        "framework,expected",
        [
            (".NETFramework4.7.2", "net472"),
            (".NETFramework,Version=v4.5", "net45"),
            (".NETFramework4.0", "net40"),
            (".NETStandard,Version=v2.0", "netstandard2.0"),
            (".NETStandard1.6", "netstandard1.6"),
            (".NETCoreApp3.1", "netcoreapp3.1"),
            (".NETCoreApp,Version=v8.0", "net8.0"),
            ("net8.0", "net8.0"),
            ("NET472", "net472"),
            ("  netstandard2.1  ", "netstandard2.1"),
        ],
    )
    def test_conversion(self, framework: str, expected: str):
        assert get_short_folder_name(framework) == expected


class TestFrameworkCompatibility:
    @pytest.fixture
    def service(self) -> FrameworkCompatibilityService:
        return FrameworkCompatibilityService()

    def test_includes_self_and_any(self, service):
        compatible = service.find_all_compatible_frameworks("net472")
        assert compatible[0] == "net472"
        assert compatible[-1] == "any"

    def test_net_framework(self, service):
        compatible = service.find_all_compatible_frameworks("net472")
        assert "net45" in compatible
        assert "netstandard2.0" in compatible
        assert "net48" not in compatible
        assert "netstandard2.1" not in compatible

    def test_net_standard(self, service):
        compatible = service.find_all_compatible_frameworks("netstandard1.3")
        assert "netstandard1.0" in compatible
        assert "netstandard1.4" not in compatible

    def test_modern_net(self, service):
        compatible = service.find_all_compatible_frameworks("net8.0")
        assert {"net5.0", "net6.0", "netcoreapp3.1", "netstandard2.1"} <= set(compatible)
        assert "net9.0" not in compatible
        assert "net472" not in compatible

    def test_platform_specific(self, service):
        compatible = service.find_all_compatible_frameworks("net6.0-windows")
        assert "net6.0-windows" in compatible
        assert "net5.0-windows" in compatible
        assert "net6.0" in compatible

    def test_net_core_app(self, service):
        compatible = service.find_all_compatible_frameworks("netcoreapp2.1")
        assert "netcoreapp2.0" in compatible
        assert "netstandard2.0" in compatible
        assert "netstandard2.1" not in compatible

    def test_unknown_framework(self, service):
        assert service.find_all_compatible_frameworks("tizen40") == ["tizen40", "any"]

    def test_no_duplicates(self, service):
        compatible = service.find_all_compatible_frameworks("net6.0")
        assert len(compatible) == len(set(compatible))
