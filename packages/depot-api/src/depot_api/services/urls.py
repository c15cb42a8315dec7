# SPDX-License-Identifier: MIT
"""Absolute URLs of the registry's resources."""

from depot_version import Version


def _lower(version: Version) -> str:
    return version.to_normalized_string().lower()


class UrlGenerator:
    """Builds resource URLs relative to the registry's public base URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def package_publish(self) -> str:
        return self._url("api/v2/package")

    def package_base_address(self) -> str:
        return self._url("v3/package") + "/"

    def registrations_base(self) -> str:
        return self._url("v3/registration") + "/"

    def search(self) -> str:
        return self._url("v3/search")

    def autocomplete(self) -> str:
        return self._url("v3/autocomplete")

    def package_download(self, package_id: str, version: Version) -> str:
        lower_id = package_id.lower()
        lower_version = _lower(version)
        return self._url(f"v3/package/{lower_id}/{lower_version}/{lower_id}.{lower_version}.nupkg")

    def package_icon(self, package_id: str, version: Version) -> str:
        return self._url(f"v3/package/{package_id.lower()}/{_lower(version)}/icon")

    def registration_index(self, package_id: str) -> str:
        return self._url(f"v3/registration/{package_id.lower()}/index.json")

    def registration_page(self, package_id: str, lower: Version, upper: Version) -> str:
        return self._url(
            f"v3/registration/{package_id.lower()}/page/{_lower(lower)}/{_lower(upper)}.json"
        )

    def registration_leaf(self, package_id: str, version: Version) -> str:
        return self._url(f"v3/registration/{package_id.lower()}/{_lower(version)}.json")
