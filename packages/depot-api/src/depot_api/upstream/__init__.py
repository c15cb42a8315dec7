# SPDX-License-Identifier: MIT
"""Upstream mirror clients."""

from .base import DisabledUpstreamClient, UpstreamClient
from .fallback import FallbackUpstreamClient
from .resolver import create_http_client, create_mirror_client, create_upstream_client
from .v2 import V2UpstreamClient
from .v3 import V3UpstreamClient

__all__ = [
    "UpstreamClient",
    "DisabledUpstreamClient",
    "FallbackUpstreamClient",
    "V2UpstreamClient",
    "V3UpstreamClient",
    "create_http_client",
    "create_mirror_client",
    "create_upstream_client",
]
