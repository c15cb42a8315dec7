# SPDX-License-Identifier: MIT
"""Build the upstream client from the configured mirrors."""

import logging
from typing import Optional, Sequence

import httpx

from ..config import ConfigError, MirrorAuthenticationType, MirrorConfig
from .base import DisabledUpstreamClient, UpstreamClient
from .fallback import FallbackUpstreamClient
from .v2 import V2UpstreamClient
from .v3 import V3UpstreamClient

logger = logging.getLogger(__name__)


def create_http_client(
    mirror: MirrorConfig,
    user_agent: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the single HTTP client used for one mirror.

    Authentication is attached here, once, so requests never mutate shared
    headers. ``transport`` replaces the network transport, e.g. with a mock.

    Raises:
        ConfigError: For authentication types the mirror cannot use
    """
    headers = {"User-Agent": user_agent}
    auth = None
    authentication = mirror.authentication

    if authentication.type == MirrorAuthenticationType.BASIC:
        auth = httpx.BasicAuth(authentication.username or "", authentication.password or "")
    elif authentication.type == MirrorAuthenticationType.BEARER:
        headers["Authorization"] = f"Bearer {authentication.token}"
    elif authentication.type == MirrorAuthenticationType.CUSTOM:
        headers.update(authentication.custom_headers)
    elif authentication.type != MirrorAuthenticationType.NONE:
        raise ConfigError(f"Unsupported mirror authentication type: {authentication.type}")

    return httpx.AsyncClient(
        headers=headers,
        auth=auth,
        timeout=httpx.Timeout(mirror.package_download_timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )


def create_mirror_client(mirror: MirrorConfig, user_agent: str) -> UpstreamClient:
    """Create the protocol client for one mirror."""
    if not mirror.package_source:
        raise ConfigError("Mirror package_source is required")

    if mirror.legacy and mirror.authentication.type not in (
        MirrorAuthenticationType.NONE,
        MirrorAuthenticationType.BASIC,
    ):
        raise ConfigError("Legacy mirrors only support basic authentication")

    http = create_http_client(mirror, user_agent)
    if mirror.legacy:
        return V2UpstreamClient(http, mirror.package_source)
    return V3UpstreamClient(http, mirror.package_source)


def create_upstream_client(mirrors: Sequence[MirrorConfig], user_agent: str) -> UpstreamClient:
    """Create the upstream client for the enabled mirrors.

    No enabled mirror gives a disabled client, one gives that mirror's client
    directly, and more give a fallback client trying them in configured order.
    """
    enabled = [mirror for mirror in mirrors if mirror.enabled]
    if not enabled:
        return DisabledUpstreamClient()

    clients = [create_mirror_client(mirror, user_agent) for mirror in enabled]
    for mirror in enabled:
        logger.info(
            "Mirroring packages from %s (%s protocol)",
            mirror.package_source,
            "v2" if mirror.legacy else "v3",
        )

    if len(clients) == 1:
        return clients[0]
    return FallbackUpstreamClient(clients)
