# SPDX-License-Identifier: MIT
"""API key and basic credential authentication."""

import base64
import binascii
import hmac
import logging
from typing import Annotated, Iterable, Optional

from fastapi import Header, Request

from ..config import APIConfig, AuthConfig, CredentialConfig
from ..middleware.errors import UnauthorizedError
from .hashing import verify_secret

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-NuGet-ApiKey"


def _is_set(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _equals(presented: str, configured: str) -> bool:
    return hmac.compare_digest(presented.encode("utf-8"), configured.encode("utf-8"))


class ApiKeyAuthenticator:
    """Decides whether a presented API key may push or delete packages.

    Configured secrets are the legacy ``api_key``/``api_key_hash`` pair plus any
    ``api_keys`` entries. With none of them set the registry is open and every
    request authenticates.
    """

    def __init__(self, config: AuthConfig):
        self._legacy_key = config.api_key if _is_set(config.api_key) else None
        self._legacy_hash = config.api_key_hash if _is_set(config.api_key_hash) else None
        self._keys = [k.key for k in config.api_keys if _is_set(k.key)]
        self._hashes = [k.key_hash for k in config.api_keys if _is_set(k.key_hash)]

    @property
    def required(self) -> bool:
        return bool(self._legacy_key or self._legacy_hash or self._keys or self._hashes)

    def authenticate(self, presented: Optional[str]) -> bool:
        if not self.required:
            return True
        if not presented:
            return False

        if self._legacy_key is not None and _equals(presented, self._legacy_key):
            return True
        if self._legacy_hash is not None and verify_secret(presented, self._legacy_hash):
            return True
        if any(_equals(presented, key) for key in self._keys):
            return True
        return any(verify_secret(presented, key_hash) for key_hash in self._hashes)


class CredentialAuthenticator:
    """Checks HTTP basic credentials for read access."""

    def __init__(self, credentials: Iterable[CredentialConfig]):
        self._credentials = [c for c in credentials if _is_set(c.username)]

    @property
    def required(self) -> bool:
        return bool(self._credentials)

    def authenticate(self, username: Optional[str], password: Optional[str]) -> bool:
        if not self.required:
            return True
        if not username or not password:
            return False

        for credential in self._credentials:
            if not _equals(username, credential.username):
                continue
            if _is_set(credential.password) and _equals(password, credential.password):
                return True
            if verify_secret(password, credential.password_hash):
                return True
        return False


def parse_basic_authorization(header: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Extract username and password from a Basic Authorization header.

    Returns:
        (username, password), or (None, None) if the header is missing or invalid
    """
    if not header:
        return None, None
    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None, None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None, None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None, None
    return username, password


def _get_config(request: Request) -> APIConfig:
    return request.app.state.config


async def require_api_key(
    request: Request,
    api_key: Annotated[str | None, Header(alias=API_KEY_HEADER)] = None,
) -> None:
    """Dependency guarding package writes.

    Raises:
        UnauthorizedError: In read-only mode or when the API key is rejected
    """
    config = _get_config(request)
    if config.read_only:
        raise UnauthorizedError("The registry is in read-only mode")

    authenticator: ApiKeyAuthenticator = request.app.state.api_key_authenticator
    if not authenticator.authenticate(api_key):
        logger.warning(
            "AUDIT api_key_rejected path=%s remote=%s",
            request.url.path,
            request.client.host if request.client else "-",
        )
        raise UnauthorizedError("Invalid or missing API key")


async def require_read_access(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Dependency guarding package reads when credentials are configured.

    Raises:
        UnauthorizedError: When basic credentials are required and rejected
    """
    authenticator: CredentialAuthenticator = request.app.state.credential_authenticator
    if not authenticator.required:
        return

    username, password = parse_basic_authorization(authorization)
    if not authenticator.authenticate(username, password):
        raise UnauthorizedError("Invalid or missing credentials", basic_realm=True)

