# SPDX-License-Identifier: MIT
"""Authentication handlers."""

from .api_keys import (
    API_KEY_HEADER,
    ApiKeyAuthenticator,
    CredentialAuthenticator,
    parse_basic_authorization,
    require_api_key,
    require_read_access,
)
from .hashing import (
    DEFAULT_ITERATIONS,
    MIN_ITERATIONS,
    hash_secret,
    verify_secret,
)

__all__ = [
    # API keys
    "API_KEY_HEADER",
    "ApiKeyAuthenticator",
    "CredentialAuthenticator",
    "parse_basic_authorization",
    "require_api_key",
    "require_read_access",
    # Hashing
    "DEFAULT_ITERATIONS",
    "MIN_ITERATIONS",
    "hash_secret",
    "verify_secret",
]
