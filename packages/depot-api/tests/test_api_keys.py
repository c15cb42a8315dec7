# SPDX-License-Identifier: MIT
"""Tests for API key and basic credential authentication."""

import base64

import pytest
from hypothesis import given, settings, strategies as st

from depot_api.auth import (
    ApiKeyAuthenticator,
    CredentialAuthenticator,
    hash_secret,
    parse_basic_authorization,
)
from depot_api.auth.hashing import MIN_ITERATIONS
from depot_api.config import ApiKeyConfig, AuthConfig, CredentialConfig


# =============================================================================
# Strategies for generating test data
# =============================================================================

presented_keys = st.one_of(st.none(), st.text(max_size=40))


def _basic(value: str) -> str:
    return "Basic " + base64.b64encode(value.encode("utf-8")).decode("ascii")


class TestOpenRegistry:
    """With no key configured every request authenticates."""

    @given(presented=presented_keys)
    @settings(max_examples=100)
    def test_any_key_accepted(self, presented):
        authenticator = ApiKeyAuthenticator(AuthConfig())
        assert not authenticator.required
        assert authenticator.authenticate(presented)

    def test_blank_entries_do_not_enable_auth(self):
        config = AuthConfig(
            api_key="  ",
            api_key_hash="",
            api_keys=[ApiKeyConfig(key=""), ApiKeyConfig(key_hash=" ")],
        )
        authenticator = ApiKeyAuthenticator(config)
        assert not authenticator.required
        assert authenticator.authenticate("")


class TestApiKeyAuthenticator:
    """Tests for configured API keys."""

    def test_legacy_key(self):
        authenticator = ApiKeyAuthenticator(AuthConfig(api_key="abc"))
        assert authenticator.required
        assert authenticator.authenticate("abc")
        assert not authenticator.authenticate("xyz")
        assert not authenticator.authenticate("")
        assert not authenticator.authenticate(None)

    def test_key_comparison_is_case_sensitive(self):
        authenticator = ApiKeyAuthenticator(AuthConfig(api_key="abc"))
        assert not authenticator.authenticate("ABC")

    def test_legacy_hash(self):
        config = AuthConfig(api_key_hash=hash_secret("abc", MIN_ITERATIONS))
        authenticator = ApiKeyAuthenticator(config)
        assert authenticator.authenticate("abc")
        assert not authenticator.authenticate("xyz")

    def test_key_list(self):
        config = AuthConfig(
            api_keys=[
                ApiKeyConfig(key="first"),
                ApiKeyConfig(key_hash=hash_secret("second", MIN_ITERATIONS)),
            ]
        )
        authenticator = ApiKeyAuthenticator(config)
        assert authenticator.authenticate("first")
        assert authenticator.authenticate("second")
        assert not authenticator.authenticate("third")

    def test_legacy_and_list_combined(self):
        config = AuthConfig(api_key="legacy", api_keys=[ApiKeyConfig(key="listed")])
        authenticator = ApiKeyAuthenticator(config)
        assert authenticator.authenticate("legacy")
        assert authenticator.authenticate("listed")

    def test_malformed_hash_rejects(self):
        authenticator = ApiKeyAuthenticator(AuthConfig(api_key_hash="not-a-hash"))
        assert authenticator.required
        assert not authenticator.authenticate("not-a-hash")

    def test_oversized_iteration_count_rejects(self):
        authenticator = ApiKeyAuthenticator(
            AuthConfig(api_key_hash="PBKDF2$99999999999999999999999$c2FsdA==$a2V5")
        )
        assert not authenticator.authenticate("abc")


class TestCredentialAuthenticator:
    """Tests for basic read credentials."""

    def test_no_credentials_is_anonymous(self):
        authenticator = CredentialAuthenticator([])
        assert not authenticator.required
        assert authenticator.authenticate(None, None)

    def test_plain_password(self):
        authenticator = CredentialAuthenticator(
            [CredentialConfig(username="reader", password="pw")]
        )
        assert authenticator.required
        assert authenticator.authenticate("reader", "pw")
        assert not authenticator.authenticate("reader", "wrong")
        assert not authenticator.authenticate("other", "pw")
        assert not authenticator.authenticate(None, None)

    def test_hashed_password(self):
        authenticator = CredentialAuthenticator(
            [CredentialConfig(username="reader", password_hash=hash_secret("pw", MIN_ITERATIONS))]
        )
        assert authenticator.authenticate("reader", "pw")
        assert not authenticator.authenticate("reader", "nope")

    def test_malformed_password_hash_rejects(self):
        authenticator = CredentialAuthenticator(
            [CredentialConfig(username="reader", password_hash="PBKDF2$\u00b2\u00b2$c2FsdA==$a2V5")]
        )
        assert not authenticator.authenticate("reader", "pw")

    def test_blank_usernames_ignored(self):
        authenticator = CredentialAuthenticator([CredentialConfig(username="", password="pw")])
        assert not authenticator.required


class TestParseBasicAuthorization:
    """Tests for decoding Basic Authorization headers."""

    def test_valid_header(self):
        assert parse_basic_authorization(_basic("reader:pw")) == ("reader", "pw")

    def test_password_may_contain_colon(self):
        assert parse_basic_authorization(_basic("reader:a:b")) == ("reader", "a:b")

    def test_scheme_case_insensitive(self):
        header = _basic("reader:pw").replace("Basic", "basic")
        assert parse_basic_authorization(header) == ("reader", "pw")

    @pytest.mark.parametrize(
        "header",
        [
            None,
            "",
            "Bearer abc",
            "Basic",
            "Basic !!!notbase64",
            _basic("no-separator"),
        ],
    )
    def test_invalid_headers(self, header):
        assert parse_basic_authorization(header) == (None, None)

    @given(
        username=st.text(
            alphabet=st.characters(codec="utf-8", exclude_characters=":"), max_size=20
        ),
        password=st.text(alphabet=st.characters(codec="utf-8"), max_size=20),
    )
    @settings(max_examples=100)
    def test_encoded_credentials_decode(self, username: str, password: str):
        """Any username without a colon decodes back to its parts."""
        assert parse_basic_authorization(_basic(f"{username}:{password}")) == (username, password)
