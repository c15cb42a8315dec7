# SPDX-License-Identifier: MIT
"""Salted PBKDF2 hashing for API keys and passwords.

Hashes are stored as ``PBKDF2$<iterations>$<base64 salt>$<base64 key>`` so
operators can configure credentials without keeping plaintext secrets.
"""

import base64
import binascii
import hashlib
import hmac
import secrets

HASH_SCHEME = "PBKDF2"
DEFAULT_ITERATIONS = 100_000
MIN_ITERATIONS = 10_000
# Largest signed 32-bit count.
MAX_ITERATIONS = 2**31 - 1
SALT_SIZE = 16
KEY_SIZE = 32


def _derive(secret: str, salt: bytes, iterations: int, length: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations, dklen=length)


def hash_secret(secret: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Hash a secret with a random salt.

    Args:
        secret: The plaintext secret
        iterations: PBKDF2 iteration count, at least 10000

    Returns:
        The encoded hash string

    Raises:
        ValueError: If the secret is blank or iterations is out of range
    """
    if not secret or not secret.strip():
        raise ValueError("Secret cannot be empty")
    if iterations < MIN_ITERATIONS:
        raise ValueError(f"Iterations must be at least {MIN_ITERATIONS}")
    if iterations > MAX_ITERATIONS:
        raise ValueError(f"Iterations must be at most {MAX_ITERATIONS}")

    salt = secrets.token_bytes(SALT_SIZE)
    key = _derive(secret, salt, iterations, KEY_SIZE)
    return "$".join(
        [
            HASH_SCHEME,
            str(iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(key).decode("ascii"),
        ]
    )


def verify_secret(secret: str | None, hash_value: str | None) -> bool:
    """Check a secret against an encoded hash.

    Malformed hash strings never raise; they simply fail verification.
    """
    if not secret or not secret.strip() or not hash_value or not hash_value.strip():
        return False

    parts = [part for part in hash_value.strip().split("$") if part]
    if len(parts) != 4:
        return False

    scheme, iterations_text, salt_text, key_text = parts
    if scheme.upper() != HASH_SCHEME:
        return False

    if not iterations_text.isascii() or not iterations_text.isdigit():
        return False
    try:
        iterations = int(iterations_text)
    except ValueError:
        return False
    if iterations < MIN_ITERATIONS or iterations > MAX_ITERATIONS:
        return False

    try:
        salt = base64.b64decode(salt_text, validate=True)
        expected = base64.b64decode(key_text, validate=True)
    except (binascii.Error, ValueError):
        return False
    if not salt or not expected:
        return False

    actual = _derive(secret, salt, iterations, len(expected))
    return hmac.compare_digest(actual, expected)
