# SPDX-License-Identifier: MIT
"""Checksum and entity tag utilities for served content."""

import hashlib
from typing import Optional


def compute_sha256(data: bytes) -> str:
    """Compute SHA256 hash of bytes data.

    Args:
        data: Bytes to hash

    Returns:
        Lowercase hex-encoded SHA256 hash
    """
    return hashlib.sha256(data).hexdigest()


def compute_etag(*parts: Optional[str]) -> str:
    """Create a strong entity tag from identifying parts.

    Parts are joined with ``|``; None counts as an empty part.

    Returns:
        The quoted, upper-case hex SHA256 of the joined parts
    """
    text = "|".join(part or "" for part in parts)
    return f'"{compute_sha256(text.encode("utf-8")).upper()}"'


def _normalize_etag(etag: str) -> str:
    etag = etag.strip()
    if etag.startswith("W/"):
        etag = etag[2:].strip()
    return etag


def matches_if_none_match(header: Optional[str], etag: str) -> bool:
    """Check an If-None-Match header against an entity tag.

    Weak validators compare equal to their strong form and ``*`` matches
    anything.
    """
    if header is None or not header.strip():
        return False

    current = _normalize_etag(etag)
    for candidate in header.split(","):
        candidate = candidate.strip()
        if not candidate:
            continue
        if candidate == "*" or _normalize_etag(candidate) == current:
            return True
    return False
