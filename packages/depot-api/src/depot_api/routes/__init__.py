# SPDX-License-Identifier: MIT
"""API route modules."""

from . import content, index, publish, registration, search

__all__ = ["content", "index", "publish", "registration", "search"]
