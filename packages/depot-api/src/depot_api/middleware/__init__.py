# SPDX-License-Identifier: MIT
"""API middleware components."""

from .errors import APIError, add_error_handlers

__all__ = ["APIError", "add_error_handlers"]
