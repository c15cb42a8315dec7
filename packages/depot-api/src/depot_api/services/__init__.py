# SPDX-License-Identifier: MIT
"""Package services: reading, indexing, retention, lookups and metadata."""
