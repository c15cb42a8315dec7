# SPDX-License-Identifier: MIT
"""Package search: query parsing, database search and indexing."""
