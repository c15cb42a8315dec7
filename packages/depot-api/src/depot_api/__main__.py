# SPDX-License-Identifier: MIT
"""Allow ``python -m depot_api``."""

from .cli import main

main()
