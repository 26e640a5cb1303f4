# SPDX-License-Identifier: MIT
"""API route modules."""

from . import admin, download, gems, index

__all__ = ["admin", "download", "gems", "index"]
