# SPDX-License-Identifier: MIT
"""Middleware components for the gem index API."""

from .errors import add_error_handlers

__all__ = ["add_error_handlers"]
