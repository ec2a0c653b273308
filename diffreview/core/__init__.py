"""Shared library utilities."""

from diffreview.core.logging import get_logger
from diffreview.core.text import truncate

__all__ = [
    "get_logger",
    "truncate",
]
