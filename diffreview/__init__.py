"""Unified diff parsing, batching and review report building."""

__version__ = "0.1.0"
