"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .loader import CacheLoader

__all__ = ["CacheLoader"]
