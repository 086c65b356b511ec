"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Token cache, records and verification.
"""

from .manager import TokenManager, TokenResult
from .types import TokenRecord, TokenState, UnsupportedMark
from .verify import TokenVerifier, VerifiedToken

__all__ = [
    "TokenManager",
    "TokenResult",
    "TokenRecord",
    "TokenState",
    "UnsupportedMark",
    "TokenVerifier",
    "VerifiedToken",
]
