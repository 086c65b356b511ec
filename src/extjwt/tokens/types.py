"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Token cache records and per-peer states.
"""

from __future__ import annotations

import enum
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

import jwt

from ..errors import TokenVerificationError


class TokenState(str, enum.Enum):
    """Lifecycle state of one peer inside a token manager."""

    NO_RECORD = "no_record"
    PENDING = "pending"
    VALID = "valid"
    STALE = "stale"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class TokenRecord:
    """A token and the clock reading at which it was acquired."""

    token: str
    acquired_at: float

    def age(self, now: float) -> float:
        return now - self.acquired_at

    def claims(self) -> dict[str, Any]:
        """
        Decode the token claims without checking the signature.

        Raises:
            TokenVerificationError: If the token is not a decodable JWT.
        """
        try:
            return jwt.decode(self.token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(f"Token is not a JWT: {exc}") from exc

    def __repr__(self) -> str:
        # Never expose the full token in logs.
        return f"TokenRecord(token='{self.token[:8]}...', acquired_at={self.acquired_at})"


@dataclass(frozen=True, slots=True)
class UnsupportedMark:
    """Negative cache row for a peer that does not know the token command."""

    peer: Hashable
    marked_at: float

    def expired(self, now: float, ttl_s: float) -> bool:
        return now - self.marked_at > ttl_s
