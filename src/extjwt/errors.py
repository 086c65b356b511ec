"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy for token acquisition and verification.
"""

from __future__ import annotations


class ExtJwtError(RuntimeError):
    """Base class for token acquisition failures."""


class CorrelationTimeoutError(ExtJwtError, TimeoutError):
    """Raised when no correlated response arrives before the deadline."""


class UnsupportedProtocolError(ExtJwtError):
    """Raised when a peer replies that the token command is unknown."""

    def __init__(self, command: str, detail: str | None = None) -> None:
        self.command = command
        message = f"Peer does not support '{command}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedResponseError(ExtJwtError):
    """Raised when a correlated reply does not have the expected shape."""


class StaleValueError(ExtJwtError):
    """Raised by validity checks when a cached value is too old to reuse."""


class TokenVerificationError(PermissionError):
    """Raised when a token cannot be decoded or fails signature checks."""
