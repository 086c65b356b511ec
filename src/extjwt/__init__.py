"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

EXTJWT credential token cache.

Acquires short-lived tokens from chat server peers, caches them per peer,
refreshes them when stale, deduplicates concurrent requests and remembers
peers that do not support the command.

Quick start::

    from extjwt import InMemoryPeer, TokenManager

    manager = TokenManager()
    token = await manager.acquire(peer)
    if token is False:
        ...  # upload anonymously
"""

from .cache import CacheLoader
from .errors import (
    CorrelationTimeoutError,
    ExtJwtError,
    MalformedResponseError,
    StaleValueError,
    TokenVerificationError,
    UnsupportedProtocolError,
)
from .peers import InMemoryPeer, IrcMessage, Peer, PeerRegistry
from .protocol import CorrelatedResponse, Match, await_response, request_extjwt
from .settings import TokenSettings
from .tokens import (
    TokenManager,
    TokenRecord,
    TokenState,
    TokenVerifier,
    UnsupportedMark,
    VerifiedToken,
)

__all__ = [
    "CacheLoader",
    "ExtJwtError",
    "CorrelationTimeoutError",
    "UnsupportedProtocolError",
    "MalformedResponseError",
    "StaleValueError",
    "TokenVerificationError",
    "Peer",
    "IrcMessage",
    "InMemoryPeer",
    "PeerRegistry",
    "Match",
    "CorrelatedResponse",
    "await_response",
    "request_extjwt",
    "TokenSettings",
    "TokenManager",
    "TokenRecord",
    "TokenState",
    "UnsupportedMark",
    "TokenVerifier",
    "VerifiedToken",
]
