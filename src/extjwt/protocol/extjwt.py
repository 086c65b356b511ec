"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

EXTJWT token request exchange.

Replies have the shape ``EXTJWT <target> <service> [*] <token>``. Four
parameters mean the token continues in the next reply; three parameters end
the token. Peers without the command answer ``421 <nick> EXTJWT :Unknown
command``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import MalformedResponseError, UnsupportedProtocolError
from ..peers.types import IrcMessage, Peer
from .correlator import Match, await_response

logger = logging.getLogger("extjwt.protocol")

EXTJWT_COMMAND = "EXTJWT"
ERR_UNKNOWNCOMMAND = "421"
WILDCARD_TARGET = "*"
CONTINUATION_PARAM_COUNT = 4
TERMINAL_PARAM_COUNT = 3


def extjwt_matcher(target: str = WILDCARD_TARGET) -> Callable[[IrcMessage], Match]:
    """Build a matcher for the reply to ``EXTJWT <target>``."""

    def match(message: IrcMessage) -> Match:
        params = message.params
        if message.command == ERR_UNKNOWNCOMMAND:
            if len(params) >= 2 and params[1].upper() == EXTJWT_COMMAND:
                raise UnsupportedProtocolError(EXTJWT_COMMAND, message.payload)
            return Match.IGNORE

        if message.command != EXTJWT_COMMAND:
            return Match.IGNORE
        if not params or params[0] != target:
            return Match.IGNORE

        if len(params) == CONTINUATION_PARAM_COUNT:
            return Match.PARTIAL
        if len(params) == TERMINAL_PARAM_COUNT:
            return Match.COMPLETE
        raise MalformedResponseError(
            f"{EXTJWT_COMMAND} reply has {len(params)} parameters, "
            f"expected {TERMINAL_PARAM_COUNT} or {CONTINUATION_PARAM_COUNT}"
        )

    return match


async def request_extjwt(
    peer: Peer,
    *,
    timeout_s: float,
    target: str = WILDCARD_TARGET,
) -> str:
    """
    Send ``EXTJWT <target>`` to ``peer`` and return the reassembled token.

    Raises:
        UnsupportedProtocolError: If the peer does not know the command.
        CorrelationTimeoutError: If the reply does not arrive in time.
        MalformedResponseError: If a reply has an unexpected shape.
    """
    pending = await_response(peer, extjwt_matcher(target), timeout_s)
    try:
        peer.send_raw(EXTJWT_COMMAND, target)
    except BaseException:
        pending.cancel()
        raise
    logger.debug("Sent %s %s to %r", EXTJWT_COMMAND, target, peer)

    response = await pending
    token = response.payload
    if not token:
        raise MalformedResponseError(f"{EXTJWT_COMMAND} reply carried an empty token")
    return token
