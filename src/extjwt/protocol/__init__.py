"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Protocol correlation and the EXTJWT request exchange.
"""

from .correlator import CorrelatedResponse, Match, Matcher, await_response
from .extjwt import (
    CONTINUATION_PARAM_COUNT,
    ERR_UNKNOWNCOMMAND,
    EXTJWT_COMMAND,
    TERMINAL_PARAM_COUNT,
    WILDCARD_TARGET,
    extjwt_matcher,
    request_extjwt,
)

__all__ = [
    "CorrelatedResponse",
    "Match",
    "Matcher",
    "await_response",
    "EXTJWT_COMMAND",
    "ERR_UNKNOWNCOMMAND",
    "WILDCARD_TARGET",
    "CONTINUATION_PARAM_COUNT",
    "TERMINAL_PARAM_COUNT",
    "extjwt_matcher",
    "request_extjwt",
]
