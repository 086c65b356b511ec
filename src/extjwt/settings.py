"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Token cache settings and explicit config loading.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """Explicit settings used by the token manager and its protocol exchange."""

    token_max_age_s: float = 15.0
    unsupported_ttl_s: float = 300.0
    request_timeout_s: float = 10.0
    supported_version: str = "1"
    require_isupport: bool = True

    def __post_init__(self) -> None:
        for name in ("token_max_age_s", "unsupported_ttl_s", "request_timeout_s"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value}")
        if not self.supported_version.strip():
            raise ValueError("supported_version must be non-empty")

    @staticmethod
    def from_env() -> "TokenSettings":
        """Load settings from `EXTJWT_*` environment variables."""
        require_raw = os.getenv("EXTJWT_REQUIRE_ISUPPORT", "1").strip().lower()
        return TokenSettings(
            token_max_age_s=_env_float("EXTJWT_TOKEN_MAX_AGE_S", 15.0),
            unsupported_ttl_s=_env_float("EXTJWT_UNSUPPORTED_TTL_S", 300.0),
            request_timeout_s=_env_float("EXTJWT_REQUEST_TIMEOUT_S", 10.0),
            supported_version=os.getenv("EXTJWT_SUPPORTED_VERSION", "1").strip(),
            require_isupport=require_raw not in ("0", "false", "no", "off"),
        )
