"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Receiving-side verification of EXTJWT tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import jwt

from ..errors import TokenVerificationError

logger = logging.getLogger("extjwt.tokens.verify")

HMAC_ALGORITHMS: tuple[str, ...] = ("HS256", "HS384", "HS512")
FALLBACK_ISSUER = "*"


@dataclass(frozen=True, slots=True)
class VerifiedToken:
    """Identity resolved from a verified token."""

    issuer: str
    account: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


class TokenVerifier:
    """
    Verify HMAC-signed tokens with one shared secret per issuer.

    The secret is looked up by the ``iss`` claim; an entry under ``"*"`` is
    used for issuers without their own secret.
    """

    def __init__(self, secrets_by_issuer: Mapping[str, str]) -> None:
        self._secrets = dict(secrets_by_issuer)

    def secret_for(self, issuer: str) -> str:
        """
        Return the secret configured for ``issuer``.

        Raises:
            TokenVerificationError: If neither the issuer nor a fallback is configured.
        """
        secret = self._secrets.get(issuer)
        if secret is not None:
            return secret
        secret = self._secrets.get(FALLBACK_ISSUER)
        if secret is None:
            raise TokenVerificationError(f"Issuer {issuer!r} not configured")
        logger.warning("Issuer %r not configured, used fallback", issuer)
        return secret

    def verify(self, token: str) -> VerifiedToken:
        """
        Verify ``token`` and return its issuer and account.

        Raises:
            TokenVerificationError: On any decoding, signature or claim failure.
        """
        try:
            header = jwt.get_unverified_header(token)
            unverified = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(f"Invalid token: {exc}") from exc

        algorithm = header.get("alg")
        if algorithm not in HMAC_ALGORITHMS:
            raise TokenVerificationError(f"Unexpected signing method: {algorithm}")

        issuer = unverified.get("iss")
        if issuer is None:
            raise TokenVerificationError("Issuer field 'iss' missing from JWT")
        if not isinstance(issuer, str):
            raise TokenVerificationError("Issuer field 'iss' is not a string")

        secret = self.secret_for(issuer)
        try:
            claims = jwt.decode(token, secret, algorithms=[algorithm])
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(f"Invalid token: {exc}") from exc

        account = claims.get("account")
        return VerifiedToken(
            issuer=issuer,
            account=account if isinstance(account, str) else None,
            claims={str(key): value for key, value in claims.items()},
        )
