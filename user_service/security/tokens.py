"""Utilities for issuing and validating application JWTs."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Callable

import jwt

from ..domain.errors import InvalidSignature, MalformedToken, TokenExpired

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 2 * 60 * 60


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Identity claims embedded in a bearer token."""

    user_id: str
    email: str
    issued_at: int
    expires_at: int


class TokenIssuer:
    """Issue and verify stateless HS256 bearer tokens.

    Parameters
    ----------
    secret:
        Signing key loaded once at startup; it is never rotated while the
        process is running.
    ttl_seconds:
        Lifetime added to the issue time to produce the ``exp`` claim.
    clock:
        Callable returning the current UNIX time in seconds.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must be configured (TOKEN_KEY)")
        self._secret = secret
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def issue(self, *, user_id: str, email: str) -> str:
        """Create a signed token for ``user_id`` expiring ``ttl_seconds`` from now."""
        now = int(self._clock())
        payload: dict[str, Any] = {
            "user_id": user_id,
            "email": email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Decode ``token`` and return its claims.

        Raises
        ------
        InvalidSignature
            The token was not signed with this issuer's secret.
        TokenExpired
            The current time is past the embedded ``exp`` claim.
        MalformedToken
            The token cannot be parsed or lacks the identity claims.
        """
        try:
            # Time claims are checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except jwt.PyJWTError as exc:
            raise MalformedToken() from exc

        try:
            claims = TokenClaims(
                user_id=str(payload["user_id"]),
                email=str(payload["email"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedToken() from exc

        if self._clock() > claims.expires_at:
            raise TokenExpired()
        return claims
