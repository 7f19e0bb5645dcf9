"""
JWT creation and verification (PyJWT).

Tokens are standard HS256 JWTs signed with ``TokenSettings.secret``.  The
issuer is constructed with its settings explicitly (see ``main.create_app``);
it never reads the environment itself.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict

import jwt

from auth.errors import InvalidTokenError, SigningError

CLAIM_SUB = "sub"
CLAIM_EMAIL = "email"
CLAIM_IAT = "iat"
CLAIM_EXP = "exp"


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    algorithm: str = "HS256"
    expiry_seconds: int = 604800


class TokenIssuer:
    def __init__(self, settings: TokenSettings):
        self._settings = settings

    def sign(self, claims: Dict[str, Any]) -> str:
        """Sign ``claims`` (plus ``iat``/``exp``) into a compact JWT."""
        if not self._settings.secret:
            raise SigningError("JWT secret is not configured")

        now = int(time.time())
        payload = dict(claims)
        payload[CLAIM_IAT] = now
        if self._settings.expiry_seconds > 0:
            payload[CLAIM_EXP] = now + self._settings.expiry_seconds

        try:
            return jwt.encode(payload, self._settings.secret, algorithm=self._settings.algorithm)
        except (TypeError, ValueError, jwt.PyJWTError) as exc:
            raise SigningError() from exc

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the claims.

        Raises ``InvalidTokenError`` on any failure.
        """
        if not self._settings.secret:
            raise InvalidTokenError()
        try:
            claims = jwt.decode(
                token,
                self._settings.secret,
                algorithms=[self._settings.algorithm],
                options={"require": [CLAIM_SUB]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError() from exc
        return claims
