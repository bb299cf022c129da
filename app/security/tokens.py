"""
app/security/tokens.py

Signed identity tokens (HS256 JWT).

Payload layout:

    {"data": {team, teamId, providerId, locationId, facility, userBaseEntityId},
     "iat": <issued at>, "exp": <expiry>}
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt

from app.config import get_auth_settings
from app.domain.identity import SubmitterIdentity

ALGORITHM = "HS256"


class TokenService:
    def __init__(self, *, secret: str, ttl_seconds: int = 86_400) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty.")
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)

    def issue(self, identity: SubmitterIdentity, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "data": identity.to_claims(),
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> SubmitterIdentity:
        """
        Decode and check a token.

        Raises jwt.PyJWTError for a bad signature, an expired token or a
        payload without identity claims.
        """

        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        claims = payload.get("data")
        if not isinstance(claims, dict):
            raise jwt.InvalidTokenError("Token carries no identity claims.")
        try:
            return SubmitterIdentity.from_claims(claims)
        except KeyError as exc:
            raise jwt.InvalidTokenError(f"Token is missing the {exc.args[0]} claim.") from exc


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    settings = get_auth_settings()
    return TokenService(secret=settings.jwt_secret, ttl_seconds=settings.token_ttl_seconds)
