from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.domain.identity import SubmitterIdentity
from app.security.tokens import TokenService

SECRET = "unit-test-secret-with-enough-length"


def test_issued_token_verifies_to_same_identity(identity: SubmitterIdentity) -> None:
    service = TokenService(secret=SECRET)

    token = service.issue(identity)

    assert service.verify(token) == identity


def test_payload_carries_claims_under_data(identity: SubmitterIdentity) -> None:
    token = TokenService(secret=SECRET, ttl_seconds=600).issue(identity)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"])

    assert payload["data"]["providerId"] == "provider1"
    assert payload["data"]["userBaseEntityId"] == "base-entity-1"
    assert payload["exp"] - payload["iat"] == 600


def test_expired_token_is_refused(identity: SubmitterIdentity) -> None:
    service = TokenService(secret=SECRET, ttl_seconds=60)
    token = service.issue(identity, now=datetime.now(timezone.utc) - timedelta(hours=1))

    with pytest.raises(jwt.ExpiredSignatureError):
        service.verify(token)


def test_token_signed_with_other_secret_is_refused(identity: SubmitterIdentity) -> None:
    token = TokenService(secret="another-secret-with-enough-length").issue(identity)

    with pytest.raises(jwt.InvalidSignatureError):
        TokenService(secret=SECRET).verify(token)


def test_token_without_identity_claims_is_refused() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode({"iat": now, "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        TokenService(secret=SECRET).verify(token)


def test_token_missing_a_claim_is_refused(identity: SubmitterIdentity) -> None:
    now = datetime.now(timezone.utc)
    claims = identity.to_claims()
    del claims["teamId"]
    token = jwt.encode({"data": claims, "iat": now, "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        TokenService(secret=SECRET).verify(token)


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenService(secret="")
