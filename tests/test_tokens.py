"""Tests for bearer token issuance and verification."""

from __future__ import annotations

import time

import jwt
import pytest

from user_service.domain.errors import InvalidSignature, MalformedToken, TokenExpired
from user_service.security.tokens import TokenIssuer

SECRET = "unit-test-secret-0123456789abcdef"


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    # Three hours in the past so every instant the tests visit is already elapsed.
    return FakeClock(int(time.time()) - 3 * 3600)


def test_issue_embeds_identity_and_two_hour_expiry(clock):
    issuer = TokenIssuer(SECRET, clock=clock)
    claims = issuer.verify(issuer.issue(user_id="acc-1", email="jane@x.com"))
    assert claims.user_id == "acc-1"
    assert claims.email == "jane@x.com"
    assert claims.issued_at == int(clock.now)
    assert claims.expires_at - claims.issued_at == 2 * 60 * 60


def test_expiry_boundary(clock):
    issuer = TokenIssuer(SECRET, clock=clock)
    issued_at = clock.now
    token = issuer.issue(user_id="acc-1", email="jane@x.com")

    clock.now = issued_at + 60 * 119
    assert issuer.verify(token).user_id == "acc-1"

    clock.now = issued_at + 2 * 3600
    assert issuer.verify(token).user_id == "acc-1"

    clock.now = issued_at + 60 * 121
    with pytest.raises(TokenExpired):
        issuer.verify(token)


def test_signature_from_other_secret_rejected(clock):
    token = TokenIssuer("another-secret-0123456789abcdef0", clock=clock).issue(user_id="acc-1", email="a@b.com")
    with pytest.raises(InvalidSignature):
        TokenIssuer(SECRET, clock=clock).verify(token)


def test_tampered_payload_rejected(clock):
    issuer = TokenIssuer(SECRET, clock=clock)
    header, _, signature = issuer.issue(user_id="acc-1", email="a@b.com").split(".")
    forged_payload = jwt.encode(
        {"user_id": "admin", "email": "a@b.com", "iat": 0, "exp": 9_999_999_999}, "x", algorithm="HS256"
    ).split(".")[1]
    with pytest.raises(InvalidSignature):
        issuer.verify(f"{header}.{forged_payload}.{signature}")


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_unparseable_tokens_are_malformed(clock, token):
    with pytest.raises(MalformedToken):
        TokenIssuer(SECRET, clock=clock).verify(token)


def test_missing_identity_claims_are_malformed(clock):
    now = int(clock.now)
    token = jwt.encode({"iat": now, "exp": now + 60}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedToken):
        TokenIssuer(SECRET, clock=clock).verify(token)


def test_missing_expiry_is_malformed(clock):
    token = jwt.encode({"user_id": "acc-1", "email": "a@b.com"}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedToken):
        TokenIssuer(SECRET, clock=clock).verify(token)


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenIssuer("")
