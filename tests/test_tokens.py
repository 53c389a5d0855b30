from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from errors import TokenExpired, TokenInvalid
from services.tokens import TOKEN_TTL, TokenIssuer


def test_issue_then_verify_returns_user_id():
    issuer = TokenIssuer("secret")
    token = issuer.issue(42)
    assert issuer.verify(token) == 42


def test_token_expires_after_24_hours():
    assert TOKEN_TTL == timedelta(hours=24)
    issued_at = datetime.now(timezone.utc) - timedelta(hours=25)
    issuer = TokenIssuer("secret", clock=lambda: issued_at)
    token = issuer.issue(7)

    with pytest.raises(TokenExpired):
        TokenIssuer("secret").verify(token)


def test_token_still_valid_just_before_expiry():
    issued_at = datetime.now(timezone.utc) - timedelta(hours=23)
    token = TokenIssuer("secret", clock=lambda: issued_at).issue(7)
    assert TokenIssuer("secret").verify(token) == 7


def test_payload_carries_subject_and_expiry():
    issuer = TokenIssuer("secret")
    payload = jwt.decode(issuer.issue(5), "secret", algorithms=["HS256"])
    assert payload["sub"] == "5"
    assert payload["exp"] - payload["iat"] == int(TOKEN_TTL.total_seconds())


def test_wrong_secret_is_invalid():
    token = TokenIssuer("secret").issue(1)
    with pytest.raises(TokenInvalid):
        TokenIssuer("other-secret").verify(token)


@pytest.mark.parametrize("token", ["", None, "not.a.jwt", "abc"])
def test_malformed_tokens_are_invalid(token):
    with pytest.raises(TokenInvalid):
        TokenIssuer("secret").verify(token)


def test_non_numeric_subject_is_invalid():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "alice", "exp": int((now + timedelta(hours=1)).timestamp())},
        "secret",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalid):
        TokenIssuer("secret").verify(token)


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenIssuer("")
