"""TokenCodec unit tests: key separation, type claims, expiry and tampering."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from school_auth.application.interfaces.services import TokenExpiredError
from school_auth.domain.enums import TokenType
from school_auth.infrastructure.security import TokenCodec
from school_auth.shared.utils.datetime import to_epoch_micros

ACCESS_SECRET = "access-secret-for-tests"
REFRESH_SECRET = "refresh-secret-for-tests"
CLAIMS = {"id": "u1", "roleId": "r1", "roleName": "TEACHER", "permissions": ["student.view"]}


@pytest.fixture
def tokens() -> TokenCodec:
    return TokenCodec(ACCESS_SECRET, REFRESH_SECRET)


def test_access_token_round_trip(tokens: TokenCodec) -> None:
    payload = tokens.verify_access_token(tokens.create_access_token(CLAIMS))
    assert payload["id"] == "u1"
    assert payload["permissions"] == ["student.view"]
    assert payload["type"] == TokenType.ACCESS.value
    assert payload["exp"] > payload["iat"]


def test_refresh_token_is_signed_with_refresh_key(tokens: TokenCodec) -> None:
    token = tokens.create_refresh_token(CLAIMS)
    assert jwt.decode(token, REFRESH_SECRET, algorithms=["HS256"])["id"] == "u1"
    with pytest.raises(ValueError):
        tokens.verify_access_token(token)


def test_access_token_is_not_a_refresh_token(tokens: TokenCodec) -> None:
    with pytest.raises(ValueError):
        tokens.verify_refresh_token(tokens.create_access_token(CLAIMS))


def test_tokens_for_same_claims_differ(tokens: TokenCodec) -> None:
    assert tokens.create_refresh_token(CLAIMS) != tokens.create_refresh_token(CLAIMS)


def test_refresh_ttl_controls_expiry() -> None:
    tokens = TokenCodec(ACCESS_SECRET, REFRESH_SECRET, refresh_ttl=timedelta(days=7))
    payload = tokens.verify_refresh_token(tokens.create_refresh_token(CLAIMS))
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600


def test_expired_token_raises_token_expired(tokens: TokenCodec) -> None:
    expired = TokenCodec(ACCESS_SECRET, REFRESH_SECRET, access_ttl=timedelta(seconds=-5))
    token = expired.create_access_token(CLAIMS)
    with pytest.raises(TokenExpiredError):
        tokens.verify_access_token(token)


def test_tampered_token_is_rejected(tokens: TokenCodec) -> None:
    token = tokens.create_access_token(CLAIMS)
    header, body, signature = token.split(".")
    forged = jwt.encode({**CLAIMS, "type": "access", "exp": 9999999999}, "wrong-key")
    with pytest.raises(ValueError):
        tokens.verify_access_token(f"{header}.{forged.split('.')[1]}.{signature}")


def test_token_without_id_is_rejected(tokens: TokenCodec) -> None:
    token = tokens.create_access_token({"roleId": "r1"})
    with pytest.raises(ValueError):
        tokens.verify_access_token(token)


def test_reset_token_claims(tokens: TokenCodec) -> None:
    changed_at = datetime(2026, 3, 1, 12, 30, 15, 123456, tzinfo=UTC)
    payload = tokens.verify_reset_token(tokens.create_reset_token("u1", changed_at))
    assert payload["userId"] == "u1"
    assert payload["type"] == TokenType.RESET_PASSWORD.value
    assert payload["pwdChangedAt"] == to_epoch_micros(changed_at)


def test_reset_token_is_not_an_access_token(tokens: TokenCodec) -> None:
    with pytest.raises(ValueError):
        tokens.verify_access_token(tokens.create_reset_token("u1"))


def test_missing_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenCodec("", REFRESH_SECRET)
