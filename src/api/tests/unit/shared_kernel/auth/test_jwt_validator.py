"""Unit tests for the HS256 JWT validator."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
from jose import jwt

from shared_kernel.auth.jwt_validator import (
    InvalidTokenError,
    JWTValidator,
    TokenClaims,
)
from shared_kernel.auth.observability import JWTValidatorProbe

TEST_SECRET = "test-signing-secret-with-enough-length"
TEST_AUDIENCE = "authenticated"


def create_token(
    claims: dict[str, Any] | None = None,
    secret: str = TEST_SECRET,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Create a signed test token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "user-123",
        "email": "ada@example.com",
        "aud": TEST_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    payload.update(claims or {})
    return jwt.encode(payload, secret, algorithm=algorithm)


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=JWTValidatorProbe)


@pytest.fixture
def validator(mock_probe: MagicMock) -> JWTValidator:
    return JWTValidator(secret=TEST_SECRET, audience=TEST_AUDIENCE, probe=mock_probe)


class TestValidToken:
    def test_returns_claims(self, validator: JWTValidator, mock_probe: MagicMock):
        claims = validator.validate_token(create_token())

        assert claims == TokenClaims(sub="user-123", email="ada@example.com")
        mock_probe.token_accepted.assert_called_once_with(user_id="user-123")

    def test_custom_user_id_claim(self, mock_probe: MagicMock):
        validator = JWTValidator(
            secret=TEST_SECRET,
            audience=TEST_AUDIENCE,
            probe=mock_probe,
            user_id_claim="user_id",
        )

        claims = validator.validate_token(create_token({"user_id": "custom-7"}))

        assert claims.sub == "custom-7"

    def test_email_is_optional(self, validator: JWTValidator):
        token = create_token({"email": None})

        assert validator.validate_token(token).email is None


class TestInvalidToken:
    def test_malformed_token(self, validator: JWTValidator, mock_probe: MagicMock):
        with pytest.raises(InvalidTokenError):
            validator.validate_token("not-a-token")

        mock_probe.token_rejected.assert_called_once_with(reason="malformed")

    def test_wrong_secret(self, validator: JWTValidator):
        with pytest.raises(InvalidTokenError, match="signature"):
            validator.validate_token(create_token(secret="some-other-secret"))

    def test_expired(self, validator: JWTValidator):
        with pytest.raises(InvalidTokenError, match="expired"):
            validator.validate_token(create_token(expires_in=timedelta(hours=-1)))

    def test_wrong_audience(self, validator: JWTValidator):
        with pytest.raises(InvalidTokenError, match="audience"):
            validator.validate_token(create_token({"aud": "someone-else"}))

    def test_unexpected_algorithm(self, validator: JWTValidator):
        token = create_token(algorithm="HS512")

        with pytest.raises(InvalidTokenError, match="algorithm"):
            validator.validate_token(token)

    def test_missing_subject(self, validator: JWTValidator, mock_probe: MagicMock):
        with pytest.raises(InvalidTokenError, match="sub"):
            validator.validate_token(create_token({"sub": ""}))

        mock_probe.token_accepted.assert_not_called()
