"""Unit tests for current user resolution."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from jose import jwt

from access.domain.aggregates import UserRole
from access.domain.value_objects import PlatformRole, UserId
from shared_kernel.auth import JWTValidator

SECRET = "test-secret"
AUDIENCE = "authenticated"


def _token(sub: str = "user-42", **overrides) -> str:
    now = datetime.now(UTC)
    claims = {
        "sub": sub,
        "aud": AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
        **overrides,
    }
    return jwt.encode(claims, SECRET, algorithm="HS256")


@pytest.fixture
def role_repository() -> Mock:
    repository = Mock()
    repository.get = AsyncMock(return_value=None)
    return repository


@pytest.fixture
def test_client(mock_session, role_repository) -> TestClient:
    from access.dependencies.authentication import get_jwt_validator
    from access.presentation import router
    from infrastructure.database.dependencies import get_session

    app = FastAPI()
    app.dependency_overrides[get_jwt_validator] = lambda: JWTValidator(
        secret=SECRET, audience=AUDIENCE, probe=Mock()
    )
    app.dependency_overrides[get_session] = lambda: mock_session
    app.include_router(router)

    with patch(
        "access.dependencies.user.UserRoleRepository", return_value=role_repository
    ):
        yield TestClient(app)


class TestGetCurrentUser:
    def test_missing_credentials_is_401(self, test_client):
        response = test_client.get("/access/roles/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_is_401(self, test_client):
        response = test_client.get(
            "/access/roles/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_token_is_401(self, test_client):
        expired = _token(exp=int((datetime.now(UTC) - timedelta(minutes=1)).timestamp()))

        response = test_client.get(
            "/access/roles/me", headers={"Authorization": f"Bearer {expired}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_without_assignment_has_user_role(self, test_client, role_repository):
        response = test_client.get(
            "/access/roles/me", headers={"Authorization": f"Bearer {_token()}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user_id"] == "user-42"
        assert response.json()["role"] == "user"
        role_repository.get.assert_awaited_once_with(UserId.from_string("user-42"))

    def test_role_comes_from_assignment(self, test_client, role_repository):
        assignment = UserRole.default_for(UserId.from_string("user-42"))
        assignment.role = PlatformRole.ADMIN
        role_repository.get.return_value = assignment

        body = test_client.get(
            "/access/roles/me", headers={"Authorization": f"Bearer {_token()}"}
        ).json()

        assert body["role"] == "admin"
        assert body["is_admin"] is True
        assert body["is_super_admin"] is False

    def test_role_gate_uses_looked_up_role(self, test_client):
        response = test_client.get(
            "/access/roles", headers={"Authorization": f"Bearer {_token()}"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
