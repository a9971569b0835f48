"""Unit tests for role HTTP routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from access.application.services import RoleService
from access.application.value_objects import CurrentUser
from access.domain.aggregates import UserRole
from access.domain.exceptions import SelfDemotionError
from access.domain.value_objects import PlatformRole, UserId

SUPER = CurrentUser(
    user_id=UserId.from_string("root-1"),
    role=PlatformRole.SUPER_ADMIN,
    ip_address="10.0.0.9",
)


@pytest.fixture
def mock_role_service() -> AsyncMock:
    return AsyncMock(spec=RoleService)


@pytest.fixture
def app(mock_role_service: AsyncMock) -> FastAPI:
    from access.dependencies.services import get_role_service
    from access.dependencies.user import get_current_user
    from access.presentation import router

    app = FastAPI()
    app.dependency_overrides[get_role_service] = lambda: mock_role_service
    app.dependency_overrides[get_current_user] = lambda: SUPER
    app.include_router(router)
    return app


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestChangeRole:
    def test_changes_role_with_client_address(self, test_client, mock_role_service):
        target = UserId.from_string("user-7")
        user_role = UserRole.default_for(target)
        user_role.change_to(PlatformRole.ADMIN, SUPER.user_id)
        mock_role_service.change_role.return_value = user_role

        response = test_client.put("/access/roles/user-7", json={"role": "admin"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "admin"
        mock_role_service.change_role.assert_awaited_once_with(
            SUPER.user_id, target, PlatformRole.ADMIN, ip_address="10.0.0.9"
        )

    def test_self_demotion_is_409(self, test_client, mock_role_service):
        mock_role_service.change_role.side_effect = SelfDemotionError(
            "Super admins cannot demote themselves"
        )

        response = test_client.put("/access/roles/root-1", json={"role": "user"})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_role_is_422(self, test_client):
        response = test_client.put("/access/roles/user-7", json={"role": "owner"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize("role", [PlatformRole.USER, PlatformRole.ADMIN])
    def test_requires_super_admin(self, app, test_client, mock_role_service, role):
        from access.dependencies.user import get_current_user

        app.dependency_overrides[get_current_user] = lambda: CurrentUser(
            user_id=UserId.from_string("someone"), role=role
        )

        response = test_client.put("/access/roles/user-7", json={"role": "admin"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_role_service.change_role.assert_not_awaited()


class TestReadRoles:
    def test_me(self, test_client):
        response = test_client.get("/access/roles/me")

        assert response.json() == {
            "user_id": "root-1",
            "role": "super_admin",
            "is_admin": True,
            "is_super_admin": True,
        }

    def test_list(self, test_client, mock_role_service):
        mock_role_service.list_user_roles.return_value = [
            UserRole.default_for(UserId.from_string("a"))
        ]

        response = test_client.get("/access/roles")

        assert [r["user_id"] for r in response.json()] == ["a"]
