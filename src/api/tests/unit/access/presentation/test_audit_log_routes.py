"""Unit tests for audit log HTTP routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from access.application.services import AuditService
from access.application.value_objects import CurrentUser
from access.domain.aggregates import AuditLogEntry
from access.domain.value_objects import (
    AuditAction,
    AuditResourceType,
    PlatformRole,
    UserId,
)
from access.ports.exceptions import ConfirmationMismatchError
from infrastructure.settings import AccessSettings

ADMIN = CurrentUser(user_id=UserId.from_string("admin-1"), role=PlatformRole.ADMIN)
SUPER = CurrentUser(
    user_id=UserId.from_string("root-1"),
    role=PlatformRole.SUPER_ADMIN,
    ip_address="10.0.0.9",
)


@pytest.fixture
def mock_audit_service() -> AsyncMock:
    return AsyncMock(spec=AuditService)


@pytest.fixture
def app(mock_audit_service: AsyncMock) -> FastAPI:
    from access.dependencies.services import get_audit_service
    from access.dependencies.user import get_current_user
    from access.presentation import router
    from infrastructure.settings import get_access_settings

    app = FastAPI()
    app.dependency_overrides[get_audit_service] = lambda: mock_audit_service
    app.dependency_overrides[get_current_user] = lambda: ADMIN
    app.dependency_overrides[get_access_settings] = lambda: AccessSettings(
        audit_query_limit=25
    )
    app.include_router(router)
    return app


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _act_as(app: FastAPI, user: CurrentUser) -> None:
    from access.dependencies.user import get_current_user

    app.dependency_overrides[get_current_user] = lambda: user


class TestListEntries:
    def test_builds_filter_with_default_limit(self, test_client, mock_audit_service):
        mock_audit_service.query.return_value = []

        response = test_client.get(
            "/access/audit-logs",
            params={"action": "role_change", "actor_id": "root-1"},
        )

        assert response.status_code == status.HTTP_200_OK
        criteria = mock_audit_service.query.await_args.args[0]
        assert criteria.action == AuditAction.ROLE_CHANGE
        assert criteria.actor_id == UserId.from_string("root-1")
        assert criteria.limit == 25

    def test_explicit_limit(self, test_client, mock_audit_service):
        mock_audit_service.query.return_value = []

        test_client.get("/access/audit-logs", params={"limit": 5})

        assert mock_audit_service.query.await_args.args[0].limit == 5

    def test_limit_out_of_range_is_422(self, test_client):
        response = test_client.get("/access/audit-logs", params={"limit": 5000})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_serializes_entries(self, test_client, mock_audit_service):
        entry = AuditLogEntry.record(
            actor_id=SUPER.user_id,
            action=AuditAction.ROLE_CHANGE,
            resource_type=AuditResourceType.USER_ROLE,
            resource_id="user-7",
            details={"old_role": "user", "new_role": "admin"},
            ip_address="10.0.0.9",
        )
        mock_audit_service.query.return_value = [entry]

        body = test_client.get("/access/audit-logs").json()

        assert body[0]["id"] == entry.id.value
        assert body[0]["details"]["new_role"] == "admin"
        assert body[0]["resource_type"] == "user_role"

    def test_requires_admin(self, app, test_client):
        _act_as(app, CurrentUser(user_id=ADMIN.user_id, role=PlatformRole.USER))

        response = test_client.get("/access/audit-logs")

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPurge:
    def test_returns_deleted_count(self, app, test_client, mock_audit_service):
        _act_as(app, SUPER)
        mock_audit_service.purge.return_value = 12

        response = test_client.post(
            "/access/audit-logs/purge", json={"confirmation": "CLEAR OLD LOGS"}
        )

        assert response.json() == {"deleted": 12}
        mock_audit_service.purge.assert_awaited_once_with(
            SUPER.user_id, "CLEAR OLD LOGS", ip_address="10.0.0.9"
        )

    def test_wrong_confirmation_is_400(self, app, test_client, mock_audit_service):
        _act_as(app, SUPER)
        mock_audit_service.purge.side_effect = ConfirmationMismatchError("mismatch")

        response = test_client.post(
            "/access/audit-logs/purge", json={"confirmation": "clear"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_admin_cannot_purge(self, test_client, mock_audit_service):
        response = test_client.post(
            "/access/audit-logs/purge", json={"confirmation": "CLEAR OLD LOGS"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_audit_service.purge.assert_not_awaited()
