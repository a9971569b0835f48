"""Unit tests for RoleService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.exc import OperationalError

from access.application.observability import RoleServiceProbe
from access.application.services import AuditService, RoleService
from access.domain.aggregates import UserRole
from access.domain.exceptions import SelfDemotionError
from access.domain.value_objects import (
    AuditAction,
    AuditResourceType,
    PlatformRole,
    UserId,
)
from access.ports.exceptions import PersistenceError
from access.ports.repositories import IUserRoleRepository

ROOT = UserId.from_string("root-1")
TARGET = UserId.from_string("user-2")


@pytest.fixture
def mock_role_repo():
    repo = Mock(spec=IUserRoleRepository)
    repo.get = AsyncMock(return_value=None)
    repo.save = AsyncMock()
    repo.list_all = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_audit():
    audit = Mock(spec=AuditService)
    audit.record = AsyncMock()
    return audit


@pytest.fixture
def mock_probe():
    return Mock(spec=RoleServiceProbe)


@pytest.fixture
def role_service(mock_session, mock_role_repo, mock_audit, mock_probe):
    return RoleService(
        session=mock_session,
        role_repository=mock_role_repo,
        audit=mock_audit,
        probe=mock_probe,
    )


def _assignment(user_id: UserId, role: PlatformRole) -> UserRole:
    return UserRole(user_id=user_id, role=role, created_at=datetime.now(UTC))


class TestChangeRole:
    @pytest.mark.asyncio
    async def test_promotes_user_without_assignment(
        self, role_service, mock_role_repo, mock_audit
    ):
        user_role = await role_service.change_role(
            ROOT, TARGET, PlatformRole.ADMIN, ip_address="10.1.1.1"
        )

        assert user_role.role == PlatformRole.ADMIN
        mock_role_repo.save.assert_awaited_once_with(user_role)
        mock_audit.record.assert_awaited_once_with(
            actor_id=ROOT,
            action=AuditAction.ROLE_CHANGE,
            resource_type=AuditResourceType.USER_ROLE,
            resource_id=TARGET.value,
            details={
                "target_user_id": TARGET.value,
                "old_role": "user",
                "new_role": "admin",
            },
            ip_address="10.1.1.1",
        )

    @pytest.mark.asyncio
    async def test_self_demotion_is_blocked(
        self, role_service, mock_role_repo, mock_audit, mock_probe
    ):
        mock_role_repo.get.return_value = _assignment(ROOT, PlatformRole.SUPER_ADMIN)

        with pytest.raises(SelfDemotionError):
            await role_service.change_role(ROOT, ROOT, PlatformRole.ADMIN)

        mock_role_repo.save.assert_not_awaited()
        mock_audit.record.assert_not_awaited()
        mock_probe.self_demotion_blocked.assert_called_once_with(
            actor_id=ROOT.value, requested_role="admin"
        )

    @pytest.mark.asyncio
    async def test_demoting_another_super_admin_is_allowed(
        self, role_service, mock_role_repo
    ):
        mock_role_repo.get.return_value = _assignment(TARGET, PlatformRole.SUPER_ADMIN)

        user_role = await role_service.change_role(ROOT, TARGET, PlatformRole.USER)

        assert user_role.role == PlatformRole.USER

    @pytest.mark.asyncio
    async def test_database_failure(self, role_service, mock_role_repo, mock_audit):
        mock_role_repo.save.side_effect = OperationalError("upsert", {}, Exception())

        with pytest.raises(PersistenceError):
            await role_service.change_role(ROOT, TARGET, PlatformRole.ADMIN)

        mock_audit.record.assert_not_awaited()


class TestReads:
    @pytest.mark.asyncio
    async def test_missing_assignment_is_plain_user(self, role_service):
        assert await role_service.get_role(TARGET) == PlatformRole.USER

    @pytest.mark.asyncio
    async def test_list_sorted_highest_first(self, role_service, mock_role_repo):
        low = _assignment(TARGET, PlatformRole.DEVELOPER)
        high = _assignment(ROOT, PlatformRole.SUPER_ADMIN)
        mock_role_repo.list_all.return_value = [low, high]

        assert await role_service.list_user_roles() == [high, low]
