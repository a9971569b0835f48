"""Unit tests for AuditService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock, call

import pytest
from sqlalchemy.exc import OperationalError

from access.application.observability import AuditServiceProbe
from access.application.services import AuditService
from access.application.services.audit_service import PURGE_OPERATION
from access.domain.value_objects import AuditAction, AuditResourceType, UserId
from access.ports.exceptions import ConfirmationMismatchError, PersistenceError
from access.ports.repositories import AuditLogFilter, IAuditLogRepository

ACTOR = UserId.from_string("super-1")
NOW = datetime(2026, 5, 1, tzinfo=UTC)


@pytest.fixture
def mock_audit_repo():
    repo = Mock(spec=IAuditLogRepository)
    repo.append = AsyncMock()
    repo.query = AsyncMock(return_value=[])
    repo.delete_older_than = AsyncMock(return_value=7)
    return repo


@pytest.fixture
def mock_probe():
    return Mock(spec=AuditServiceProbe)


@pytest.fixture
def audit_service(mock_session, mock_audit_repo, mock_probe):
    return AuditService(
        session=mock_session,
        audit_repository=mock_audit_repo,
        probe=mock_probe,
        retention_days=30,
        purge_confirmation="CLEAR OLD LOGS",
    )


class TestRecord:
    @pytest.mark.asyncio
    async def test_appends_entry(self, audit_service, mock_audit_repo, mock_probe):
        entry = await audit_service.record(
            actor_id=ACTOR,
            action=AuditAction.CREATED,
            resource_type=AuditResourceType.TENANT,
            resource_id="t-1",
            details={"name": "Texas"},
            ip_address="10.0.0.1",
        )

        mock_audit_repo.append.assert_awaited_once_with(entry)
        assert entry.details == {"name": "Texas"}
        assert entry.ip_address == "10.0.0.1"
        mock_probe.entry_recorded.assert_called_once()

    @pytest.mark.asyncio
    async def test_write_failure_is_reported_not_raised(
        self, audit_service, mock_audit_repo, mock_probe
    ):
        mock_audit_repo.append.side_effect = OperationalError("insert", {}, Exception())

        entry = await audit_service.record(
            actor_id=ACTOR,
            action=AuditAction.ROLE_CHANGE,
            resource_type=AuditResourceType.USER_ROLE,
            resource_id="user-2",
            details={"new_role": "admin"},
        )

        assert entry is None
        mock_probe.audit_write_failed.assert_called_once()
        kwargs = mock_probe.audit_write_failed.call_args.kwargs
        assert kwargs["action"] == "role_change"
        assert kwargs["details"] == {"new_role": "admin"}


class TestQuery:
    @pytest.mark.asyncio
    async def test_passes_filter_through(self, audit_service, mock_audit_repo):
        criteria = AuditLogFilter(action=AuditAction.DELETED, limit=5)

        await audit_service.query(criteria)

        mock_audit_repo.query.assert_awaited_once_with(criteria)

    @pytest.mark.asyncio
    async def test_default_filter(self, audit_service, mock_audit_repo):
        await audit_service.query()

        assert mock_audit_repo.query.await_args.args[0] == AuditLogFilter()


class TestPurge:
    @pytest.mark.asyncio
    async def test_wrong_confirmation_deletes_nothing(
        self, audit_service, mock_audit_repo, mock_probe
    ):
        with pytest.raises(ConfirmationMismatchError):
            await audit_service.purge(ACTOR, "clear old logs", now=NOW)

        mock_audit_repo.append.assert_not_awaited()
        mock_audit_repo.delete_older_than.assert_not_awaited()
        mock_probe.purge_rejected.assert_called_once_with(actor_id=ACTOR.value)

    @pytest.mark.asyncio
    async def test_intent_is_recorded_before_deletion(
        self, audit_service, mock_audit_repo
    ):
        manager = Mock()
        manager.attach_mock(mock_audit_repo.append, "append")
        manager.attach_mock(mock_audit_repo.delete_older_than, "delete_older_than")

        deleted = await audit_service.purge(
            ACTOR, "CLEAR OLD LOGS", now=NOW, ip_address="10.0.0.9"
        )

        assert deleted == 7
        assert [c[0] for c in manager.mock_calls] == ["append", "delete_older_than"]

        intent = mock_audit_repo.append.await_args.args[0]
        assert intent.action == AuditAction.BULK_DELETE
        assert intent.resource_type == AuditResourceType.DANGEROUS_OPERATION
        assert intent.details["operation"] == PURGE_OPERATION
        assert intent.ip_address == "10.0.0.9"

        cutoff = NOW - timedelta(days=30)
        assert mock_audit_repo.delete_older_than.await_args == call(
            cutoff, keep=intent.id
        )

    @pytest.mark.asyncio
    async def test_intent_write_failure_aborts_purge(
        self, audit_service, mock_audit_repo
    ):
        mock_audit_repo.append.side_effect = OperationalError("insert", {}, Exception())

        with pytest.raises(PersistenceError):
            await audit_service.purge(ACTOR, "CLEAR OLD LOGS", now=NOW)

        mock_audit_repo.delete_older_than.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deletion_failure_is_reported_before_raising(
        self, audit_service, mock_audit_repo, mock_probe
    ):
        mock_audit_repo.delete_older_than.side_effect = OperationalError(
            "delete", {}, Exception()
        )

        with pytest.raises(PersistenceError):
            await audit_service.purge(ACTOR, "CLEAR OLD LOGS", now=NOW)

        kwargs = mock_probe.purge_failed.call_args.kwargs
        assert kwargs["actor_id"] == ACTOR.value
        assert kwargs["cutoff"] == (NOW - timedelta(days=30)).isoformat()
        mock_probe.purge_completed.assert_not_called()
