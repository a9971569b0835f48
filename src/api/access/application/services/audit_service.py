"""Audit application service for the access bounded context.

Writes and reads the append-only audit trail and runs the retention purge.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import AuditServiceProbe, DefaultAuditServiceProbe
from access.domain.aggregates import AuditLogEntry
from access.domain.value_objects import AuditAction, AuditResourceType, UserId
from access.ports.exceptions import ConfirmationMismatchError, PersistenceError
from access.ports.repositories import AuditLogFilter, IAuditLogRepository

DEFAULT_RETENTION_DAYS = 90
DEFAULT_PURGE_CONFIRMATION = "CLEAR OLD LOGS"
PURGE_OPERATION = "clear_old_audit_logs"


class AuditService:
    """Application service for the audit trail.

    ``record`` is meant to be called right after the audited mutation has
    committed. It runs in its own transaction and never raises: a failed
    write is reported through the probe so the gap is visible, and the
    mutation it describes stands.
    """

    def __init__(
        self,
        session: AsyncSession,
        audit_repository: IAuditLogRepository,
        probe: AuditServiceProbe | None = None,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        purge_confirmation: str = DEFAULT_PURGE_CONFIRMATION,
    ):
        """Initialize AuditService with dependencies.

        Args:
            session: Database session for transaction management
            audit_repository: Append-only audit entry store
            probe: Optional domain probe for observability
            retention_days: Entries older than this many days may be purged
            purge_confirmation: Phrase the caller must type to purge
        """
        self._session = session
        self._audit_repository = audit_repository
        self._probe = probe or DefaultAuditServiceProbe()
        self._retention_days = retention_days
        self._purge_confirmation = purge_confirmation

    async def record(
        self,
        actor_id: UserId | None,
        action: AuditAction,
        resource_type: AuditResourceType,
        resource_id: str | None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLogEntry | None:
        """Append one audit entry.

        Returns:
            The written entry, or None if the write failed
        """
        entry = AuditLogEntry.record(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            ip_address=ip_address,
        )
        try:
            async with self._session.begin():
                await self._audit_repository.append(entry)
        except SQLAlchemyError as e:
            self._probe.audit_write_failed(
                action=action.value,
                resource_type=resource_type.value,
                resource_id=resource_id,
                actor_id=actor_id.value if actor_id else None,
                details=entry.details,
                error=str(e),
            )
            return None

        self._probe.entry_recorded(
            entry_id=entry.id.value,
            action=action.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
        )
        return entry

    async def query(self, criteria: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        """Read entries matching the filter, newest first."""
        async with self._session.begin():
            entries = await self._audit_repository.query(criteria or AuditLogFilter())
        self._probe.entries_queried(count=len(entries))
        return entries

    async def purge(
        self,
        actor_id: UserId,
        confirmation: str,
        now: datetime | None = None,
        ip_address: str | None = None,
    ) -> int:
        """Delete entries older than the retention window.

        The purge is recorded before anything is deleted, and that record is
        excluded from the deletion so it survives the purge it describes.

        Args:
            actor_id: User running the purge
            confirmation: Typed confirmation phrase; must match exactly
            now: Reference time, defaults to the current time
            ip_address: Client address for the audit entry

        Returns:
            Number of entries deleted

        Raises:
            ConfirmationMismatchError: If the confirmation phrase is wrong
            PersistenceError: If the intent entry or the deletion fails
        """
        if confirmation != self._purge_confirmation:
            self._probe.purge_rejected(actor_id=actor_id.value)
            raise ConfirmationMismatchError(
                f"Type '{self._purge_confirmation}' to confirm"
            )

        cutoff = (now or datetime.now(UTC)) - timedelta(days=self._retention_days)
        intent = AuditLogEntry.record(
            actor_id=actor_id,
            action=AuditAction.BULK_DELETE,
            resource_type=AuditResourceType.DANGEROUS_OPERATION,
            resource_id=None,
            details={
                "operation": PURGE_OPERATION,
                "cutoff": cutoff.isoformat(),
                "retention_days": self._retention_days,
            },
            ip_address=ip_address,
        )

        try:
            # Intent entry commits before the purge runs.
            async with self._session.begin():
                await self._audit_repository.append(intent)

            async with self._session.begin():
                deleted = await self._audit_repository.delete_older_than(
                    cutoff, keep=intent.id
                )
        except SQLAlchemyError as e:
            self._probe.purge_failed(
                actor_id=actor_id.value, cutoff=cutoff.isoformat(), error=str(e)
            )
            raise PersistenceError("Failed to purge audit logs") from e

        self._probe.purge_completed(
            actor_id=actor_id.value,
            cutoff=cutoff.isoformat(),
            deleted=deleted,
        )
        return deleted
