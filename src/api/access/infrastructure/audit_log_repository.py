"""PostgreSQL implementation of IAuditLogRepository.

The repository exposes no update path. Deletion happens only through
``delete_older_than``, which the audit service calls after writing the
purge's own entry.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import AuditLogEntry
from access.domain.value_objects import (
    AuditAction,
    AuditLogEntryId,
    AuditResourceType,
    UserId,
)
from access.infrastructure.models import AuditLogModel
from access.ports.repositories import AuditLogFilter, IAuditLogRepository


class AuditLogRepository(IAuditLogRepository):
    """Append-only audit store backed by system_audit_logs."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, entry: AuditLogEntry) -> None:
        self._session.add(
            AuditLogModel(
                id=entry.id.value,
                actor_id=entry.actor_id.value if entry.actor_id else None,
                action=entry.action.value,
                resource_type=entry.resource_type.value,
                resource_id=entry.resource_id,
                details=dict(entry.details),
                ip_address=entry.ip_address,
                created_at=entry.created_at,
            )
        )
        await self._session.flush()

    async def query(self, criteria: AuditLogFilter) -> list[AuditLogEntry]:
        stmt = select(AuditLogModel)
        if criteria.action is not None:
            stmt = stmt.where(AuditLogModel.action == criteria.action.value)
        if criteria.resource_type is not None:
            stmt = stmt.where(AuditLogModel.resource_type == criteria.resource_type.value)
        if criteria.actor_id is not None:
            stmt = stmt.where(AuditLogModel.actor_id == criteria.actor_id.value)
        if criteria.since is not None:
            stmt = stmt.where(AuditLogModel.created_at >= criteria.since)
        if criteria.until is not None:
            stmt = stmt.where(AuditLogModel.created_at < criteria.until)
        stmt = stmt.order_by(AuditLogModel.created_at.desc()).limit(criteria.limit)

        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete_older_than(self, cutoff: datetime, keep: AuditLogEntryId) -> int:
        stmt = (
            delete(AuditLogModel)
            .where(AuditLogModel.created_at < cutoff, AuditLogModel.id != keep.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    def _to_domain(self, model: AuditLogModel) -> AuditLogEntry:
        return AuditLogEntry(
            id=AuditLogEntryId(value=model.id),
            actor_id=UserId(value=model.actor_id) if model.actor_id else None,
            action=AuditAction(model.action),
            resource_type=AuditResourceType(model.resource_type),
            resource_id=model.resource_id,
            created_at=model.created_at,
            details=dict(model.details or {}),
            ip_address=model.ip_address,
        )
