"""AuditLogEntry aggregate for the access context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

from access.domain.value_objects import (
    AuditAction,
    AuditLogEntryId,
    AuditResourceType,
    UserId,
)


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of a privileged action.

    Entries are only ever appended. The only removal path is the retention
    purge, which deletes whole ranges of old entries and is audited itself.
    """

    id: AuditLogEntryId
    actor_id: Optional[UserId]
    action: AuditAction
    resource_type: AuditResourceType
    resource_id: Optional[str]
    created_at: datetime
    details: dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None

    @classmethod
    def record(
        cls,
        actor_id: UserId | None,
        action: AuditAction,
        resource_type: AuditResourceType,
        resource_id: str | None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLogEntry:
        """Create a new entry stamped with the current time."""
        return cls(
            id=AuditLogEntryId.generate(),
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=dict(details or {}),
            ip_address=ip_address,
            created_at=datetime.now(UTC),
        )
