"""Pydantic models for audit log API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from access.domain.aggregates import AuditLogEntry


class AuditLogEntryResponse(BaseModel):
    id: str
    actor_id: str | None
    action: str
    resource_type: str
    resource_id: str | None
    details: dict[str, Any]
    ip_address: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: AuditLogEntry) -> AuditLogEntryResponse:
        return cls(
            id=entry.id.value,
            actor_id=entry.actor_id.value if entry.actor_id else None,
            action=entry.action.value,
            resource_type=entry.resource_type.value,
            resource_id=entry.resource_id,
            details=entry.details,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
        )


class PurgeRequest(BaseModel):
    confirmation: str = Field(..., description="The confirmation phrase, typed exactly")


class PurgeResponse(BaseModel):
    deleted: int = Field(..., description="Number of entries removed")
