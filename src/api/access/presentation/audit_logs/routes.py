"""HTTP routes for reading and purging the audit log."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from access.application.services import AuditService
from access.application.value_objects import CurrentUser
from access.dependencies.services import Settings, get_audit_service
from access.dependencies.user import require_admin, require_super_admin
from access.domain.exceptions import AccessError
from access.domain.value_objects import AuditAction, AuditResourceType, UserId
from access.ports.repositories import AuditLogFilter
from access.presentation.audit_logs.models import (
    AuditLogEntryResponse,
    PurgeRequest,
    PurgeResponse,
)
from access.presentation.errors import invalid_id, to_http_exception

router = APIRouter(
    prefix="/audit-logs",
    tags=["audit-logs"],
)

Service = Annotated[AuditService, Depends(get_audit_service)]


@router.get("")
async def list_entries(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
    settings: Settings,
    action: Annotated[AuditAction | None, Query()] = None,
    resource_type: Annotated[AuditResourceType | None, Query()] = None,
    actor_id: Annotated[str | None, Query()] = None,
    since: Annotated[datetime | None, Query(description="Inclusive lower bound")] = None,
    until: Annotated[datetime | None, Query(description="Exclusive upper bound")] = None,
    limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> list[AuditLogEntryResponse]:
    """Read audit entries, newest first."""
    actor = None
    if actor_id:
        try:
            actor = UserId.from_string(actor_id)
        except ValueError as e:
            raise invalid_id("user", e) from e

    criteria = AuditLogFilter(
        action=action,
        resource_type=resource_type,
        actor_id=actor,
        since=since,
        until=until,
        limit=limit or settings.audit_query_limit,
    )
    try:
        entries = await service.query(criteria)
    except AccessError as e:
        raise to_http_exception(e) from e
    return [AuditLogEntryResponse.from_domain(entry) for entry in entries]


@router.post("/purge")
async def purge_entries(
    request: PurgeRequest,
    current_user: Annotated[CurrentUser, Depends(require_super_admin)],
    service: Service,
) -> PurgeResponse:
    """Delete entries older than the retention window.

    Raises:
        HTTPException: 400 if the confirmation phrase does not match
    """
    try:
        deleted = await service.purge(
            current_user.user_id,
            request.confirmation,
            ip_address=current_user.ip_address,
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return PurgeResponse(deleted=deleted)
