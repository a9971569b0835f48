"""Repository protocols (ports) for the access bounded context.

These protocols define the interfaces that infrastructure adapters must
implement. They live in the ports layer so that the application layer
depends only on abstractions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from access.domain.aggregates import AuditLogEntry, RegistrationCode, Tenant, UserRole
from access.domain.onboarding import UserProfile
from access.domain.value_objects import (
    ApprovalStatus,
    AuditAction,
    AuditLogEntryId,
    AuditResourceType,
    RedemptionId,
    RegistrationCodeId,
    TenantId,
    UserId,
)


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def save(self, tenant: Tenant) -> None:
        """Insert or update a tenant.

        Parent reference and hierarchy level are written in the same row
        update.

        Raises:
            DuplicateTenantSlugError: If the slug is taken by another tenant
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID."""
        ...

    async def list_all(
        self, approval_status: ApprovalStatus | None = None
    ) -> list[Tenant]:
        """List tenants, optionally restricted to one approval status."""
        ...

    async def count_by_status(self, approval_status: ApprovalStatus) -> int:
        """Count tenants with the given approval status."""
        ...

    async def delete(self, tenant: Tenant) -> bool:
        """Delete a tenant.

        Returns:
            True if a row was deleted, False if it did not exist
        """
        ...


@runtime_checkable
class IRegistrationCodeRepository(Protocol):
    """Repository for RegistrationCode aggregate persistence."""

    async def save(self, code: RegistrationCode) -> None:
        """Insert or update a code's admin-editable fields.

        Never writes ``current_uses``; only ``redeem`` and
        ``release_redemption`` change the counter.

        Raises:
            DuplicateRegistrationCodeError: If the code string already exists
        """
        ...

    async def get_by_id(self, code_id: RegistrationCodeId) -> RegistrationCode | None:
        """Retrieve a code by its ID."""
        ...

    async def get_by_code(self, code: str) -> RegistrationCode | None:
        """Retrieve a code by its string, ignoring case."""
        ...

    async def list_all(self) -> list[RegistrationCode]:
        """List every code, newest first."""
        ...

    async def set_active(
        self, code_ids: Sequence[RegistrationCodeId], active: bool
    ) -> list[RegistrationCodeId]:
        """Set the active flag on the given codes.

        Returns:
            IDs of the codes that exist
        """
        ...

    async def delete_many(
        self, code_ids: Sequence[RegistrationCodeId]
    ) -> list[RegistrationCodeId]:
        """Delete the given codes.

        Returns:
            IDs of the codes that were deleted
        """
        ...

    async def redeem(
        self, code_id: RegistrationCodeId, user_id: UserId, now: datetime
    ) -> RedemptionId | None:
        """Consume one use of a code if it is still usable at ``now``.

        The usability check and the increment must be one atomic
        conditional update. Concurrent callers can never push
        ``current_uses`` past ``max_uses``.

        Returns:
            ID of the new redemption record, or None if the code was not
            usable at the moment of the update
        """
        ...

    async def release_redemption(
        self, redemption_id: RedemptionId, now: datetime
    ) -> RegistrationCodeId | None:
        """Give back the use consumed by a redemption.

        Returns:
            ID of the code whose counter was decremented, or None if the
            redemption does not exist or was already released
        """
        ...


@runtime_checkable
class IUserRoleRepository(Protocol):
    """Repository for UserRole persistence."""

    async def get(self, user_id: UserId) -> UserRole | None:
        """Retrieve the role row for a user, or None if the user has none."""
        ...

    async def save(self, user_role: UserRole) -> None:
        """Update the user's role row in place, or insert it."""
        ...

    async def list_all(self) -> list[UserRole]:
        """List all role rows."""
        ...


@dataclass(frozen=True)
class AuditLogFilter:
    """Criteria for reading the audit log.

    ``since`` is inclusive and ``until`` is exclusive.
    """

    action: AuditAction | None = None
    resource_type: AuditResourceType | None = None
    actor_id: UserId | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int = 100


@runtime_checkable
class IAuditLogRepository(Protocol):
    """Append-only store of audit entries."""

    async def append(self, entry: AuditLogEntry) -> None:
        """Append one entry."""
        ...

    async def query(self, criteria: AuditLogFilter) -> list[AuditLogEntry]:
        """Return matching entries, newest first."""
        ...

    async def delete_older_than(
        self, cutoff: datetime, keep: AuditLogEntryId
    ) -> int:
        """Delete entries created strictly before ``cutoff``.

        The entry identified by ``keep`` is never deleted.

        Returns:
            Number of entries deleted
        """
        ...


@runtime_checkable
class IProfileRepository(Protocol):
    """Repository for onboarding profiles."""

    async def get_by_user(self, user_id: UserId) -> UserProfile | None:
        """Retrieve a user's profile."""
        ...

    async def upsert(self, profile: UserProfile) -> None:
        """Insert the profile, or replace the existing one for the same user."""
        ...
