"""Value objects for the access domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ulid import ULID


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Args:
            value: ULID string

        Returns:
            TenantId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class RegistrationCodeId:
    """Identifier for a RegistrationCode aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RegistrationCodeId:
        """Generate a new RegistrationCodeId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> RegistrationCodeId:
        """Create RegistrationCodeId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid RegistrationCodeId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class RedemptionId:
    """Identifier for a single successful registration code redemption."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RedemptionId:
        """Generate a new RedemptionId using ULID."""
        return cls(value=str(ULID()))


@dataclass(frozen=True)
class AuditLogEntryId:
    """Identifier for an AuditLogEntry.

    ULIDs sort by creation time, which keeps newest-first ordering stable
    for entries sharing a timestamp.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> AuditLogEntryId:
        """Generate a new AuditLogEntryId using ULID."""
        return cls(value=str(ULID()))


@dataclass(frozen=True)
class UserId:
    """Identifier for a user.

    User identifiers are issued by the external identity provider, so any
    non-empty string is accepted.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Raises:
            ValueError: If value is empty
        """
        if not value or not value.strip():
            raise ValueError("UserId cannot be empty")
        return cls(value=value)


class PlatformRole(StrEnum):
    """Platform-wide role of a user.

    Roles are totally ordered for sorting and display. The order does not
    constrain transitions between roles.
    """

    USER = "user"
    DEVELOPER = "developer"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def rank(self) -> int:
        """Position of the role in the ordering, 0 being the lowest."""
        return _ROLE_ORDER.index(self)

    def is_at_least(self, other: PlatformRole) -> bool:
        """Check whether this role ranks at or above another role."""
        return self.rank >= other.rank


_ROLE_ORDER: tuple[PlatformRole, ...] = (
    PlatformRole.USER,
    PlatformRole.DEVELOPER,
    PlatformRole.MODERATOR,
    PlatformRole.ADMIN,
    PlatformRole.SUPER_ADMIN,
)


class ApprovalStatus(StrEnum):
    """Review status of a tenant."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVISION = "needs_revision"


class CategoryType(StrEnum):
    """Kind of organization a tenant represents."""

    GEOGRAPHY = "geography"
    BROADBAND_PROVIDER = "broadband_provider"
    TRADE_SKILL = "trade_skill"
    SCHOOL = "school"
    EMPLOYER = "employer"
    TRAINING_CENTER = "training_center"
    GOVERNMENT = "government"
    NONPROFIT = "nonprofit"


class CodeStatus(StrEnum):
    """Derived lifecycle status of a registration code."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


class CodeUnusableReason(StrEnum):
    """Reason a registration code cannot be redeemed."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


class AuditAction(StrEnum):
    """Controlled vocabulary of audited actions."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ROLE_CHANGE = "role_change"
    BULK_ACTIVATE = "bulk_activate"
    BULK_DEACTIVATE = "bulk_deactivate"
    BULK_DELETE = "bulk_delete"
    REDEEMED = "redeemed"
    REDEMPTION_RELEASED = "redemption_released"


class AuditResourceType(StrEnum):
    """Kinds of resources referenced by audit entries."""

    TENANT = "tenant"
    REGISTRATION_CODE = "registration_code"
    USER_ROLE = "user_role"
    DANGEROUS_OPERATION = "dangerous_operation"


def plain(value: object) -> object:
    """Render a domain value as something a JSON payload can carry."""
    if isinstance(value, (TenantId, RegistrationCodeId, UserId)):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value
