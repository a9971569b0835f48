"""RegistrationCode aggregate for the access context."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Optional

from access.domain.exceptions import ValidationError
from access.domain.value_objects import (
    CodeStatus,
    CodeUnusableReason,
    RegistrationCodeId,
    TenantId,
    UserId,
    plain,
)

# No 0/O, 1/I/L: codes are read aloud and typed by hand.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
DEFAULT_CODE_LENGTH = 8


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Generate a random candidate code.

    Uniqueness is not checked here; a collision surfaces when the code is
    saved.
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    """Normalize a code for storage and lookup."""
    return (code or "").strip().upper()


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive instants are taken as UTC so they compare with the clock.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _validate_max_uses(max_uses: int | None) -> int | None:
    if max_uses is not None and max_uses < 1:
        raise ValidationError("max_uses", "Max uses must be at least 1")
    return max_uses


@dataclass
class RegistrationCode:
    """Registration code aggregate.

    A code is usable when it is active, not expired and below its usage
    cap. Expiry is exclusive: a code whose ``expires_at`` equals the current
    instant is already expired.

    ``current_uses`` is never incremented here. Redemption is an atomic
    conditional update performed by the repository, so the counter on an
    in-memory instance is only a snapshot.
    """

    id: RegistrationCodeId
    code: str
    created_at: datetime
    tenant_id: Optional[TenantId] = None
    created_by: Optional[UserId] = None
    description: Optional[str] = None
    max_uses: Optional[int] = None
    current_uses: int = 0
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        code: str,
        created_by: UserId,
        tenant_id: TenantId | None = None,
        description: str | None = None,
        max_uses: int | None = None,
        expires_at: datetime | None = None,
    ) -> RegistrationCode:
        """Factory method for creating a new registration code.

        Raises:
            ValidationError: If the code is blank or max_uses is below 1
        """
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError("code", "Code is required")
        return cls(
            id=RegistrationCodeId.generate(),
            code=normalized,
            tenant_id=tenant_id,
            created_by=created_by,
            description=(description or "").strip() or None,
            max_uses=_validate_max_uses(max_uses),
            expires_at=_as_utc(expires_at),
            created_at=datetime.now(UTC),
        )

    def status(self, now: datetime) -> CodeStatus:
        """Derive the lifecycle status at the given instant.

        Checked in order: inactive, expired, exhausted, active.
        """
        if not self.is_active:
            return CodeStatus.INACTIVE
        if self.expires_at is not None and self.expires_at <= now:
            return CodeStatus.EXPIRED
        if self.max_uses is not None and self.current_uses >= self.max_uses:
            return CodeStatus.EXHAUSTED
        return CodeStatus.ACTIVE

    def is_usable(self, now: datetime) -> bool:
        """Check whether the code can be redeemed at the given instant."""
        return self.status(now) == CodeStatus.ACTIVE

    def update(self, **changes: Any) -> dict[str, dict[str, Any]]:
        """Apply admin edits and return the field diff.

        Raises:
            ValidationError: If max_uses would fall below current_uses
        """
        diff: dict[str, dict[str, Any]] = {}
        for name, value in changes.items():
            if name == "description":
                value = (value or "").strip() or None
            elif name == "expires_at":
                value = _as_utc(value)
            elif name == "max_uses":
                value = _validate_max_uses(value)
                if value is not None and value < self.current_uses:
                    raise ValidationError(
                        "max_uses",
                        f"Max uses cannot be lower than current uses ({self.current_uses})",
                    )
            elif name not in ("tenant_id", "expires_at", "is_active"):
                raise ValidationError(name, "Field cannot be edited")

            old = getattr(self, name)
            if old == value:
                continue
            setattr(self, name, value)
            diff[name] = {"from": plain(old), "to": plain(value)}
        return diff

    def as_audit_details(self) -> dict[str, Any]:
        """Details recorded when the code is created."""
        return {
            "code": self.code,
            "tenant_id": plain(self.tenant_id),
            "max_uses": self.max_uses,
            "expires_at": plain(self.expires_at),
        }


@dataclass(frozen=True)
class ValidatedCode:
    """A registration code that passed validation."""

    code_id: RegistrationCodeId
    code: str
    tenant_id: Optional[TenantId] = None


@dataclass(frozen=True)
class UnusableCode:
    """A registration code that failed validation, with the reason."""

    code: str
    reason: CodeUnusableReason


CodeValidation = ValidatedCode | UnusableCode
