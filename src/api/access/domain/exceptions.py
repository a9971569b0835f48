"""Domain exceptions for the access bounded context.

These exceptions represent violations of business rules detected by the
domain model itself. The application layer lets them propagate and the
presentation layer turns them into user-facing responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from access.domain.value_objects import CodeUnusableReason


class AccessError(Exception):
    """Base class for every error raised by the access bounded context."""

    pass


class ValidationError(AccessError):
    """Raised when input has the wrong shape.

    Field-level and recoverable by the user correcting the input.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class CycleError(AccessError):
    """Raised when a parent assignment would make a tenant its own ancestor."""

    def __init__(self, tenant_id: str, candidate_parent_id: str):
        super().__init__(
            f"Tenant {candidate_parent_id} cannot be the parent of {tenant_id}: "
            "the assignment would create a cycle"
        )
        self.tenant_id = tenant_id
        self.candidate_parent_id = candidate_parent_id


class CodeUnusableError(AccessError):
    """Raised when a registration code cannot be redeemed.

    The reason tells the caller which message to show, so a lost redemption
    race is reported as ``exhausted`` rather than as a generic failure.
    """

    _MESSAGES = {
        "not_found": "Invalid code",
        "inactive": "This code is no longer active",
        "expired": "This code has expired",
        "exhausted": "This code has reached its usage limit",
    }

    def __init__(self, reason: CodeUnusableReason):
        super().__init__(self._MESSAGES.get(reason.value, reason.value))
        self.reason = reason


class SelfDemotionError(AccessError):
    """Raised when a super admin tries to lower their own role."""

    pass


class InvalidOnboardingTransitionError(AccessError):
    """Raised when the onboarding workflow is driven out of order."""

    pass
