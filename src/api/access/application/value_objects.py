"""Application-layer value objects for the access bounded context.

These represent request context and operation inputs/results rather than
core business entities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional

from access.domain.onboarding import Address
from access.domain.value_objects import (
    AuditAction,
    CategoryType,
    PlatformRole,
    RegistrationCodeId,
    TenantId,
    UserId,
)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated user making the request.

    The user id comes from validated token claims; the role is looked up
    from the user's role assignment.
    """

    user_id: UserId
    role: PlatformRole
    ip_address: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role.is_at_least(PlatformRole.ADMIN)

    @property
    def is_super_admin(self) -> bool:
        return self.role == PlatformRole.SUPER_ADMIN


@dataclass(frozen=True)
class TenantInput:
    """Fields submitted from the tenant form.

    On update, ``parent_id`` is only applied when ``parent_set`` is True so
    a form that omits the parent does not detach the tenant.
    """

    name: str
    slug: str
    parent_id: Optional[TenantId] = None
    parent_set: bool = False
    description: Optional[str] = None
    category_type: Optional[CategoryType] = None
    brand_color: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    location: Optional[str] = None
    game_titles: list[str] = field(default_factory=list)
    is_verified: bool = False

    def attributes(self) -> dict[str, Any]:
        """Editable attributes other than name, slug and parent."""
        return {
            "description": self.description,
            "category_type": self.category_type,
            "brand_color": self.brand_color,
            "logo_url": self.logo_url,
            "website_url": self.website_url,
            "location": self.location,
            "game_titles": self.game_titles,
            "is_verified": self.is_verified,
        }


class BulkCodeAction(StrEnum):
    """Lifecycle transitions that can be applied to many codes at once."""

    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    DELETE = "delete"

    @property
    def audit_action(self) -> AuditAction:
        return {
            BulkCodeAction.ACTIVATE: AuditAction.BULK_ACTIVATE,
            BulkCodeAction.DEACTIVATE: AuditAction.BULK_DEACTIVATE,
            BulkCodeAction.DELETE: AuditAction.BULK_DELETE,
        }[self]


@dataclass(frozen=True)
class BulkResult:
    """Aggregate result of a bulk code action."""

    action: BulkCodeAction
    count: int
    code_ids: list[RegistrationCodeId]


@dataclass(frozen=True)
class OnboardingSubmission:
    """Everything the onboarding form collected, submitted at the last step."""

    full_name: str
    address: Address
    discord_id: Optional[str] = None
    override_code: Optional[str] = None
    continue_anyway: bool = False
