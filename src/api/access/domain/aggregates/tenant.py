"""Tenant aggregate for the access context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

from access.domain.exceptions import ValidationError
from access.domain.value_objects import (
    ApprovalStatus,
    CategoryType,
    TenantId,
    UserId,
    plain,
)

DEFAULT_BRAND_COLOR = "#3B82F6"

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
_WHITESPACE = re.compile(r"\s+")

# Fields an admin may edit directly. Parent and review state have their own
# operations because they carry extra invariants.
EDITABLE_FIELDS = (
    "name",
    "slug",
    "description",
    "category_type",
    "brand_color",
    "logo_url",
    "website_url",
    "location",
    "game_titles",
    "is_verified",
)


def normalize_slug(value: str) -> str:
    """Lowercase a slug and replace whitespace runs with hyphens."""
    return _WHITESPACE.sub("-", value.strip().lower())


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name", "Name is required")
    if len(name) > 255:
        raise ValidationError("name", "Name must be at most 255 characters")
    return name


def _validate_slug(slug: str) -> str:
    slug = normalize_slug(slug or "")
    if not slug:
        raise ValidationError("slug", "Slug is required")
    if not _SLUG_PATTERN.match(slug):
        raise ValidationError(
            "slug", "Slug may only contain lowercase letters, digits and hyphens"
        )
    return slug


def _validate_brand_color(color: str) -> str:
    if not _COLOR_PATTERN.match(color):
        raise ValidationError("brand_color", "Brand color must look like #RRGGBB")
    return color.upper()


@dataclass
class Tenant:
    """Tenant aggregate representing a community or organization.

    Tenants form a forest: each tenant has at most one parent and the
    hierarchy level is always one more than the parent's level, or 0 for a
    root. Acyclicity across the whole forest is checked by
    ``TenantHierarchy`` before ``assign_parent`` is called, because a single
    aggregate cannot see its descendants.

    Business rules:
    - Name and slug are required; slugs are normalized to lowercase
    - Brand color is a #RRGGBB hex value
    - Rejecting a tenant requires reviewer notes
    - Approving a tenant marks it verified
    """

    id: TenantId
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime
    parent_id: Optional[TenantId] = None
    hierarchy_level: int = 0
    description: Optional[str] = None
    category_type: Optional[CategoryType] = None
    brand_color: str = DEFAULT_BRAND_COLOR
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    location: Optional[str] = None
    game_titles: list[str] = field(default_factory=list)
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    is_verified: bool = False
    member_count: int = 0
    owner_id: Optional[UserId] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[UserId] = None
    reviewer_notes: Optional[str] = None

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        parent: Tenant | None = None,
        owner_id: UserId | None = None,
        approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
        **attributes: Any,
    ) -> Tenant:
        """Factory method for creating a new tenant.

        Args:
            name: Display name (required)
            slug: URL-safe identifier, normalized before validation
            parent: Optional parent tenant; sets the hierarchy level
            owner_id: User owning the tenant, if any
            approval_status: PENDING for self-service submissions
            **attributes: Any of the other editable fields

        Returns:
            A new Tenant aggregate

        Raises:
            ValidationError: If a field fails validation
        """
        now = datetime.now(UTC)
        tenant = cls(
            id=TenantId.generate(),
            name=_validate_name(name),
            slug=_validate_slug(slug),
            parent_id=parent.id if parent else None,
            hierarchy_level=parent.hierarchy_level + 1 if parent else 0,
            owner_id=owner_id,
            approval_status=approval_status,
            submitted_at=now if approval_status == ApprovalStatus.PENDING else None,
            created_at=now,
            updated_at=now,
        )
        tenant.update(**attributes)
        return tenant

    def update(self, **changes: Any) -> dict[str, dict[str, Any]]:
        """Apply edits to the editable fields.

        Unchanged values are skipped, so calling this with the current state
        returns an empty diff.

        Returns:
            Map of field name to ``{"from": old, "to": new}`` for every field
            that actually changed

        Raises:
            ValidationError: If a field is unknown or fails validation
        """
        diff: dict[str, dict[str, Any]] = {}
        for name, value in changes.items():
            if name not in EDITABLE_FIELDS:
                raise ValidationError(name, "Field cannot be edited")
            value = self._clean(name, value)
            old = getattr(self, name)
            if old == value:
                continue
            setattr(self, name, value)
            diff[name] = {"from": plain(old), "to": plain(value)}

        if diff:
            self.updated_at = datetime.now(UTC)
        return diff

    def assign_parent(self, parent: Tenant | None) -> dict[str, dict[str, Any]]:
        """Point this tenant at a new parent and recompute its level.

        Parent and level change together so they are always persisted as
        one record update.
        """
        new_parent_id = parent.id if parent else None
        new_level = parent.hierarchy_level + 1 if parent else 0
        diff: dict[str, dict[str, Any]] = {}
        if new_parent_id != self.parent_id:
            diff["parent_tenant_id"] = {
                "from": plain(self.parent_id),
                "to": plain(new_parent_id),
            }
        if new_level != self.hierarchy_level:
            diff["hierarchy_level"] = {"from": self.hierarchy_level, "to": new_level}

        self.parent_id = new_parent_id
        self.hierarchy_level = new_level
        if diff:
            self.updated_at = datetime.now(UTC)
        return diff

    def review(
        self,
        status: ApprovalStatus,
        reviewer_id: UserId,
        notes: str | None = None,
    ) -> dict[str, dict[str, Any]]:
        """Record a review decision.

        Raises:
            ValidationError: If rejecting without notes, or resetting to pending
        """
        if status == ApprovalStatus.PENDING:
            raise ValidationError("status", "A review cannot return a tenant to pending")
        if status == ApprovalStatus.REJECTED and not (notes or "").strip():
            raise ValidationError("notes", "Please provide a reason for rejection")

        diff: dict[str, dict[str, Any]] = {}
        if status != self.approval_status:
            diff["approval_status"] = {
                "from": self.approval_status.value,
                "to": status.value,
            }
        self.approval_status = status
        if status == ApprovalStatus.APPROVED and not self.is_verified:
            diff["is_verified"] = {"from": False, "to": True}
            self.is_verified = True
        if notes is not None:
            self.reviewer_notes = notes

        now = datetime.now(UTC)
        self.reviewed_by = reviewer_id
        self.reviewed_at = now
        self.updated_at = now
        return diff

    def _clean(self, name: str, value: Any) -> Any:
        if name == "name":
            return _validate_name(value)
        if name == "slug":
            return _validate_slug(value)
        if name == "brand_color":
            return _validate_brand_color(value or DEFAULT_BRAND_COLOR)
        if name == "category_type" and value is not None:
            try:
                return CategoryType(value)
            except ValueError as e:
                raise ValidationError(name, f"Unknown category: {value}") from e
        if name == "game_titles":
            return list(value or [])
        if name == "is_verified":
            return bool(value)
        if isinstance(value, str):
            return value.strip() or None
        return value
