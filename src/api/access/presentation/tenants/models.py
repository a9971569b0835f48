"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from access.domain.aggregates import Tenant
from access.domain.hierarchy import TenantNode
from access.domain.value_objects import ApprovalStatus, CategoryType


class TenantRequest(BaseModel):
    """Request model for creating or submitting a tenant."""

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)
    slug: str = Field(..., description="URL slug; normalized to lowercase", min_length=1)
    parent_id: str | None = Field(default=None, description="Parent tenant ID")
    description: str | None = None
    category_type: CategoryType | None = None
    brand_color: str | None = Field(default=None, description="#RRGGBB color")
    logo_url: str | None = None
    website_url: str | None = None
    location: str | None = None
    game_titles: list[str] = Field(default_factory=list)
    is_verified: bool = False


class TenantPatchRequest(BaseModel):
    """Request model for editing a tenant. Omitted fields keep their value.

    Sending ``parent_id`` (including null) moves the tenant.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1)
    parent_id: str | None = None
    description: str | None = None
    category_type: CategoryType | None = None
    brand_color: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    location: str | None = None
    game_titles: list[str] | None = None
    is_verified: bool | None = None


class SetParentRequest(BaseModel):
    """Request model for moving a tenant. Null makes it a root."""

    parent_id: str | None = Field(default=None, description="New parent tenant ID")


class ReviewTenantRequest(BaseModel):
    """Request model for a review decision."""

    status: ApprovalStatus = Field(..., description="approved, rejected or needs_revision")
    notes: str | None = Field(default=None, description="Required when rejecting")


class TenantResponse(BaseModel):
    """Response model for tenant."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    name: str
    slug: str
    parent_tenant_id: str | None
    hierarchy_level: int
    description: str | None
    category_type: str | None
    brand_color: str
    logo_url: str | None
    website_url: str | None
    location: str | None
    game_titles: list[str]
    approval_status: str
    is_verified: bool
    member_count: int
    owner_id: str | None
    submitted_at: datetime | None
    reviewed_at: datetime | None
    reviewed_by: str | None
    reviewer_notes: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response.

        Args:
            tenant: Tenant domain aggregate

        Returns:
            TenantResponse
        """
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            slug=tenant.slug,
            parent_tenant_id=tenant.parent_id.value if tenant.parent_id else None,
            hierarchy_level=tenant.hierarchy_level,
            description=tenant.description,
            category_type=tenant.category_type.value if tenant.category_type else None,
            brand_color=tenant.brand_color,
            logo_url=tenant.logo_url,
            website_url=tenant.website_url,
            location=tenant.location,
            game_titles=list(tenant.game_titles),
            approval_status=tenant.approval_status.value,
            is_verified=tenant.is_verified,
            member_count=tenant.member_count,
            owner_id=tenant.owner_id.value if tenant.owner_id else None,
            submitted_at=tenant.submitted_at,
            reviewed_at=tenant.reviewed_at,
            reviewed_by=tenant.reviewed_by.value if tenant.reviewed_by else None,
            reviewer_notes=tenant.reviewer_notes,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
        )


class TenantNodeResponse(BaseModel):
    """A tenant and its children, nested."""

    tenant: TenantResponse
    children: list[TenantNodeResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, node: TenantNode) -> TenantNodeResponse:
        return cls(
            tenant=TenantResponse.from_domain(node.tenant),
            children=[cls.from_domain(child) for child in node.children],
        )


class PendingCountResponse(BaseModel):
    """Number of tenants awaiting review."""

    pending: int


_NULLABLE = frozenset(
    {"description", "category_type", "logo_url", "website_url", "location"}
)


def patch_fields(tenant: Tenant, request: TenantPatchRequest) -> dict[str, Any]:
    """Full form values for ``tenant`` with the request's fields applied."""
    values: dict[str, Any] = {
        "name": tenant.name,
        "slug": tenant.slug,
        "description": tenant.description,
        "category_type": tenant.category_type,
        "brand_color": tenant.brand_color,
        "logo_url": tenant.logo_url,
        "website_url": tenant.website_url,
        "location": tenant.location,
        "game_titles": list(tenant.game_titles),
        "is_verified": tenant.is_verified,
    }
    sent = request.model_dump(exclude_unset=True)
    sent.pop("parent_id", None)
    values.update({k: v for k, v in sent.items() if v is not None or k in _NULLABLE})
    return values
