"""PostgreSQL implementation of ITenantRepository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import Tenant
from access.domain.value_objects import (
    ApprovalStatus,
    CategoryType,
    TenantId,
    UserId,
)
from access.infrastructure.models import TenantModel
from access.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from access.ports.exceptions import DuplicateTenantSlugError
from access.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository for Tenant aggregate persistence to PostgreSQL.

    The whole forest is small enough to load at once; hierarchy checks run
    in memory over ``list_all``.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Insert or update a tenant.

        Raises:
            DuplicateTenantSlugError: If another tenant already uses the slug
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = TenantModel(id=tenant.id.value, created_at=tenant.created_at)
            self._session.add(model)

        model.name = tenant.name
        model.slug = tenant.slug
        model.description = tenant.description
        model.parent_tenant_id = tenant.parent_id.value if tenant.parent_id else None
        model.hierarchy_level = tenant.hierarchy_level
        model.category_type = tenant.category_type.value if tenant.category_type else None
        model.brand_color = tenant.brand_color
        model.logo_url = tenant.logo_url
        model.website_url = tenant.website_url
        model.location = tenant.location
        model.game_titles = list(tenant.game_titles)
        model.approval_status = tenant.approval_status.value
        model.is_verified = tenant.is_verified
        model.member_count = tenant.member_count
        model.owner_id = tenant.owner_id.value if tenant.owner_id else None
        model.submitted_at = tenant.submitted_at
        model.reviewed_at = tenant.reviewed_at
        model.reviewed_by = tenant.reviewed_by.value if tenant.reviewed_by else None
        model.reviewer_notes = tenant.reviewer_notes
        model.updated_at = tenant.updated_at

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "ix_tenants_slug" in str(e):
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Tenant slug '{tenant.slug}' is already taken"
                ) from e
            raise

        self._probe.tenant_saved(tenant.id.value)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found(tenant_id.value)
            return None
        return self._to_domain(model)

    async def list_all(
        self, approval_status: ApprovalStatus | None = None
    ) -> list[Tenant]:
        stmt = select(TenantModel)
        if approval_status is not None:
            stmt = stmt.where(TenantModel.approval_status == approval_status.value)
        stmt = stmt.order_by(TenantModel.hierarchy_level, TenantModel.name)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def count_by_status(self, approval_status: ApprovalStatus) -> int:
        stmt = select(func.count()).select_from(TenantModel).where(
            TenantModel.approval_status == approval_status.value
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def delete(self, tenant: Tenant) -> bool:
        stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found(tenant.id.value)
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.tenant_deleted(tenant.id.value)
        return True

    def _to_domain(self, model: TenantModel) -> Tenant:
        """Convert SQLAlchemy model to domain aggregate."""
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            created_at=model.created_at,
            updated_at=model.updated_at,
            parent_id=TenantId(value=model.parent_tenant_id)
            if model.parent_tenant_id
            else None,
            hierarchy_level=model.hierarchy_level,
            description=model.description,
            category_type=CategoryType(model.category_type)
            if model.category_type
            else None,
            brand_color=model.brand_color,
            logo_url=model.logo_url,
            website_url=model.website_url,
            location=model.location,
            game_titles=list(model.game_titles or []),
            approval_status=ApprovalStatus(model.approval_status),
            is_verified=model.is_verified,
            member_count=model.member_count,
            owner_id=UserId(value=model.owner_id) if model.owner_id else None,
            submitted_at=model.submitted_at,
            reviewed_at=model.reviewed_at,
            reviewed_by=UserId(value=model.reviewed_by) if model.reviewed_by else None,
            reviewer_notes=model.reviewer_notes,
        )
