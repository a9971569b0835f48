"""Tenant application service for the access bounded context.

Handles tenant management: create and edit, hierarchy placement with cycle
prevention, self-service submission, review, and deletion.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from access.application.services.audit_service import AuditService
from access.application.value_objects import TenantInput
from access.domain.aggregates import Tenant
from access.domain.exceptions import CycleError
from access.domain.hierarchy import DEFAULT_MAX_DEPTH, TenantHierarchy, TenantNode
from access.domain.value_objects import (
    ApprovalStatus,
    AuditAction,
    AuditResourceType,
    TenantId,
    UserId,
    plain,
)
from access.ports.exceptions import (
    DuplicateTenantSlugError,
    PersistenceError,
    TenantHasChildrenError,
    TenantNotFoundError,
)
from access.ports.repositories import ITenantRepository


class TenantService:
    """Application service for tenant management.

    Hierarchy checks always run against the full set of tenants loaded in
    the same transaction as the write. A rejected parent assignment leaves
    the database untouched and writes no audit entry.
    """

    def __init__(
        self,
        session: AsyncSession,
        tenant_repository: ITenantRepository,
        audit: AuditService,
        probe: TenantServiceProbe | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize TenantService with dependencies.

        Args:
            session: Database session for transaction management
            tenant_repository: Repository for tenant persistence
            audit: Audit writer for privileged mutations
            probe: Optional domain probe for observability
            max_depth: Bound on ancestor walks
        """
        self._session = session
        self._tenant_repository = tenant_repository
        self._audit = audit
        self._probe = probe or DefaultTenantServiceProbe()
        self._max_depth = max_depth

    async def create_or_update_tenant(
        self,
        actor_id: UserId,
        data: TenantInput,
        existing_id: TenantId | None = None,
    ) -> Tenant:
        """Create a tenant, or edit an existing one.

        A new tenant is a root at level 0 unless a parent is supplied, in
        which case its level is one more than the parent's. On update the
        parent is only touched when ``data.parent_set`` is True, and goes
        through the same cycle check as ``set_parent``.

        Args:
            actor_id: User performing the change
            data: Form fields
            existing_id: Tenant to update; None creates a new tenant

        Returns:
            The created or updated Tenant

        Raises:
            ValidationError: If name or slug is missing or malformed
            TenantNotFoundError: If the tenant or the parent does not exist
            CycleError: If the new parent is the tenant or a descendant
            DuplicateTenantSlugError: If the slug is already taken
            PersistenceError: If the database fails
        """
        if existing_id is None:
            return await self._create(actor_id, data, ApprovalStatus.APPROVED)

        try:
            async with self._session.begin():
                hierarchy = await self._load_hierarchy()
                tenant = self._require(hierarchy, existing_id)
                diff = tenant.update(
                    name=data.name, slug=data.slug, **data.attributes()
                )

                changed = [tenant] if diff else []
                if data.parent_set and data.parent_id != tenant.parent_id:
                    if data.parent_id is not None:
                        self._require(hierarchy, data.parent_id)
                    previous_parent = tenant.parent_id
                    previous_level = tenant.hierarchy_level
                    moved = self._reparent(hierarchy, tenant.id, data.parent_id)
                    diff["parent_tenant_id"] = {
                        "from": plain(previous_parent),
                        "to": plain(tenant.parent_id),
                    }
                    if previous_level != tenant.hierarchy_level:
                        diff["hierarchy_level"] = {
                            "from": previous_level,
                            "to": tenant.hierarchy_level,
                        }
                    changed = _merge(changed, moved)

                for item in changed:
                    await self._tenant_repository.save(item)
        except DuplicateTenantSlugError:
            self._probe.duplicate_tenant_slug(slug=data.slug)
            raise
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="update_tenant", error=str(e))
            raise PersistenceError("Failed to update tenant") from e

        if diff:
            self._probe.tenant_updated(tenant_id=tenant.id.value, fields=sorted(diff))
            await self._audit.record(
                actor_id=actor_id,
                action=AuditAction.UPDATED,
                resource_type=AuditResourceType.TENANT,
                resource_id=tenant.id.value,
                details={"name": tenant.name, "changes": diff},
            )
        return tenant

    async def submit_tenant(self, owner_id: UserId, data: TenantInput) -> Tenant:
        """Create a tenant through self-service submission.

        The tenant starts as ``pending`` and unverified until reviewed,
        whatever the submitter sent for ``is_verified``.
        """
        return await self._create(owner_id, data, ApprovalStatus.PENDING)

    async def set_parent(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        candidate_parent_id: TenantId | None,
    ) -> Tenant:
        """Move a tenant under a new parent, or make it a root.

        Walks the candidate's ancestor chain before assigning. Levels of the
        tenant and all of its descendants are recomputed and written in the
        same transaction.

        Raises:
            TenantNotFoundError: If the tenant or the candidate does not exist
            CycleError: If the candidate is the tenant or one of its descendants
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                hierarchy = await self._load_hierarchy()
                tenant = self._require(hierarchy, tenant_id)
                if candidate_parent_id is not None:
                    self._require(hierarchy, candidate_parent_id)
                previous_parent = tenant.parent_id
                previous_level = tenant.hierarchy_level

                changed = self._reparent(hierarchy, tenant_id, candidate_parent_id)
                for item in changed:
                    await self._tenant_repository.save(item)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="set_parent", error=str(e))
            raise PersistenceError("Failed to move tenant") from e

        relevelled = [t.id.value for t in changed if t.id != tenant_id]
        self._probe.tenant_parent_changed(
            tenant_id=tenant_id.value,
            parent_id=candidate_parent_id.value if candidate_parent_id else None,
            relevelled=len(relevelled),
        )
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.UPDATED,
            resource_type=AuditResourceType.TENANT,
            resource_id=tenant_id.value,
            details={
                "name": tenant.name,
                "changes": {
                    "parent_tenant_id": {
                        "from": plain(previous_parent),
                        "to": plain(tenant.parent_id),
                    },
                    "hierarchy_level": {
                        "from": previous_level,
                        "to": tenant.hierarchy_level,
                    },
                },
                "relevelled_descendants": relevelled,
            },
        )
        return tenant

    async def list_eligible_parents(self, tenant_id: TenantId | None) -> list[Tenant]:
        """List the tenants that may be offered as a parent for ``tenant_id``.

        Excludes the tenant and its descendants. Pass None when the tenant
        is being created.
        """
        hierarchy = await self._read_hierarchy()
        if tenant_id is not None:
            self._require(hierarchy, tenant_id)
        return hierarchy.eligible_parents(tenant_id)

    async def review_tenant(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        status: ApprovalStatus,
        notes: str | None = None,
    ) -> Tenant:
        """Record an approval decision for a submitted tenant.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            ValidationError: If rejecting without notes
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                tenant = await self._tenant_repository.get_by_id(tenant_id)
                if tenant is None:
                    self._probe.tenant_not_found(tenant_id=tenant_id.value)
                    raise TenantNotFoundError(f"Tenant {tenant_id} not found")
                diff = tenant.review(status=status, reviewer_id=actor_id, notes=notes)
                await self._tenant_repository.save(tenant)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="review_tenant", error=str(e))
            raise PersistenceError("Failed to review tenant") from e

        self._probe.tenant_reviewed(tenant_id=tenant_id.value, status=status.value)
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.UPDATED,
            resource_type=AuditResourceType.TENANT,
            resource_id=tenant_id.value,
            details={"name": tenant.name, "changes": diff, "reviewer_notes": notes},
        )
        return tenant

    async def delete_tenant(self, actor_id: UserId, tenant_id: TenantId) -> None:
        """Delete a tenant that has no children.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            TenantHasChildrenError: If other tenants still point at it
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                hierarchy = await self._load_hierarchy()
                tenant = self._require(hierarchy, tenant_id)
                children = hierarchy.children(tenant_id)
                if children:
                    raise TenantHasChildrenError(
                        f"Tenant {tenant.name} has {len(children)} child tenant(s); "
                        "move or delete them first"
                    )
                await self._tenant_repository.delete(tenant)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="delete_tenant", error=str(e))
            raise PersistenceError("Failed to delete tenant") from e

        self._probe.tenant_deleted(tenant_id=tenant_id.value)
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.DELETED,
            resource_type=AuditResourceType.TENANT,
            resource_id=tenant_id.value,
            details={"name": tenant.name, "slug": tenant.slug},
        )

    async def get_tenant(self, tenant_id: TenantId) -> Tenant:
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    async def list_tenants(
        self, approval_status: ApprovalStatus | None = None
    ) -> list[Tenant]:
        async with self._session.begin():
            return await self._tenant_repository.list_all(approval_status=approval_status)

    async def pending_review_count(self) -> int:
        async with self._session.begin():
            return await self._tenant_repository.count_by_status(ApprovalStatus.PENDING)

    async def get_children(self, tenant_id: TenantId) -> list[Tenant]:
        hierarchy = await self._read_hierarchy()
        self._require(hierarchy, tenant_id)
        return hierarchy.children(tenant_id)

    async def get_ancestors(self, tenant_id: TenantId) -> list[Tenant]:
        """Return the chain of ancestors, root first."""
        hierarchy = await self._read_hierarchy()
        self._require(hierarchy, tenant_id)
        return hierarchy.ancestors(tenant_id)

    async def get_descendants(self, tenant_id: TenantId) -> list[Tenant]:
        hierarchy = await self._read_hierarchy()
        self._require(hierarchy, tenant_id)
        return hierarchy.descendants(tenant_id)

    async def list_roots(self) -> list[Tenant]:
        hierarchy = await self._read_hierarchy()
        return hierarchy.roots()

    async def build_tree(self) -> list[TenantNode]:
        hierarchy = await self._read_hierarchy()
        return hierarchy.build_tree()

    async def _create(
        self,
        actor_id: UserId,
        data: TenantInput,
        approval_status: ApprovalStatus,
    ) -> Tenant:
        attributes = data.attributes()
        if approval_status == ApprovalStatus.PENDING:
            attributes["is_verified"] = False
        try:
            async with self._session.begin():
                parent = None
                if data.parent_id is not None:
                    parent = await self._tenant_repository.get_by_id(data.parent_id)
                    if parent is None:
                        self._probe.tenant_not_found(tenant_id=data.parent_id.value)
                        raise TenantNotFoundError(
                            f"Parent tenant {data.parent_id} not found"
                        )
                tenant = Tenant.create(
                    name=data.name,
                    slug=data.slug,
                    parent=parent,
                    owner_id=actor_id if approval_status == ApprovalStatus.PENDING else None,
                    approval_status=approval_status,
                    **attributes,
                )
                await self._tenant_repository.save(tenant)
        except DuplicateTenantSlugError:
            self._probe.duplicate_tenant_slug(slug=data.slug)
            raise
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="create_tenant", error=str(e))
            raise PersistenceError("Failed to create tenant") from e

        self._probe.tenant_created(
            tenant_id=tenant.id.value,
            slug=tenant.slug,
            parent_id=tenant.parent_id.value if tenant.parent_id else None,
        )
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.CREATED,
            resource_type=AuditResourceType.TENANT,
            resource_id=tenant.id.value,
            details={
                "name": tenant.name,
                "slug": tenant.slug,
                "parent_tenant_id": tenant.parent_id.value if tenant.parent_id else None,
                "hierarchy_level": tenant.hierarchy_level,
                "approval_status": tenant.approval_status.value,
            },
        )
        return tenant

    async def _load_hierarchy(self) -> TenantHierarchy:
        tenants = await self._tenant_repository.list_all()
        return TenantHierarchy(tenants, max_depth=self._max_depth)

    async def _read_hierarchy(self) -> TenantHierarchy:
        async with self._session.begin():
            return await self._load_hierarchy()

    def _require(self, hierarchy: TenantHierarchy, tenant_id: TenantId) -> Tenant:
        tenant = hierarchy.get(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    def _reparent(
        self,
        hierarchy: TenantHierarchy,
        tenant_id: TenantId,
        candidate_parent_id: TenantId | None,
    ) -> list[Tenant]:
        try:
            return hierarchy.set_parent(tenant_id, candidate_parent_id)
        except CycleError:
            self._probe.cycle_rejected(
                tenant_id=tenant_id.value,
                candidate_parent_id=candidate_parent_id.value if candidate_parent_id else "",
            )
            raise


def _merge(first: list[Tenant], second: list[Tenant]) -> list[Tenant]:
    seen = {t.id for t in first}
    return first + [t for t in second if t.id not in seen]
