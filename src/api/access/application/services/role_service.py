"""Role application service for the access bounded context."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import DefaultRoleServiceProbe, RoleServiceProbe
from access.application.services.audit_service import AuditService
from access.domain.aggregates import UserRole
from access.domain.aggregates.user_role import sort_by_rank
from access.domain.exceptions import SelfDemotionError
from access.domain.value_objects import (
    AuditAction,
    AuditResourceType,
    PlatformRole,
    UserId,
)
from access.ports.exceptions import PersistenceError
from access.ports.repositories import IUserRoleRepository


class RoleService:
    """Application service for platform role assignment."""

    def __init__(
        self,
        session: AsyncSession,
        role_repository: IUserRoleRepository,
        audit: AuditService,
        probe: RoleServiceProbe | None = None,
    ):
        self._session = session
        self._role_repository = role_repository
        self._audit = audit
        self._probe = probe or DefaultRoleServiceProbe()

    async def get_role(self, user_id: UserId) -> PlatformRole:
        """Role of a user; ``user`` when no assignment exists."""
        async with self._session.begin():
            user_role = await self._role_repository.get(user_id)
        return user_role.role if user_role else PlatformRole.USER

    async def list_user_roles(self) -> list[UserRole]:
        """All role assignments, highest role first."""
        async with self._session.begin():
            roles = await self._role_repository.list_all()
        return sort_by_rank(roles)

    async def change_role(
        self,
        actor_id: UserId,
        target_user_id: UserId,
        new_role: PlatformRole,
        ip_address: str | None = None,
    ) -> UserRole:
        """Assign a new role to a user.

        Args:
            actor_id: Super admin performing the change
            target_user_id: User whose role changes
            new_role: Role to assign
            ip_address: Client address for the audit entry

        Returns:
            The updated assignment

        Raises:
            SelfDemotionError: If a super admin tries to demote themselves
            PersistenceError: If the database fails
        """
        try:
            async with self._session.begin():
                user_role = await self._role_repository.get(target_user_id)
                if user_role is None:
                    user_role = UserRole.default_for(target_user_id)
                try:
                    old_role = user_role.change_to(new_role, actor_id)
                except SelfDemotionError:
                    self._probe.self_demotion_blocked(
                        actor_id=actor_id.value, requested_role=new_role.value
                    )
                    raise
                await self._role_repository.save(user_role)
        except SQLAlchemyError as e:
            self._probe.persistence_failed(operation="change_role", error=str(e))
            raise PersistenceError("Failed to change role") from e

        self._probe.role_changed(
            actor_id=actor_id.value,
            target_user_id=target_user_id.value,
            old_role=old_role.value,
            new_role=new_role.value,
        )
        await self._audit.record(
            actor_id=actor_id,
            action=AuditAction.ROLE_CHANGE,
            resource_type=AuditResourceType.USER_ROLE,
            resource_id=target_user_id.value,
            details={
                "target_user_id": target_user_id.value,
                "old_role": old_role.value,
                "new_role": new_role.value,
            },
            ip_address=ip_address,
        )
        return user_role
