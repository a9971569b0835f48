"""PostgreSQL implementation of IUserRoleRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import UserRole
from access.domain.value_objects import PlatformRole, UserId
from access.infrastructure.models import UserRoleModel
from access.ports.repositories import IUserRoleRepository


class UserRoleRepository(IUserRoleRepository):
    """Repository for UserRole persistence. One row per user."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UserId) -> UserRole | None:
        model = await self._session.get(UserRoleModel, user_id.value)
        return self._to_domain(model) if model else None

    async def save(self, user_role: UserRole) -> None:
        model = await self._session.get(UserRoleModel, user_role.user_id.value)
        if model is None:
            model = UserRoleModel(
                user_id=user_role.user_id.value, created_at=user_role.created_at
            )
            self._session.add(model)
        model.role = user_role.role.value
        await self._session.flush()

    async def list_all(self) -> list[UserRole]:
        result = await self._session.execute(select(UserRoleModel))
        return [self._to_domain(model) for model in result.scalars().all()]

    def _to_domain(self, model: UserRoleModel) -> UserRole:
        return UserRole(
            user_id=UserId(value=model.user_id),
            role=PlatformRole(model.role),
            created_at=model.created_at,
        )
