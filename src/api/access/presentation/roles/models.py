"""Pydantic models for role API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from access.domain.aggregates import UserRole
from access.domain.value_objects import PlatformRole


class ChangeRoleRequest(BaseModel):
    role: PlatformRole = Field(..., description="Role to assign")


class UserRoleResponse(BaseModel):
    user_id: str
    role: PlatformRole
    created_at: datetime

    @classmethod
    def from_domain(cls, user_role: UserRole) -> UserRoleResponse:
        return cls(
            user_id=user_role.user_id.value,
            role=user_role.role,
            created_at=user_role.created_at,
        )


class CurrentRoleResponse(BaseModel):
    """The caller's own role, for gating UI."""

    user_id: str
    role: PlatformRole
    is_admin: bool
    is_super_admin: bool
