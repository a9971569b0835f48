"""HTTP routes for platform role assignment."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from access.application.services import RoleService
from access.application.value_objects import CurrentUser
from access.dependencies.services import get_role_service
from access.dependencies.user import (
    get_current_user,
    require_admin,
    require_super_admin,
)
from access.domain.exceptions import AccessError
from access.domain.value_objects import UserId
from access.presentation.errors import invalid_id, to_http_exception
from access.presentation.roles.models import (
    ChangeRoleRequest,
    CurrentRoleResponse,
    UserRoleResponse,
)

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
)

Service = Annotated[RoleService, Depends(get_role_service)]


@router.get("")
async def list_roles(
    _: Annotated[CurrentUser, Depends(require_admin)],
    service: Service,
) -> list[UserRoleResponse]:
    """List role assignments, highest role first."""
    try:
        roles = await service.list_user_roles()
    except AccessError as e:
        raise to_http_exception(e) from e
    return [UserRoleResponse.from_domain(r) for r in roles]


@router.get("/me")
async def get_my_role(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentRoleResponse:
    return CurrentRoleResponse(
        user_id=current_user.user_id.value,
        role=current_user.role,
        is_admin=current_user.is_admin,
        is_super_admin=current_user.is_super_admin,
    )


@router.put("/{user_id}")
async def change_role(
    user_id: str,
    request: ChangeRoleRequest,
    current_user: Annotated[CurrentUser, Depends(require_super_admin)],
    service: Service,
) -> UserRoleResponse:
    """Assign a role to a user.

    Raises:
        HTTPException: 400 if the user ID is malformed
        HTTPException: 409 if a super admin tries to demote themselves
    """
    try:
        target = UserId.from_string(user_id)
    except ValueError as e:
        raise invalid_id("user", e) from e

    try:
        user_role = await service.change_role(
            current_user.user_id,
            target,
            request.role,
            ip_address=current_user.ip_address,
        )
    except AccessError as e:
        raise to_http_exception(e) from e
    return UserRoleResponse.from_domain(user_role)
