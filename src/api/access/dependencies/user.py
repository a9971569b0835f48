"""Current user resolution and role gates.

Usage in FastAPI routes:
    @router.get("")
    async def list_codes(
        current_user: Annotated[CurrentUser, Depends(require_admin)],
    ):
        ...
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.value_objects import CurrentUser
from access.dependencies.authentication import bearer_scheme, get_jwt_validator
from access.domain.value_objects import PlatformRole, UserId
from access.infrastructure import UserRoleRepository
from infrastructure.database.dependencies import get_session
from shared_kernel.auth import InvalidTokenError, JWTValidator
from shared_kernel.observability_context import ObservationContext


async def get_current_user(
    request: Request,
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
    session: Annotated[AsyncSession, Depends(get_session)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> CurrentUser:
    """Authenticate the bearer token and look up the user's platform role.

    A user without a role assignment has the ``user`` role.

    Raises:
        HTTPException 401: If the token is missing or invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = validator.validate_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user_id = UserId(value=claims.sub)
    async with session.begin():
        user_role = await UserRoleRepository(session).get(user_id)

    return CurrentUser(
        user_id=user_id,
        role=user_role.role if user_role else PlatformRole.USER,
        ip_address=request.client.host if request.client else None,
    )


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Allow admins and super admins.

    Raises:
        HTTPException 403: For any lower role
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def require_super_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Allow super admins only.

    Raises:
        HTTPException 403: For any other role
    """
    if not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return current_user


def get_observation_context(request: Request) -> ObservationContext:
    """Request-scoped metadata attached to every probe event."""
    return ObservationContext(
        request_id=request.headers.get("X-Request-ID") or str(uuid.uuid4()),
        ip_address=request.client.host if request.client else None,
    )
