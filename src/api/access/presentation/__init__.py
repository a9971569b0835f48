"""Access presentation layer, organized by aggregate.

Each aggregate package contains its own routes and models. Auth is enforced
per endpoint: most routes require an admin, onboarding and code redemption
only an authenticated user, and role changes and audit purges a super admin.
"""

from __future__ import annotations

from fastapi import APIRouter

from access.presentation import (
    audit_logs,
    onboarding,
    registration_codes,
    roles,
    tenants,
)

router = APIRouter(
    prefix="/access",
)

router.include_router(tenants.router)
router.include_router(registration_codes.router)
router.include_router(roles.router)
router.include_router(audit_logs.router)
router.include_router(onboarding.router)

__all__ = ["router"]
