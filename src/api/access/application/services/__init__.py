"""Application services for the access bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the access context.
"""

from access.application.services.audit_service import AuditService
from access.application.services.onboarding_service import OnboardingService
from access.application.services.registration_code_service import (
    RegistrationCodeService,
)
from access.application.services.role_service import RoleService
from access.application.services.tenant_service import TenantService

__all__ = [
    "AuditService",
    "OnboardingService",
    "RegistrationCodeService",
    "RoleService",
    "TenantService",
]
