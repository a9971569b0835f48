"""Infrastructure layer for the access bounded context.

PostgreSQL repositories and the external address validation client.
"""

from access.infrastructure.audit_log_repository import AuditLogRepository
from access.infrastructure.profile_repository import ProfileRepository
from access.infrastructure.registration_code_repository import (
    RegistrationCodeRepository,
)
from access.infrastructure.smarty_address_validator import SmartyAddressValidator
from access.infrastructure.tenant_repository import TenantRepository
from access.infrastructure.user_role_repository import UserRoleRepository

__all__ = [
    "AuditLogRepository",
    "ProfileRepository",
    "RegistrationCodeRepository",
    "SmartyAddressValidator",
    "TenantRepository",
    "UserRoleRepository",
]
