"""SQLAlchemy ORM models for the access bounded context.

These models map to database tables and are used by repository implementations.
"""

from access.infrastructure.models.audit_log import AuditLogModel
from access.infrastructure.models.registration_code import (
    RegistrationCodeModel,
    RegistrationCodeRedemptionModel,
)
from access.infrastructure.models.tenant import TenantModel
from access.infrastructure.models.user_address import UserAddressModel
from access.infrastructure.models.user_role import UserRoleModel

__all__ = [
    "AuditLogModel",
    "RegistrationCodeModel",
    "RegistrationCodeRedemptionModel",
    "TenantModel",
    "UserAddressModel",
    "UserRoleModel",
]
