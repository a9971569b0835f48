"""Ports layer for the access bounded context.

Defines the abstractions the application layer depends on; infrastructure
provides the implementations.
"""

from access.ports.address_validation import IAddressValidator
from access.ports.repositories import (
    AuditLogFilter,
    IAuditLogRepository,
    IProfileRepository,
    IRegistrationCodeRepository,
    ITenantRepository,
    IUserRoleRepository,
)

__all__ = [
    "AuditLogFilter",
    "IAddressValidator",
    "IAuditLogRepository",
    "IProfileRepository",
    "IRegistrationCodeRepository",
    "ITenantRepository",
    "IUserRoleRepository",
]
