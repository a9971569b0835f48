"""Domain aggregates for the access context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from access.domain.aggregates.audit_log_entry import AuditLogEntry
from access.domain.aggregates.registration_code import RegistrationCode
from access.domain.aggregates.tenant import Tenant
from access.domain.aggregates.user_role import UserRole

__all__ = [
    "AuditLogEntry",
    "RegistrationCode",
    "Tenant",
    "UserRole",
]
