"""Application-level observability for the access bounded context.

Provides domain probes for application services following the
Domain-Oriented Observability pattern.
"""

from access.application.observability.audit_service_probe import (
    AuditServiceProbe,
    DefaultAuditServiceProbe,
)
from access.application.observability.onboarding_service_probe import (
    DefaultOnboardingServiceProbe,
    OnboardingServiceProbe,
)
from access.application.observability.registration_code_service_probe import (
    DefaultRegistrationCodeServiceProbe,
    RegistrationCodeServiceProbe,
)
from access.application.observability.role_service_probe import (
    DefaultRoleServiceProbe,
    RoleServiceProbe,
)
from access.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "AuditServiceProbe",
    "DefaultAuditServiceProbe",
    "DefaultOnboardingServiceProbe",
    "DefaultRegistrationCodeServiceProbe",
    "DefaultRoleServiceProbe",
    "DefaultTenantServiceProbe",
    "OnboardingServiceProbe",
    "RegistrationCodeServiceProbe",
    "RoleServiceProbe",
    "TenantServiceProbe",
]
