"""Domain-Oriented Observability for access infrastructure.

Probes for repository and external service operations.
"""

from access.infrastructure.observability.address_validation_probe import (
    AddressValidationProbe,
    DefaultAddressValidationProbe,
)
from access.infrastructure.observability.repository_probe import (
    DefaultRegistrationCodeRepositoryProbe,
    DefaultTenantRepositoryProbe,
    RegistrationCodeRepositoryProbe,
    TenantRepositoryProbe,
)

__all__ = [
    "AddressValidationProbe",
    "DefaultAddressValidationProbe",
    "DefaultRegistrationCodeRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "RegistrationCodeRepositoryProbe",
    "TenantRepositoryProbe",
]
