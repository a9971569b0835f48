"""Port for the external address validation service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from access.domain.onboarding import Address, AddressValidationResult


@runtime_checkable
class IAddressValidator(Protocol):
    """Validates and corrects postal addresses."""

    async def validate(self, address: Address) -> AddressValidationResult:
        """Validate an address.

        Returns:
            The validation outcome. An address the service rejects is a
            result with ``is_valid=False``, not an error.

        Raises:
            AddressServiceUnavailableError: If the service could not answer
        """
        ...
