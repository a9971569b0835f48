"""Address validation against the Smarty US street address API."""

from __future__ import annotations

from typing import Any

import httpx

from access.domain.onboarding import Address, AddressValidationResult
from access.infrastructure.observability import (
    AddressValidationProbe,
    DefaultAddressValidationProbe,
)
from access.ports.address_validation import IAddressValidator
from access.ports.exceptions import AddressServiceUnavailableError

STREET_ADDRESS_PATH = "/street-address"
NO_MATCH_MESSAGE = "Address could not be verified. Please check your entry."


class SmartyAddressValidator(IAddressValidator):
    """Validates US addresses with a single-candidate Smarty lookup.

    An empty candidate list means the address is not deliverable. Transport
    errors and non-2xx responses mean the service is unavailable.
    """

    def __init__(
        self,
        base_url: str,
        auth_id: str,
        auth_token: str,
        timeout: float = 10.0,
        probe: AddressValidationProbe | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the validator.

        Args:
            base_url: API base URL
            auth_id: Smarty auth id
            auth_token: Smarty auth token
            timeout: Request timeout in seconds
            probe: Optional domain probe for observability
            client: Optional preconfigured HTTP client, mainly for tests
        """
        self._base_url = base_url.rstrip("/")
        self._auth_id = auth_id
        self._auth_token = auth_token
        self._timeout = timeout
        self._probe = probe or DefaultAddressValidationProbe()
        self._client = client

    async def validate(self, address: Address) -> AddressValidationResult:
        params = {
            "auth-id": self._auth_id,
            "auth-token": self._auth_token,
            "street": address.street.strip(),
            "city": address.city.strip(),
            "state": address.state.strip(),
            "zipcode": address.zip_code.strip(),
            "candidates": "1",
        }
        url = f"{self._base_url}{STREET_ADDRESS_PATH}"

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(
                        url, params=params, headers={"Accept": "application/json"}
                    )
            response.raise_for_status()
            candidates = response.json()
        except httpx.HTTPStatusError as e:
            self._probe.lookup_failed(error=str(e), status_code=e.response.status_code)
            raise AddressServiceUnavailableError(
                f"Address service returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            self._probe.lookup_failed(error=str(e))
            raise AddressServiceUnavailableError("Address service unavailable") from e

        if not candidates:
            self._probe.lookup_completed(candidates=0, has_corrections=False)
            return AddressValidationResult(is_valid=False, error_message=NO_MATCH_MESSAGE)

        match = candidates[0]
        validated = _to_address(match)
        has_corrections = _differs(address, validated)
        self._probe.lookup_completed(
            candidates=len(candidates), has_corrections=has_corrections
        )
        return AddressValidationResult(
            is_valid=True,
            validated_address=validated,
            has_corrections=has_corrections,
            raw=match,
        )


def _to_address(match: dict[str, Any]) -> Address:
    components = match.get("components", {})
    return Address(
        street=match.get("delivery_line_1", ""),
        city=components.get("city_name", ""),
        state=components.get("state_abbreviation", ""),
        zip_code=components.get("zipcode", ""),
    )


def _differs(entered: Address, validated: Address) -> bool:
    return (
        entered.street.strip().lower() != validated.street.lower()
        or entered.city.strip().lower() != validated.city.lower()
        or entered.state.strip().lower() != validated.state.lower()
        or entered.zip_code.strip() != validated.zip_code
    )
