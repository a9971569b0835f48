"""Onboarding session state machine.

A session moves from personal info to address entry to success. Nothing in
a session is persisted until it completes; cancelling throws the input
away.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from access.domain.aggregates.registration_code import CodeValidation, ValidatedCode
from access.domain.exceptions import InvalidOnboardingTransitionError, ValidationError
from access.domain.value_objects import (
    RedemptionId,
    RegistrationCodeId,
    TenantId,
    UserId,
)

MIN_NAME_LENGTH = 2


class OnboardingStep(StrEnum):
    """Steps of the onboarding workflow."""

    PERSONAL_INFO = "personal"
    ADDRESS = "address"
    SUCCESS = "success"


@dataclass(frozen=True)
class Address:
    """Postal address entered by the user or returned by the validator."""

    street: str
    city: str
    state: str
    zip_code: str

    def __post_init__(self) -> None:
        for name in ("street", "city", "state", "zip_code"):
            if not getattr(self, name).strip():
                raise ValidationError(name, "This field is required")


@dataclass(frozen=True)
class AddressValidationResult:
    """Outcome of an address validation request.

    ``service_unavailable`` distinguishes "the service said no" from "the
    service could not be reached"; only the latter is a service failure.
    """

    is_valid: bool
    validated_address: Optional[Address] = None
    has_corrections: bool = False
    error_message: Optional[str] = None
    service_unavailable: bool = False
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class OnboardingSession:
    """Client-held onboarding state.

    The session can only reach SUCCESS from ADDRESS, and only when the
    address was validated, the user chose to continue with an unvalidated
    address, or a validated override code is attached.
    """

    step: OnboardingStep = OnboardingStep.PERSONAL_INFO
    full_name: Optional[str] = None
    discord_id: Optional[str] = None
    address: Optional[Address] = None
    address_validation: Optional[AddressValidationResult] = None
    continue_anyway: bool = False
    override_code: Optional[CodeValidation] = None
    redemption_id: Optional[RedemptionId] = None
    error: Optional[str] = None

    @classmethod
    def completed(cls) -> OnboardingSession:
        """Session for a user who has already onboarded."""
        return cls(step=OnboardingStep.SUCCESS)

    @property
    def is_complete(self) -> bool:
        return self.step == OnboardingStep.SUCCESS

    @property
    def has_valid_override(self) -> bool:
        return isinstance(self.override_code, ValidatedCode)

    @property
    def address_is_validated(self) -> bool:
        return bool(self.address_validation and self.address_validation.is_valid)

    @property
    def can_continue_anyway(self) -> bool:
        """Whether the "continue anyway" choice should be offered."""
        return self.address is not None and not self.address_is_validated

    def submit_personal_info(self, full_name: str, discord_id: str | None = None) -> None:
        """Record personal info and advance to the address step.

        Raises:
            ValidationError: If the trimmed name is shorter than 2 characters
        """
        self._require(OnboardingStep.PERSONAL_INFO)
        name = (full_name or "").strip()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(
                "full_name", "Please enter your full name (at least 2 characters)"
            )
        self.full_name = name
        self.discord_id = (discord_id or "").strip() or None
        self.step = OnboardingStep.ADDRESS

    def enter_address(self, address: Address) -> None:
        """Set the address, dropping any earlier validation of it."""
        self._require(OnboardingStep.ADDRESS)
        if address != self.address:
            self.address_validation = None
            self.continue_anyway = False
        self.address = address
        self.error = None

    def record_address_validation(self, result: AddressValidationResult) -> None:
        self._require(OnboardingStep.ADDRESS)
        if self.address is None:
            raise InvalidOnboardingTransitionError("Enter an address before validating it")
        self.address_validation = result
        if result.is_valid and result.validated_address is not None:
            self.address = result.validated_address

    def accept_unvalidated_address(self) -> None:
        """The user chose to continue with an address that did not validate."""
        self._require(OnboardingStep.ADDRESS)
        if self.address is None:
            raise InvalidOnboardingTransitionError("Enter an address first")
        self.continue_anyway = True

    def apply_override_code(self, validation: CodeValidation | None) -> None:
        """Attach (or clear) the result of validating an override code."""
        self._require(OnboardingStep.ADDRESS)
        self.override_code = validation
        self.error = None

    def needs_address_validation(self) -> bool:
        """Whether completing requires calling the address validator first."""
        return (
            not self.has_valid_override
            and not self.continue_anyway
            and self.address_validation is None
        )

    def can_complete(self) -> bool:
        return (
            self.step == OnboardingStep.ADDRESS
            and self.address is not None
            and (self.has_valid_override or self.address_is_validated or self.continue_anyway)
        )

    def complete(self, redemption_id: RedemptionId | None = None) -> None:
        """Move to SUCCESS.

        Raises:
            InvalidOnboardingTransitionError: If no completion condition holds
        """
        if not self.can_complete():
            raise InvalidOnboardingTransitionError(
                "The address must be validated or accepted before completing"
            )
        self.redemption_id = redemption_id
        self.error = None
        self.step = OnboardingStep.SUCCESS

    def fail_completion(self, message: str, *, drop_override: bool = False) -> None:
        """Stay on the address step and show an error.

        When the override code could not be used it is dropped so the user
        falls back to standard address verification.
        """
        self._require(OnboardingStep.ADDRESS)
        if drop_override:
            self.override_code = None
        self.redemption_id = None
        self.error = message

    def cancel(self) -> None:
        """Discard all input. Cancelling a completed session does nothing."""
        if self.is_complete:
            return
        fresh = OnboardingSession()
        self.__dict__.update(fresh.__dict__)

    def _require(self, step: OnboardingStep) -> None:
        if self.step != step:
            raise InvalidOnboardingTransitionError(
                f"Expected onboarding step '{step.value}', session is at '{self.step.value}'"
            )


@dataclass
class UserProfile:
    """Address profile written when a user completes onboarding."""

    user_id: UserId
    full_name: str
    address: Address
    is_validated: bool
    created_at: datetime
    discord_id: Optional[str] = None
    validation_payload: dict[str, Any] = field(default_factory=dict)
    override_code_id: Optional[RegistrationCodeId] = None
    redemption_id: Optional[RedemptionId] = None
    tenant_id: Optional[TenantId] = None
