"""Pydantic models for onboarding API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from access.application.value_objects import OnboardingSubmission
from access.domain.onboarding import (
    Address,
    AddressValidationResult,
    OnboardingSession,
)
from access.presentation.registration_codes.models import CodeValidationResponse


class AddressModel(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str

    def to_domain(self) -> Address:
        return Address(
            street=self.street, city=self.city, state=self.state, zip_code=self.zip_code
        )

    @classmethod
    def from_domain(cls, address: Address) -> AddressModel:
        return cls(
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
        )


class OverrideCodeRequest(BaseModel):
    code: str = Field(..., min_length=1)


class CompleteOnboardingRequest(BaseModel):
    """Everything collected by the onboarding form."""

    full_name: str
    discord_id: str | None = None
    address: AddressModel
    override_code: str | None = Field(
        default=None, description="Skips address verification when valid"
    )
    continue_anyway: bool = Field(
        default=False, description="Accept the address without verification"
    )

    def to_submission(self) -> OnboardingSubmission:
        return OnboardingSubmission(
            full_name=self.full_name,
            address=self.address.to_domain(),
            discord_id=self.discord_id,
            override_code=self.override_code,
            continue_anyway=self.continue_anyway,
        )


class AddressValidationResponse(BaseModel):
    is_valid: bool
    validated_address: AddressModel | None = None
    has_corrections: bool = False
    error_message: str | None = None
    service_unavailable: bool = False

    @classmethod
    def from_domain(cls, result: AddressValidationResult) -> AddressValidationResponse:
        return cls(
            is_valid=result.is_valid,
            validated_address=(
                AddressModel.from_domain(result.validated_address)
                if result.validated_address
                else None
            ),
            has_corrections=result.has_corrections,
            error_message=result.error_message,
            service_unavailable=result.service_unavailable,
        )


class OnboardingSessionResponse(BaseModel):
    """State of the onboarding flow after a request."""

    step: str
    is_complete: bool
    error: str | None = None
    address_validation: AddressValidationResponse | None = None
    can_continue_anyway: bool = False
    override_code: CodeValidationResponse | None = None
    redemption_id: str | None = None

    @classmethod
    def from_domain(cls, session: OnboardingSession) -> OnboardingSessionResponse:
        return cls(
            step=session.step.value,
            is_complete=session.is_complete,
            error=session.error,
            address_validation=(
                AddressValidationResponse.from_domain(session.address_validation)
                if session.address_validation
                else None
            ),
            can_continue_anyway=(
                not session.is_complete and session.can_continue_anyway
            ),
            override_code=(
                CodeValidationResponse.from_domain(session.override_code)
                if session.override_code
                else None
            ),
            redemption_id=session.redemption_id.value if session.redemption_id else None,
        )
