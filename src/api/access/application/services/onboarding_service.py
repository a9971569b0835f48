"""Onboarding application service for the access bounded context.

Drives the onboarding session from a submitted form: verifies the address
or redeems an override code, then writes the user's address profile.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultOnboardingServiceProbe,
    OnboardingServiceProbe,
)
from access.application.services.registration_code_service import (
    RegistrationCodeService,
)
from access.application.value_objects import OnboardingSubmission
from access.domain.aggregates.registration_code import (
    CodeValidation,
    UnusableCode,
    ValidatedCode,
)
from access.domain.exceptions import CodeUnusableError
from access.domain.onboarding import (
    Address,
    AddressValidationResult,
    OnboardingSession,
    UserProfile,
)
from access.domain.value_objects import RedemptionId, UserId
from access.ports.address_validation import IAddressValidator
from access.ports.exceptions import AddressServiceUnavailableError
from access.ports.repositories import IProfileRepository

SERVICE_UNAVAILABLE_MESSAGE = (
    "Address verification is temporarily unavailable. "
    "You can continue with the address as entered."
)
ADDRESS_NOT_VERIFIED_MESSAGE = (
    "We could not verify this address. Check it, or continue anyway."
)
PROFILE_WRITE_FAILED_MESSAGE = "We could not save your profile. Please try again."
PROFILE_RELEASE_REASON = "profile_write_failed"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OnboardingService:
    """Application service for user onboarding.

    A user with a profile has onboarded; completing again returns the
    success state without writing anything.
    """

    def __init__(
        self,
        session: AsyncSession,
        profile_repository: IProfileRepository,
        codes: RegistrationCodeService,
        address_validator: IAddressValidator,
        probe: OnboardingServiceProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize OnboardingService with dependencies.

        Args:
            session: Database session for transaction management
            profile_repository: Store for completed address profiles
            codes: Registration code service used for override codes
            address_validator: External address validation service
            probe: Optional domain probe for observability
            clock: Source of the current time
        """
        self._session = session
        self._profile_repository = profile_repository
        self._codes = codes
        self._address_validator = address_validator
        self._probe = probe or DefaultOnboardingServiceProbe()
        self._clock = clock

    async def has_completed_onboarding(self, user_id: UserId) -> bool:
        async with self._session.begin():
            profile = await self._profile_repository.get_by_user(user_id)
        return profile is not None

    async def status(self, user_id: UserId) -> OnboardingSession:
        """Session a user starts from: fresh, or already at success."""
        if await self.has_completed_onboarding(user_id):
            self._probe.onboarding_already_completed(user_id=user_id.value)
            return OnboardingSession.completed()
        return OnboardingSession()

    async def validate_address(
        self, user_id: UserId, address: Address
    ) -> AddressValidationResult:
        """Ask the address service to verify an address.

        An unreachable service is reported as a result with
        ``service_unavailable`` set, which lets the user continue anyway.
        """
        try:
            result = await self._address_validator.validate(address)
        except AddressServiceUnavailableError as e:
            self._probe.address_service_unavailable(user_id=user_id.value, error=str(e))
            return AddressValidationResult(
                is_valid=False,
                error_message=SERVICE_UNAVAILABLE_MESSAGE,
                service_unavailable=True,
            )

        self._probe.address_validated(
            user_id=user_id.value,
            is_valid=result.is_valid,
            has_corrections=result.has_corrections,
        )
        return result

    async def check_override_code(self, code: str) -> CodeValidation:
        """Validate an override code without consuming it."""
        return await self._codes.validate(code)

    async def complete(
        self, user_id: UserId, submission: OnboardingSubmission
    ) -> OnboardingSession:
        """Run the submitted form through the session and finish onboarding.

        A valid override code skips address verification and is redeemed.
        If the code is unusable or its redemption fails, the code is dropped
        and the session stays on the address step with the reason, so the
        user can resubmit for standard verification. If the profile write fails after a redemption,
        the redemption is released.

        Returns:
            The session, at SUCCESS, or still at the address step with
            ``error`` set

        Raises:
            ValidationError: If the name or address fields are invalid
            PersistenceError: If a redemption could not be released
        """
        if await self.has_completed_onboarding(user_id):
            self._probe.onboarding_already_completed(user_id=user_id.value)
            return OnboardingSession.completed()

        onboarding = OnboardingSession()
        onboarding.submit_personal_info(submission.full_name, submission.discord_id)
        onboarding.enter_address(submission.address)
        if submission.override_code:
            validation = await self.check_override_code(submission.override_code)
            onboarding.apply_override_code(validation)
            if isinstance(validation, UnusableCode):
                self._probe.override_redemption_failed(
                    user_id=user_id.value, reason=validation.reason.value
                )
                onboarding.fail_completion(
                    str(CodeUnusableError(validation.reason)), drop_override=True
                )
                return onboarding
        if submission.continue_anyway:
            onboarding.accept_unvalidated_address()

        await self._verify_address(user_id, onboarding)
        if not onboarding.can_complete():
            onboarding.fail_completion(_address_error(onboarding))
            return onboarding

        redemption_id = None
        if isinstance(onboarding.override_code, ValidatedCode):
            try:
                redemption_id = await self._codes.redeem(
                    onboarding.override_code.code, user_id
                )
            except CodeUnusableError as e:
                self._probe.override_redemption_failed(
                    user_id=user_id.value, reason=e.reason.value
                )
                onboarding.fail_completion(str(e), drop_override=True)
                return onboarding

        profile = self._build_profile(user_id, onboarding, redemption_id)
        try:
            async with self._session.begin():
                await self._profile_repository.upsert(profile)
        except SQLAlchemyError as e:
            self._probe.profile_write_failed(
                user_id=user_id.value,
                redemption_id=redemption_id.value if redemption_id else None,
                error=str(e),
            )
            if redemption_id is not None:
                await self._codes.release_redemption(
                    redemption_id, actor_id=user_id, reason=PROFILE_RELEASE_REASON
                )
            onboarding.fail_completion(PROFILE_WRITE_FAILED_MESSAGE)
            return onboarding

        onboarding.complete(redemption_id)
        self._probe.onboarding_completed(
            user_id=user_id.value,
            via_override=redemption_id is not None,
            is_validated=profile.is_validated,
        )
        return onboarding

    async def _verify_address(self, user_id: UserId, onboarding: OnboardingSession) -> None:
        if onboarding.needs_address_validation():
            result = await self.validate_address(user_id, onboarding.address)
            onboarding.record_address_validation(result)

    def _build_profile(
        self,
        user_id: UserId,
        onboarding: OnboardingSession,
        redemption_id: RedemptionId | None,
    ) -> UserProfile:
        override = onboarding.override_code if redemption_id is not None else None
        validation = onboarding.address_validation
        return UserProfile(
            user_id=user_id,
            full_name=onboarding.full_name,
            address=onboarding.address,
            is_validated=onboarding.address_is_validated,
            created_at=self._clock(),
            discord_id=onboarding.discord_id,
            validation_payload=dict(validation.raw) if validation else {},
            override_code_id=override.code_id if override else None,
            redemption_id=redemption_id,
            tenant_id=override.tenant_id if override else None,
        )


def _address_error(onboarding: OnboardingSession) -> str:
    validation = onboarding.address_validation
    if validation is not None and validation.service_unavailable:
        return SERVICE_UNAVAILABLE_MESSAGE
    if validation is not None and validation.error_message:
        return validation.error_message
    return ADDRESS_NOT_VERIFIED_MESSAGE
