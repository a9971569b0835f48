"""Protocol for onboarding workflow observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class OnboardingServiceProbe(Protocol):
    """Domain probe for the onboarding workflow."""

    def address_validated(self, user_id: str, is_valid: bool, has_corrections: bool) -> None:
        """Record the outcome of an address validation."""
        ...

    def address_service_unavailable(self, user_id: str, error: str) -> None:
        """Record that the address validation service failed."""
        ...

    def override_redemption_failed(self, user_id: str, reason: str) -> None:
        """Record that the override code could not be redeemed at completion."""
        ...

    def profile_write_failed(
        self, user_id: str, redemption_id: str | None, error: str
    ) -> None:
        """Record that the profile could not be written."""
        ...

    def onboarding_completed(self, user_id: str, via_override: bool, is_validated: bool) -> None:
        """Record that a user finished onboarding."""
        ...

    def onboarding_already_completed(self, user_id: str) -> None:
        """Record that a user re-entered onboarding after finishing it."""
        ...

    def with_context(self, context: ObservationContext) -> OnboardingServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultOnboardingServiceProbe:
    """Default implementation of OnboardingServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultOnboardingServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultOnboardingServiceProbe(logger=self._logger, context=context)

    def address_validated(self, user_id: str, is_valid: bool, has_corrections: bool) -> None:
        """Record the outcome of an address validation."""
        self._logger.info(
            "onboarding_address_validated",
            user_id=user_id,
            is_valid=is_valid,
            has_corrections=has_corrections,
            **self._get_context_kwargs(),
        )

    def address_service_unavailable(self, user_id: str, error: str) -> None:
        """Record that the address validation service failed."""
        self._logger.warning(
            "onboarding_address_service_unavailable",
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def override_redemption_failed(self, user_id: str, reason: str) -> None:
        """Record that the override code could not be redeemed at completion."""
        self._logger.info(
            "onboarding_override_redemption_failed",
            user_id=user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def profile_write_failed(
        self, user_id: str, redemption_id: str | None, error: str
    ) -> None:
        """Record that the profile could not be written."""
        self._logger.error(
            "onboarding_profile_write_failed",
            user_id=user_id,
            redemption_id=redemption_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def onboarding_completed(self, user_id: str, via_override: bool, is_validated: bool) -> None:
        """Record that a user finished onboarding."""
        self._logger.info(
            "onboarding_completed",
            user_id=user_id,
            via_override=via_override,
            is_validated=is_validated,
            **self._get_context_kwargs(),
        )

    def onboarding_already_completed(self, user_id: str) -> None:
        """Record that a user re-entered onboarding after finishing it."""
        self._logger.debug(
            "onboarding_already_completed",
            user_id=user_id,
            **self._get_context_kwargs(),
        )
