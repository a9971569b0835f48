"""Protocol for registration code service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RegistrationCodeServiceProbe(Protocol):
    """Domain probe for registration code operations."""

    def code_created(self, code_id: str, max_uses: int | None) -> None:
        """Record that a code was created."""
        ...

    def code_updated(self, code_id: str, fields: list[str]) -> None:
        """Record that a code was edited."""
        ...

    def duplicate_code(self) -> None:
        """Record that a code string collided with an existing one."""
        ...

    def code_validated(self, code_id: str | None, outcome: str) -> None:
        """Record the outcome of validating a code."""
        ...

    def code_redeemed(self, code_id: str, redemption_id: str, user_id: str) -> None:
        """Record a successful redemption."""
        ...

    def redemption_refused(self, code_id: str | None, user_id: str, reason: str) -> None:
        """Record that a redemption was refused."""
        ...

    def redemption_released(self, redemption_id: str, code_id: str) -> None:
        """Record that a redemption was given back."""
        ...

    def bulk_action_applied(self, action: str, requested: int, affected: int) -> None:
        """Record a bulk lifecycle transition."""
        ...

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        ...

    def with_context(self, context: ObservationContext) -> RegistrationCodeServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRegistrationCodeServiceProbe:
    """Default implementation of RegistrationCodeServiceProbe using structlog.

    Code strings are never logged; they are bearer secrets.
    """

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultRegistrationCodeServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRegistrationCodeServiceProbe(logger=self._logger, context=context)

    def code_created(self, code_id: str, max_uses: int | None) -> None:
        """Record that a code was created."""
        self._logger.info(
            "registration_code_created",
            code_id=code_id,
            max_uses=max_uses,
            **self._get_context_kwargs(),
        )

    def code_updated(self, code_id: str, fields: list[str]) -> None:
        """Record that a code was edited."""
        self._logger.info(
            "registration_code_updated",
            code_id=code_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def duplicate_code(self) -> None:
        """Record that a code string collided with an existing one."""
        self._logger.warning(
            "registration_code_duplicate",
            **self._get_context_kwargs(),
        )

    def code_validated(self, code_id: str | None, outcome: str) -> None:
        """Record the outcome of validating a code."""
        self._logger.debug(
            "registration_code_validated",
            code_id=code_id,
            outcome=outcome,
            **self._get_context_kwargs(),
        )

    def code_redeemed(self, code_id: str, redemption_id: str, user_id: str) -> None:
        """Record a successful redemption."""
        self._logger.info(
            "registration_code_redeemed",
            code_id=code_id,
            redemption_id=redemption_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def redemption_refused(self, code_id: str | None, user_id: str, reason: str) -> None:
        """Record that a redemption was refused."""
        self._logger.info(
            "registration_code_redemption_refused",
            code_id=code_id,
            user_id=user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def redemption_released(self, redemption_id: str, code_id: str) -> None:
        """Record that a redemption was given back."""
        self._logger.warning(
            "registration_code_redemption_released",
            redemption_id=redemption_id,
            code_id=code_id,
            **self._get_context_kwargs(),
        )

    def bulk_action_applied(self, action: str, requested: int, affected: int) -> None:
        """Record a bulk lifecycle transition."""
        self._logger.info(
            "registration_code_bulk_action",
            action=action,
            requested=requested,
            affected=affected,
            **self._get_context_kwargs(),
        )

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        self._logger.error(
            "registration_code_persistence_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
