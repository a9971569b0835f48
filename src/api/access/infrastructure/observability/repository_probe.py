"""Domain probes for access repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events from tenant and registration code persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class RegistrationCodeRepositoryProbe(Protocol):
    """Domain probe for registration code repository operations."""

    def code_saved(self, code_id: str) -> None:
        """Record that a code was successfully saved."""
        ...

    def duplicate_code(self, code: str) -> None:
        """Record that a duplicate code string was detected."""
        ...

    def redemption_recorded(self, code_id: str, redemption_id: str) -> None:
        """Record that the conditional increment matched and a redemption row was written."""
        ...

    def redemption_not_applied(self, code_id: str) -> None:
        """Record that the conditional increment matched no row."""
        ...

    def redemption_released(self, redemption_id: str, code_id: str) -> None:
        """Record that a redemption was released and its use given back."""
        ...

    def with_context(
        self, context: ObservationContext
    ) -> RegistrationCodeRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe:
    """Default implementation of TenantRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_saved(self, tenant_id: str) -> None:
        self._logger.info(
            "tenant_saved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        self._logger.info(
            "tenant_deleted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )


class DefaultRegistrationCodeRepositoryProbe:
    """Default implementation of RegistrationCodeRepositoryProbe using structlog."""

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
    ) -> DefaultRegistrationCodeRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultRegistrationCodeRepositoryProbe(
            logger=self._logger, context=context
        )

    def code_saved(self, code_id: str) -> None:
        self._logger.info(
            "registration_code_saved",
            code_id=code_id,
            **self._get_context_kwargs(),
        )

    def duplicate_code(self, code: str) -> None:
        self._logger.warning(
            "duplicate_registration_code",
            code=code,
            **self._get_context_kwargs(),
        )

    def redemption_recorded(self, code_id: str, redemption_id: str) -> None:
        self._logger.debug(
            "registration_code_redemption_recorded",
            code_id=code_id,
            redemption_id=redemption_id,
            **self._get_context_kwargs(),
        )

    def redemption_not_applied(self, code_id: str) -> None:
        self._logger.debug(
            "registration_code_redemption_not_applied",
            code_id=code_id,
            **self._get_context_kwargs(),
        )

    def redemption_released(self, redemption_id: str, code_id: str) -> None:
        self._logger.info(
            "registration_code_redemption_released",
            redemption_id=redemption_id,
            code_id=code_id,
            **self._get_context_kwargs(),
        )
