"""Domain probe for the external address validation client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AddressValidationProbe(Protocol):
    """Domain probe for address validation requests."""

    def lookup_completed(self, candidates: int, has_corrections: bool) -> None:
        """Record that the service answered."""
        ...

    def lookup_failed(self, error: str, status_code: int | None = None) -> None:
        """Record that the service could not be reached or answered with an error."""
        ...

    def with_context(self, context: ObservationContext) -> AddressValidationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAddressValidationProbe:
    """Default implementation of AddressValidationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAddressValidationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAddressValidationProbe(logger=self._logger, context=context)

    def lookup_completed(self, candidates: int, has_corrections: bool) -> None:
        self._logger.debug(
            "address_lookup_completed",
            candidates=candidates,
            has_corrections=has_corrections,
            **self._get_context_kwargs(),
        )

    def lookup_failed(self, error: str, status_code: int | None = None) -> None:
        self._logger.warning(
            "address_lookup_failed",
            error=error,
            status_code=status_code,
            **self._get_context_kwargs(),
        )
