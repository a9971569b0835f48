"""Protocol for tenant application service observability.

Defines the interface for domain probes that capture application-level
domain events for tenant hierarchy operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_created(self, tenant_id: str, slug: str, parent_id: str | None) -> None:
        """Record that a tenant was created."""
        ...

    def tenant_updated(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a tenant's fields were edited."""
        ...

    def tenant_parent_changed(
        self, tenant_id: str, parent_id: str | None, relevelled: int
    ) -> None:
        """Record that a tenant was moved in the hierarchy."""
        ...

    def cycle_rejected(self, tenant_id: str, candidate_parent_id: str) -> None:
        """Record that a parent assignment was refused because it would create a cycle."""
        ...

    def tenant_reviewed(self, tenant_id: str, status: str) -> None:
        """Record a review decision."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was detected."""
        ...

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_created(self, tenant_id: str, slug: str, parent_id: str | None) -> None:
        """Record that a tenant was created."""
        self._logger.info(
            "tenant_created",
            tenant_id=tenant_id,
            slug=slug,
            parent_id=parent_id,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a tenant's fields were edited."""
        self._logger.info(
            "tenant_updated",
            tenant_id=tenant_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def tenant_parent_changed(
        self, tenant_id: str, parent_id: str | None, relevelled: int
    ) -> None:
        """Record that a tenant was moved in the hierarchy."""
        self._logger.info(
            "tenant_parent_changed",
            tenant_id=tenant_id,
            parent_id=parent_id,
            relevelled=relevelled,
            **self._get_context_kwargs(),
        )

    def cycle_rejected(self, tenant_id: str, candidate_parent_id: str) -> None:
        """Record that a parent assignment was refused because it would create a cycle."""
        self._logger.warning(
            "tenant_cycle_rejected",
            tenant_id=tenant_id,
            candidate_parent_id=candidate_parent_id,
            **self._get_context_kwargs(),
        )

    def tenant_reviewed(self, tenant_id: str, status: str) -> None:
        """Record a review decision."""
        self._logger.info(
            "tenant_reviewed",
            tenant_id=tenant_id,
            status=status,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        self._logger.info(
            "tenant_deleted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was detected."""
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        self._logger.error(
            "tenant_persistence_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
