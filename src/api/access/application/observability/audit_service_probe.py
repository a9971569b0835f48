"""Protocol for audit service observability.

The audit probe is the separate channel through which audit write failures
are surfaced. A failed audit write never fails the mutation it accompanies,
so this log line is what makes the gap detectable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuditServiceProbe(Protocol):
    """Domain probe for audit log operations."""

    def entry_recorded(
        self, entry_id: str, action: str, resource_type: str, resource_id: str | None
    ) -> None:
        """Record that an audit entry was written."""
        ...

    def audit_write_failed(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        actor_id: str | None,
        details: dict[str, Any],
        error: str,
    ) -> None:
        """Record that an audit entry could not be written."""
        ...

    def entries_queried(self, count: int) -> None:
        """Record that the audit log was read."""
        ...

    def purge_rejected(self, actor_id: str) -> None:
        """Record that a purge was refused because the confirmation did not match."""
        ...

    def purge_completed(self, actor_id: str, cutoff: str, deleted: int) -> None:
        """Record that old audit entries were purged."""
        ...

    def purge_failed(self, actor_id: str, cutoff: str, error: str) -> None:
        """Record that the purge could not be written or run."""
        ...

    def with_context(self, context: ObservationContext) -> AuditServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditServiceProbe:
    """Default implementation of AuditServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuditServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditServiceProbe(logger=self._logger, context=context)

    def entry_recorded(
        self, entry_id: str, action: str, resource_type: str, resource_id: str | None
    ) -> None:
        """Record that an audit entry was written."""
        self._logger.debug(
            "audit_entry_recorded",
            entry_id=entry_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            **self._get_context_kwargs(),
        )

    def audit_write_failed(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        actor_id: str | None,
        details: dict[str, Any],
        error: str,
    ) -> None:
        """Record that an audit entry could not be written."""
        self._logger.error(
            "audit_write_failed",
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            audit_actor_id=actor_id,
            details=details,
            error=error,
            **self._get_context_kwargs(),
        )

    def entries_queried(self, count: int) -> None:
        """Record that the audit log was read."""
        self._logger.debug(
            "audit_entries_queried",
            count=count,
            **self._get_context_kwargs(),
        )

    def purge_rejected(self, actor_id: str) -> None:
        """Record that a purge was refused because the confirmation did not match."""
        self._logger.warning(
            "audit_purge_rejected",
            audit_actor_id=actor_id,
            **self._get_context_kwargs(),
        )

    def purge_completed(self, actor_id: str, cutoff: str, deleted: int) -> None:
        """Record that old audit entries were purged."""
        self._logger.warning(
            "audit_purge_completed",
            audit_actor_id=actor_id,
            cutoff=cutoff,
            deleted=deleted,
            **self._get_context_kwargs(),
        )

    def purge_failed(self, actor_id: str, cutoff: str, error: str) -> None:
        """Record that the purge could not be written or run."""
        self._logger.error(
            "audit_purge_failed",
            audit_actor_id=actor_id,
            cutoff=cutoff,
            error=error,
            **self._get_context_kwargs(),
        )
