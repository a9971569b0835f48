"""Protocol for role service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoleServiceProbe(Protocol):
    """Domain probe for platform role changes."""

    def role_changed(
        self, actor_id: str, target_user_id: str, old_role: str, new_role: str
    ) -> None:
        """Record that a user's role changed."""
        ...

    def self_demotion_blocked(self, actor_id: str, requested_role: str) -> None:
        """Record that a super admin tried to demote themselves."""
        ...

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        ...

    def with_context(self, context: ObservationContext) -> RoleServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoleServiceProbe:
    """Default implementation of RoleServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoleServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoleServiceProbe(logger=self._logger, context=context)

    def role_changed(
        self, actor_id: str, target_user_id: str, old_role: str, new_role: str
    ) -> None:
        """Record that a user's role changed."""
        self._logger.info(
            "user_role_changed",
            role_actor_id=actor_id,
            target_user_id=target_user_id,
            old_role=old_role,
            new_role=new_role,
            **self._get_context_kwargs(),
        )

    def self_demotion_blocked(self, actor_id: str, requested_role: str) -> None:
        """Record that a super admin tried to demote themselves."""
        self._logger.warning(
            "self_demotion_blocked",
            role_actor_id=actor_id,
            requested_role=requested_role,
            **self._get_context_kwargs(),
        )

    def persistence_failed(self, operation: str, error: str) -> None:
        """Record that the database failed during an operation."""
        self._logger.error(
            "user_role_persistence_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
