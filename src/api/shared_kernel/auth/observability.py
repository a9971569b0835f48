"""Probe for bearer token validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    def token_accepted(self, user_id: str) -> None: ...

    def token_rejected(self, reason: str) -> None:
        """``reason`` is a short code such as ``expired`` or ``signature``."""
        ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe: ...


class DefaultJWTValidatorProbe:
    """Logs token outcomes with structlog. Tokens themselves are never logged."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _context_kwargs(self) -> dict[str, Any]:
        return self._context.as_dict() if self._context else {}

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def token_accepted(self, user_id: str) -> None:
        self._logger.debug("bearer_token_accepted", user_id=user_id, **self._context_kwargs())

    def token_rejected(self, reason: str) -> None:
        self._logger.warning("bearer_token_rejected", reason=reason, **self._context_kwargs())
