"""Probe for the database engine lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DatabaseProbe(Protocol):
    def engine_created(self, host: str, database: str, pool_size: int) -> None: ...

    def engine_disposed(self) -> None: ...

    def with_context(self, context: ObservationContext) -> DatabaseProbe: ...


class DefaultDatabaseProbe:
    """Logs engine creation and disposal. Credentials are never logged."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _context_kwargs(self) -> dict[str, Any]:
        return self._context.as_dict() if self._context else {}

    def with_context(self, context: ObservationContext) -> DefaultDatabaseProbe:
        return DefaultDatabaseProbe(logger=self._logger, context=context)

    def engine_created(self, host: str, database: str, pool_size: int) -> None:
        self._logger.info(
            "database_engine_created",
            host=host,
            database=database,
            pool_size=pool_size,
            **self._context_kwargs(),
        )

    def engine_disposed(self) -> None:
        self._logger.info("database_engine_disposed", **self._context_kwargs())
