"""Probe for application startup and shutdown."""

from __future__ import annotations

from typing import Protocol

import structlog


class StartupProbe(Protocol):
    def application_started(self, app_name: str, version: str) -> None: ...

    def auth_secret_missing(self) -> None:
        """No signing secret is configured, so every bearer token is refused."""
        ...

    def application_stopped(self) -> None: ...


class DefaultStartupProbe:
    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def application_started(self, app_name: str, version: str) -> None:
        self._logger.info("application_started", app_name=app_name, version=version)

    def auth_secret_missing(self) -> None:
        self._logger.warning(
            "auth_secret_missing",
            setting="ACCESS_AUTH_JWT_SECRET",
            effect="all bearer tokens will be rejected",
        )

    def application_stopped(self) -> None:
        self._logger.info("application_stopped")
