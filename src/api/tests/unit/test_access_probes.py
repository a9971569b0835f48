"""Unit tests for domain probes.

Probes turn domain events into structured log lines.
"""

from unittest.mock import MagicMock

import structlog

from access.application.observability import (
    DefaultRegistrationCodeServiceProbe,
    DefaultTenantServiceProbe,
)
from infrastructure.observability import ObservationContext
from infrastructure.observability.probes import DefaultDatabaseProbe


class TestDatabaseProbe:
    def test_default_probe_creates_with_default_logger(self):
        probe = DefaultDatabaseProbe()
        assert probe._logger is not None

    def test_engine_created_logs_pool_size(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultDatabaseProbe(logger=mock_logger)

        probe.engine_created(host="localhost", database="access", pool_size=10)

        mock_logger.info.assert_called_once_with(
            "database_engine_created", host="localhost", database="access", pool_size=10
        )


class TestTenantServiceProbe:
    def test_cycle_rejected_logs_warning(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultTenantServiceProbe(logger=mock_logger)

        probe.cycle_rejected(tenant_id="t-1", candidate_parent_id="t-2")

        mock_logger.warning.assert_called_once_with(
            "tenant_cycle_rejected",
            tenant_id="t-1",
            candidate_parent_id="t-2",
        )

    def test_with_context_adds_request_metadata(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        context = ObservationContext(request_id="req-1", ip_address="10.0.0.1")
        probe = DefaultTenantServiceProbe(logger=mock_logger).with_context(context)

        probe.tenant_created(tenant_id="t-1", slug="texas", parent_id=None)

        mock_logger.info.assert_called_once_with(
            "tenant_created",
            tenant_id="t-1",
            slug="texas",
            parent_id=None,
            request_id="req-1",
            ip_address="10.0.0.1",
        )


class TestRegistrationCodeServiceProbe:
    def test_redemption_refused_includes_reason(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultRegistrationCodeServiceProbe(logger=mock_logger)

        probe.redemption_refused(code_id=None, user_id="u-1", reason="not_found")

        mock_logger.info.assert_called_once_with(
            "registration_code_redemption_refused",
            code_id=None,
            user_id="u-1",
            reason="not_found",
        )
