"""Probes for process-level events: startup, shutdown and the database engine."""

from infrastructure.observability.probes import DatabaseProbe, DefaultDatabaseProbe
from infrastructure.observability.startup_probe import (
    DefaultStartupProbe,
    StartupProbe,
)
from shared_kernel.observability_context import ObservationContext

__all__ = [
    "DatabaseProbe",
    "DefaultDatabaseProbe",
    "DefaultStartupProbe",
    "ObservationContext",
    "StartupProbe",
]
