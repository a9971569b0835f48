"""Observation context for domain-oriented observability.

Observation contexts carry request-scoped metadata that every probe
attaches to the events it emits, so log lines from one request can be
correlated.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Unique identifier for the current request.
        actor_id: Identifier of the user performing the operation.
        ip_address: Client address, when known.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", actor_id="user-456")
        probe = DefaultRoleServiceProbe().with_context(context)
    """

    request_id: str | None = None
    actor_id: str | None = None
    ip_address: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id
        if self.ip_address is not None:
            result["ip_address"] = self.ip_address
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            actor_id=self.actor_id,
            ip_address=self.ip_address,
            extra={**self.extra, **kwargs},
        )
