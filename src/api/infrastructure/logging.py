"""structlog setup.

Console output with colors when attached to a terminal (or when
FORCE_COLOR is set, e.g. under docker compose), JSON lines otherwise.
"""

import logging
import os
import sys

import structlog


def _use_console() -> bool:
    return os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes") or (
        sys.stdout.isatty()
    )


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for the process. Debug events are kept only when ``debug``."""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if _use_console():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
