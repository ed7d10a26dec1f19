import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    level = level.upper()
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
    ]
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    # stdout belongs to the CLI's own output (JSON previews, tallies).
    structlog.configure(
        processors=shared_processors + [structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(level=level, stream=sys.stderr)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def payslip_context(**values: str) -> Iterator[None]:
    """Bind employee/month identifiers to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
