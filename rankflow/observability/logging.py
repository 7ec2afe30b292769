"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the engine.

    Sets up structlog with JSON output format and standard processors
    for timestamps, log levels, and context binding. The redis and neo4j
    client libraries log through the standard library, so the root logger
    is pointed at the same stream.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )
    # The neo4j driver is chatty at INFO about routing and pool events.
    logging.getLogger("neo4j").setLevel(max(level, logging.WARNING))


def bind_job_context(job_id: str, job: str) -> None:
    """Bind job context to all subsequent log messages.

    Used by the resync commands so every line of a run can be correlated.

    Args:
        job_id: Unique job identifier.
        job: Job name (e.g. ``sync-graph``).
    """
    structlog.contextvars.bind_contextvars(job_id=job_id, job=job)


def clear_job_context() -> None:
    """Clear job context from log messages."""
    structlog.contextvars.unbind_contextvars("job_id", "job")
