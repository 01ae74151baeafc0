import logging
import sys

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # stdout stays free for command output
    return structlog.PrintLogger(sys.stderr)


def configure_logging(level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=_stderr_logger,
    )

    logging.basicConfig(level=level.upper())


def configure_library_defaults() -> None:
    """Quiet stderr logging for callers that never run ``configure_logging``."""
    if structlog.is_configured():
        return
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=_stderr_logger,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    configure_library_defaults()
    return structlog.get_logger(name)
