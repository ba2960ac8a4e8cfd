# src/geohash_record/core/logging.py
"""Structured logging for geohash-record.

structlog events and plain stdlib records share one processor chain:
structlog loggers wrap their event for ProcessorFormatter, and stdlib
records pick up the same fields through `foreign_pre_chain`. Either way a
line carries the timestamp, the level and any batch context bound with
structlog.contextvars (the CLI binds the input file name).

Output goes to stderr. stdout belongs to command output.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Libraries that chatter at DEBUG; held at WARNING even under --verbose
_NOISY_LOGGERS: tuple[str, ...] = (
    "dynaconf",
    "pluggy",
)

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _drop_formatter_bookkeeping(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Strip the keys ProcessorFormatter adds to every event."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(json_output: bool) -> list[Any]:
    if json_output:
        return [
            _drop_formatter_bookkeeping,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [_drop_formatter_bookkeeping, structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Install the structlog/stdlib logging setup on the root logger.

    Safe to call repeatedly; each call replaces the root handlers.

    Args:
        json_output: Render one JSON object per line instead of console text.
        level: DEBUG, INFO, WARNING or ERROR (case-insensitive).
        stream: Destination (default: the current sys.stderr).

    Raises:
        ValueError: If level is not one of the names above.
    """
    try:
        log_level = _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}. Expected one of: {', '.join(_LEVELS)}") from None

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created at import time
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound structlog logger for a module (pass __name__)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
