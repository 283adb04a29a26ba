"""structlog pipeline for gocancel loggers.

Package modules obtain their logger from ``get_logger``. Events are rendered
by structlog and handed to the standard library logger of the same name, so
levels and handlers are controlled through ``logging`` as usual and nothing
is emitted unless the application enables the ``gocancel`` logger.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

ROOT_LOGGER = "gocancel"

_FORMATS = ("json", "text")

# shared by every logger from get_logger; the renderer is swapped in place
_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.JSONRenderer(),
]

_handler: logging.Handler | None = None


def _renderer(format: str) -> structlog.types.Processor:
    if format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger wrapping the stdlib logger ``name``."""
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
    return logger


def configure_logging(
    level: str = "INFO",
    format: str = "json",
    stream: IO[str] | None = None,
) -> structlog.stdlib.BoundLogger:
    """Enable gocancel log output.

    Sets the level of the ``gocancel`` logger and installs a single stream
    handler for it, replacing one installed by an earlier call.

    Args:
        level: Log level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        format: "json" or "text".
        stream: Output stream, stderr by default.

    Returns:
        The ``gocancel`` logger, for receivers that log rejection kinds.
    """
    global _handler

    if format not in _FORMATS:
        raise ValueError(f"unknown log format: {format!r}")
    _PROCESSORS[-1] = _renderer(format)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(_handler)

    return get_logger(ROOT_LOGGER)
