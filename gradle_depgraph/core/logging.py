"""Logging setup for gradle-depgraph.

stdout carries the tagged result lines, so every record goes to stderr.
Only the ``gradle_depgraph`` logger tree is configured; host applications
embedding the library keep control of the root logger.

Environment variables:
    GRADLE_DEPGRAPH_LOG_LEVEL   level name (default: INFO); ``-v`` forces DEBUG
    GRADLE_DEPGRAPH_LOG_FORMAT  console | json (default: console)
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

ENV_LOG_LEVEL = "GRADLE_DEPGRAPH_LOG_LEVEL"
ENV_LOG_FORMAT = "GRADLE_DEPGRAPH_LOG_FORMAT"

PACKAGE_LOGGER = "gradle_depgraph"

# shared by structlog events and records from plain stdlib loggers
_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _handler(log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )
    return handler


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog through the ``gradle_depgraph`` stdlib logger.

    Explicit arguments win over the environment. Calling it again replaces
    the handler, so the stream is always the current ``sys.stderr``.
    """
    log_level = (level or os.environ.get(ENV_LOG_LEVEL) or "INFO").upper()
    log_format = (log_format or os.environ.get(ENV_LOG_FORMAT) or "console").lower()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    structlog.configure(
        processors=_PRE_CHAIN
        + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers[:] = [_handler(log_format)]
    logger.setLevel(log_level)
    logger.propagate = False
