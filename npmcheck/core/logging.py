"""Logging setup for the npmcheck CLI (structlog rendered through stdlib logging)."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(level: str | None = None) -> None:
    """Send npmcheck log events to stderr.

    *level* wins over ``NPMCHECK_LOG_LEVEL`` (default INFO);
    ``NPMCHECK_LOG_FORMAT=json`` switches from console to JSON lines.
    """
    log_level = (level or os.environ.get("NPMCHECK_LOG_LEVEL", "INFO")).upper()
    as_json = os.environ.get("NPMCHECK_LOG_FORMAT", "console").lower() == "json"

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer(),
            ],
        )
    )
    logger = logging.getLogger("npmcheck")
    logger.handlers[:] = [handler]
    logger.setLevel(log_level)
    logger.propagate = False
