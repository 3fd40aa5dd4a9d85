"""Structured logging setup for hybrid search.

Log level and output format come from ``HybridSearchConfig``
(``HYBRID_LOG_LEVEL`` and ``HYBRID_LOG_FORMAT``) unless the caller passes
them explicitly. Every line is rendered by ``structlog`` as JSON or as
colored console output, and carries the service name and deployment
environment bound through context variables.

Typical usage
- Call ``configure_logging("hybrid-search")`` once at startup
- Acquire loggers via ``structlog.get_logger(name)``
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory, add_logger_name

from .config import HybridSearchConfig, get_config

LOG_FORMATS = ("json", "console")


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {log_level!r}")
    return level


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=True)
    raise ValueError(f"Log format must be one of {LOG_FORMATS}, got {log_format!r}")


def configure_logging(
    service_name: str,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    config: Optional[HybridSearchConfig] = None,
) -> None:
    """Configure structured logging for hybrid search.

    Parameters
    - service_name: logical service identifier bound to each log line
    - log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` (case-insensitive);
      defaults to ``config.hybrid_log_level``
    - log_format: ``json`` or ``console``; defaults to ``config.hybrid_log_format``
    - config: settings to read defaults from; loaded from the environment
      when omitted

    Raises ``ValueError`` for an unknown level or format.
    """
    config = config or get_config()
    level = _resolve_level(log_level or config.hybrid_log_level)
    renderer = _renderer((log_format or config.hybrid_log_format).lower())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_logger_name,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=config.hybrid_env,
    )
