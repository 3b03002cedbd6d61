"""
Structured logging configuration using structlog.

JSON lines in production, colored console output at DEBUG. Session and
registry transitions are logged through the stdlib loggers of the
``dapp_sso.sso`` modules and rendered by the same pipeline; operator actions
go to the ``dapp_sso.audit`` logger.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

AUDIT_LOGGER = "dapp_sso.audit"

# Chatty third-party loggers
_QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _add_chain_context(logger, method_name, event_dict):
    """Every line names the chain its session signatures are bound to."""
    event_dict.setdefault("chain_id", settings.chain_id)
    return event_dict


def setup_logging(log_level: Optional[str] = None) -> None:
    """Route structlog and stdlib logging through one renderer.

    Args:
        log_level: Override log level (default: from settings.log_level)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    console = level == logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_chain_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if not console:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = structlog.dev.ConsoleRenderer() if console else structlog.processors.JSONRenderer()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Operator actions are kept even when the service logs at WARNING
    logging.getLogger(AUDIT_LOGGER).setLevel(min(level, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_audit_logger() -> structlog.stdlib.BoundLogger:
    """Logger for privileged registry and operator actions."""
    return structlog.stdlib.get_logger(AUDIT_LOGGER)
