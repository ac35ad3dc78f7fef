"""
Structured logging setup for the growth tracker.
Provides JSON-formatted logs with consistent fields for the tick loop and sync calls.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

# Third-party loggers that only add noise at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "redis", "uvicorn.access")

_SECRET_FIELDS = ("password", "token", "api_key")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog to emit one JSON object per line on stdout.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _mask_secrets,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _mask_secrets(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential fields that slip into log calls."""
    for field in _SECRET_FIELDS:
        if event_dict.get(field):
            event_dict[field] = "***"
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_sync_call(operation: str, ok: bool, duration_ms: float, status_code: int = None):
    """Log one backend round trip; failures go out at WARNING."""
    fields = {"kind": "sync_call", "operation": operation, "ok": ok, "duration_ms": duration_ms}
    if status_code is not None:
        fields["status_code"] = status_code

    logger = get_logger("sync")
    if ok:
        logger.info("Sync call completed", **fields)
    else:
        logger.warning("Sync call failed", **fields)
