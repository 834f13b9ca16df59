"""
Structured logging for the brief service (structlog).

Every line carries event_type, level, logger name and an ISO timestamp; lines
emitted while a brief is running also carry the target address (see
bind_request). Provider credentials never reach the output: keys such as
apikey / authorization / cookie are masked before rendering.

LOG_LEVEL picks the threshold (default INFO). LOG_FORMAT=console switches
from JSON to the human-readable renderer for local runs.

Imports nothing from backend_brief so any module can log at import time.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

SECRET_KEYS = frozenset({"apikey", "api_key", "authorization", "cookie", "token", "x-api-key"})
MASK = "***"


def _level_value(name: str) -> int:
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def _mask_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential-looking keys, including one level down in dict values (headers, params)."""
    for key, value in list(event_dict.items()):
        if key.lower() in SECRET_KEYS and value:
            event_dict[key] = MASK
        elif isinstance(value, dict):
            event_dict[key] = {
                k: (MASK if isinstance(k, str) and k.lower() in SECRET_KEYS and v else v)
                for k, v in value.items()
            }
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Emit structlog's positional event under event_type."""
    event = event_dict.pop("event", None)
    if event is not None:
        event_dict.setdefault("event_type", event)
    return event_dict


def _renderer() -> Any:
    if LOG_FORMAT == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            _mask_secrets,
            _event_type,
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger with its name bound:

        logger = get_logger(__name__)
        logger.info("brief_done", risk_score=72, mode="enhanced")
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_request(address: str) -> None:
    """Bind the target address to every log line emitted for the current request."""
    structlog.contextvars.bind_contextvars(address=address)


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
