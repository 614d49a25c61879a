"""
oishine_backoffice.observability.logging

Log setup for the back-office API and the realtime socket workers.

Every event is one JSON object on stdout carrying the `service` name plus whatever
request (`request_id`, `path`) or socket (`connection_id`) context is bound at the
time. Auth events (`admin_login`, `admin_auth_denied`, ...) and realtime events
(`realtime_published`, `realtime_subscriber_dropped`, ...) are keyed by event name,
never by free text.

Credentials must never reach the log stream: passwords, tokens, cookies and the
signing secret are masked by `_redact_secrets` whatever logger emitted them.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_REDACTED_KEYS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "password_hash",
        "token",
        "authorization",
        "cookie",
        "jwt_secret",
    }
)

# aiosqlite logs every executed operation at DEBUG.
_CHATTY_LOGGERS = ("aiosqlite",)


def configure_logging(*, service_name: str, level: str) -> None:
    stdlib_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=stdlib_level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(stdlib_level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            _redact_secrets,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _redact_secrets(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
