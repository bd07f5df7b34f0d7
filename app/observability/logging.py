"""JSON logging for the gateway and resolver processes.

Every event, including records emitted through stdlib loggers such as uvicorn's,
is rendered by structlog as one JSON object per line on stdout. Lines carry the
service name so gateway and resolver output can share one sink.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger


_CONFIGURED = False
_service: str | None = None

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# httpx/httpcore log every request at INFO; upstream calls are logged by fetch().
_CLIENT_LOGGERS = ("httpx", "httpcore")


def add_service_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    if _service:
        event_dict.setdefault("service", _service)
    return event_dict


def parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def _attach(handler: logging.Handler, level: int) -> None:
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False
        server_logger.setLevel(level)

    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_logging(level: int | str = logging.INFO, service: str | None = None) -> None:
    """Install the JSON pipeline once; later calls only update the service name."""

    global _CONFIGURED, _service
    if service:
        _service = service
    if _CONFIGURED:
        return

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _attach(_json_handler(), parse_level(level))

    _CONFIGURED = True
