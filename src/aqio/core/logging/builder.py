"""
Builds and applies the logging configuration.

`make_dict_config(settings)` returns a plain dictConfig dict:

    formatters: standard (text/colour) and json
    filters:    request_id, redact
    handlers:   console, plus rotating file + error file when LOG_TO_STDOUT is off
                (error_console otherwise)
    loggers:    root, uvicorn.*, sqlalchemy.engine

`setup_logging(settings)` applies it and, with LOG_USE_QUEUE=True, moves the
configured handlers behind a `QueueListener` thread so request handlers never
block on file I/O. Call `stop_queue_logging()` on shutdown to flush the queue.
"""

from __future__ import annotations

import logging
import logging.config
import queue as _queue
import threading
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Optional

from aqio.config.settings import Settings
from aqio.utils.logging import get_project_name

from .filters import RedactFilter, RequestIdFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

logger = logging.getLogger(__name__)

_QUEUE_LISTENER: Optional[QueueListener] = None
_QUEUE: Optional[_queue.Queue] = None
_QUEUE_HANDLER: Optional[QueueHandler] = None
_DROP_WARNING_THRESHOLD = 100
_DROPPED_LOGS_COUNT = 0
_DROPPED_LOGS_LOCK = threading.Lock()


class NonBlockingQueueHandler(QueueHandler):
    """QueueHandler that drops (and counts) records instead of blocking when the queue is full."""

    def emit(self, record: logging.LogRecord) -> None:
        global _DROPPED_LOGS_COUNT
        try:
            self.queue.put_nowait(self.prepare(record))
        except _queue.Full:
            with _DROPPED_LOGS_LOCK:
                _DROPPED_LOGS_COUNT += 1


def get_queue_stats() -> dict:
    with _DROPPED_LOGS_LOCK:
        return {"dropped_logs": _DROPPED_LOGS_COUNT, "queue_present": _QUEUE is not None}


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="aqio"),
        },
    }
    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    all_handlers = list(handlers.keys())
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {"handlers": all_handlers, "level": settings.LOG_LEVEL, "propagate": True},
            "uvicorn.error": {"handlers": all_handlers, "level": settings.LOG_LEVEL, "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": "INFO", "propagate": False},
            # INFO on sqlalchemy.engine echoes every statement.
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "INFO" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    global _QUEUE_LISTENER, _QUEUE, _QUEUE_HANDLER, _DROP_WARNING_THRESHOLD

    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(RequestIdFilter())

    if not getattr(settings, "LOG_USE_QUEUE", False):
        return

    max_size = getattr(settings, "LOG_QUEUE_MAX_SIZE", 0) or 0
    blocking = bool(getattr(settings, "LOG_QUEUE_BLOCKING", False))
    _DROP_WARNING_THRESHOLD = int(getattr(settings, "LOG_QUEUE_DROP_WARNING_THRESHOLD", 100))

    root_logger = logging.getLogger()
    moved = list(root_logger.handlers)
    if not moved:
        return

    # Only the root logger goes through the queue; uvicorn and sqlalchemy keep their direct handlers.
    for handler in moved:
        root_logger.removeHandler(handler)

    log_queue: _queue.Queue = _queue.Queue(max_size)
    handler_cls = NonBlockingQueueHandler if (max_size > 0 and not blocking) else QueueHandler

    listener = QueueListener(log_queue, *moved, respect_handler_level=True)
    listener.start()

    queue_handler = handler_cls(log_queue)
    queue_handler.addFilter(RequestIdFilter())
    queue_handler.addFilter(RedactFilter())
    root_logger.addHandler(queue_handler)

    _QUEUE_LISTENER = listener
    _QUEUE = log_queue
    _QUEUE_HANDLER = queue_handler


def stop_queue_logging() -> None:
    """Stop the QueueListener (if any), flushing queued records to their handlers."""
    global _QUEUE_LISTENER, _QUEUE, _QUEUE_HANDLER

    listener = _QUEUE_LISTENER
    if listener is None:
        return

    with _DROPPED_LOGS_LOCK:
        dropped = _DROPPED_LOGS_COUNT
    if _DROP_WARNING_THRESHOLD > 0 and dropped >= _DROP_WARNING_THRESHOLD:
        logger.warning("logging.queue.dropped", extra={"dropped_logs": dropped})

    try:
        listener.stop()
    finally:
        if _QUEUE_HANDLER is not None:
            logging.getLogger().removeHandler(_QUEUE_HANDLER)
        _QUEUE_LISTENER = None
        _QUEUE = None
        _QUEUE_HANDLER = None


__all__ = [
    "NonBlockingQueueHandler",
    "get_queue_stats",
    "make_dict_config",
    "setup_logging",
    "stop_queue_logging",
]
