from __future__ import annotations

import logging
import os
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import Optional

from .context import get_context
from .formatter import ConsoleFormatter, JSONFormatter
from .levels import register_levels, to_level

_listener: QueueListener | None = None


class _ServiceFilter(logging.Filter):
    """Stamps records that carry no service with the process-wide one."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "service", None):
            record.service = self._service
        if not hasattr(record, "bound_context"):
            record.bound_context = get_context()
        return True


def bootstrap_logging(
    *,
    service: str = "arena-tracker",
    level: str | int | None = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "arena-tracker.jsonl",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    """Install console and rotating JSON file handlers on the root logger.

    Console output is opt-in (``LOG_CONSOLE=true``) because the interactive
    menu shares the terminal. The file handler sits behind a queue so that
    slow disk writes never stall the event loop.
    """
    global _listener
    shutdown_logging()
    register_levels()

    root = logging.getLogger()
    root.handlers.clear()
    lvl = to_level(level or os.getenv("LOG_LEVEL", "INFO"))
    root.setLevel(lvl)
    service_filter = _ServiceFilter(service)

    if os.getenv("LOG_CONSOLE", "false").strip().lower() == "true":
        console = logging.StreamHandler()
        console_level = os.getenv("LOG_CONSOLE_LEVEL", "")
        console.setLevel(to_level(console_level) if console_level else lvl)
        console.setFormatter(ConsoleFormatter())
        console.addFilter(service_filter)
        root.addHandler(console)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(lvl)
        file_handler.setFormatter(JSONFormatter())
        queue: Queue[logging.LogRecord] = Queue(-1)
        queue_handler = QueueHandler(queue)
        queue_handler.addFilter(service_filter)
        root.addHandler(queue_handler)
        _listener = QueueListener(queue, file_handler, respect_handler_level=True)
        _listener.start()

    # httpx logs every request at INFO; keep that out of the sync log.
    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))


def shutdown_logging() -> None:
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
