from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from .context import get_context

_LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[37m",
    "INFO": "\033[36m",
    "SUCCESS": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


def _timestamp(record: logging.LogRecord) -> str:
    base = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created))
    return f"{base}.{int(record.msecs):03d}"


def _bound_context(record: logging.LogRecord) -> Dict[str, Any]:
    # Records formatted on the queue listener thread carry the context
    # captured when they were emitted.
    captured = getattr(record, "bound_context", None)
    return dict(captured) if isinstance(captured, dict) else get_context()


def _record_metadata(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": _timestamp(record),
        "level": record.levelname,
        "service": getattr(record, "service", None),
        "logger": record.name,
        "function": record.funcName,
        "line_number": record.lineno,
        "task": getattr(record, "taskName", None),
    }


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        md = _record_metadata(record)
        parts = [
            md["timestamp"],
            md["level"],
            md["service"] or "-",
            f"{md['logger']}:{md['function']}:{md['line_number']}",
            record.getMessage(),
        ]
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            parts.append(f"t={exec_ms}ms")
        ctx = _bound_context(record)
        if ctx:
            parts.append(" ".join(f"{k}={v}" for k, v in sorted(ctx.items())))
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        color = _LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{' | '.join(parts)}{_RESET}"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = _record_metadata(record)
        payload["message"] = record.getMessage()
        ctx = _bound_context(record)
        extra_ctx = getattr(record, "context", None)
        if isinstance(extra_ctx, dict):
            ctx = {**ctx, **extra_ctx}
        if ctx:
            payload["context"] = ctx
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            payload["execution_time_ms"] = exec_ms
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))
