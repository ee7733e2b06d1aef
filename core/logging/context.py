from __future__ import annotations

import contextvars
from typing import Any, Dict

# Per-task log context. Each asyncio task gets its own copy, so fields bound
# inside one sync run never leak into an auto-refresh running beside it.
_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("arena_log_context", default={})


def get_context() -> Dict[str, Any]:
    return dict(_context.get())


def _merged(values: Dict[str, Any]) -> Dict[str, Any]:
    current = dict(_context.get())
    current.update({k: v for k, v in values.items() if v is not None})
    return current


def bind(**values: Any) -> None:
    _context.set(_merged(values))


def unbind(*keys: str) -> None:
    current = dict(_context.get())
    for key in keys:
        current.pop(key, None)
    _context.set(current)


class context(object):
    """Temporarily bind fields, e.g. ``with context(operation="sync", puuid=p):``."""

    def __init__(self, **values: Any) -> None:
        self._values = values
        self._token: contextvars.Token | None = None

    def __enter__(self) -> Dict[str, Any]:
        merged = _merged(self._values)
        self._token = _context.set(merged)
        return merged

    def __exit__(self, exc_type, exc, tb):
        if self._token is not None:
            _context.reset(self._token)
            self._token = None
        return False
