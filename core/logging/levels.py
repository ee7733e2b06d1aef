from __future__ import annotations

import logging
from enum import IntEnum


class LogLevel(IntEnum):
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    SUCCESS = 25
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


_CUSTOM = (LogLevel.TRACE, LogLevel.SUCCESS)


def register_levels() -> None:
    for level in _CUSTOM:
        if logging.getLevelName(int(level)) != level.name:
            logging.addLevelName(int(level), level.name)


def to_level(value: int | str | None, default: int = logging.INFO) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name in LogLevel.__members__:
        return int(LogLevel[name])
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else default
