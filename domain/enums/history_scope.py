"""History scope: how much of the post-cutoff history counts toward progress."""
from enum import Enum


class HistoryScope(Enum):
    """Secondary narrowing applied after the season cutoff.

    Persisted as its value (``"all"`` / ``"last_n"``); anything unrecognised
    reads back as ``ALL``.
    """

    ALL = "all"
    LAST_N = "last_n"

    @classmethod
    def parse(cls, value: object) -> "HistoryScope":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALL
