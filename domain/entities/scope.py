"""Progress scope settings."""
from dataclasses import dataclass
from typing import List, Sequence, TypeVar

from ..enums import HistoryScope

T = TypeVar("T")

MIN_LIMIT = 1
MAX_LIMIT = 500
DEFAULT_LIMIT = 100


def clamp_limit(value: int) -> int:
    return max(MIN_LIMIT, min(MAX_LIMIT, int(value)))


def parse_limit(value: object) -> int:
    """Read a stored limit: unparsable or non-positive values fall back to 100."""
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if n <= 0:
        return DEFAULT_LIMIT
    return clamp_limit(n)


@dataclass(frozen=True)
class ProgressScope:
    mode: HistoryScope = HistoryScope.ALL
    limit: int = DEFAULT_LIMIT

    @property
    def effective_limit(self) -> int:
        return clamp_limit(self.limit)

    def apply(self, entries: Sequence[T]) -> List[T]:
        if self.mode is HistoryScope.LAST_N:
            return list(entries[: self.effective_limit])
        return list(entries)
