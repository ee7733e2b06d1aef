"""Arena progress: which champions have been played, top-4'd and won."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..enums import ProgressCategory


def _unique(values) -> List[str]:
    return list(dict.fromkeys(str(v) for v in values))


@dataclass
class ArenaProgress:
    """Derived aggregate over the match history.

    ``first_place_champions`` is the legacy name of ``wins`` and is kept equal
    to it for older readers of the persisted document.
    """

    first_plays: List[str] = field(default_factory=list)
    top4s: List[str] = field(default_factory=list)
    wins: List[str] = field(default_factory=list)
    first_place_champions: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.first_plays = _unique(self.first_plays)
        self.top4s = _unique(self.top4s)
        self.wins = _unique(self.wins)
        self.first_place_champions = _unique(self.first_place_champions)

    def champions(self, category: ProgressCategory) -> List[str]:
        return {
            ProgressCategory.WINS: self.wins,
            ProgressCategory.TOP4S: self.top4s,
            ProgressCategory.FIRST_PLAYS: self.first_plays,
        }[category]

    def completion_level(self, champion: str) -> int:
        if champion in self.wins:
            return 3
        if champion in self.top4s:
            return 2
        if champion in self.first_plays:
            return 1
        return 0

    def same_sets(self, other: "ArenaProgress") -> bool:
        return (
            set(self.first_plays) == set(other.first_plays)
            and set(self.top4s) == set(other.top4s)
            and set(self.wins) == set(other.wins)
            and set(self.first_place_champions) == set(other.first_place_champions)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'firstPlaceChampions': list(self.first_place_champions),
            'wins': list(self.wins),
            'top4s': list(self.top4s),
            'firstPlays': list(self.first_plays),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArenaProgress":
        """Read a persisted document, back-filling fields older versions lacked."""
        legacy = data.get('firstPlaceChampions') or []
        return cls(
            first_plays=data.get('firstPlays') or [],
            top4s=data.get('top4s') or [],
            wins=data.get('wins') or legacy,
            first_place_champions=legacy,
        )
