"""Participant entity representing one player's outcome in an arena match."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Participant:
    """A player's line in a match, reduced to what progress tracking needs."""

    puuid: str
    champion: str
    placement: int  # 1 (best) .. number of teams

    # Arena extras (absent on older payloads)
    score: Optional[int] = None
    augments: List[int] = field(default_factory=list)

    @property
    def is_win(self) -> bool:
        return self.placement == 1

    @property
    def is_top4(self) -> bool:
        return self.placement <= 4

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'puuid': self.puuid,
            'champion': self.champion,
            'placement': self.placement,
        }
        if self.score is not None:
            data['score'] = self.score
        if self.augments:
            data['augments'] = list(self.augments)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            puuid=data['puuid'],
            champion=data['champion'],
            placement=int(data['placement']),
            score=data.get('score'),
            augments=list(data.get('augments') or []),
        )
