"""Match entities: the cached match detail and the per-player result."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .participant import Participant
from ..enums import Region


@dataclass
class MatchDetail:
    """Slimmed match payload, immutable once fetched.

    Only the creation time and the participants' outcomes survive slimming;
    everything else the provider returns is dropped before caching.
    """

    timestamp: int  # gameCreation, Unix milliseconds
    participants: List[Participant] = field(default_factory=list)

    def find_participant(self, puuid: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.puuid == puuid), None)

    def result_for(self, match_id: str, puuid: str) -> Optional["MatchResult"]:
        """Derive the player's result, or None if they are not in this match."""
        player = self.find_participant(puuid)
        if player is None:
            return None
        return MatchResult(
            match_id=match_id,
            champion=player.champion,
            placement=player.placement,
            timestamp=self.timestamp,
            score=player.score,
            augments=list(player.augments) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'participants': [p.to_dict() for p in self.participants],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchDetail":
        return cls(
            timestamp=int(data['timestamp']),
            participants=[Participant.from_dict(p) for p in data.get('participants', [])],
        )


@dataclass
class MatchResult:
    """One entry of the match history: a match seen from the tracked player."""

    match_id: str
    champion: str
    placement: int
    timestamp: int
    score: Optional[int] = None
    augments: Optional[List[int]] = None

    @property
    def played_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    @property
    def league_of_graphs_url(self) -> str:
        region = Region.from_match_id(self.match_id)
        prefix, _, rest = self.match_id.partition("_")
        slug = region.friendly if region else (prefix.lower() or "na")
        return f"https://www.leagueofgraphs.com/match/{slug}/{rest or self.match_id}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'matchId': self.match_id,
            'champion': self.champion,
            'placement': self.placement,
            'timestamp': self.timestamp,
        }
        if self.score is not None:
            data['score'] = self.score
        if self.augments:
            data['augments'] = list(self.augments)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResult":
        augments = data.get('augments')
        return cls(
            match_id=str(data['matchId']),
            champion=str(data['champion']),
            placement=int(data['placement']),
            timestamp=int(data.get('timestamp', 0)),
            score=data.get('score'),
            augments=list(augments) if augments else None,
        )
