"""Wire schemas for provider responses.

Validation is strict on the fields the tracker reads and ignores the rest:
a payload missing ``placement`` is an error, an extra ``goldEarned`` is not.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, TypeAdapter

from domain.entities import MatchDetail, Participant, RemoteAccount

_AUGMENT_FIELDS = tuple(f"playerAugment{i}" for i in range(1, 7))
_SCORE_FIELDS = ("arenaScore", "score", "cherryScore", "playerScore0")


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class AccountPayload(_Payload):
    puuid: StrictStr
    gameName: StrictStr
    tagLine: StrictStr

    def to_entity(self) -> RemoteAccount:
        return RemoteAccount(puuid=self.puuid, game_name=self.gameName, tag_line=self.tagLine)


class ParticipantPayload(_Payload):
    puuid: StrictStr
    championName: StrictStr
    placement: StrictInt

    def _extra(self, key: str):
        return (self.model_extra or {}).get(key)

    @property
    def augment_ids(self) -> List[int]:
        listed = self._extra("augments")
        if isinstance(listed, list):
            nums = [v for v in listed if isinstance(v, int) and not isinstance(v, bool)]
            if nums:
                return nums
        out: List[int] = []
        for key in _AUGMENT_FIELDS:
            value = self._extra(key)
            if isinstance(value, int) and not isinstance(value, bool) and value > 0:
                out.append(value)
        return out

    @property
    def arena_score(self) -> Optional[int]:
        for key in _SCORE_FIELDS:
            value = self._extra(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
        return None

    def to_entity(self) -> Participant:
        return Participant(
            puuid=self.puuid,
            champion=self.championName,
            placement=self.placement,
            score=self.arena_score,
            augments=self.augment_ids,
        )


class MatchInfoPayload(_Payload):
    gameCreation: StrictInt
    participants: List[ParticipantPayload]


class MatchPayload(_Payload):
    info: MatchInfoPayload

    def to_entity(self) -> MatchDetail:
        return MatchDetail(
            timestamp=self.info.gameCreation,
            participants=[p.to_entity() for p in self.info.participants],
        )


class ErrorPayload(_Payload):
    """Either the provider's ``{"status": {...}}`` or the proxy's ``{"error": "..."}``."""

    error: Optional[str] = None
    message: Optional[str] = None
    status: Optional[dict] = None

    @property
    def text(self) -> Optional[str]:
        if self.status and isinstance(self.status.get("message"), str):
            return self.status["message"]
        return self.error or self.message


MatchIdList = TypeAdapter(List[StrictStr])
