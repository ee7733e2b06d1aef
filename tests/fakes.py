"""Test doubles and builders shared across the suite."""
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

from domain.entities import MatchDetail, MatchResult, Participant, RemoteAccount
from domain.errors import NotFoundError

PUUID = "puuid-me"


def make_detail(champion: str, placement: int, timestamp: int, puuid: str = PUUID) -> MatchDetail:
    return MatchDetail(
        timestamp=timestamp,
        participants=[
            Participant(puuid=puuid, champion=champion, placement=placement, score=10, augments=[1, 2]),
            Participant(puuid="someone-else", champion="Garen", placement=8),
        ],
    )


def make_result(match_id: str, champion: str = "Ahri", placement: int = 5, timestamp: int = 0) -> MatchResult:
    return MatchResult(match_id=match_id, champion=champion, placement=placement, timestamp=timestamp)


class FakeClient:
    """
    Provider double. ``remote_ids`` is the full history, newest first;
    listing slices it like the real endpoint. Missing details raise
    ``NotFoundError``.
    """

    def __init__(self, remote_ids: List[str], details: Dict[str, MatchDetail], puuid: str = PUUID):
        self.remote_ids = remote_ids
        self.details = details
        self.account = RemoteAccount(puuid=puuid, game_name="Gambler", tag_line="Adict")
        self.resolve_account = AsyncMock(side_effect=self._resolve)
        self.list_match_ids = AsyncMock(side_effect=self._list)
        self.fetch_match = AsyncMock(side_effect=self._fetch)

    async def _resolve(self, game_name: str, tag_line: str) -> RemoteAccount:
        return self.account

    async def _list(self, puuid: str, count: int, start: int = 0) -> List[str]:
        return list(self.remote_ids[start:start + count])

    async def _fetch(self, match_id: str) -> MatchDetail:
        if match_id not in self.details:
            raise NotFoundError(match_id)
        return self.details[match_id]


def remote_history(n: int, champions: Optional[List[str]] = None):
    """``n`` matches EUW1_n .. EUW1_1 (newest first) with increasing timestamps."""
    champions = champions or ["Ahri", "Jinx", "Lux", "Zed", "Sett"]
    ids = [f"EUW1_{i}" for i in range(n, 0, -1)]
    details = {
        f"EUW1_{i}": make_detail(champions[i % len(champions)], (i % 8) + 1, 1_700_000_000_000 + i * 1000)
        for i in range(1, n + 1)
    }
    return ids, details
