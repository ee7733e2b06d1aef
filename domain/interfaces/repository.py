"""Interfaces for the remote provider and the two local stores."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..entities import ArenaProgress, MatchDetail, MatchResult, ProgressScope, RemoteAccount, RiotId


class IMatchClient(ABC):
    """Remote match provider, reached through the credential proxy."""

    @abstractmethod
    async def resolve_account(self, game_name: str, tag_line: str) -> RemoteAccount:
        """Translate a Riot id to a stable account."""
        pass

    @abstractmethod
    async def list_match_ids(self, puuid: str, count: int, start: int = 0) -> List[str]:
        """Up to ``count`` arena match ids from offset ``start``, newest first."""
        pass

    @abstractmethod
    async def fetch_match(self, match_id: str) -> MatchDetail:
        """Full (slimmed) detail of one match."""
        pass


class ISettingsStore(ABC):
    """Small documents: identity, history, progress, cutoff, scope."""

    @abstractmethod
    def get_riot_id(self) -> Optional[RiotId]:
        pass

    @abstractmethod
    def set_riot_id(self, riot_id: RiotId) -> None:
        pass

    @abstractmethod
    def get_match_history(self) -> List[MatchResult]:
        pass

    @abstractmethod
    def set_match_history(self, history: List[MatchResult]) -> None:
        pass

    @abstractmethod
    def get_arena_progress(self) -> ArenaProgress:
        pass

    @abstractmethod
    def set_arena_progress(self, progress: ArenaProgress) -> None:
        pass

    @abstractmethod
    def get_first_season_match_id(self) -> Optional[str]:
        pass

    @abstractmethod
    def set_first_season_match_id(self, match_id: Optional[str]) -> None:
        pass

    @abstractmethod
    def clear_match_history(self) -> None:
        pass

    @abstractmethod
    def clear_all_match_data(self) -> None:
        """History, progress and season cutoff."""
        pass

    @abstractmethod
    def get_progress_scope(self) -> ProgressScope:
        pass

    @abstractmethod
    def set_progress_scope(self, scope: ProgressScope) -> None:
        pass


class IMatchCacheStore(ABC):
    """Bulk match-detail cache keyed by match id."""

    @abstractmethod
    async def put_many(self, matches: Dict[str, Any]) -> None:
        """Slim and store every entry; existing ids are replaced."""
        pass

    @abstractmethod
    async def get_many(self, match_ids: Iterable[str]) -> Dict[str, MatchDetail]:
        """Return only the ids found; misses are silent."""
        pass

    @abstractmethod
    async def delete_many(self, match_ids: Iterable[str]) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    @abstractmethod
    async def get_all(self) -> Dict[str, MatchDetail]:
        pass
