"""Backup and restore of the whole local state as one JSON document."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from domain.entities import ArenaProgress, MatchDetail, MatchResult, ProgressScope, RiotId
from domain.enums import HistoryScope
from domain.errors import UserInputInvalidError
from domain.interfaces import IMatchCacheStore, ISettingsStore
from infrastructure.repositories.slimming import to_match_detail

logger = logging.getLogger(__name__)


class BackupDocument(BaseModel):
    """Portable backup layout; unknown keys are kept but ignored."""

    model_config = ConfigDict(extra="allow")

    riotId: Optional[Dict[str, Any]] = None
    matchHistory: List[Dict[str, Any]] = []
    arenaProgress: Optional[Dict[str, Any]] = None
    matchCache: Dict[str, Any] = {}
    firstSeasonMatchId: Optional[str] = None
    historyScope: Optional[str] = None
    historyLimit: Optional[int] = None


class BackupService:
    """Snapshot both store namespaces and write them back verbatim."""

    def __init__(self, store: ISettingsStore, cache: IMatchCacheStore):
        self.store = store
        self.cache = cache

    async def snapshot(self) -> Dict[str, Any]:
        """Dump both namespaces; settings are read together after the cache await."""
        match_cache = await self.cache.get_all()
        riot_id = self.store.get_riot_id()
        scope = self.store.get_progress_scope()
        return {
            'riotId': riot_id.to_dict() if riot_id else None,
            'matchHistory': [m.to_dict() for m in self.store.get_match_history()],
            'arenaProgress': self.store.get_arena_progress().to_dict(),
            'matchCache': {match_id: d.to_dict() for match_id, d in match_cache.items()},
            'firstSeasonMatchId': self.store.get_first_season_match_id(),
            'historyScope': scope.mode.value,
            'historyLimit': scope.effective_limit,
        }

    async def restore(self, data: Dict[str, Any]) -> Dict[str, int]:
        """
        Overwrite every namespace with the document's content.

        Progress is restored as stored, not recomputed. The cache is cleared
        first, and restored entries are slimmed again on the way in.
        """
        try:
            doc = BackupDocument.model_validate(data)
            history = [MatchResult.from_dict(item) for item in doc.matchHistory]
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            raise UserInputInvalidError(
                f"malformed backup document: {e}", user_message="Invalid backup file"
            ) from e

        matches: Dict[str, MatchDetail] = {}
        for match_id, payload in doc.matchCache.items():
            try:
                matches[match_id] = to_match_detail(payload)
            except ValueError as e:
                logger.warning(f"Skipping cache entry {match_id} from backup: {e}")

        if doc.riotId and doc.riotId.get('gameName') and doc.riotId.get('tagLine'):
            self.store.set_riot_id(RiotId.from_dict(doc.riotId))
        self.store.set_match_history(history)
        self.store.set_first_season_match_id(doc.firstSeasonMatchId)
        self.store.set_arena_progress(ArenaProgress.from_dict(doc.arenaProgress or {}))
        if doc.historyScope is not None or doc.historyLimit is not None:
            current = self.store.get_progress_scope()
            self.store.set_progress_scope(ProgressScope(
                mode=HistoryScope.parse(doc.historyScope) if doc.historyScope else current.mode,
                limit=doc.historyLimit if doc.historyLimit is not None else current.limit,
            ))

        await self.cache.clear()
        await self.cache.put_many(matches)

        logger.info(f"Restored backup: {len(history)} history entries, {len(matches)} cached matches")
        return {'history': len(history), 'matches': len(matches)}

    async def export_to_file(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        snapshot = await self.snapshot()
        path.write_text(json.dumps(snapshot, indent=2), encoding='utf-8')
        logger.info(f"Backup written to {path}")
        return path

    async def import_from_file(self, path: Path) -> Dict[str, int]:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except OSError as e:
            raise UserInputInvalidError(f"cannot read {path}: {e}", user_message=f"Cannot read {path}") from e
        except ValueError as e:
            raise UserInputInvalidError(f"{path} is not JSON: {e}", user_message="Invalid backup file") from e
        if not isinstance(data, dict):
            raise UserInputInvalidError(f"{path} is not a JSON object", user_message="Invalid backup file")
        return await self.restore(data)
