"""Settings namespace: small JSON documents in a single SQLite table."""
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, List, Optional

from domain.entities import ArenaProgress, MatchResult, ProgressScope, RiotId
from domain.entities.scope import parse_limit
from domain.enums import HistoryScope
from domain.errors import StoreError
from domain.interfaces import ISettingsStore

logger = logging.getLogger(__name__)

RIOT_ID_KEY = 'riot-id'
MATCH_HISTORY_KEY = 'match-history'
ARENA_PROGRESS_KEY = 'arena-progress'
LEGACY_MATCH_CACHE_KEY = 'match-cache'
FIRST_SEASON_MATCH_KEY = 'first-season-match'
HISTORY_SCOPE_KEY = 'history-scope'
HISTORY_LIMIT_KEY = 'history-limit'


class SettingsStore(ISettingsStore):
    """
    Key/value documents, last write wins.

    Every key has a single writer (the sync engine or an explicit user
    action), so no merge logic is needed here. Values are stored as JSON
    text; a value that fails to decode is treated as absent.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS documents (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open settings store {self.db_path}: {e}") from e

    def close(self) -> None:
        self._conn.close()

    # ── Raw documents ──────────────────────────────────────────────────────

    def get_document(self, key: str) -> Any:
        try:
            row = self._conn.execute("SELECT value FROM documents WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"read {key}: {e}") from e
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except ValueError:
            logger.warning(f"Ignoring undecodable document {key!r}")
            return None

    def set_document(self, key: str, value: Any) -> None:
        try:
            self._conn.execute(
                "INSERT INTO documents(key, value) VALUES(?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"write {key}: {e}") from e

    def delete_document(self, *keys: str) -> None:
        try:
            self._conn.executemany("DELETE FROM documents WHERE key = ?", [(k,) for k in keys])
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"delete {', '.join(keys)}: {e}") from e

    # ── Identity ───────────────────────────────────────────────────────────

    def get_riot_id(self) -> Optional[RiotId]:
        data = self.get_document(RIOT_ID_KEY)
        if not isinstance(data, dict) or not data.get('gameName') or not data.get('tagLine'):
            return None
        return RiotId.from_dict(data)

    def set_riot_id(self, riot_id: RiotId) -> None:
        self.set_document(RIOT_ID_KEY, riot_id.to_dict())

    # ── History ────────────────────────────────────────────────────────────

    def get_match_history(self) -> List[MatchResult]:
        data = self.get_document(MATCH_HISTORY_KEY)
        if not isinstance(data, list):
            return []
        history: List[MatchResult] = []
        for item in data:
            try:
                history.append(MatchResult.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed history entry: {item!r:.80}")
        return history

    def set_match_history(self, history: List[MatchResult]) -> None:
        self.set_document(MATCH_HISTORY_KEY, [m.to_dict() for m in history])

    def clear_match_history(self) -> None:
        self.delete_document(MATCH_HISTORY_KEY)

    # ── Progress ───────────────────────────────────────────────────────────

    def get_arena_progress(self) -> ArenaProgress:
        data = self.get_document(ARENA_PROGRESS_KEY)
        if not isinstance(data, dict):
            return ArenaProgress()
        return ArenaProgress.from_dict(data)

    def set_arena_progress(self, progress: ArenaProgress) -> None:
        self.set_document(ARENA_PROGRESS_KEY, progress.to_dict())

    # ── Season cutoff ──────────────────────────────────────────────────────

    def get_first_season_match_id(self) -> Optional[str]:
        value = self.get_document(FIRST_SEASON_MATCH_KEY)
        return value if isinstance(value, str) and value else None

    def set_first_season_match_id(self, match_id: Optional[str]) -> None:
        if match_id:
            self.set_document(FIRST_SEASON_MATCH_KEY, match_id)
        else:
            self.delete_document(FIRST_SEASON_MATCH_KEY)

    # ── Scope ──────────────────────────────────────────────────────────────

    def get_progress_scope(self) -> ProgressScope:
        mode = HistoryScope.parse(self.get_document(HISTORY_SCOPE_KEY))
        return ProgressScope(mode=mode, limit=parse_limit(self.get_document(HISTORY_LIMIT_KEY)))

    def set_progress_scope(self, scope: ProgressScope) -> None:
        self.set_document(HISTORY_SCOPE_KEY, scope.mode.value)
        self.set_document(HISTORY_LIMIT_KEY, scope.effective_limit)

    # ── Legacy cache blob ──────────────────────────────────────────────────

    def get_legacy_match_cache(self) -> Optional[Any]:
        return self.get_document(LEGACY_MATCH_CACHE_KEY)

    def delete_legacy_match_cache(self) -> None:
        self.delete_document(LEGACY_MATCH_CACHE_KEY)

    # ── Wipes ──────────────────────────────────────────────────────────────

    def clear_all_match_data(self) -> None:
        """Drop history, progress, season cutoff and any legacy cache blob."""
        self.delete_document(
            MATCH_HISTORY_KEY, ARENA_PROGRESS_KEY, FIRST_SEASON_MATCH_KEY, LEGACY_MATCH_CACHE_KEY
        )
