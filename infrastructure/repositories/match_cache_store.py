"""Match-detail namespace: bulk cache of slimmed matches, keyed by match id."""
import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import aiosqlite

from domain.entities import MatchDetail
from domain.errors import StoreError
from domain.interfaces import IMatchCacheStore
from .settings_store import SettingsStore
from .slimming import slim_match_detail

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS matches (
    id   TEXT PRIMARY KEY,
    data TEXT NOT NULL
);
"""

# SQLite's default host-parameter limit is 999.
_CHUNK = 500


def _chunks(items: List[str], size: int = _CHUNK):
    for i in range(0, len(items), size):
        yield items[i:i + size]


class MatchCacheStore(IMatchCacheStore):
    """
    Async SQLite-backed match cache.

    The first operation in a session creates the schema and moves any
    legacy single-blob cache from the settings store into this table.
    That step runs once per instance: concurrent callers await the same
    initialisation task instead of racing to migrate.
    """

    def __init__(self, db_path: Path, legacy_source: Optional[SettingsStore] = None):
        self.db_path = Path(db_path)
        self.legacy_source = legacy_source
        self._ready: Optional[asyncio.Task] = None
        self.migrated_count = 0

    # ── Initialisation ─────────────────────────────────────────────────────

    async def ensure_ready(self) -> None:
        if self._ready is None:
            self._ready = asyncio.ensure_future(self._initialize())
        try:
            await asyncio.shield(self._ready)
        except Exception:
            # Let the next caller try again.
            self._ready = None
            raise

    async def _initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.executescript(SCHEMA)
                await db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open match cache {self.db_path}: {e}") from e
        await self._migrate_legacy_blob()

    async def _migrate_legacy_blob(self) -> None:
        if self.legacy_source is None:
            return
        blob = self.legacy_source.get_legacy_match_cache()
        if blob is None:
            return

        if not isinstance(blob, dict):
            logger.warning("Discarding legacy match cache: not a JSON object")
            self.legacy_source.delete_legacy_match_cache()
            return

        rows = []
        for match_id, payload in blob.items():
            try:
                rows.append((str(match_id), json.dumps(slim_match_detail(payload))))
            except ValueError as e:
                logger.warning(f"Skipping legacy cache entry {match_id}: {e}")

        if rows:
            await self._write_rows(rows)
        self.legacy_source.delete_legacy_match_cache()
        self.migrated_count = len(rows)
        logger.info(f"Migrated {len(rows)}/{len(blob)} legacy cache entries")

    # ── Operations ─────────────────────────────────────────────────────────

    async def _write_rows(self, rows: List[tuple]) -> None:
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.executemany(
                    "INSERT OR REPLACE INTO matches(id, data) VALUES(?, ?)", rows
                )
                await db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"write {len(rows)} match(es): {e}") from e

    async def put_many(self, matches: Dict[str, Any]) -> None:
        await self.ensure_ready()
        if not matches:
            return
        rows = [(match_id, json.dumps(slim_match_detail(m))) for match_id, m in matches.items()]
        await self._write_rows(rows)
        logger.debug(f"Cached {len(rows)} match(es)")

    async def get_many(self, match_ids: Iterable[str]) -> Dict[str, MatchDetail]:
        await self.ensure_ready()
        ids = list(dict.fromkeys(match_ids))
        found: Dict[str, MatchDetail] = {}
        if not ids:
            return found
        try:
            async with aiosqlite.connect(self.db_path) as db:
                for chunk in _chunks(ids):
                    marks = ", ".join("?" for _ in chunk)
                    async with db.execute(
                        f"SELECT id, data FROM matches WHERE id IN ({marks})", chunk
                    ) as cursor:
                        async for match_id, data in cursor:
                            detail = self._decode(match_id, data)
                            if detail is not None:
                                found[match_id] = detail
        except sqlite3.Error as e:
            raise StoreError(f"read {len(ids)} match(es): {e}") from e
        return found

    async def delete_many(self, match_ids: Iterable[str]) -> None:
        await self.ensure_ready()
        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.executemany("DELETE FROM matches WHERE id = ?", [(i,) for i in ids])
                await db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"delete {len(ids)} match(es): {e}") from e
        logger.debug(f"Evicted {len(ids)} match(es) from cache")

    async def clear(self) -> None:
        await self.ensure_ready()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("DELETE FROM matches")
                await db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"clear match cache: {e}") from e

    async def get_all(self) -> Dict[str, MatchDetail]:
        await self.ensure_ready()
        found: Dict[str, MatchDetail] = {}
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute("SELECT id, data FROM matches") as cursor:
                    async for match_id, data in cursor:
                        detail = self._decode(match_id, data)
                        if detail is not None:
                            found[match_id] = detail
        except sqlite3.Error as e:
            raise StoreError(f"read match cache: {e}") from e
        return found

    async def count(self) -> int:
        await self.ensure_ready()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute("SELECT COUNT(*) FROM matches") as cursor:
                    row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"count match cache: {e}") from e
        return int(row[0]) if row else 0

    @staticmethod
    def _decode(match_id: str, data: str) -> Optional[MatchDetail]:
        try:
            return MatchDetail.from_dict(json.loads(data))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Ignoring corrupt cache row {match_id}")
            return None
