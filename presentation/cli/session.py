from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Union

from config import settings
from application.services import BackupService, SyncEngine
from infrastructure.api import RiotMatchClient
from infrastructure.repositories import MatchCacheStore, SettingsStore


async def ask(prompt: str) -> str:
    """``input()`` off the event loop, so background tasks keep running."""
    return (await asyncio.to_thread(input, prompt)).strip()


async def confirm_yes(prompt: str) -> bool:
    print(f"\n{prompt}")
    return await ask("Type 'YES' to confirm: ") == "YES"


class TrackerSession:
    """Wires stores, client, engine and backups for one command run."""

    def __init__(self, confirm: Optional[Callable[[str], Union[bool, Awaitable[bool]]]] = None) -> None:
        self._confirm = confirm or confirm_yes
        self.store: SettingsStore
        self.cache: MatchCacheStore
        self.client: RiotMatchClient
        self.engine: SyncEngine
        self.backups: BackupService

    async def __aenter__(self) -> "TrackerSession":
        settings.validate()
        settings.create_directories()
        self.store = SettingsStore(settings.DB_DIR / settings.SETTINGS_DB_NAME)
        self.cache = MatchCacheStore(settings.DB_DIR / settings.MATCH_CACHE_DB_NAME, legacy_source=self.store)
        await self.cache.ensure_ready()
        self.client = RiotMatchClient()
        await self.client.__aenter__()
        self.engine = SyncEngine(self.client, self.store, self.cache, confirm=self._confirm)
        self.backups = BackupService(self.store, self.cache)
        return self

    async def __aexit__(self, *exc) -> None:
        try:
            await self.engine.wait_for_background()
        finally:
            await self.client.__aexit__(*exc)
            self.store.close()
