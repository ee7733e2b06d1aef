from __future__ import annotations

import asyncio

from config import settings
from core.logging.logger import get_logger
from domain.entities import ArenaProgress, RiotId
from domain.errors import ArenaTrackerError
from .session import TrackerSession, ask


def _print_progress(progress: ArenaProgress) -> None:
    print(
        f"Progress: {len(progress.wins)} wins | {len(progress.top4s)} top 4 | "
        f"{len(progress.first_plays)} played"
    )


class SyncCommand:
    """Interactive match-history sync: update, load more, auto-refresh, season reset."""

    def __init__(self) -> None:
        self.log = get_logger(__name__, service="sync-cli")

    async def run(self) -> None:
        async with TrackerSession() as session:
            session.engine.subscribe(_print_progress)
            while True:
                engine = session.engine
                riot_id = session.store.get_riot_id()
                print("\n=== Match History ===")
                print(f"Riot ID: {riot_id or '(not set)'}")
                print(f"Matches: {len(engine.history)} | Next offset: {engine.cursor} | "
                      f"More available: {'yes' if engine.has_more else 'no'}")
                print("1) Update (newest matches)")
                print("2) Load more")
                print("3) Auto-refresh")
                print("4) Drop past games")
                print("5) Set Riot ID")
                print("6) Back")
                choice = await ask("Choose: ")
                try:
                    if choice == "1":
                        await self._update(session, load_more=False)
                    elif choice == "2":
                        await self._update(session, load_more=True)
                    elif choice == "3":
                        await self._auto_refresh(session)
                    elif choice == "4":
                        await self._drop_past_games(session)
                    elif choice == "5":
                        await self._set_riot_id(session)
                    elif choice == "6":
                        return
                    else:
                        print("Invalid option.")
                except ArenaTrackerError as e:
                    self.log.error(lambda: f"sync-cli-failed {e}")
                    print(f"Error: {e.user_message}")

    async def _set_riot_id(self, session: TrackerSession) -> None:
        raw = await ask("Riot ID (Name#TAG): ")
        riot_id = RiotId.parse(raw)
        session.store.set_riot_id(riot_id)
        print(f"Riot ID set to {riot_id}")

    async def _update(self, session: TrackerSession, *, load_more: bool) -> None:
        if session.store.get_riot_id() is None:
            await self._set_riot_id(session)
        raw = await ask(f"Matches to fetch [1-{settings.MAX_PAGE_SIZE}, default {session.engine.page_size}]: ")
        page_size = settings.clamp_page_size(raw) if raw else None
        print("Updating..." if not load_more else "Loading more...")
        report = await session.engine.sync(load_more=load_more, page_size=page_size)
        print(report)

    async def _auto_refresh(self, session: TrackerSession) -> None:
        interval = settings.AUTO_REFRESH_INTERVAL
        print(f"Auto-refresh every {interval}s. Press Enter to stop.")
        stop = asyncio.Event()
        task = asyncio.create_task(session.engine.run_auto_refresh(interval, stop))
        await ask("")
        stop.set()
        runs = await task
        print(f"Auto-refresh stopped after {runs} run(s).")

    async def _drop_past_games(self, session: TrackerSession) -> None:
        cutoff = await ask("Cutoff match id (blank = newest match): ")
        report = await session.engine.drop_past_games(cutoff or None)
        print(report)
