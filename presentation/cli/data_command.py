from __future__ import annotations

from datetime import datetime
from pathlib import Path

from config import settings
from core.logging.logger import get_logger
from domain.errors import ArenaTrackerError
from .session import TrackerSession, ask


class DataCommand:
    """Wipes and backups of the local match data."""

    def __init__(self) -> None:
        self.log = get_logger(__name__, service="data-cli")

    async def run(self) -> None:
        async with TrackerSession() as session:
            while True:
                print("\n=== Data & Backups ===")
                print(f"Database folder: {settings.DB_DIR}")
                print(f"Cached matches: {await session.cache.count()}")
                print("1) Clear matches (keep progress)")
                print("2) Clear ALL match data")
                print("3) Export backup")
                print("4) Import backup")
                print("5) Back")
                choice = await ask("Choose: ")
                try:
                    if choice == "1":
                        await self._clear_matches(session)
                    elif choice == "2":
                        await self._clear_all(session)
                    elif choice == "3":
                        await self._export(session)
                    elif choice == "4":
                        await self._import(session)
                    elif choice == "5":
                        return
                    else:
                        print("Invalid option.")
                except ArenaTrackerError as e:
                    self.log.error(lambda: f"data-cli-failed {e}")
                    print(f"Error: {e.user_message}")

    async def _clear_matches(self, session: TrackerSession) -> None:
        confirm = await ask("Type 'YES' to clear the match history: ")
        if confirm != "YES":
            print("Not confirmed.")
            return
        session.engine.clear_matches()
        print("Match history cleared. Progress and cache were kept.")
        self.log.success(lambda: "clear-matches-ok")

    async def _clear_all(self, session: TrackerSession) -> None:
        confirm = await ask("Type 'NUKE' to clear history, progress, season cutoff and cache: ")
        if confirm != "NUKE":
            print("Not confirmed.")
            return
        await session.engine.clear_all()
        print("All match data cleared.")
        self.log.success(lambda: "clear-all-ok")

    async def _export(self, session: TrackerSession) -> None:
        default = settings.BACKUP_DIR / f"arena-backup-{datetime.now():%Y%m%d-%H%M%S}.json"
        raw = await ask(f"File [{default}]: ")
        path = await session.backups.export_to_file(Path(raw).expanduser() if raw else default)
        print(f"Backup written to {path}")
        self.log.success(lambda: f"export-ok {path}")

    async def _import(self, session: TrackerSession) -> None:
        raw = await ask("Backup file: ")
        if not raw:
            print("No file given.")
            return
        confirm = await ask("Type 'YES' to overwrite ALL local data with this backup: ")
        if confirm != "YES":
            print("Not confirmed.")
            return
        counts = await session.backups.import_from_file(Path(raw).expanduser())
        session.engine.reload()
        print(f"Restored {counts['history']} matches and {counts['matches']} cached details.")
        self.log.success(lambda: f"import-ok {raw}")
