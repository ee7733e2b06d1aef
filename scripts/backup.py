from __future__ import annotations

import argparse
import asyncio
from datetime import datetime
from pathlib import Path

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from domain.errors import ArenaTrackerError
from presentation.cli import TrackerSession


async def _export(path: Path) -> None:
    async with TrackerSession() as session:
        print(f"Backup written to {await session.backups.export_to_file(path)}")


async def _import(path: Path) -> None:
    async with TrackerSession() as session:
        counts = await session.backups.import_from_file(path)
        print(f"Restored {counts['history']} matches and {counts['matches']} cached details.")


def main() -> int:
    parser = argparse.ArgumentParser(description="Export or import the arena tracker's local data.")
    sub = parser.add_subparsers(dest="action", required=True)
    exp = sub.add_parser("export")
    exp.add_argument("path", nargs="?", type=Path,
                     default=settings.BACKUP_DIR / f"arena-backup-{datetime.now():%Y%m%d-%H%M%S}.json")
    imp = sub.add_parser("import")
    imp.add_argument("path", type=Path)
    args = parser.parse_args()

    bootstrap_logging(service="backup", level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_file_name="backup.jsonl")
    try:
        asyncio.run(_export(args.path) if args.action == "export" else _import(args.path))
        return 0
    except ArenaTrackerError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())
