from __future__ import annotations

import argparse
import asyncio

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from domain.entities import RiotId
from domain.errors import ArenaTrackerError
from presentation.cli import TrackerSession


async def _run(riot_id: RiotId | None, load_more: bool, count: int | None) -> None:
    async with TrackerSession() as session:
        report = await session.engine.sync(load_more=load_more, riot_id=riot_id, page_size=count)
        print(report)


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch the newest arena matches (or the next page).")
    parser.add_argument("riot_id", nargs="?", help="Name#TAG; defaults to the stored Riot ID")
    parser.add_argument("--more", action="store_true", help="load the page after the stored history")
    parser.add_argument("--count", type=int, default=None, help=f"ids per page (1-{settings.MAX_PAGE_SIZE})")
    args = parser.parse_args()

    bootstrap_logging(service="update", level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_file_name="update.jsonl")
    try:
        riot_id = RiotId.parse(args.riot_id) if args.riot_id else None
        asyncio.run(_run(riot_id, args.more, args.count))
        return 0
    except ArenaTrackerError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())
