from __future__ import annotations

import asyncio

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from presentation.cli import TrackerSession


async def _run() -> None:
    async with TrackerSession() as session:
        session.engine.subscribe(
            lambda p: print(f"Progress: {len(p.wins)} wins | {len(p.top4s)} top 4 | {len(p.first_plays)} played")
        )
        print(f"Auto-refresh every {settings.AUTO_REFRESH_INTERVAL}s. Ctrl+C to stop.")
        await session.engine.run_auto_refresh(settings.AUTO_REFRESH_INTERVAL)


def main() -> int:
    bootstrap_logging(service="auto-refresh", level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_file_name="auto_refresh.jsonl")
    try:
        asyncio.run(_run())
        return 0
    except KeyboardInterrupt:
        print("\nStopped.")
        return 0
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())
