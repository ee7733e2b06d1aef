"""Main CLI entry-point."""
from __future__ import annotations

import asyncio
import shutil
import sys

from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings

_BRIGHT_GREEN = "\033[1;92m"
_CYAN = "\033[96m"
_YELLOW = "\033[93m"
_RESET = "\033[0m"
_BOLD = "\033[1m"


def _g(s: str) -> str:
    return f"{_BRIGHT_GREEN}{s}{_RESET}"


def _c(s: str) -> str:
    return f"{_CYAN}{s}{_RESET}"


_LOGO = r"""
   █████╗ ██████╗ ███████╗███╗   ██╗ █████╗     ████████╗██████╗  █████╗  ██████╗██╗  ██╗
  ██╔══██╗██╔══██╗██╔════╝████╗  ██║██╔══██╗    ╚══██╔══╝██╔══██╗██╔══██╗██╔════╝██║ ██╔╝
  ███████║██████╔╝█████╗  ██╔██╗ ██║███████║       ██║   ██████╔╝███████║██║     █████╔╝
  ██╔══██║██╔══██╗██╔══╝  ██║╚██╗██║██╔══██║       ██║   ██╔══██╗██╔══██║██║     ██╔═██╗
  ██║  ██║██║  ██║███████╗██║ ╚████║██║  ██║       ██║   ██║  ██║██║  ██║╚██████╗██║  ██╗
  ╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝╚═╝  ╚═══╝╚═╝  ╚═╝       ╚═╝   ╚═╝  ╚═╝╚═╝  ╚═╝ ╚═════╝╚═╝  ╚═╝
"""


def _print_logo() -> None:
    cols = shutil.get_terminal_size(fallback=(100, 20)).columns
    div = "═" * min(cols, 96)
    print(_g(div))
    for line in _LOGO.splitlines():
        print(_g(line))
    print(_c("  League of Legends Arena champion progress tracker"))
    print(_g(div))


def _menu() -> None:
    _print_logo()
    from presentation.cli import SyncCommand, ProgressCommand, DataCommand
    from domain.errors import ArenaTrackerError

    while True:
        cols = shutil.get_terminal_size(fallback=(96, 20)).columns
        print(f"\n{_g('═' * min(cols, 48))}")
        print(f"  {_BOLD}MAIN MENU{_RESET}")
        print(_g("═" * min(cols, 48)))
        print(f"  {_c('1')}  Match history")
        print(f"  {_c('2')}  Arena progress")
        print(f"  {_c('3')}  Data & backups")
        print(f"  {_c('4')}  Exit")
        print(_g("─" * min(cols, 48)))
        choice = input("  Choose: ").strip()

        try:
            if choice == "1":
                asyncio.run(SyncCommand().run())
            elif choice == "2":
                asyncio.run(ProgressCommand().run())
            elif choice == "3":
                asyncio.run(DataCommand().run())
            elif choice == "4":
                print(f"\n  {_g('Goodbye!')}\n")
                break
            else:
                print(f"  {_YELLOW}Invalid option.{_RESET}")
        except ArenaTrackerError as e:
            # Startup failures (store or config) surface here.
            print(f"  {_YELLOW}Error: {e.user_message}{_RESET}")


def main(argv: list[str]) -> int:
    bootstrap_logging(
        service="arena-tracker",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="arena-tracker.jsonl",
    )
    try:
        _menu()
        return 0
    finally:
        shutdown_logging()


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
