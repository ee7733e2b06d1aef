from __future__ import annotations

from core.logging.logger import get_logger
from domain.enums import HistoryScope, ProgressCategory
from domain.errors import ArenaTrackerError
from .session import TrackerSession, ask

_LEVEL_NAMES = {3: "win", 2: "top 4", 1: "played"}


class ProgressCommand:
    """Show and adjust arena progress."""

    def __init__(self) -> None:
        self.log = get_logger(__name__, service="progress-cli")

    async def run(self) -> None:
        async with TrackerSession() as session:
            while True:
                scope = session.store.get_progress_scope()
                cutoff = session.store.get_first_season_match_id()
                scope_txt = "all matches" if scope.mode is HistoryScope.ALL else f"last {scope.effective_limit}"
                print("\n=== Arena Progress ===")
                print(f"Scope: {scope_txt} | Season cutoff: {cutoff or '(none)'}")
                print("1) Summary")
                print("2) Champions by completion")
                print("3) Recent matches")
                print("4) Toggle champion")
                print("5) History scope")
                print("6) Recompute from history")
                print("7) Back")
                choice = await ask("Choose: ")
                try:
                    if choice == "1":
                        self._summary(session)
                    elif choice == "2":
                        self._champions(session)
                    elif choice == "3":
                        await self._recent(session)
                    elif choice == "4":
                        await self._toggle(session)
                    elif choice == "5":
                        await self._scope(session)
                    elif choice == "6":
                        session.engine.recompute_progress()
                        self._summary(session)
                    elif choice == "7":
                        return
                    else:
                        print("Invalid option.")
                except ArenaTrackerError as e:
                    self.log.error(lambda: f"progress-cli-failed {e}")
                    print(f"Error: {e.user_message}")

    def _summary(self, session: TrackerSession) -> None:
        progress = session.engine.progress
        print("")
        for category in ProgressCategory:
            print(f"{category.label:<8} {len(progress.champions(category))}")

    def _champions(self, session: TrackerSession) -> None:
        progress = session.engine.progress
        levels = {c: progress.completion_level(c) for c in progress.first_plays + progress.top4s + progress.wins}
        if not levels:
            print("No champions tracked yet.")
            return
        for champion, level in sorted(levels.items(), key=lambda kv: (-kv[1], kv[0])):
            print(f"- {champion:<16} {_LEVEL_NAMES[level]}")

    async def _recent(self, session: TrackerSession) -> None:
        raw = await ask("How many [20]: ")
        try:
            n = max(1, int(raw)) if raw else 20
        except ValueError:
            n = 20
        history = session.engine.history[:n]
        if not history:
            print("History is empty.")
            return
        for m in history:
            print(f"{m.played_at:%Y-%m-%d %H:%M}  #{m.placement}  {m.champion:<14} {m.league_of_graphs_url}")

    async def _toggle(self, session: TrackerSession) -> None:
        categories = list(ProgressCategory)
        for i, category in enumerate(categories, start=1):
            print(f"{i}) {category.label}")
        raw = await ask("Category: ")
        if not raw.isdigit() or not 1 <= int(raw) <= len(categories):
            print("Invalid option.")
            return
        champion = await ask("Champion name: ")
        if not champion:
            print("Champion name is required.")
            return
        category = categories[int(raw) - 1]
        tracked = session.engine.toggle_progress(category, champion)
        print(f"{champion} {'added to' if tracked else 'removed from'} {category.label}")

    async def _scope(self, session: TrackerSession) -> None:
        print("1) All matches")
        print("2) Last N matches")
        raw = await ask("Scope: ")
        if raw == "1":
            scope = session.engine.set_history_scope(HistoryScope.ALL)
        elif raw == "2":
            raw_limit = await ask("N [1-500]: ")
            try:
                limit = int(raw_limit) if raw_limit else None
            except ValueError:
                print("N must be a number.")
                return
            scope = session.engine.set_history_scope(HistoryScope.LAST_N, limit)
        else:
            print("Invalid option.")
            return
        print(f"Scope set to {scope.mode.value} ({scope.effective_limit})")
        self._summary(session)
