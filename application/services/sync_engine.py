"""Incremental match-history sync.

One engine instance owns the in-memory history, the pagination cursor and
the busy flag shared by every entry point. Manual update, load-more,
auto-refresh and the season reset all go through the same flag, so their
merges can never interleave.
"""
import asyncio
import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set, Union

from config import settings
from core.logging import context, get_logger
from domain.entities import ArenaProgress, MatchDetail, MatchResult, ProgressScope, RiotId
from domain.entities.scope import clamp_limit
from domain.enums import HistoryScope, ProgressCategory, SyncState
from domain.errors import ArenaTrackerError, StoreError, SyncError, UserInputInvalidError
from domain.interfaces import IMatchCacheStore, IMatchClient, ISettingsStore
from .progress_aggregator import aggregate

logger = get_logger(__name__, service="sync")

Sleep = Callable[[float], Awaitable[None]]
Confirm = Callable[[str], Union[bool, Awaitable[bool]]]
ProgressListener = Callable[[ArenaProgress], None]

DROP_PAST_GAMES_PROMPT = (
    "Drop all older games and track from this match onward? "
    "This will ignore older matches for progress and stop loading older matches."
)


def _deny(_prompt: str) -> bool:
    return False


@dataclass
class SyncReport:
    """Outcome of one engine operation, for display and logging."""

    operation: str
    requested: int = 0   # ids asked for
    listed: int = 0      # ids the provider returned
    cached: int = 0      # details served from the cache
    fetched: int = 0     # details fetched over the network
    new: int = 0         # entries merged into history
    skipped: bool = False
    message: str = ""

    def __str__(self) -> str:
        if self.skipped:
            return f"{self.operation}: skipped ({self.message})"
        return (
            f"{self.operation}: {self.new} new "
            f"({self.listed} listed, {self.cached} cached, {self.fetched} fetched)"
            + (f" - {self.message}" if self.message else "")
        )


@dataclass
class _BatchOutcome:
    results: List[MatchResult]
    cached: int
    fetched: int


class SyncEngine:
    """
    Keeps the local mirror of the player's arena history up to date.

    Collaborators are injected:
      - ``client``: remote match provider (rate limited, retrying)
      - ``store``: settings namespace (identity, history, progress, cutoff, scope)
      - ``cache``: match-detail namespace
      - ``sleep``: pacing delays; tests pass a no-op
      - ``confirm``: asked before destructive operations; denies by default
        (plain or async callable)
    """

    def __init__(
        self,
        client: IMatchClient,
        store: ISettingsStore,
        cache: IMatchCacheStore,
        *,
        sleep: Sleep = asyncio.sleep,
        confirm: Confirm = _deny,
        batch_size: int = settings.BATCH_SIZE,
        batch_delay: float = settings.BATCH_PACING_DELAY,
        list_delay: float = settings.LIST_PACING_DELAY,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        auto_refresh_count: int = settings.AUTO_REFRESH_COUNT,
    ):
        self.client = client
        self.store = store
        self.cache = cache
        self._sleep = sleep
        self._confirm = confirm

        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self.list_delay = list_delay
        self.page_size = settings.clamp_page_size(page_size)
        self.auto_refresh_count = auto_refresh_count

        self._history: List[MatchResult] = store.get_match_history()
        self._progress: ArenaProgress = store.get_arena_progress()
        self._cursor = len(self._history)
        self._has_more = self._stored_has_more()
        self._busy = False
        self._state = SyncState.IDLE

        self._listeners: List[ProgressListener] = []
        self._background: Set[asyncio.Task] = set()

    # ── Read-only views ────────────────────────────────────────────────────

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def history(self) -> List[MatchResult]:
        return list(self._history)

    @property
    def progress(self) -> ArenaProgress:
        return self._progress

    def _stored_has_more(self) -> bool:
        # History ending at the season cutoff means older pages were dropped.
        cutoff = self.store.get_first_season_match_id()
        return not (cutoff and self._history and self._history[-1].match_id == cutoff)

    # ── Notifications ──────────────────────────────────────────────────────

    def subscribe(self, listener: ProgressListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._progress)
            except Exception as e:
                logger.error(lambda: f"progress listener {listener!r} failed: {e}")

    # ── State machine ──────────────────────────────────────────────────────

    def _set_state(self, state: SyncState) -> None:
        if state is not self._state:
            logger.trace(lambda: f"state {self._state.value} -> {state.value}")
        self._state = state

    def _acquire(self, operation: str) -> Optional[SyncReport]:
        """Take the busy flag, or return the report for a rejected call."""
        if self._busy:
            logger.info(lambda: f"{operation} ignored: another operation is in progress")
            return SyncReport(operation=operation, skipped=True, message="another operation is in progress")
        self._busy = True
        return None

    def _release(self) -> None:
        self._busy = False
        self._set_state(SyncState.IDLE)

    # ── Shared fetch path ──────────────────────────────────────────────────

    def _resolve_riot_id(self, riot_id: Optional[RiotId]) -> RiotId:
        riot_id = riot_id or self.store.get_riot_id()
        if riot_id is None:
            raise UserInputInvalidError("no riot id configured")
        return riot_id

    async def _fetch_one(self, match_id: str) -> Optional[MatchDetail]:
        try:
            return await self.client.fetch_match(match_id)
        except ArenaTrackerError as e:
            logger.warning(lambda: f"match {match_id} skipped: {e}")
            return None

    async def _process_batch(self, puuid: str, batch: Sequence[str]) -> _BatchOutcome:
        """
        Cache-first: cached ids cost no request; the rest are fetched
        concurrently and written back in one bulk call. Results keep the
        provider's order. Matches the player is not part of are dropped.
        """
        try:
            cached = await self.cache.get_many(batch)
        except StoreError as e:
            logger.warning(lambda: f"cache read failed, fetching the whole batch: {e}")
            cached = {}

        uncached = [match_id for match_id in batch if match_id not in cached]
        details = await asyncio.gather(*(self._fetch_one(match_id) for match_id in uncached))
        staged: Dict[str, MatchDetail] = {
            match_id: detail for match_id, detail in zip(uncached, details) if detail is not None
        }

        if staged:
            try:
                await self.cache.put_many(staged)
            except StoreError as e:
                logger.warning(lambda: f"cache write of {len(staged)} match(es) failed: {e}")

        results: List[MatchResult] = []
        for match_id in batch:
            detail = cached.get(match_id) or staged.get(match_id)
            if detail is None:
                continue
            result = detail.result_for(match_id, puuid)
            if result is None:
                logger.debug(lambda: f"player not found in {match_id}, dropped")
                continue
            results.append(result)

        return _BatchOutcome(results=results, cached=len(cached), fetched=len(staged))

    async def _run_batches(
        self,
        puuid: str,
        match_ids: Sequence[str],
        report: SyncReport,
        on_batch: Optional[Callable[[List[MatchResult]], None]] = None,
    ) -> List[MatchResult]:
        """Process ids in order, one batch at a time, pausing after every batch."""
        collected: List[MatchResult] = []
        total = (len(match_ids) + self.batch_size - 1) // self.batch_size
        for number, start in enumerate(range(0, len(match_ids), self.batch_size), start=1):
            batch = match_ids[start:start + self.batch_size]
            self._set_state(SyncState.BATCHING)
            with context(batch=f"{number}/{total}"):
                outcome = await self._process_batch(puuid, batch)
                report.cached += outcome.cached
                report.fetched += outcome.fetched
                logger.debug(
                    lambda: f"batch {number}/{total}: {outcome.cached} cached, "
                    f"{outcome.fetched} fetched, {len(outcome.results)} results"
                )
                if on_batch is not None:
                    on_batch(outcome.results)
                collected.extend(outcome.results)
            await self._sleep(self.batch_delay)
        return collected

    def _persist(self, history: List[MatchResult]) -> None:
        self._set_state(SyncState.PERSISTING)
        self.store.set_match_history(history)
        self._history = history
        self.recompute_progress()

    # ── A. Manual update / load more ───────────────────────────────────────

    async def sync(
        self,
        load_more: bool = False,
        *,
        riot_id: Optional[RiotId] = None,
        page_size: Optional[int] = None,
    ) -> SyncReport:
        """
        Fresh update (``load_more=False``) prepends the newest unseen matches;
        load-more appends the next page after the cursor.

        Identity and listing failures raise; per-match failures only drop
        that match. Each batch is merged and persisted as soon as it is
        processed, so work done before a failure is kept.
        """
        operation = "load_more" if load_more else "update"
        if load_more and not self._has_more:
            return SyncReport(operation=operation, skipped=True, message="no more matches")
        rejected = self._acquire(operation)
        if rejected:
            return rejected

        try:
            riot_id = self._resolve_riot_id(riot_id)
            with context(operation=operation, riot_id=str(riot_id)):
                return await self._sync(load_more, riot_id, page_size, operation)
        except ArenaTrackerError as e:
            self._set_state(SyncState.ERROR)
            logger.error(lambda: f"{operation} failed: {e}")
            raise
        finally:
            self._release()

    async def _sync(
        self, load_more: bool, riot_id: RiotId, page_size: Optional[int], operation: str
    ) -> SyncReport:
        self._set_state(SyncState.RESOLVING)
        account = await self.client.resolve_account(riot_id.game_name, riot_id.tag_line)
        self.store.set_riot_id(account.riot_id)

        count = settings.clamp_page_size(page_size if page_size is not None else self.page_size)
        start = self._cursor if load_more else 0
        report = SyncReport(operation=operation, requested=count)

        with context(puuid=account.puuid):
            self._set_state(SyncState.LISTING_IDS)
            match_ids = await self.client.list_match_ids(account.puuid, count, start)
            await self._sleep(self.list_delay)
            report.listed = len(match_ids)
            logger.info(lambda: f"listed {len(match_ids)} id(s) from offset {start}")

            if not match_ids:
                if load_more:
                    self._has_more = False
                    report.message = "no more matches"
                    return report
                raise SyncError("empty id list on fresh update", user_message="No match IDs received")

            base = list(self._history)
            seen = {m.match_id for m in base}
            merged_new: List[MatchResult] = []

            def merge(results: List[MatchResult]) -> None:
                self._set_state(SyncState.MERGING)
                fresh = [r for r in results if r.match_id not in seen]
                seen.update(r.match_id for r in fresh)
                if not fresh:
                    return
                merged_new.extend(fresh)
                self._cursor += len(fresh)
                self._persist(base + merged_new if load_more else merged_new + base)

            await self._run_batches(account.puuid, match_ids, report, on_batch=merge)
            report.new = len(merged_new)

            if load_more and len(match_ids) < count:
                self._has_more = False
                report.message = "reached the end of the history"

        if not report.new:
            # Nothing merged; still refresh progress from the full history.
            self.recompute_progress()
        logger.success(lambda: str(report))
        return report

    # ── B. Auto-refresh ────────────────────────────────────────────────────

    def _base_history(self) -> List[MatchResult]:
        """The longer of the in-memory and persisted histories."""
        persisted = self.store.get_match_history()
        return persisted if len(persisted) >= len(self._history) else list(self._history)

    async def auto_refresh_latest(self, *, riot_id: Optional[RiotId] = None) -> SyncReport:
        """
        Pull the newest page and prepend whatever is new.

        Best effort: failures are logged and reported, never raised. The
        "has more" flag is left alone so manual paging keeps working.
        """
        operation = "auto_refresh"
        rejected = self._acquire(operation)
        if rejected:
            return rejected

        report = SyncReport(operation=operation, requested=self.auto_refresh_count)
        try:
            riot_id = self._resolve_riot_id(riot_id)
            with context(operation=operation, riot_id=str(riot_id)):
                await self._auto_refresh(riot_id, report)
        except Exception as e:
            self._set_state(SyncState.ERROR)
            logger.warning(lambda: f"auto-refresh failed: {e}")
            report.message = getattr(e, "user_message", None) or str(e)
        finally:
            self._release()
        return report

    async def _auto_refresh(self, riot_id: RiotId, report: SyncReport) -> None:
        self._set_state(SyncState.RESOLVING)
        account = await self.client.resolve_account(riot_id.game_name, riot_id.tag_line)

        with context(puuid=account.puuid):
            self._set_state(SyncState.LISTING_IDS)
            match_ids = await self.client.list_match_ids(account.puuid, self.auto_refresh_count, 0)
            report.listed = len(match_ids)
            if not match_ids:
                report.message = "no matches listed"
                return

            base = self._base_history()
            newest_known = base[0].match_id if base else None
            if newest_known is not None and newest_known in match_ids:
                match_ids = match_ids[: match_ids.index(newest_known)]
            if not match_ids:
                report.message = "no new matches found"
                logger.info("auto-refresh: no new matches found")
                return

            results = await self._run_batches(account.puuid, match_ids, report)

            self._set_state(SyncState.MERGING)
            known = {m.match_id for m in base}
            fresh: Dict[str, MatchResult] = {}
            for result in results:
                if result.match_id not in known:
                    fresh.setdefault(result.match_id, result)
            new_entries = sorted(fresh.values(), key=lambda m: m.timestamp, reverse=True)
            report.new = len(new_entries)
            if not new_entries:
                report.message = "no new matches found"
                return

            adopted_stored = len(base) > len(self._history)
            self._persist(new_entries + base)
            if adopted_stored:
                self._cursor = len(self._history)
            else:
                self._cursor += len(new_entries)
            report.message = f"added {len(new_entries)} new match(es)"
            logger.success(lambda: str(report))

    async def run_auto_refresh(
        self,
        interval: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
        *,
        riot_id: Optional[RiotId] = None,
    ) -> int:
        """Refresh now, then every ``interval`` seconds until ``stop_event`` is set.

        Returns the number of refreshes run.
        """
        interval = settings.AUTO_REFRESH_INTERVAL if interval is None else interval
        stop_event = stop_event or asyncio.Event()
        runs = 0
        while not stop_event.is_set():
            report = await self.auto_refresh_latest(riot_id=riot_id)
            runs += 1
            logger.info(lambda: str(report))
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
        return runs

    # ── C. Season reset ────────────────────────────────────────────────────

    async def drop_past_games(self, cutoff_match_id: Optional[str] = None) -> SyncReport:
        """
        Mark a season cutoff and forget everything older.

        The cutoff defaults to the newest entry. Older ids are evicted from
        the cache in the background; eviction is an optimisation and its
        failures are only logged.
        """
        operation = "drop_past_games"
        if not self._history:
            return SyncReport(operation=operation, skipped=True, message="history is empty")

        if cutoff_match_id:
            index = next(
                (i for i, m in enumerate(self._history) if m.match_id == cutoff_match_id), -1
            )
            if index < 0:
                return SyncReport(operation=operation, skipped=True, message=f"{cutoff_match_id} is not in history")
        else:
            index = 0

        confirmed = self._confirm(DROP_PAST_GAMES_PROMPT)
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            return SyncReport(operation=operation, skipped=True, message="not confirmed")

        rejected = self._acquire(operation)
        if rejected:
            return rejected
        try:
            cutoff = self._history[index].match_id
            self.store.set_first_season_match_id(cutoff)

            removed = [m.match_id for m in self._history[index + 1:]]
            if removed:
                self._spawn(self._evict(removed))

            self._has_more = False
            self._persist(self._history[: index + 1])
            self._cursor = len(self._history)
            logger.info(lambda: f"season cutoff set to {cutoff}, dropped {len(removed)} older match(es)")
            return SyncReport(operation=operation, message=f"cutoff {cutoff}, dropped {len(removed)}")
        finally:
            self._release()

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _evict(self, match_ids: List[str]) -> None:
        try:
            await self.cache.delete_many(match_ids)
        except Exception as e:
            logger.warning(lambda: f"cache eviction of {len(match_ids)} match(es) failed: {e}")

    async def wait_for_background(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ── Progress ───────────────────────────────────────────────────────────

    def recompute_progress(self) -> ArenaProgress:
        self._progress = aggregate(
            self._history,
            self.store.get_first_season_match_id(),
            self.store.get_progress_scope(),
        )
        self.store.set_arena_progress(self._progress)
        self._notify()
        return self._progress

    def set_history_scope(self, mode, limit: Optional[int] = None) -> ProgressScope:
        current = self.store.get_progress_scope()
        scope = ProgressScope(
            mode=HistoryScope.parse(mode),
            limit=clamp_limit(limit) if limit is not None else current.limit,
        )
        self.store.set_progress_scope(scope)
        self.recompute_progress()
        return scope

    def toggle_progress(self, category: ProgressCategory, champion: str) -> bool:
        """Manually flip a champion in one category; returns whether it is now tracked.

        The next recompute overwrites manual changes.
        """
        progress = self._progress
        current = progress.champions(category)
        tracked = champion not in current
        updated = current + [champion] if tracked else [c for c in current if c != champion]

        if category is ProgressCategory.WINS:
            progress = ArenaProgress(progress.first_plays, progress.top4s, updated, updated)
        elif category is ProgressCategory.TOP4S:
            progress = ArenaProgress(progress.first_plays, updated, progress.wins, progress.wins)
        else:
            progress = ArenaProgress(updated, progress.top4s, progress.wins, progress.wins)

        self._progress = progress
        self.store.set_arena_progress(progress)
        self._notify()
        return tracked

    # ── Wipes ──────────────────────────────────────────────────────────────

    def clear_matches(self) -> None:
        """Forget the history; progress and the cache are kept."""
        self.store.clear_match_history()
        self._history = []
        self._cursor = 0
        self._has_more = True
        logger.info("match history cleared")

    async def clear_all(self) -> None:
        """Forget history, progress, season cutoff and every cached match."""
        self.store.clear_all_match_data()
        await self.cache.clear()
        self._history = []
        self._progress = ArenaProgress()
        self._cursor = 0
        self._has_more = True
        self._notify()
        logger.info("all match data cleared")

    def reload(self) -> None:
        """Re-read history and progress from the store, e.g. after a restore."""
        self._history = self.store.get_match_history()
        self._progress = self.store.get_arena_progress()
        self._cursor = len(self._history)
        self._has_more = self._stored_has_more()
        self._notify()
