import asyncio
from unittest.mock import AsyncMock

import pytest

from application.services import SyncEngine
from domain.entities import RiotId
from domain.enums import HistoryScope, ProgressCategory, SyncState
from domain.errors import SyncError, UnauthorizedError, UserInputInvalidError

from fakes import PUUID, FakeClient, make_detail, remote_history

RIOT_ID = RiotId("Gambler", "Adict")


def _engine(client, settings_store, cache_store, sleep, **kwargs):
    settings_store.set_riot_id(RIOT_ID)
    kwargs.setdefault("batch_size", 3)
    kwargs.setdefault("batch_delay", 1.5)
    kwargs.setdefault("list_delay", 1.2)
    return SyncEngine(client, settings_store, cache_store, sleep=sleep, **kwargs)


def _ids(history):
    return [m.match_id for m in history]


# ── Manual update / load more ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fresh_update_fetches_merges_and_persists(settings_store, cache_store, no_sleep):
    ids, details = remote_history(7)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)

    report = await engine.sync(page_size=5)

    assert report.listed == 5 and report.new == 5 and report.fetched == 5 and report.cached == 0
    assert _ids(engine.history) == ids[:5]
    assert _ids(settings_store.get_match_history()) == ids[:5]
    assert engine.cursor == 5
    assert engine.state is SyncState.IDLE
    client.list_match_ids.assert_awaited_once_with(PUUID, 5, 0)

    # one pause after listing, one after each of the two batches
    assert [c.args[0] for c in no_sleep.await_args_list] == [1.2, 1.5, 1.5]

    expected_champions = {details[i].participants[0].champion for i in ids[:5]}
    assert set(engine.progress.first_plays) == expected_champions
    assert settings_store.get_arena_progress() == engine.progress
    assert set((await cache_store.get_all()).keys()) == set(ids[:5])


@pytest.mark.asyncio
async def test_repeated_updates_never_duplicate(settings_store, cache_store, no_sleep):
    ids, details = remote_history(6)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)

    await engine.sync(page_size=4)
    report = await engine.sync(page_size=6)
    await engine.sync(page_size=6)

    assert report.new == 2
    history_ids = _ids(engine.history)
    assert len(history_ids) == len(set(history_ids)) == 6


@pytest.mark.asyncio
async def test_fresh_update_prepends_new_matches(settings_store, cache_store, no_sleep):
    ids, details = remote_history(4)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)
    await engine.sync(page_size=4)

    new_ids, new_details = remote_history(6)
    client.remote_ids = new_ids
    client.details = new_details
    await engine.sync(page_size=3)

    assert _ids(engine.history) == ["EUW1_6", "EUW1_5", "EUW1_4", "EUW1_3", "EUW1_2", "EUW1_1"]
    assert engine.cursor == 6


@pytest.mark.asyncio
async def test_cached_matches_cost_no_detail_requests(settings_store, cache_store, no_sleep):
    ids, details = remote_history(5)
    await cache_store.put_many({i: details[i] for i in ids[:3]})
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)

    report = await engine.sync(page_size=5)

    assert report.cached == 3 and report.fetched == 2
    fetched = [c.args[0] for c in client.fetch_match.await_args_list]
    assert sorted(fetched) == sorted(ids[3:])
    assert _ids(engine.history) == ids


@pytest.mark.asyncio
async def test_load_more_cursor_advances_by_unique_new_only(settings_store, cache_store, no_sleep):
    ids, details = remote_history(12)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)
    await engine.sync(page_size=5)  # EUW1_12 .. EUW1_8
    assert engine.cursor == 5

    # A new match is played: every remote offset shifts by one.
    ids13, details13 = remote_history(13)
    client.remote_ids, client.details = ids13, details13

    report = await engine.sync(load_more=True, page_size=5)

    # offset 5 now starts at EUW1_8, which is already known
    client.list_match_ids.assert_awaited_with(PUUID, 5, 5)
    assert report.listed == 5
    assert report.new == 4
    assert engine.cursor == 9
    assert _ids(engine.history) == [f"EUW1_{i}" for i in range(12, 3, -1)]
    assert engine.has_more is True


@pytest.mark.asyncio
async def test_short_page_marks_end_of_history(settings_store, cache_store, no_sleep):
    ids, details = remote_history(7)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)
    await engine.sync(page_size=5)

    report = await engine.sync(load_more=True, page_size=5)

    assert report.new == 2
    assert engine.has_more is False
    skipped = await engine.sync(load_more=True)
    assert skipped.skipped


@pytest.mark.asyncio
async def test_empty_page_on_load_more_is_not_an_error(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)
    await engine.sync(page_size=3)

    report = await engine.sync(load_more=True, page_size=3)

    assert report.listed == 0
    assert engine.has_more is False


@pytest.mark.asyncio
async def test_empty_page_on_fresh_update_raises(settings_store, cache_store, no_sleep):
    engine = _engine(FakeClient([], {}), settings_store, cache_store, no_sleep)

    with pytest.raises(SyncError) as info:
        await engine.sync()

    assert info.value.user_message == "No match IDs received"
    assert engine.state is SyncState.IDLE
    assert engine.is_busy is False


@pytest.mark.asyncio
async def test_identity_failure_aborts(settings_store, cache_store, no_sleep):
    client = FakeClient(*remote_history(3))
    client.resolve_account.side_effect = UnauthorizedError("expired")
    engine = _engine(client, settings_store, cache_store, no_sleep)

    with pytest.raises(UnauthorizedError):
        await engine.sync()
    client.list_match_ids.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_riot_id_is_user_input_error(settings_store, cache_store, no_sleep):
    engine = SyncEngine(FakeClient([], {}), settings_store, cache_store, sleep=no_sleep)
    with pytest.raises(UserInputInvalidError):
        await engine.sync()


@pytest.mark.asyncio
async def test_bad_matches_are_dropped_not_fatal(settings_store, cache_store, no_sleep):
    ids, details = remote_history(5)
    del details["EUW1_4"]                                       # fetch fails
    details["EUW1_2"] = make_detail("Ahri", 1, 5, puuid="x")    # player not in match
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)

    report = await engine.sync(page_size=5)

    assert _ids(engine.history) == ["EUW1_5", "EUW1_3", "EUW1_1"]
    assert report.new == 3
    assert engine.cursor == 3
    # the fetched-but-foreign match is still cached; the failed one is not
    assert set(await cache_store.get_all()) == {"EUW1_5", "EUW1_3", "EUW1_2", "EUW1_1"}


@pytest.mark.asyncio
async def test_resolved_riot_id_is_stored(settings_store, cache_store, no_sleep):
    client = FakeClient(*remote_history(2))
    engine = _engine(client, settings_store, cache_store, no_sleep)

    await engine.sync(riot_id=RiotId("gambler", "adict"))

    assert settings_store.get_riot_id() == RiotId("Gambler", "Adict")


@pytest.mark.asyncio
async def test_concurrent_sync_is_rejected(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    client = FakeClient(ids, details)
    release = asyncio.Event()
    original_list = client._list

    async def slow_list(*args):
        await release.wait()
        return await original_list(*args)

    client.list_match_ids.side_effect = slow_list
    engine = _engine(client, settings_store, cache_store, no_sleep)

    first = asyncio.create_task(engine.sync())
    while engine.state is not SyncState.LISTING_IDS:
        await asyncio.sleep(0)
    second = await engine.sync(load_more=True)
    refresh = await engine.auto_refresh_latest()
    release.set()
    await first

    assert second.skipped and refresh.skipped
    assert client.list_match_ids.await_count == 1


# ── Auto-refresh ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_auto_refresh_is_a_no_op_when_nothing_is_new(settings_store, cache_store, no_sleep):
    ids, details = remote_history(5)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)
    await engine.sync(page_size=5)
    before = engine.history
    cache_store.put_many = AsyncMock(wraps=cache_store.put_many)

    report = await engine.auto_refresh_latest()

    assert report.new == 0
    assert engine.history == before
    cache_store.put_many.assert_not_awaited()
    client.list_match_ids.assert_awaited_with(PUUID, 30, 0)


@pytest.mark.asyncio
async def test_auto_refresh_prepends_only_the_new_prefix(settings_store, cache_store, no_sleep):
    ids, details = remote_history(4)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)
    await engine.sync(page_size=4)
    await engine.sync(load_more=True, page_size=4)
    assert engine.has_more is False

    client.remote_ids, client.details = remote_history(7)
    client.fetch_match.reset_mock()

    report = await engine.auto_refresh_latest()

    assert report.new == 3
    assert _ids(engine.history) == [f"EUW1_{i}" for i in range(7, 0, -1)]
    assert sorted(c.args[0] for c in client.fetch_match.await_args_list) == ["EUW1_5", "EUW1_6", "EUW1_7"]
    assert engine.cursor == 7
    assert engine.has_more is False


@pytest.mark.asyncio
async def test_auto_refresh_sorts_new_entries_by_time(settings_store, cache_store, no_sleep):
    ids = ["EUW1_b", "EUW1_a", "EUW1_c"]
    details = {
        "EUW1_a": make_detail("Ahri", 1, 3000),
        "EUW1_b": make_detail("Zed", 2, 1000),
        "EUW1_c": make_detail("Lux", 3, 2000),
    }
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)

    await engine.auto_refresh_latest()

    assert _ids(engine.history) == ["EUW1_a", "EUW1_c", "EUW1_b"]


@pytest.mark.asyncio
async def test_auto_refresh_builds_on_the_longer_history(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep)
    await engine.sync(page_size=2)

    # Another session persisted a longer history meanwhile.
    settings_store.set_match_history([details[i].result_for(i, PUUID) for i in ids])
    client.remote_ids, client.details = remote_history(4)

    await engine.auto_refresh_latest()

    assert _ids(engine.history) == ["EUW1_4", "EUW1_3", "EUW1_2", "EUW1_1"]
    assert engine.cursor == 4


@pytest.mark.asyncio
async def test_auto_refresh_failures_are_not_raised(settings_store, cache_store, no_sleep):
    client = FakeClient(*remote_history(3))
    client.resolve_account.side_effect = UnauthorizedError("expired")
    engine = _engine(client, settings_store, cache_store, no_sleep)

    report = await engine.auto_refresh_latest()

    assert report.new == 0
    assert "expired" in report.message or "token" in report.message.lower()
    assert engine.is_busy is False


@pytest.mark.asyncio
async def test_run_auto_refresh_until_stopped(settings_store, cache_store, no_sleep):
    engine = _engine(FakeClient(*remote_history(2)), settings_store, cache_store, no_sleep)
    stop = asyncio.Event()
    calls = []
    original = engine.auto_refresh_latest

    async def counting(**kwargs):
        calls.append(1)
        if len(calls) == 3:
            stop.set()
        return await original(**kwargs)

    engine.auto_refresh_latest = counting

    runs = await engine.run_auto_refresh(interval=0.001, stop_event=stop)

    assert runs == 3


# ── Season reset ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_drop_past_games_trims_history_and_evicts_cache(settings_store, cache_store, no_sleep):
    ids, details = remote_history(5)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=5)

    report = await engine.drop_past_games("EUW1_3")
    await engine.wait_for_background()

    assert not report.skipped
    assert _ids(engine.history) == ["EUW1_5", "EUW1_4", "EUW1_3"]
    assert _ids(settings_store.get_match_history()) == ["EUW1_5", "EUW1_4", "EUW1_3"]
    assert settings_store.get_first_season_match_id() == "EUW1_3"
    assert engine.has_more is False
    assert set(await cache_store.get_all()) == {"EUW1_5", "EUW1_4", "EUW1_3"}
    expected = {details[i].participants[0].champion for i in ["EUW1_5", "EUW1_4", "EUW1_3"]}
    assert set(engine.progress.first_plays) == expected


@pytest.mark.asyncio
async def test_season_cutoff_stops_paging_in_a_new_engine(settings_store, cache_store, no_sleep):
    ids, details = remote_history(10)
    client = FakeClient(ids, details)
    engine = _engine(client, settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=3)
    await engine.drop_past_games("EUW1_8")
    await engine.wait_for_background()

    reopened = _engine(client, settings_store, cache_store, no_sleep)
    assert reopened.has_more is False
    assert reopened.cursor == 3

    report = await reopened.sync(load_more=True, page_size=5)

    assert report.skipped
    assert _ids(reopened.history) == ["EUW1_10", "EUW1_9", "EUW1_8"]
    assert client.list_match_ids.await_count == 1

    reopened.reload()
    assert reopened.has_more is False


@pytest.mark.asyncio
async def test_new_engine_pages_when_cutoff_is_not_the_oldest_entry(settings_store, cache_store, no_sleep):
    ids, details = remote_history(6)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=3)
    settings_store.set_first_season_match_id("EUW1_5")

    assert _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep).has_more is True


@pytest.mark.asyncio
async def test_drop_past_games_accepts_async_confirmation(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    confirm = AsyncMock(return_value=True)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=confirm)
    await engine.sync(page_size=3)

    report = await engine.drop_past_games("EUW1_2")

    assert not report.skipped
    assert _ids(engine.history) == ["EUW1_3", "EUW1_2"]
    confirm.assert_awaited_once()

    confirm.return_value = False
    assert (await engine.drop_past_games("EUW1_3")).skipped


@pytest.mark.asyncio
async def test_drop_past_games_defaults_to_newest(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=3)

    await engine.drop_past_games()

    assert _ids(engine.history) == ["EUW1_3"]
    assert settings_store.get_first_season_match_id() == "EUW1_3"


@pytest.mark.asyncio
async def test_drop_past_games_requires_confirmation(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)
    await engine.sync(page_size=3)

    report = await engine.drop_past_games("EUW1_2")

    assert report.skipped
    assert len(engine.history) == 3
    assert settings_store.get_first_season_match_id() is None


@pytest.mark.asyncio
async def test_eviction_failure_is_swallowed(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=3)
    cache_store.delete_many = AsyncMock(side_effect=RuntimeError("disk gone"))

    await engine.drop_past_games("EUW1_2")
    await engine.wait_for_background()

    assert _ids(engine.history) == ["EUW1_3", "EUW1_2"]
    cache_store.delete_many.assert_awaited_once_with(["EUW1_1"])


# ── Progress and wipes ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_history_scope_recomputes_and_notifies(settings_store, cache_store, no_sleep):
    ids, details = remote_history(5)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)
    await engine.sync(page_size=5)
    seen = []
    engine.subscribe(seen.append)

    scope = engine.set_history_scope(HistoryScope.LAST_N, 1)

    assert scope.limit == 1
    assert engine.progress.first_plays == [details["EUW1_5"].participants[0].champion]
    assert seen[-1] is engine.progress

    engine.unsubscribe(seen.append)
    engine.set_history_scope("all")
    assert len(seen) == 1


def test_toggle_progress_and_recompute_overwrites(settings_store, cache_store, no_sleep):
    engine = _engine(FakeClient([], {}), settings_store, cache_store, no_sleep)

    assert engine.toggle_progress(ProgressCategory.WINS, "Ahri") is True
    assert engine.progress.wins == ["Ahri"]
    assert engine.progress.first_place_champions == ["Ahri"]
    assert settings_store.get_arena_progress().wins == ["Ahri"]

    assert engine.toggle_progress(ProgressCategory.WINS, "Ahri") is False
    assert engine.progress.wins == []

    engine.toggle_progress(ProgressCategory.TOP4S, "Zed")
    engine.recompute_progress()
    assert engine.progress.top4s == []


@pytest.mark.asyncio
async def test_clear_matches_keeps_progress_and_cache(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep)
    await engine.sync(page_size=3)
    progress = engine.progress

    engine.clear_matches()

    assert engine.history == [] and engine.cursor == 0 and engine.has_more
    assert settings_store.get_match_history() == []
    assert settings_store.get_arena_progress() == progress
    assert len(await cache_store.get_all()) == 3


@pytest.mark.asyncio
async def test_clear_all_wipes_everything(settings_store, cache_store, no_sleep):
    ids, details = remote_history(3)
    engine = _engine(FakeClient(ids, details), settings_store, cache_store, no_sleep, confirm=lambda _: True)
    await engine.sync(page_size=3)
    await engine.drop_past_games()
    await engine.wait_for_background()

    await engine.clear_all()

    assert engine.history == [] and engine.progress.first_plays == []
    assert settings_store.get_first_season_match_id() is None
    assert await cache_store.get_all() == {}
    assert settings_store.get_riot_id() == RIOT_ID
