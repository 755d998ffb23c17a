"""Tests for OfflineSyncManager sync passes and connectivity handling."""
from __future__ import annotations

import asyncio

from services.local_storage import JsonFileStorage
from services.remote_store import LocalOnlyRemoteStore
from services.sync_offline import LAST_SYNC_KEY, Connectivity


def go_online(mgr):
    async def scenario():
        mgr.notify_connectivity_changed(Connectivity.ONLINE)
        await mgr.wait_for_pending_syncs()
    asyncio.run(scenario())


class TestSyncPass:
    def test_going_online_drains_queue(self, make_manager, remote_factory, clock):
        notes = []
        remote = remote_factory()
        mgr = make_manager(remote, on_notify=notes.append)
        for n in range(3):
            mgr.enqueue({"n": n})

        go_online(mgr)

        status = mgr.get_status()
        assert status.online is True
        assert status.pending_count == 0
        assert status.last_sync_time == clock.now
        assert [p["n"] for p in remote.calls] == [0, 1, 2]
        assert "Synced 3 cached items" in notes

    def test_item_dropped_after_fourth_failure(self, make_manager, remote_factory):
        remote = remote_factory(default=False)
        mgr = make_manager(remote)
        item = mgr.enqueue({"n": 1})

        go_online(mgr)
        asyncio.run(mgr.sync_pass())
        asyncio.run(mgr.sync_pass())
        assert item.retry_count == 3
        assert mgr.get_status().pending_count == 1

        asyncio.run(mgr.sync_pass())
        assert item.retry_count == 4
        assert mgr.get_status().pending_count == 0

        assert asyncio.run(mgr.sync_pass()) is False
        assert len(remote.calls) == 4

    def test_two_failures_then_success(self, make_manager, remote_factory):
        remote = remote_factory({1: [False, RuntimeError("boom"), True]})
        mgr = make_manager(remote)
        item = mgr.enqueue({"n": 1})

        go_online(mgr)
        asyncio.run(mgr.sync_pass())
        assert mgr.get_status().pending_count == 1
        asyncio.run(mgr.sync_pass())

        assert mgr.get_status().pending_count == 0
        assert item.retry_count == 2
        assert len(remote.calls) == 3

    def test_one_failing_item_does_not_stop_the_rest(self, make_manager, remote_factory):
        remote = remote_factory({0: [ConnectionError("unreachable")]})
        mgr = make_manager(remote)
        first = mgr.enqueue({"n": 0})
        mgr.enqueue({"n": 1})
        mgr.enqueue({"n": 2})

        go_online(mgr)

        assert [i.id for i in mgr.queue.peek_all()] == [first.id]
        assert first.retry_count == 1
        assert len(remote.calls) == 3

    def test_retry_counts_survive_restart(self, tmp_path, make_manager, remote_factory):
        path = str(tmp_path / "storage.json")
        mgr = make_manager(remote_factory(default=False), store=JsonFileStorage(path))
        mgr.enqueue({"n": 1})
        go_online(mgr)

        again = make_manager(store=JsonFileStorage(path))
        (item,) = again.queue.peek_all()
        assert item.retry_count == 1

    def test_offline_pass_is_noop(self, make_manager, remote_factory):
        remote = remote_factory()
        mgr = make_manager(remote)
        mgr.enqueue({"n": 1})

        assert asyncio.run(mgr.sync_pass()) is False
        assert remote.calls == []
        assert mgr.get_status().pending_count == 1

    def test_empty_queue_pass_is_noop(self, make_manager):
        mgr = make_manager(online=True)
        assert asyncio.run(mgr.sync_pass()) is False

    def test_local_only_store_keeps_items(self, make_manager):
        mgr = make_manager(LocalOnlyRemoteStore("no keys.json"))
        item = mgr.enqueue({"n": 1})

        go_online(mgr)
        asyncio.run(mgr.sync_pass())

        assert mgr.get_status().pending_count == 1
        assert item.retry_count == 0

    def test_last_sync_time_is_persisted(self, make_manager, storage, clock):
        mgr = make_manager()
        mgr.enqueue({"n": 1})
        go_online(mgr)

        assert storage.get(LAST_SYNC_KEY) == str(clock.now)
        assert make_manager().get_status().last_sync_time == clock.now


class TestSingleFlight:
    def test_second_pass_while_running_is_dropped(self, make_manager, remote_factory):
        remote = remote_factory(default=False, delay=0.01)
        mgr = make_manager(remote)
        item = mgr.enqueue({"n": 1})
        mgr.connectivity = Connectivity.ONLINE

        async def scenario():
            first = asyncio.create_task(mgr.sync_pass())
            second = asyncio.create_task(mgr.sync_pass())
            return await asyncio.gather(first, second)

        assert asyncio.run(scenario()) == [True, False]
        assert item.retry_count == 1
        assert len(remote.calls) == 1

    def test_item_enqueued_mid_pass_drains_in_follow_up(self, make_manager, remote_factory):
        remote = remote_factory(delay=0.01)
        mgr = make_manager(remote)
        mgr.enqueue({"n": 0})
        mgr.connectivity = Connectivity.ONLINE

        async def scenario():
            running = asyncio.create_task(mgr.sync_pass())
            await asyncio.sleep(0)
            assert mgr.is_syncing
            late = mgr.enqueue({"n": 1})
            await running
            await mgr.wait_for_pending_syncs()
            return late

        late = asyncio.run(scenario())

        assert mgr.get_status().pending_count == 0
        assert not mgr.is_syncing
        assert late.retry_count == 0
        assert [p["n"] for p in remote.calls] == [0, 1]

    def test_follow_up_covers_whole_queue(self, make_manager, remote_factory):
        remote = remote_factory({0: [False]}, delay=0.01)
        mgr = make_manager(remote)
        failing = mgr.enqueue({"n": 0})
        mgr.connectivity = Connectivity.ONLINE

        async def scenario():
            running = asyncio.create_task(mgr.sync_pass())
            await asyncio.sleep(0)
            mgr.enqueue({"n": 1})
            await running
            await mgr.wait_for_pending_syncs()

        asyncio.run(scenario())

        # follow-up retried the failed entry once and delivered both
        assert mgr.get_status().pending_count == 0
        assert failing.retry_count == 1
        assert [p["n"] for p in remote.calls] == [0, 0, 1]

    def test_thread_fallback_can_be_awaited(self, make_manager, remote_factory):
        remote = remote_factory(delay=0.01)
        mgr = make_manager(remote, online=True)

        # no running loop here, so the pass starts on a worker thread
        mgr.enqueue({"n": 1})
        asyncio.run(mgr.wait_for_pending_syncs())

        assert mgr.get_status().pending_count == 0
        assert len(remote.calls) == 1


class TestConnectivity:
    def test_going_offline_keeps_queue(self, make_manager):
        notes = []
        mgr = make_manager(online=True, on_notify=notes.append)
        mgr.connectivity = Connectivity.OFFLINE
        mgr.enqueue({"n": 1})
        mgr.connectivity = Connectivity.ONLINE

        mgr.notify_connectivity_changed(Connectivity.OFFLINE)

        assert mgr.get_status().online is False
        assert mgr.get_status().pending_count == 1
        assert notes == ["Offline - Data will be cached locally"]

    def test_repeated_state_is_ignored(self, make_manager):
        notes = []
        mgr = make_manager(on_notify=notes.append)
        mgr.notify_connectivity_changed(False)
        assert notes == []

    def test_status_snapshot_does_not_mutate(self, make_manager):
        mgr = make_manager()
        mgr.enqueue({"n": 1})
        before = [i.to_dict() for i in mgr.queue.peek_all()]

        status = mgr.get_status()
        mgr.get_status()

        assert status.pending_count == 1
        assert status.last_sync_time is None
        assert [i.to_dict() for i in mgr.queue.peek_all()] == before


class TestLocalPersistenceFailure:
    def test_quota_exceeded_is_a_warning(self, tmp_path, make_manager):
        warnings = []
        store = JsonFileStorage(str(tmp_path / "storage.json"), max_bytes=200)
        mgr = make_manager(store=store, on_warning=warnings.append)

        for n in range(10):
            mgr.enqueue({"n": n, "note": "x" * 40})

        assert mgr.get_status().pending_count == 10
        assert warnings
        assert "Could not save pending entries locally" in warnings[0]

    def test_in_memory_queue_still_syncs(self, tmp_path, make_manager, remote_factory):
        store = JsonFileStorage(str(tmp_path / "storage.json"), max_bytes=200)
        remote = remote_factory()
        mgr = make_manager(remote, store=store, on_warning=lambda _: None)
        for n in range(5):
            mgr.enqueue({"n": n, "note": "x" * 40})

        go_online(mgr)

        assert mgr.get_status().pending_count == 0
        assert len(remote.calls) == 5
