"""
Tests for SignalStore persistence and derived queries (mindease/signals/store.py).
"""

from __future__ import annotations

import json

from mindease.alerts.constants import MIN_ALERT_INTERVAL_MS
from mindease.exceptions import StorageError
from mindease.signals.state import AlertType
from mindease.signals.storage import FileSessionStorage, MemorySessionStorage, SessionStorage
from mindease.signals.store import STORAGE_KEY, SignalStore


class BrokenStorage(SessionStorage):
    def get_item(self, key):
        raise StorageError("unavailable")

    def set_item(self, key, value):
        raise StorageError("unavailable")

    def remove_item(self, key):
        raise StorageError("unavailable")


class TestPersistence:
    def test_every_action_is_written(self, signals, storage):
        signals.increment_sessions()
        saved = json.loads(storage.get_item(STORAGE_KEY))
        assert saved["consecutive_sessions"] == 1

    def test_state_survives_reload(self, storage, clock):
        first = SignalStore(storage, clock=clock.ms)
        first.show_alert(AlertType.MISSING_BREAK)
        first.start_task_focus("t1")
        clock.advance(60)
        second = SignalStore(storage, clock=clock.ms)
        assert second.state.alert_history == (AlertType.MISSING_BREAK,)
        assert second.get_task_focus_time("t1") == 60_000

    def test_invalid_json_starts_fresh(self, clock):
        storage = MemorySessionStorage({STORAGE_KEY: "{not json"})
        store = SignalStore(storage, clock=clock.ms)
        assert store.state.alert_history == ()
        assert store.state.last_user_action == clock.ms()

    def test_broken_storage_never_raises(self, clock):
        store = SignalStore(BrokenStorage(), clock=clock.ms)
        store.increment_sessions()
        assert store.state.consecutive_sessions == 1

    def test_file_storage_round_trip(self, tmp_path, clock):
        path = tmp_path / "session.json"
        SignalStore(FileSessionStorage(path), clock=clock.ms).increment_sessions()
        reloaded = SignalStore(FileSessionStorage(path), clock=clock.ms)
        assert reloaded.state.consecutive_sessions == 1

    def test_corrupt_file_starts_fresh_and_is_replaced(self, tmp_path, clock):
        path = tmp_path / "session.json"
        path.write_text("][")
        store = SignalStore(FileSessionStorage(path), clock=clock.ms)
        assert store.state.consecutive_sessions == 0
        store.increment_sessions()
        assert STORAGE_KEY in json.loads(path.read_text())

    def test_listener_sees_each_change(self, signals):
        seen = []
        signals.register_listener(lambda state, action: seen.append(type(action).__name__))
        signals.start_navigation()
        signals.start_navigation()      # no change
        signals.stop_navigation()
        assert seen == ["StartNavigation", "StopNavigation"]


class TestQueries:
    def test_rate_limit_blocks_other_types(self, signals, clock):
        signals.show_alert(AlertType.MISSING_BREAK)
        clock.advance(10 * 60)
        assert signals.should_show_alert(AlertType.EXCESSIVE_TIME) is False

    def test_rate_limit_lifts_after_interval(self, signals, clock):
        signals.show_alert(AlertType.MISSING_BREAK)
        clock.advance(MIN_ALERT_INTERVAL_MS / 1000)
        assert signals.should_show_alert(AlertType.EXCESSIVE_TIME) is True

    def test_dedup_within_session(self, signals, clock):
        signals.show_alert(AlertType.MISSING_BREAK)
        clock.advance(3 * 3600)
        assert signals.should_show_alert(AlertType.MISSING_BREAK) is False

    def test_focus_time_stable_after_stop(self, signals, clock):
        signals.start_task_focus("t1")
        clock.advance(120)
        signals.stop_task_focus("t1")
        clock.advance(600)
        assert signals.get_task_focus_time("t1") == 120_000

    def test_focus_time_unknown_task(self, signals):
        assert signals.get_task_focus_time("nope") == 0

    def test_navigation_time(self, signals, clock):
        assert signals.get_navigation_time() == 0
        signals.start_navigation()
        clock.advance(30)
        assert signals.get_navigation_time() == 30_000
        signals.update_user_action()
        assert signals.get_navigation_time() == 0
