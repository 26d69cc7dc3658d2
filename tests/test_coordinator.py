"""
Tests for the SessionCoordinator (mindease/session/coordinator.py).
"""

from __future__ import annotations

import json

import pytest

from mindease.exceptions import TimerStateError
from mindease.session.coordinator import TIMERS_STORAGE_KEY, SessionCoordinator, SessionMode
from mindease.tasks.models import TaskStatus
from mindease.timers.state import BreakPhase, FocusPhase
from mindease.timers.timer import BreakTimer, FocusTimer


def _coordinator(signals, storage, clock, tasks=None):
    return SessionCoordinator(
        signals,
        FocusTimer(lambda: 3, clock=clock),
        BreakTimer(lambda: 2, clock=clock),
        storage=storage,
        tasks=tasks,
    )


@pytest.fixture()
def coordinator(signals, storage, clock, tasks):
    return _coordinator(signals, storage, clock, tasks)


class TestMutualExclusion:
    def test_start_focus_stops_break(self, coordinator):
        coordinator.start_break("t1")
        s = coordinator.start_focus("t1")
        assert s.focus.phase == FocusPhase.RUNNING
        assert s.rest.phase == BreakPhase.IDLE
        assert s.mode == SessionMode.FOCUSING

    def test_start_break_stops_focus(self, coordinator):
        coordinator.start_focus("t1")
        s = coordinator.start_break("t1")
        assert s.focus.is_idle
        assert s.rest.phase == BreakPhase.RUNNING
        assert s.mode == SessionMode.BREAKING
        assert s.active_task_id == "t1"

    def test_never_both_running_through_any_sequence(self, coordinator):
        ops = [
            lambda: coordinator.start_focus("t1"),
            lambda: coordinator.start_break("t1"),
            lambda: coordinator.start_focus("t2"),
            coordinator.tick,
            lambda: coordinator.start_break(None),
            coordinator.tick,
            coordinator.tick,
            lambda: coordinator.start_focus("t1"),
            coordinator.stop_all,
        ]
        for op in ops:
            s = op()
            assert not (s.focus.is_running and s.rest.is_running)

    def test_both_running_raises(self, signals, storage, clock):
        class StuckBreakTimer(BreakTimer):
            def stop(self):
                return self.state

        coordinator = SessionCoordinator(
            signals,
            FocusTimer(lambda: 3, clock=clock),
            StuckBreakTimer(lambda: 2, clock=clock),
            storage=storage,
        )
        coordinator.start_break("t1")
        with pytest.raises(TimerStateError):
            coordinator.start_focus("t1")


class TestFocusTracking:
    def test_focus_accumulates_while_running(self, coordinator, signals, clock):
        coordinator.start_focus("t1")
        clock.advance(2)
        assert signals.get_task_focus_time("t1") == 2000

    def test_pause_stops_accumulation(self, coordinator, signals, clock):
        coordinator.start_focus("t1")
        clock.advance(1)
        coordinator.pause_focus()
        clock.advance(50)
        assert signals.get_task_focus_time("t1") == 1000
        coordinator.resume_focus()
        clock.advance(1)
        assert signals.get_task_focus_time("t1") == 2000

    def test_pause_when_idle_raises(self, coordinator):
        with pytest.raises(TimerStateError):
            coordinator.pause_focus()

    def test_switching_task_stops_previous(self, coordinator, signals, clock):
        coordinator.start_focus("t1")
        clock.advance(1)
        coordinator.start_focus("t2")
        clock.advance(5)
        assert signals.get_task_focus_time("t1") == 1000
        assert signals.get_task_focus_time("t2") == 5000

    def test_completion_stops_accumulation(self, coordinator, signals, clock):
        coordinator.start_focus("t1")
        for _ in range(3):
            clock.advance(1)
            coordinator.tick()
        assert coordinator.snapshot().focus.phase == FocusPhase.COMPLETED
        clock.advance(100)
        assert signals.get_task_focus_time("t1") == 3000


class TestTick:
    def test_tick_advances_running_timer(self, coordinator):
        coordinator.start_focus("t1")
        assert coordinator.tick().focus.remaining_seconds == 2

    def test_listeners_only_on_phase_change(self, coordinator):
        seen = []
        coordinator.start_focus("t1")
        coordinator.register_listener(lambda prev, cur: seen.append(cur.focus.phase))
        coordinator.tick()
        coordinator.tick()
        assert seen == []
        coordinator.tick()
        assert seen == [FocusPhase.COMPLETED]

    def test_break_runs_out(self, coordinator):
        coordinator.start_break("t1")
        coordinator.tick()
        s = coordinator.tick()
        assert s.rest.phase == BreakPhase.BREAK_ENDED
        assert s.rest.active_task_id == "t1"


class TestBeginTask:
    async def test_moves_todo_task_in_progress(self, coordinator, tasks, signals, clock):
        await tasks.refresh_task("t1")
        clock.advance(5)
        s = await coordinator.begin_task("t1")
        assert s.focus.is_running
        assert tasks.get_task("t1").status == TaskStatus.IN_PROGRESS
        assert signals.state.last_user_action == clock.ms()

    async def test_done_task_keeps_status(self, coordinator, tasks):
        await tasks.update_task_status("t1", TaskStatus.DONE)
        await coordinator.begin_task("t1")
        assert tasks.get_task("t1").status == TaskStatus.DONE

    async def test_unknown_task_still_starts(self, coordinator):
        s = await coordinator.begin_task("ghost")
        assert s.focus.active_task_id == "ghost"


class TestPersistence:
    def test_snapshot_written_on_change(self, coordinator, storage):
        coordinator.start_focus("t1")
        saved = json.loads(storage.get_item(TIMERS_STORAGE_KEY))
        assert saved["focus"]["phase"] == "running"
        assert saved["focus"]["active_task_id"] == "t1"
        assert saved["break"]["phase"] == "idle"

    def test_restore_resumes_running_timer(self, coordinator, signals, storage, clock):
        coordinator.start_focus("t1")
        clock.advance(1)
        restored = _coordinator(signals, storage, clock).restore()
        assert restored.focus.phase == FocusPhase.RUNNING
        assert restored.focus.remaining_seconds == 2

    def test_restore_completed_while_away(self, coordinator, signals, storage, clock):
        coordinator.start_focus("t1")
        clock.advance(30)
        restored = _coordinator(signals, storage, clock).restore()
        assert restored.focus.phase == FocusPhase.COMPLETED
        assert restored.focus.active_task_id == "t1"

    def test_restore_counts_focus_only_up_to_session_end(self, coordinator, signals, storage, clock):
        coordinator.start_focus("t1")
        clock.advance(3 * 60 * 60)
        _coordinator(signals, storage, clock).restore()
        assert signals.get_task_focus_time("t1") == 3000
        assert not signals.state.task_focus_times["t1"].accumulating

    def test_restore_drops_focus_when_both_active(self, signals, storage, clock):
        storage.set_item(TIMERS_STORAGE_KEY, json.dumps({
            "focus": {"phase": "paused", "active_task_id": "t1", "remaining_seconds": 2, "duration_seconds": 3},
            "break": {"phase": "running", "active_task_id": "t1", "remaining_seconds": 2,
                      "duration_seconds": 2, "ends_at": clock() + 2},
        }))
        s = _coordinator(signals, storage, clock).restore()
        assert s.focus.is_idle
        assert s.rest.is_running

    def test_restore_garbage_starts_idle(self, signals, storage, clock):
        storage.set_item(TIMERS_STORAGE_KEY, "nonsense")
        s = _coordinator(signals, storage, clock).restore()
        assert s.mode == SessionMode.IDLE
