"""Tests for the ghost appearance schedule."""
from cladding_layout.ghosting import GhostSchedule


class TestGhostSchedule:
    """Deferred, cancellable appearance swaps."""

    def test_runs_in_due_order(self):
        schedule = GhostSchedule()
        calls = []
        schedule.schedule(0.02, lambda: calls.append("b"))
        schedule.schedule(0.01, lambda: calls.append("a"))
        schedule.schedule(0.02, lambda: calls.append("c"))
        assert schedule.advance(0.015) == 1
        assert calls == ["a"]
        assert schedule.advance(0.01) == 2
        assert calls == ["a", "b", "c"]

    def test_nothing_runs_before_due(self):
        schedule = GhostSchedule()
        calls = []
        schedule.schedule(1.0, lambda: calls.append(1))
        assert schedule.advance(0.5) == 0
        assert schedule.pending == 1
        assert calls == []

    def test_cancel(self):
        schedule = GhostSchedule()
        calls = []
        for i in range(3):
            schedule.schedule(0.1 * i, lambda: calls.append(i))
        assert schedule.cancel() == 3
        assert schedule.pending == 0
        assert schedule.advance(10.0) == 0
        assert calls == []

    def test_flush(self):
        schedule = GhostSchedule()
        calls = []
        schedule.schedule(5.0, lambda: calls.append("late"))
        schedule.schedule(50.0, lambda: calls.append("later"))
        assert schedule.flush() == 2
        assert calls == ["late", "later"]
        assert schedule.flush() == 0

    def test_delay_is_relative_to_clock(self):
        schedule = GhostSchedule()
        schedule.advance(2.0)
        task = schedule.schedule(1.0, lambda: None)
        assert task.due == 3.0

    def test_negative_delay_runs_immediately(self):
        schedule = GhostSchedule()
        calls = []
        schedule.schedule(-1.0, lambda: calls.append(1))
        assert schedule.advance(0.0) == 1
