"""
Tests for Hold-To-Confirm Timers and Gates
==========================================
"""

import pytest

from handworlds.control.hold_gate import HoldTimer, HoldGate
from handworlds.core.events import Events
from handworlds.core.types import GateState, WorldId


class TestHoldTimer:

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            HoldTimer(0.0)

    def test_progress_non_decreasing_and_exact_at_duration(self):
        timer = HoldTimer(3.0)
        previous = 0.0
        for i in range(31):
            progress = timer.update(True, 10.0 + i * 0.1)
            assert progress >= previous
            previous = progress
        assert timer.update(True, 13.0) == 1.0

    def test_half_way(self):
        timer = HoldTimer(3.0)
        timer.update(True, 10.0)
        assert timer.update(True, 11.5) == pytest.approx(0.5)

    def test_resets_to_zero_on_first_false(self):
        timer = HoldTimer(3.0)
        timer.update(True, 0.0)
        timer.update(True, 2.0)
        assert timer.update(False, 2.1) == 0.0
        assert timer.state.hold_start is None
        # Restart measures from the new start, not the old one
        timer.update(True, 5.0)
        assert timer.update(True, 6.5) == pytest.approx(0.5)

    def test_clamped_at_one(self):
        timer = HoldTimer(3.0)
        timer.update(True, 0.0)
        assert timer.update(True, 100.0) == 1.0

    def test_reset_reports_change(self):
        timer = HoldTimer(3.0)
        assert timer.reset() is False
        timer.update(True, 0.0)
        timer.update(True, 1.0)
        assert timer.reset() is True


class TestHoldGate:

    @pytest.fixture
    def fired(self):
        return []

    @pytest.fixture
    def gate(self, fired, bus):
        return HoldGate(WorldId.A, WorldId.B, GateState(), on_unlock=fired.append,
                        hold_seconds=3.0, event_bus=bus)

    def test_armed_only_with_all_conditions(self, gate):
        assert gate.is_armed(WorldId.A, True, True)
        assert not gate.is_armed(WorldId.B, True, True)
        assert not gate.is_armed(WorldId.A, False, True)
        assert not gate.is_armed(WorldId.A, True, False)

    def test_fires_once_after_hold(self, gate, fired):
        for i in range(40):
            gate.update(WorldId.A, True, True, i * 0.1)
        assert fired == [WorldId.B]
        assert gate.unlocked
        assert gate.progress == 0.0

    def test_fires_exactly_at_three_seconds(self, gate, fired):
        assert gate.update(WorldId.A, True, True, 20.0) is False
        assert gate.update(WorldId.A, True, True, 22.999) is False
        assert gate.update(WorldId.A, True, True, 23.0) is True
        assert fired == [WorldId.B]

    def test_gesture_drop_resets_progress(self, gate, fired):
        gate.update(WorldId.A, True, True, 0.0)
        gate.update(WorldId.A, True, True, 2.0)
        assert gate.progress == pytest.approx(2.0 / 3.0)
        gate.update(WorldId.A, True, False, 2.1)
        assert gate.progress == 0.0
        gate.update(WorldId.A, True, True, 3.0)
        gate.update(WorldId.A, True, True, 5.9)
        assert fired == []

    def test_leaving_deep_zone_resets_progress(self, gate):
        gate.update(WorldId.A, True, True, 0.0)
        gate.update(WorldId.A, True, True, 1.0)
        gate.update(WorldId.A, False, True, 1.1)
        assert gate.progress == 0.0

    def test_progress_events(self, gate, bus):
        gate.update(WorldId.A, True, True, 0.0)
        gate.update(WorldId.A, True, True, 1.5)
        gate.update(WorldId.A, True, False, 1.6)
        gate.update(WorldId.A, True, False, 1.7)
        events = bus.get_history(event_name=Events.GATE_PROGRESS)
        assert [e["data"]["progress"] for e in events] == [pytest.approx(0.5), 0.0]

    def test_unlock_is_idempotent_and_monotone(self, gate, bus):
        assert gate.unlock(auto=True) is True
        assert gate.unlock() is False
        gate.abort()
        assert gate.unlocked
        unlocked = bus.get_history(event_name=Events.GATE_UNLOCKED)
        assert len(unlocked) == 1
        assert unlocked[0]["data"] == {"world": "B", "auto": True}

    def test_unlocked_gate_never_arms(self, gate, fired):
        gate.unlock()
        for i in range(40):
            gate.update(WorldId.A, True, True, i * 0.1)
        assert fired == []
        assert gate.progress == 0.0
