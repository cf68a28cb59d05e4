"""
Tests for the Event Bus
=======================
"""

import logging

from handworlds.core.events import EventBus, Events
from handworlds.utils.logger import log_timing, setup_logging


class TestEventBus:

    def test_singleton(self, bus):
        assert EventBus() is bus

    def test_emit_passes_kwargs(self, bus):
        received = []
        bus.subscribe(Events.WORLD_CHANGED, lambda **kw: received.append(kw))
        bus.emit(Events.WORLD_CHANGED, previous="A", current="B")
        assert received == [{"previous": "A", "current": "B"}]

    def test_priority_order(self, bus):
        order = []
        bus.subscribe(Events.GATE_UNLOCKED, lambda **kw: order.append("low"), priority=0)
        bus.subscribe(Events.GATE_UNLOCKED, lambda **kw: order.append("high"), priority=10)
        bus.emit(Events.GATE_UNLOCKED, world="B")
        assert order == ["high", "low"]

    def test_handler_error_is_contained(self, bus, caplog):
        after = []

        def broken(**kw):
            raise RuntimeError("boom")

        bus.subscribe(Events.STRESS_CHANGED, broken, priority=1)
        bus.subscribe(Events.STRESS_CHANGED, lambda **kw: after.append(kw))
        with caplog.at_level(logging.ERROR):
            bus.emit(Events.STRESS_CHANGED, active=True)
        assert after == [{"active": True}]
        assert "boom" in caplog.text

    def test_reset_drops_listeners_and_history(self, bus):
        calls = []
        bus.subscribe(Events.CAMERA_ERROR, lambda **kw: calls.append(kw))
        bus.emit(Events.CAMERA_ERROR, message="x")
        bus.reset()
        bus.emit(Events.SYSTEM_STARTED)
        assert calls == [{"message": "x"}]
        assert [e["event"] for e in bus.get_history()] == [Events.SYSTEM_STARTED]

    def test_history_filter_and_bound(self, bus):
        for i in range(150):
            bus.emit(Events.GATE_PROGRESS, progress=i / 150)
        bus.emit(Events.WORLD_CHANGED, previous="A", current="B")
        assert len(bus.get_history(last_n=1000)) == 100
        changes = bus.get_history(event_name=Events.WORLD_CHANGED)
        assert len(changes) == 1
        assert changes[0]["data"]["current"] == "B"


class TestLogging:

    def test_setup_logging_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "handworlds.log"
        root = setup_logging("DEBUG", str(log_file))
        try:
            logging.getLogger("handworlds.test").debug("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)

    def test_log_timing_returns_result(self, caplog):
        @log_timing
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG):
            assert add(2, 3) == 5
        assert "add took" in caplog.text
