"""Tests for pdfprep.progress module."""

import logging

from pdfprep.progress import ProgressBus, ProgressEvent, ProgressEventType


class TestProgressBus:
    """Test event delivery."""

    def test_subscribe_all(self):
        bus = ProgressBus()
        events = []
        bus.subscribe(events.append)
        bus.emit_load_start()
        bus.emit_load_complete(4)
        assert [e.type for e in events] == [ProgressEventType.LOAD_START, ProgressEventType.LOAD_COMPLETE]
        assert events[1].total_pages == 4
        assert events[1].progress == 100

    def test_subscribe_filtered(self):
        bus = ProgressBus()
        events = []
        bus.subscribe(events.append, ProgressEventType.RENDER_COMPLETE)
        bus.emit_render_start(2)
        bus.emit_render_complete(2)
        assert len(events) == 1
        assert events[0].page_number == 2

    def test_unsubscribe(self):
        bus = ProgressBus()
        events = []
        unsubscribe = bus.subscribe(events.append)
        unsubscribe()
        unsubscribe()
        bus.emit_export_start()
        assert events == []
        assert bus.listener_count == 0

    def test_unsubscribe_only_removes_own_entry(self):
        bus = ProgressBus()
        events = []
        first = bus.subscribe(events.append)
        bus.subscribe(events.append)
        first()
        bus.emit_export_complete()
        assert len(events) == 1

    def test_registration_order(self):
        bus = ProgressBus()
        order = []
        bus.subscribe(lambda e: order.append("a"))
        bus.subscribe(lambda e: order.append("b"))
        bus.emit(ProgressEvent(ProgressEventType.EXPORT_PROGRESS, progress=50))
        assert order == ["a", "b"]

    def test_failing_listener_is_isolated(self, caplog):
        bus = ProgressBus()
        events = []

        def broken(event):
            raise RuntimeError("listener bug")

        bus.subscribe(broken)
        bus.subscribe(events.append)
        with caplog.at_level(logging.ERROR, logger="pdfprep"):
            bus.emit_load_error(ValueError("bad file"))
        assert len(events) == 1
        assert events[0].message == "bad file"
        assert "Progress listener failed" in caplog.text

    def test_unsubscribe_during_emit(self):
        bus = ProgressBus()
        events = []
        unsubscribe = None

        def once(event):
            events.append(event)
            unsubscribe()

        unsubscribe = bus.subscribe(once)
        bus.emit_render_progress(50, 1, 2)
        bus.emit_render_progress(100, 2, 2)
        assert len(events) == 1

    def test_clear(self):
        bus = ProgressBus()
        bus.subscribe(print)
        bus.clear()
        assert bus.listener_count == 0

    def test_event_type_values(self):
        assert ProgressEventType.LOAD_START.value == "loadStart"
        assert ProgressEventType.RENDER_PROGRESS.value == "renderProgress"
        assert len(ProgressEventType) == 11
