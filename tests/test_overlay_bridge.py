from __future__ import annotations

from livecaps.contracts import OverlayState
from livecaps.overlay.scheduler import ManualScheduler
from livecaps.overlay.timers import OverlayTimerManager
from livecaps.ui.bridge import OverlayEvent, OverlayEventBus, drain_overlay_bus


class _FakeView:
    def __init__(self) -> None:
        self.calls: list[tuple[int, bool]] = []

    def set_overlay(self, speaker_id: int, visible: bool) -> None:
        self.calls.append((speaker_id, visible))


def test_overlay_bus_drops_oldest_when_full() -> None:
    bus = OverlayEventBus(maxsize=2)
    bus.push(OverlayEvent(1, OverlayState(True, 5.0)))
    bus.push(OverlayEvent(2, OverlayState(True, 5.0)))
    bus.push(OverlayEvent(3, OverlayState(True, 5.0)))

    first = bus.pop()
    second = bus.pop()
    assert first is not None and first.speaker_id == 2
    assert second is not None and second.speaker_id == 3
    assert bus.pop() is None


def test_drain_overlay_bus_respects_max_items() -> None:
    bus = OverlayEventBus(maxsize=10)
    view = _FakeView()
    for i in range(3):
        bus(i, OverlayState(True, 1.0))
    drained = drain_overlay_bus(bus, view, max_items=2)
    assert drained == 2
    assert view.calls == [(0, True), (1, True)]


def test_overlay_manager_feeds_bus() -> None:
    clock = ManualScheduler()
    bus = OverlayEventBus()
    overlay = OverlayTimerManager(clock, hide_delay_sec=5.0, on_change=bus)
    overlay.touch(42)
    clock.advance(5.0)
    view = _FakeView()
    drain_overlay_bus(bus, view, max_items=10)
    assert view.calls == [(42, True), (42, False)]
