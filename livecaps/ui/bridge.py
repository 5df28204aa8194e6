from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Any, Optional

from livecaps.contracts import OverlayState


@dataclass(frozen=True)
class OverlayEvent:
    speaker_id: int
    state: OverlayState


class OverlayEventBus:
    """
    Thread-safe handoff of overlay transitions from timer threads -> UI thread.
    Timers push OverlayEvent. UI polls (non-blocking).
    """
    def __init__(self, maxsize: int = 100):
        self.q: "queue.Queue[OverlayEvent]" = queue.Queue(maxsize=maxsize)

    def __call__(self, speaker_id: int, state: OverlayState) -> None:
        self.push(OverlayEvent(speaker_id=speaker_id, state=state))

    def push(self, event: OverlayEvent) -> None:
        try:
            self.q.put_nowait(event)
        except queue.Full:
            # drop oldest to keep UI responsive
            try:
                _ = self.q.get_nowait()
            except queue.Empty:
                return
            try:
                self.q.put_nowait(event)
            except queue.Full:
                return

    def pop(self) -> Optional[OverlayEvent]:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return None


def drain_overlay_bus(bus: OverlayEventBus, view: Any, max_items: int) -> int:
    drained = 0
    while drained < max_items:
        event = bus.pop()
        if event is None:
            break
        view.set_overlay(event.speaker_id, event.state.visible)
        drained += 1
    return drained
