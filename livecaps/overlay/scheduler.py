from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable, List, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def now(self) -> float:
        ...

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Single-shot callbacks on daemon threading.Timer threads."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(max(0.0, float(delay_sec)), callback)
        timer.daemon = True
        timer.name = "livecaps-overlay-timer"
        timer.start()
        return timer


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual clock. Callbacks fire only from advance()/advance_to(), on the
    caller's thread. Used for capture replay and deterministic tests.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._seq = itertools.count()
        self._heap: List[Tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        due = self._now + max(0.0, float(delay_sec))
        heapq.heappush(self._heap, (due, next(self._seq), handle, callback))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._heap if not h.cancelled)

    def advance(self, seconds: float) -> int:
        return self.advance_to(self._now + max(0.0, float(seconds)))

    def advance_to(self, when: float) -> int:
        fired = 0
        while self._heap and self._heap[0][0] <= when:
            due, _, handle, callback = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            callback()
            fired += 1
        self._now = max(self._now, float(when))
        return fired
