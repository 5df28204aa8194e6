from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from livecaps.contracts import OverlayState
from livecaps.overlay.scheduler import Scheduler, ThreadingScheduler, TimerHandle

OVERLAY_HIDE_DELAY_SEC = 5.0

HIDDEN = OverlayState(visible=False, expires_at=None)

OverlayListener = Callable[[int, OverlayState], None]


@dataclass
class _Slot:
    token: int
    handle: Optional[TimerHandle]
    state: OverlayState


class OverlayTimerManager:
    """
    Per-speaker auto-hiding overlay visibility.

    Every message for a speaker cancels that speaker's timer and arms a fresh
    one; at most one timer per speaker is live. A timer that fires after it
    was replaced is ignored by token comparison.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        *,
        hide_delay_sec: float = OVERLAY_HIDE_DELAY_SEC,
        on_change: OverlayListener | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self._delay = max(0.0, float(hide_delay_sec))
        self._on_change = on_change
        self._logger = logger or logging.getLogger(__name__)
        self._slots: Dict[int, _Slot] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def hide_delay_sec(self) -> float:
        return self._delay

    def touch(self, speaker_id: int) -> OverlayState:
        with self._lock:
            slot = self._slots.get(speaker_id)
            if slot is not None and slot.handle is not None:
                slot.handle.cancel()
            token = next(self._tokens)
            state = OverlayState(visible=True, expires_at=self._scheduler.now() + self._delay)
            handle = self._scheduler.call_later(self._delay, lambda: self._expire(speaker_id, token))
            self._slots[speaker_id] = _Slot(token=token, handle=handle, state=state)
        self._notify(speaker_id, state)
        return state

    def state(self, speaker_id: int) -> OverlayState:
        with self._lock:
            slot = self._slots.get(speaker_id)
            return HIDDEN if slot is None else slot.state

    def states(self) -> Dict[int, OverlayState]:
        with self._lock:
            return {sid: slot.state for sid, slot in self._slots.items()}

    def live_timers(self) -> int:
        with self._lock:
            return sum(1 for slot in self._slots.values() if slot.handle is not None)

    def withdraw(self, speaker_id: int) -> None:
        """Speaker's media ended: hide now and forget the speaker."""
        with self._lock:
            slot = self._slots.pop(speaker_id, None)
            if slot is None:
                return
            if slot.handle is not None:
                slot.handle.cancel()
            was_visible = slot.state.visible
        if was_visible:
            self._notify(speaker_id, HIDDEN)

    def cancel_all(self) -> None:
        with self._lock:
            slots = self._slots
            self._slots = {}
            for slot in slots.values():
                if slot.handle is not None:
                    slot.handle.cancel()
        for speaker_id, slot in slots.items():
            if slot.state.visible:
                self._notify(speaker_id, HIDDEN)

    def _expire(self, speaker_id: int, token: int) -> None:
        with self._lock:
            slot = self._slots.get(speaker_id)
            if slot is None or slot.token != token:
                return
            slot.handle = None
            slot.state = HIDDEN
        self._logger.debug("overlay_expired", extra={"speaker_id": speaker_id})
        self._notify(speaker_id, HIDDEN)

    def _notify(self, speaker_id: int, state: OverlayState) -> None:
        if self._on_change is None:
            return
        self._on_change(speaker_id, state)

