from __future__ import annotations

from livecaps.app.state import TranscriptionState, TranscriptionStateTracker


def test_state_tracker_happy_path() -> None:
    tracker = TranscriptionStateTracker()
    assert tracker.state == TranscriptionState.STOPPED
    assert tracker.last_error is None
    assert not tracker.is_active

    tracker.set_starting()
    assert tracker.state == TranscriptionState.STARTING
    assert not tracker.is_active

    tracker.set_transcribing()
    assert tracker.state == TranscriptionState.TRANSCRIBING
    assert tracker.is_active

    tracker.set_stopped()
    assert tracker.state == TranscriptionState.STOPPED
    assert not tracker.is_active


def test_state_tracker_error_clears_on_restart() -> None:
    tracker = TranscriptionStateTracker()
    tracker.set_error("agent refused to start")
    assert tracker.state == TranscriptionState.ERROR
    assert tracker.last_error == "agent refused to start"
    assert not tracker.is_active

    tracker.set_starting()
    assert tracker.state == TranscriptionState.STARTING
    assert tracker.last_error is None
