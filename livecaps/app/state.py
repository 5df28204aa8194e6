from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TranscriptionState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    TRANSCRIBING = "transcribing"
    ERROR = "error"


@dataclass
class TranscriptionStateTracker:
    """Whether this participant runs its own transcription session."""
    state: TranscriptionState = TranscriptionState.STOPPED
    last_error: str | None = None

    @property
    def is_active(self) -> bool:
        return self.state == TranscriptionState.TRANSCRIBING

    def set_starting(self) -> None:
        self.state = TranscriptionState.STARTING
        self.last_error = None

    def set_transcribing(self) -> None:
        self.state = TranscriptionState.TRANSCRIBING

    def set_stopped(self) -> None:
        self.state = TranscriptionState.STOPPED

    def set_error(self, detail: str) -> None:
        self.state = TranscriptionState.ERROR
        self.last_error = detail
