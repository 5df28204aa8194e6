from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Tuple

from livecaps.contracts import TranscriptSegment


@dataclass
class _Entry:
    segment_id: int
    speaker_id: int
    created_at: datetime
    source_language: Optional[str]
    transcript_text: str
    translations: Dict[str, str] = field(default_factory=dict)

    def freeze(self) -> TranscriptSegment:
        return TranscriptSegment(
            segment_id=self.segment_id,
            speaker_id=self.speaker_id,
            created_at=self.created_at,
            source_language=self.source_language,
            transcript_text=self.transcript_text,
            translations=MappingProxyType(dict(self.translations)),
        )


class SegmentStore:
    """
    Append-only per-speaker history of finalized segments.

    The only in-place change is attaching a translation to the most recently
    appended segment of a speaker. Lookup of that segment goes through a
    speaker -> position side index, never through a scan or timestamps.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._entries: List[_Entry] = []
        self._last_by_speaker: Dict[int, int] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def append_transcript(
        self,
        speaker_id: int,
        text: str,
        source_language: Optional[str] = None,
    ) -> TranscriptSegment:
        with self._lock:
            entry = self._append(speaker_id, text, source_language)
            return entry.freeze()

    def merge_translation(self, speaker_id: int, language_code: str, text: str) -> Tuple[TranscriptSegment, bool]:
        """
        Set translations[language_code] on the speaker's latest segment.
        Returns (segment, created) where created is True when no segment
        existed yet and a translation-only one was appended.
        """
        with self._lock:
            pos = self._last_by_speaker.get(speaker_id)
            if pos is None:
                entry = self._append(speaker_id, "", None)
                created = True
            else:
                entry = self._entries[pos]
                created = False
            entry.translations[language_code] = text
            return entry.freeze(), created

    def latest_for(self, speaker_id: int) -> Optional[TranscriptSegment]:
        with self._lock:
            pos = self._last_by_speaker.get(speaker_id)
            return None if pos is None else self._entries[pos].freeze()

    def snapshot(self) -> Tuple[TranscriptSegment, ...]:
        with self._lock:
            return tuple(e.freeze() for e in self._entries)

    def for_speaker(self, speaker_id: int) -> Tuple[TranscriptSegment, ...]:
        with self._lock:
            return tuple(e.freeze() for e in self._entries if e.speaker_id == speaker_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._last_by_speaker.clear()

    def _append(self, speaker_id: int, text: str, source_language: Optional[str]) -> _Entry:
        entry = _Entry(
            segment_id=next(self._ids),
            speaker_id=speaker_id,
            created_at=self._clock(),
            source_language=source_language,
            transcript_text=text,
        )
        self._entries.append(entry)
        self._last_by_speaker[speaker_id] = len(self._entries) - 1
        return entry
