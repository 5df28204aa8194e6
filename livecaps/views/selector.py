from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from livecaps.contracts import TranscriptSegment, TranslationEntry, TranslationPair, consolidate_pairs
from livecaps.lang.resolver import LanguageRegistry
from livecaps.store.segments import SegmentStore


@dataclass(frozen=True)
class LanguageOffer:
    source: str
    target: str

    @property
    def label(self) -> str:
        if not self.source:
            return self.target
        return f"{self.source} → {self.target}"


class LiveCaptionBoard:
    """
    What is on screen right now, per speaker: the latest transcript line and
    the latest translation fragment per language. Fed straight from incoming
    messages, independent of the segment history.
    """

    def __init__(self) -> None:
        self._transcripts: Dict[int, str] = {}
        self._translations: Dict[int, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def update_transcript(self, speaker_id: int, text: str) -> None:
        with self._lock:
            self._transcripts[speaker_id] = text

    def update_translations(self, speaker_id: int, entries: Iterable[TranslationEntry]) -> None:
        latest = {e.language_code: e.text for e in entries}
        with self._lock:
            self._translations[speaker_id] = latest

    def transcript_for(self, speaker_id: int) -> str:
        with self._lock:
            return self._transcripts.get(speaker_id, "")

    def translation_for(self, speaker_id: int, language_code: Optional[str]) -> Optional[str]:
        if not language_code:
            return None
        with self._lock:
            return self._translations.get(speaker_id, {}).get(language_code)

    def clear_translation(self, speaker_id: int) -> None:
        with self._lock:
            self._translations.pop(speaker_id, None)

    def remove(self, speaker_id: int) -> None:
        with self._lock:
            self._transcripts.pop(speaker_id, None)
            self._translations.pop(speaker_id, None)

    def clear(self) -> None:
        with self._lock:
            self._transcripts.clear()
            self._translations.clear()


def observed_pairs(segments: Sequence[TranscriptSegment]) -> List[TranslationPair]:
    pairs: List[TranslationPair] = []
    for seg in segments:
        if seg.translations:
            pairs.append(TranslationPair(source=seg.source_language or "", targets=tuple(seg.translations)))
    return pairs


def offered_pairs(registry: LanguageRegistry, segments: Sequence[TranscriptSegment]) -> tuple[LanguageOffer, ...]:
    pairs: List[TranslationPair] = []
    pairs.extend(registry.local.translation_pairs)
    pairs.extend(registry.broadcast.translation_pairs)
    pairs.extend(observed_pairs(segments))
    return tuple(
        LanguageOffer(source=p.source, target=t)
        for p in consolidate_pairs(pairs)
        for t in p.targets
    )


class ViewerLanguageSelector:
    """
    Per-speaker choice of which translation the viewer sees live.
    Reads the registry and the segment store; never writes to either.
    """

    def __init__(
        self,
        registry: LanguageRegistry,
        store: SegmentStore,
        board: LiveCaptionBoard,
        *,
        preferred: Optional[str] = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._board = board
        self._preferred = preferred
        self._selection: Dict[int, str] = {}

    def offers(self) -> tuple[LanguageOffer, ...]:
        return offered_pairs(self._registry, self._store.snapshot())

    def refresh(self, speaker_id: int) -> Optional[str]:
        """Recompute offers; keep the current pick if still offered, else the first."""
        offers = self.offers()
        targets = [o.target for o in offers]
        current = self._selection.get(speaker_id)
        if current in targets:
            return current
        if self._preferred in targets:
            chosen = self._preferred
        elif targets:
            chosen = targets[0]
        else:
            self._selection.pop(speaker_id, None)
            return None
        self._selection[speaker_id] = chosen
        return chosen

    def refresh_all(self) -> None:
        for speaker_id in list(self._selection):
            self.refresh(speaker_id)

    def select(self, speaker_id: int, language_code: str) -> bool:
        if language_code not in {o.target for o in self.offers()}:
            return False
        if self._selection.get(speaker_id) != language_code:
            self._selection[speaker_id] = language_code
            self._board.clear_translation(speaker_id)
        return True

    def selected(self, speaker_id: int) -> Optional[str]:
        if speaker_id in self._selection:
            return self._selection[speaker_id]
        return self.refresh(speaker_id)

    def live_translation(self, speaker_id: int) -> Optional[str]:
        return self._board.translation_for(speaker_id, self.selected(speaker_id))

    def forget(self, speaker_id: int) -> None:
        self._selection.pop(speaker_id, None)
