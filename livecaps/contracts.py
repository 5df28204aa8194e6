from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class DataKind(str, Enum):
    TRANSCRIPT = "transcribe"
    TRANSLATION = "translate"


class MessageKind(str, Enum):
    CONTROL = "control"
    UTTERANCE = "utterance"


@dataclass(frozen=True)
class RawMessage:
    # speaker_id is the transport sender, not necessarily the person speaking
    speaker_id: int | str
    payload: bytes


@dataclass(frozen=True)
class WordEntry:
    text: str
    is_final: bool = False


@dataclass(frozen=True)
class TranslationEntry:
    language_code: str
    is_final: bool = False
    text_fragments: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return "".join(self.text_fragments)


@dataclass(frozen=True)
class UtteranceRecord:
    """
    One decoded binary stream message.
    kind decides which of words/translations is populated; the other stays empty.
    """
    speaker_id: int
    sequence_number: int
    language_index: int
    kind: DataKind
    words: Tuple[WordEntry, ...] = ()
    translations: Tuple[TranslationEntry, ...] = ()

    @property
    def text(self) -> str:
        # interim and final words are concatenated in arrival order
        return "".join(w.text for w in self.words)

    @property
    def has_final_word(self) -> bool:
        return any(w.is_final for w in self.words)


@dataclass(frozen=True)
class TranslationPair:
    source: str
    targets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LanguageSet:
    speaking: Tuple[str, ...] = ()
    translation_pairs: Tuple[TranslationPair, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.speaking and not self.translation_pairs

    def consolidated_pairs(self) -> Tuple[TranslationPair, ...]:
        return consolidate_pairs(self.translation_pairs)

    def languages(self) -> Tuple[str, ...]:
        out: list[str] = []
        for code in self.speaking:
            if code not in out:
                out.append(code)
        for pair in self.translation_pairs:
            for code in (pair.source, *pair.targets):
                if code not in out:
                    out.append(code)
        return tuple(out)


def consolidate_pairs(pairs) -> Tuple[TranslationPair, ...]:
    """Merge pairs sharing a source; a target is listed once per source."""
    by_source: dict[str, list[str]] = {}
    for pair in pairs:
        targets = by_source.setdefault(pair.source, [])
        for target in pair.targets:
            if target not in targets:
                targets.append(target)
    return tuple(TranslationPair(source=s, targets=tuple(t)) for s, t in by_source.items())


@dataclass(frozen=True)
class ControlMessage:
    type: str
    languages: LanguageSet


@dataclass(frozen=True)
class TranscriptSegment:
    segment_id: int
    speaker_id: int
    created_at: datetime
    source_language: Optional[str] = None
    transcript_text: str = ""
    translations: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class OverlayState:
    visible: bool
    expires_at: Optional[float] = None
