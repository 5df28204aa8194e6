from __future__ import annotations

import csv
import io
import json
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from livecaps.contracts import TranscriptSegment
from livecaps.lang.resolver import LanguageRegistry
from livecaps.store.segments import SegmentStore

UNKNOWN_LANGUAGE = "und"
TIME_FORMAT = "%H:%M:%S"

_WORD = re.compile(r"\w+(?:['’]\w+)*", re.UNICODE)


@dataclass(frozen=True)
class SegmentGroup:
    segment_id: int
    speaker_id: int
    time_label: str
    source_language: Optional[str]
    transcript: str
    translations: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class LanguageLine:
    segment_id: int
    speaker_id: int
    time_label: str
    text: str


@dataclass(frozen=True)
class WordCount:
    word: str
    language: str
    count: int


def _time_label(seg: TranscriptSegment) -> str:
    return seg.created_at.strftime(TIME_FORMAT)


def grouped_view(segments: Sequence[TranscriptSegment]) -> Tuple[SegmentGroup, ...]:
    return tuple(
        SegmentGroup(
            segment_id=seg.segment_id,
            speaker_id=seg.speaker_id,
            time_label=_time_label(seg),
            source_language=seg.source_language,
            transcript=seg.transcript_text,
            translations=tuple(seg.translations.items()),
        )
        for seg in segments
    )


def transcript_view(segments: Sequence[TranscriptSegment]) -> str:
    """Plain-text dump, one block per segment, translations indented below."""
    lines: List[str] = []
    for seg in segments:
        lang = seg.source_language or UNKNOWN_LANGUAGE
        if seg.transcript_text:
            lines.append(f"[{_time_label(seg)}] {seg.speaker_id} ({lang}): {seg.transcript_text}")
        else:
            lines.append(f"[{_time_label(seg)}] {seg.speaker_id} ({lang}):")
        for code, text in seg.translations.items():
            lines.append(f"    {code}: {text}")
    return "\n".join(lines)


def language_view(segments: Sequence[TranscriptSegment], language_code: str) -> Tuple[LanguageLine, ...]:
    out: List[LanguageLine] = []
    for seg in segments:
        if seg.source_language == language_code and seg.transcript_text:
            text = seg.transcript_text
        elif language_code in seg.translations:
            text = seg.translations[language_code]
        else:
            continue
        out.append(
            LanguageLine(
                segment_id=seg.segment_id,
                speaker_id=seg.speaker_id,
                time_label=_time_label(seg),
                text=text,
            )
        )
    return tuple(out)


def language_tabs(registry: LanguageRegistry, segments: Sequence[TranscriptSegment]) -> Tuple[str, ...]:
    """Local, then broadcast, then observed languages; each code once."""
    out: List[str] = []

    def _add(codes: Iterable[str]) -> None:
        for code in codes:
            if code and code not in out:
                out.append(code)

    _add(registry.local.languages())
    _add(registry.broadcast.languages())
    for seg in segments:
        if seg.source_language and seg.transcript_text:
            _add((seg.source_language,))
        _add(seg.translations.keys())
    return tuple(out)


def _words(text: str) -> List[str]:
    return [m.group(0).lower() for m in _WORD.finditer(text or "")]


def word_frequency(
    segments: Sequence[TranscriptSegment],
    language_code: Optional[str] = None,
) -> Tuple[WordCount, ...]:
    counts: Counter[tuple[str, str]] = Counter()
    for seg in segments:
        source = seg.source_language or UNKNOWN_LANGUAGE
        for word in _words(seg.transcript_text):
            counts[(word, source)] += 1
        for code, text in seg.translations.items():
            for word in _words(text):
                counts[(word, code)] += 1
    rows = [
        WordCount(word=word, language=lang, count=n)
        for (word, lang), n in counts.items()
        if language_code is None or lang == language_code
    ]
    rows.sort(key=lambda r: (-r.count, r.language, r.word))
    return tuple(rows)


def word_frequency_csv(rows: Sequence[WordCount]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["word", "language", "count"])
    for row in rows:
        writer.writerow([row.word, row.language, row.count])
    return buf.getvalue()


def grouped_json(groups: Sequence[SegmentGroup]) -> str:
    payload = [
        {
            "segment_id": g.segment_id,
            "speaker_id": g.speaker_id,
            "time": g.time_label,
            "source_language": g.source_language,
            "transcript": g.transcript,
            "translations": dict(g.translations),
        }
        for g in groups
    ]
    return json.dumps(payload, ensure_ascii=False, indent=2)


class DerivedViewBuilder:
    """Read-only projections recomputed from a store snapshot on every call."""

    def __init__(self, store: SegmentStore, registry: LanguageRegistry) -> None:
        self._store = store
        self._registry = registry

    def grouped(self) -> Tuple[SegmentGroup, ...]:
        return grouped_view(self._store.snapshot())

    def transcript(self) -> str:
        return transcript_view(self._store.snapshot())

    def per_language(self, language_code: str) -> Tuple[LanguageLine, ...]:
        return language_view(self._store.snapshot(), language_code)

    def tabs(self) -> Tuple[str, ...]:
        return language_tabs(self._registry, self._store.snapshot())

    def word_frequency(self, language_code: Optional[str] = None) -> Tuple[WordCount, ...]:
        return word_frequency(self._store.snapshot(), language_code)

    def export_text(self) -> str:
        return self.transcript()

    def export_csv(self, language_code: Optional[str] = None) -> str:
        return word_frequency_csv(self.word_frequency(language_code))

    def export_json(self) -> str:
        return grouped_json(self.grouped())
