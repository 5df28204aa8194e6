from __future__ import annotations

from google.protobuf.message import DecodeError

from livecaps.contracts import DataKind, TranslationEntry, UtteranceRecord, WordEntry
from livecaps.wire.schema import Text


class UtteranceDecodeError(ValueError):
    """speaker_id is set when the record parsed far enough to name its uid."""

    def __init__(self, message: str, speaker_id: int | None = None) -> None:
        super().__init__(message)
        self.speaker_id = speaker_id


def _text(value: object, what: str, speaker_id: int | None) -> str:
    # proto2 strings are not UTF-8 checked on parse; bad bytes surface as bytes
    if not isinstance(value, str):
        raise UtteranceDecodeError(f"invalid UTF-8 in {what}", speaker_id=speaker_id)
    return value


def decode_utterance(payload: bytes) -> UtteranceRecord:
    """
    Decode one binary stream payload into an UtteranceRecord.

    Raises UtteranceDecodeError for corrupt bytes, an unknown data_type or
    string fields that are not UTF-8. Once the bytes parse, the error carries
    the record's uid (when present) so the speaker can still be shown active.
    Each call parses into a fresh message; nothing is shared between calls.
    """
    msg = Text()
    try:
        msg.ParseFromString(bytes(payload))
    except (DecodeError, UnicodeDecodeError, ValueError) as e:
        raise UtteranceDecodeError(f"corrupt utterance payload: {e}") from e

    speaker_id = int(msg.uid) if msg.HasField("uid") else None
    data_type = _text(msg.data_type, "data_type", speaker_id)
    try:
        kind = DataKind(data_type)
    except ValueError:
        raise UtteranceDecodeError(f"unknown data_type: {data_type!r}", speaker_id=speaker_id) from None

    words: tuple[WordEntry, ...] = ()
    translations: tuple[TranslationEntry, ...] = ()
    if kind is DataKind.TRANSCRIPT:
        words = tuple(
            WordEntry(text=_text(w.text, "word text", speaker_id), is_final=bool(w.isFinal))
            for w in msg.words
        )
    else:
        translations = tuple(
            TranslationEntry(
                language_code=_text(t.lang, "translation lang", speaker_id),
                is_final=bool(t.isFinal),
                text_fragments=tuple(_text(s, "translation texts", speaker_id) for s in t.texts),
            )
            for t in msg.trans
        )

    return UtteranceRecord(
        speaker_id=int(msg.uid),
        sequence_number=int(msg.seqnum),
        language_index=int(msg.lang),
        kind=kind,
        words=words,
        translations=translations,
    )


def encode_utterance(record: UtteranceRecord) -> bytes:
    msg = Text()
    msg.uid = int(record.speaker_id)
    msg.seqnum = int(record.sequence_number)
    msg.lang = int(record.language_index)
    msg.data_type = record.kind.value
    for w in record.words:
        entry = msg.words.add()
        entry.text = w.text
        entry.isFinal = bool(w.is_final)
    for t in record.translations:
        entry = msg.trans.add()
        entry.lang = t.language_code
        entry.isFinal = bool(t.is_final)
        entry.texts.extend(t.text_fragments)
    return msg.SerializeToString()


def transcript_record(
    speaker_id: int,
    words: list[tuple[str, bool]],
    *,
    language_index: int = 0,
    sequence_number: int = 0,
) -> UtteranceRecord:
    return UtteranceRecord(
        speaker_id=speaker_id,
        sequence_number=sequence_number,
        language_index=language_index,
        kind=DataKind.TRANSCRIPT,
        words=tuple(WordEntry(text=t, is_final=f) for t, f in words),
    )


def translation_record(
    speaker_id: int,
    entries: list[tuple[str, bool, list[str]]],
    *,
    language_index: int = 0,
    sequence_number: int = 0,
) -> UtteranceRecord:
    return UtteranceRecord(
        speaker_id=speaker_id,
        sequence_number=sequence_number,
        language_index=language_index,
        kind=DataKind.TRANSLATION,
        translations=tuple(
            TranslationEntry(language_code=code, is_final=f, text_fragments=tuple(texts))
            for code, f, texts in entries
        ),
    )
