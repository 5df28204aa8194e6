from __future__ import annotations

import pytest

from livecaps.contracts import DataKind
from livecaps.wire.schema import Text
from livecaps.wire.utterance import (
    UtteranceDecodeError,
    decode_utterance,
    encode_utterance,
    transcript_record,
    translation_record,
)


def test_decode_transcript_message() -> None:
    payload = encode_utterance(
        transcript_record(42, [("Hel", False), ("lo", True)], language_index=1, sequence_number=7)
    )
    record = decode_utterance(payload)
    assert record.kind == DataKind.TRANSCRIPT
    assert record.speaker_id == 42
    assert record.sequence_number == 7
    assert record.language_index == 1
    assert [(w.text, w.is_final) for w in record.words] == [("Hel", False), ("lo", True)]
    assert record.translations == ()
    assert record.text == "Hello"
    assert record.has_final_word


def test_decode_translation_message() -> None:
    payload = encode_utterance(
        translation_record(7, [("es-ES", True, ["Ho", "la"]), ("fr-FR", False, ["Bon"])])
    )
    record = decode_utterance(payload)
    assert record.kind == DataKind.TRANSLATION
    assert record.words == ()
    assert [t.language_code for t in record.translations] == ["es-ES", "fr-FR"]
    assert record.translations[0].text == "Hola"
    assert record.translations[0].is_final
    assert not record.translations[1].is_final


def test_decode_ignores_fields_outside_its_kind() -> None:
    msg = Text()
    msg.uid = 3
    msg.data_type = "transcribe"
    w = msg.words.add()
    w.text = "ok"
    w.isFinal = True
    w.confidence = 0.9
    t = msg.trans.add()
    t.lang = "es-ES"
    t.texts.append("stray")
    msg.vendor = 1
    msg.time = 1700000000000
    record = decode_utterance(msg.SerializeToString())
    assert record.text == "ok"
    assert record.translations == ()


@pytest.mark.parametrize(
    "payload",
    [b"", b"\xff\xff\xff\xff", b"{not json", b"\x0a\x05ab"],
)
def test_decode_rejects_corrupt_or_untyped_payloads(payload: bytes) -> None:
    with pytest.raises(UtteranceDecodeError):
        decode_utterance(payload)


def test_decode_rejects_unknown_data_type() -> None:
    msg = Text()
    msg.uid = 1
    msg.data_type = "summarize"
    with pytest.raises(UtteranceDecodeError, match="unknown data_type") as exc:
        decode_utterance(msg.SerializeToString())
    assert exc.value.speaker_id == 1


def test_decode_error_without_uid_names_no_speaker() -> None:
    with pytest.raises(UtteranceDecodeError) as exc:
        decode_utterance(b"")
    assert exc.value.speaker_id is None


@pytest.mark.parametrize(
    "record, what",
    [
        (transcript_record(5, [("QZ", True)]), "word text"),
        (translation_record(5, [("QZ", True, ["Hola"])]), "translation lang"),
        (translation_record(5, [("es-ES", True, ["Ho", "QZ"])]), "translation texts"),
    ],
)
def test_decode_rejects_strings_that_are_not_utf8(record, what: str) -> None:
    payload = encode_utterance(record).replace(b"QZ", b"\xff\xfe")
    with pytest.raises(UtteranceDecodeError) as exc:
        decode_utterance(payload)
    assert str(exc.value) == f"invalid UTF-8 in {what}"
    assert exc.value.speaker_id == 5
