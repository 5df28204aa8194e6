from __future__ import annotations

from livecaps.app.state import TranscriptionStateTracker
from livecaps.broadcast import BroadcastProtocol
from livecaps.contracts import LanguageSet, TranslationPair
from livecaps.lang.resolver import LanguageRegistry
from livecaps.wire.classifier import classify
from livecaps.wire.control import parse_control_message


def _local() -> LanguageSet:
    return LanguageSet(
        speaking=("en-US",),
        translation_pairs=(
            TranslationPair(source="en-US", targets=("es-ES",)),
            TranslationPair(source="en-US", targets=("es-ES", "ru-RU")),
        ),
    )


def _announcement() -> LanguageSet:
    return LanguageSet(
        speaking=("en-US",),
        translation_pairs=(TranslationPair(source="en-US", targets=("es-ES",)),),
    )


def test_announce_only_while_transcribing() -> None:
    sent: list[bytes] = []
    state = TranscriptionStateTracker()
    proto = BroadcastProtocol(LanguageRegistry(_local()), state, sent.append)

    assert not proto.on_publish()
    assert sent == []

    state.set_transcribing()
    assert proto.on_publish()
    assert len(sent) == 1

    control = classify(sent[0]).control
    assert control is not None
    assert control.languages.speaking == ("en-US",)
    assert control.languages.translation_pairs == (
        TranslationPair(source="en-US", targets=("es-ES", "ru-RU")),
    )


def test_announce_uses_session_speaking_languages() -> None:
    sent: list[bytes] = []
    registry = LanguageRegistry(_local())
    registry.start_session(["en-US", "fr-FR"])
    state = TranscriptionStateTracker()
    state.set_transcribing()
    BroadcastProtocol(registry, state, sent.append).announce()
    msg = parse_control_message(sent[0].decode("utf-8"))
    assert msg.languages.speaking == ("en-US", "fr-FR")


def test_idle_participant_adopts_announcement() -> None:
    registry = LanguageRegistry()
    proto = BroadcastProtocol(registry, TranscriptionStateTracker())
    control = parse_control_message(
        '{"type":"languages","speaking":["en-US"],'
        '"translationPairs":[{"source":"en-US","targets":["es-ES"]}]}'
    )
    assert proto.handle_control(control, sender_id=1001)
    assert registry.broadcast == _announcement()
    assert registry.local.is_empty


def test_transcribing_participant_ignores_announcement() -> None:
    registry = LanguageRegistry(_local())
    state = TranscriptionStateTracker()
    state.set_transcribing()
    proto = BroadcastProtocol(registry, state)
    control = parse_control_message(
        '{"type":"languages","speaking":["de-DE"],"translationPairs":[]}'
    )
    assert not proto.handle_control(control)
    assert registry.broadcast.is_empty
    assert registry.local == _local()
