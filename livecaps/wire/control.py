from __future__ import annotations

import json
from typing import Any

from livecaps.contracts import ControlMessage, LanguageSet, TranslationPair

LANGUAGES_TYPE = "languages"


class ControlMessageError(ValueError):
    pass


def _string_list(value: Any, what: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ControlMessageError(f"{what} must be a list of strings")
    return tuple(value)


def parse_control_message(text: str) -> ControlMessage:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ControlMessageError(f"invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ControlMessageError("control message must be a JSON object")
    if payload.get("type") != LANGUAGES_TYPE:
        raise ControlMessageError(f"unexpected control type: {payload.get('type')!r}")

    speaking = _string_list(payload.get("speaking", []), "speaking")
    raw_pairs = payload.get("translationPairs", [])
    if not isinstance(raw_pairs, list):
        raise ControlMessageError("translationPairs must be a list")
    pairs: list[TranslationPair] = []
    for raw in raw_pairs:
        if not isinstance(raw, dict) or not isinstance(raw.get("source"), str):
            raise ControlMessageError("translation pair needs a string source")
        targets = _string_list(raw.get("targets", []), "targets")
        pairs.append(TranslationPair(source=raw["source"], targets=targets))

    return ControlMessage(
        type=LANGUAGES_TYPE,
        languages=LanguageSet(speaking=speaking, translation_pairs=tuple(pairs)),
    )


def serialize_languages(languages: LanguageSet) -> bytes:
    payload = {
        "type": LANGUAGES_TYPE,
        "speaking": list(languages.speaking),
        "translationPairs": [
            {"source": p.source, "targets": list(p.targets)} for p in languages.translation_pairs
        ],
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")
