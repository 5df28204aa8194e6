from __future__ import annotations

from livecaps.contracts import LanguageSet, TranslationPair
from livecaps.lang.resolver import LanguageRegistry, resolve_language


def test_single_language_fallback_ignores_index() -> None:
    for index in (0, 1, 5, -1):
        assert resolve_language(index, ["en-US"]) == "en-US"


def test_index_lookup_and_gap() -> None:
    assert resolve_language(1, ["en-US", "fr-FR"]) == "fr-FR"
    assert resolve_language(0, ["en-US", "fr-FR"]) == "en-US"
    assert resolve_language(5, ["en-US", "fr-FR"]) is None
    assert resolve_language(-1, ["en-US", "fr-FR"]) is None
    assert resolve_language(0, []) is None


def test_registry_prefers_session_over_local() -> None:
    registry = LanguageRegistry(LanguageSet(speaking=("en-US", "de-DE")))
    assert registry.resolve(1) == "de-DE"

    registry.start_session(["ja-JP"])
    assert registry.speaking_languages() == ("ja-JP",)
    assert registry.resolve(1) == "ja-JP"

    registry.end_session()
    assert registry.resolve(1) == "de-DE"


def test_registry_never_resolves_from_broadcast() -> None:
    registry = LanguageRegistry()
    registry.set_broadcast(
        LanguageSet(
            speaking=("en-US",),
            translation_pairs=(TranslationPair(source="en-US", targets=("es-ES",)),),
        )
    )
    assert registry.resolve(0) is None
    assert registry.broadcast.speaking == ("en-US",)
