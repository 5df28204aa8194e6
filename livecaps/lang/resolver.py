from __future__ import annotations

from typing import Optional, Sequence

from livecaps.contracts import LanguageSet


def resolve_language(language_index: int, speaking_languages: Sequence[str]) -> Optional[str]:
    """
    Map a message's numeric language index to a language code.

    With exactly one speaking language the index is ignored: the agent keeps
    sending its default index in that case.
    """
    langs = list(speaking_languages or ())
    if 0 <= int(language_index) < len(langs):
        return langs[int(language_index)]
    if len(langs) == 1:
        return langs[0]
    return None


class LanguageRegistry:
    """
    Holds the three language sources a viewer deals with:
      - local: the operator's own configuration
      - session: speaking list captured when the operator started transcription
      - broadcast: whatever a session initiator announced on the channel

    Resolution of message language indices only ever looks at session/local.
    """

    def __init__(self, local: LanguageSet | None = None) -> None:
        self._local = local or LanguageSet()
        self._session_speaking: Optional[tuple[str, ...]] = None
        self._broadcast = LanguageSet()

    @property
    def local(self) -> LanguageSet:
        return self._local

    @property
    def broadcast(self) -> LanguageSet:
        return self._broadcast

    @property
    def session_speaking(self) -> Optional[tuple[str, ...]]:
        return self._session_speaking

    def set_local(self, languages: LanguageSet) -> None:
        self._local = languages

    def start_session(self, speaking: Sequence[str]) -> None:
        self._session_speaking = tuple(speaking)

    def end_session(self) -> None:
        self._session_speaking = None

    def set_broadcast(self, languages: LanguageSet) -> None:
        self._broadcast = languages

    def speaking_languages(self) -> tuple[str, ...]:
        if self._session_speaking:
            return self._session_speaking
        return self._local.speaking

    def resolve(self, language_index: int) -> Optional[str]:
        return resolve_language(language_index, self.speaking_languages())
