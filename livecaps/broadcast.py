from __future__ import annotations

import logging
from typing import Callable, Optional

from livecaps.app.state import TranscriptionStateTracker
from livecaps.contracts import ControlMessage, LanguageSet
from livecaps.lang.resolver import LanguageRegistry
from livecaps.wire.control import serialize_languages

ControlSender = Callable[[bytes], None]


class BroadcastProtocol:
    """
    Language announcements riding the data channel.

    While transcribing, this participant announces its languages on every
    publish event. While not transcribing, it adopts the last announcement it
    received. A participant with its own session never adopts announcements.
    """

    def __init__(
        self,
        registry: LanguageRegistry,
        state: TranscriptionStateTracker,
        send: Optional[ControlSender] = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._state = state
        self._send = send
        self._logger = logger or logging.getLogger(__name__)

    def outbound_languages(self) -> LanguageSet:
        return LanguageSet(
            speaking=self._registry.speaking_languages(),
            translation_pairs=self._registry.local.consolidated_pairs(),
        )

    def announce(self) -> bool:
        if not self._state.is_active or self._send is None:
            return False
        languages = self.outbound_languages()
        self._send(serialize_languages(languages))
        self._logger.info(
            "broadcast_languages_sent",
            extra={
                "speaking": list(languages.speaking),
                "pairs": len(languages.translation_pairs),
            },
        )
        return True

    def on_publish(self) -> bool:
        return self.announce()

    def handle_control(self, message: ControlMessage, sender_id: int | str | None = None) -> bool:
        if self._state.is_active:
            self._logger.info("broadcast_languages_ignored", extra={"sender_id": sender_id})
            return False
        self._registry.set_broadcast(message.languages)
        self._logger.info(
            "broadcast_languages_applied",
            extra={
                "sender_id": sender_id,
                "speaking": list(message.languages.speaking),
                "pairs": len(message.languages.translation_pairs),
            },
        )
        return True
