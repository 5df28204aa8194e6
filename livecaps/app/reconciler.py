from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Sequence, Tuple

from livecaps.app.diagnostics import summarize_exception
from livecaps.app.logging_setup import log_event
from livecaps.app.state import TranscriptionStateTracker
from livecaps.broadcast import BroadcastProtocol, ControlSender
from livecaps.contracts import (
    DataKind,
    LanguageSet,
    MessageKind,
    OverlayState,
    TranscriptSegment,
    UtteranceRecord,
)
from livecaps.lang.resolver import LanguageRegistry
from livecaps.overlay.scheduler import Scheduler
from livecaps.overlay.timers import OVERLAY_HIDE_DELAY_SEC, OverlayListener, OverlayTimerManager
from livecaps.store.segments import SegmentStore
from livecaps.views.derived import DerivedViewBuilder
from livecaps.views.selector import LiveCaptionBoard, ViewerLanguageSelector
from livecaps.wire.classifier import classify
from livecaps.wire.utterance import UtteranceDecodeError, decode_utterance


@dataclass
class ReconcilerStats:
    messages: int = 0
    control_messages: int = 0
    broadcast_applied: int = 0
    broadcast_ignored: int = 0
    decode_failures: int = 0
    segments_appended: int = 0
    translations_merged: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class LiveCaption:
    speaker_id: int
    transcript: str
    language: Optional[str]
    translation: Optional[str]


class StreamReconciler:
    """
    The one inbound path: raw message -> classify -> (broadcast | decode) ->
    resolve language -> segment store + overlay + live captions.

    Must be driven from a single thread. handle_message never raises for
    anything found in a payload; bad messages are dropped and logged.
    """

    def __init__(
        self,
        *,
        registry: LanguageRegistry | None = None,
        store: SegmentStore | None = None,
        state: TranscriptionStateTracker | None = None,
        scheduler: Scheduler | None = None,
        hide_delay_sec: float = OVERLAY_HIDE_DELAY_SEC,
        on_overlay_change: OverlayListener | None = None,
        send_control: ControlSender | None = None,
        viewer_language: Optional[str] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.registry = registry or LanguageRegistry()
        self.store = store or SegmentStore()
        self.state = state or TranscriptionStateTracker()
        self.overlay = OverlayTimerManager(
            scheduler,
            hide_delay_sec=hide_delay_sec,
            on_change=on_overlay_change,
            logger=self.logger,
        )
        self.board = LiveCaptionBoard()
        self.selector = ViewerLanguageSelector(
            self.registry, self.store, self.board, preferred=viewer_language
        )
        self.broadcast = BroadcastProtocol(self.registry, self.state, send_control, logger=self.logger)
        self.views = DerivedViewBuilder(self.store, self.registry)
        self.stats = ReconcilerStats()

    # ----- inbound -----
    def handle_message(self, sender_id: int | str, payload: bytes) -> Optional[UtteranceRecord]:
        self.stats.messages += 1
        result = classify(payload)
        if result.kind is MessageKind.CONTROL and result.control is not None:
            self.stats.control_messages += 1
            if self.broadcast.handle_control(result.control, sender_id=sender_id):
                self.stats.broadcast_applied += 1
                self.selector.refresh_all()
            else:
                self.stats.broadcast_ignored += 1
            return None

        try:
            record = decode_utterance(payload)
        except UtteranceDecodeError as e:
            self.stats.decode_failures += 1
            log_event(
                self.logger,
                logging.WARNING,
                "utterance_decode_failed",
                sender_id=sender_id,
                speaker_id=e.speaker_id,
                size=len(payload or b""),
                error=summarize_exception(str(e)),
            )
            # the record named its speaker; the overlay follows any message from them
            if e.speaker_id is not None:
                self.overlay.touch(e.speaker_id)
            return None

        self.overlay.touch(record.speaker_id)
        if record.kind is DataKind.TRANSCRIPT:
            self._on_transcript(record)
        else:
            self._on_translation(record)
        return record

    def _on_transcript(self, record: UtteranceRecord) -> None:
        if not record.words:
            return
        text = record.text
        self.board.update_transcript(record.speaker_id, text)
        trimmed = text.strip()
        if not record.has_final_word or not trimmed:
            return
        source = self.registry.resolve(record.language_index)
        seg = self.store.append_transcript(record.speaker_id, trimmed, source)
        self.stats.segments_appended += 1
        log_event(
            self.logger,
            logging.INFO,
            "segment_appended",
            speaker_id=record.speaker_id,
            segment_id=seg.segment_id,
            seqnum=record.sequence_number,
            source_language=source,
            chars=len(trimmed),
        )

    def _on_translation(self, record: UtteranceRecord) -> None:
        if not record.translations:
            return
        self.board.update_translations(record.speaker_id, record.translations)
        for entry in record.translations:
            if not entry.is_final:
                continue
            text = entry.text.strip()
            if not text:
                continue
            seg, created = self.store.merge_translation(record.speaker_id, entry.language_code, text)
            if created:
                self.stats.segments_appended += 1
            self.stats.translations_merged += 1
            log_event(
                self.logger,
                logging.INFO,
                "translation_merged",
                speaker_id=record.speaker_id,
                segment_id=seg.segment_id,
                language=entry.language_code,
                created_segment=created,
                chars=len(text),
            )

    # ----- collaborator notifications -----
    def on_media_withdrawn(self, speaker_id: int) -> None:
        self.overlay.withdraw(speaker_id)
        self.board.remove(speaker_id)
        self.selector.forget(speaker_id)
        log_event(self.logger, logging.INFO, "speaker_withdrawn", speaker_id=speaker_id)

    def on_publish(self) -> bool:
        return self.broadcast.on_publish()

    def leave_session(self) -> None:
        self.overlay.cancel_all()
        self.board.clear()
        log_event(self.logger, logging.INFO, "session_left", segments=len(self.store))

    def start_transcription(self, speaking: Sequence[str] | None = None) -> None:
        self.state.set_starting()
        langs = tuple(speaking) if speaking else self.registry.local.speaking
        self.registry.start_session(langs)
        self.state.set_transcribing()
        log_event(self.logger, logging.INFO, "transcription_started", speaking=list(langs))

    def stop_transcription(self) -> None:
        self.state.set_stopped()
        self.registry.end_session()
        self.board.clear()
        log_event(self.logger, logging.INFO, "transcription_stopped")

    def on_local_config_changed(self, languages: LanguageSet) -> None:
        self.registry.set_local(languages)
        if self.state.is_active:
            self.registry.start_session(languages.speaking)
            self.broadcast.announce()
        self.selector.refresh_all()

    def clear_history(self) -> None:
        self.store.clear()
        log_event(self.logger, logging.INFO, "history_cleared")

    # ----- read accessors -----
    def segments(self) -> Tuple[TranscriptSegment, ...]:
        return self.store.snapshot()

    def overlay_state(self, speaker_id: int) -> OverlayState:
        return self.overlay.state(speaker_id)

    def overlay_states(self) -> Dict[int, OverlayState]:
        return self.overlay.states()

    def live_caption(self, speaker_id: int) -> LiveCaption:
        language = self.selector.selected(speaker_id)
        return LiveCaption(
            speaker_id=speaker_id,
            transcript=self.board.transcript_for(speaker_id),
            language=language,
            translation=self.board.translation_for(speaker_id, language),
        )
