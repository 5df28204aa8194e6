from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, TextIO

from livecaps.app.capture import CaptureFormatError, CaptureLine, read_capture, replay
from livecaps.app.config import language_set_from_config, resolve_args, validate_language_config
from livecaps.app.diagnostics import hint_for_exception, summarize_exception
from livecaps.app.logging_setup import setup_app_logger
from livecaps.app.reconciler import StreamReconciler
from livecaps.contracts import LanguageSet
from livecaps.lang.resolver import LanguageRegistry
from livecaps.overlay.scheduler import ManualScheduler
from livecaps.ui.bridge import OverlayEventBus, drain_overlay_bus
from livecaps.views.selector import offered_pairs


class ConsoleOverlayView:
    def __init__(self, out: TextIO) -> None:
        self.out = out

    def set_overlay(self, speaker_id: int, visible: bool) -> None:
        print(f"  overlay {speaker_id}: {'shown' if visible else 'hidden'}", file=self.out)


def _print_live(reconciler: StreamReconciler, line: CaptureLine, out: TextIO) -> None:
    for speaker_id, state in sorted(reconciler.overlay_states().items()):
        if not state.visible:
            continue
        cap = reconciler.live_caption(speaker_id)
        text = f"[{line.t:7.2f}] {speaker_id}: {cap.transcript}"
        if cap.language and cap.translation:
            text += f" | {cap.language}: {cap.translation}"
        print(text, file=out)


def _print_languages(local: LanguageSet, out: TextIO) -> int:
    print("Speaking: " + (", ".join(local.speaking) or "(none)"), file=out)
    offers = offered_pairs(LanguageRegistry(local), ())
    if not offers:
        print("Translations: (none)", file=out)
        return 0
    print("Translations:", file=out)
    for offer in offers:
        print(f"  {offer.label}", file=out)
    return 0


def _run_replay(args: Any, local: LanguageSet, logger, out: TextIO) -> int:
    scheduler = ManualScheduler()
    bus = OverlayEventBus(maxsize=max(1, int(args.queue_maxsize)))
    reconciler = StreamReconciler(
        registry=LanguageRegistry(local),
        scheduler=scheduler,
        hide_delay_sec=max(0, int(args.overlay_hide_ms)) / 1000.0,
        on_overlay_change=bus if args.live else None,
        viewer_language=args.viewer_language,
        logger=logger,
    )
    if args.session_languages:
        reconciler.start_transcription(args.session_languages)
    view = ConsoleOverlayView(out)

    def _on_line(line: CaptureLine) -> None:
        if not args.live:
            return
        drain_overlay_bus(bus, view, max_items=bus.q.maxsize)
        _print_live(reconciler, line, out)

    try:
        count = replay(read_capture(args.capture), reconciler, scheduler, on_line=_on_line)
    except (CaptureFormatError, OSError) as e:
        summary = summarize_exception(str(e))
        logger.error("replay_failed", extra={"capture": str(args.capture), "error": summary})
        print(f"error: {summary}", file=sys.stderr)
        print(hint_for_exception(summary), file=sys.stderr)
        return 2

    scheduler.advance(reconciler.overlay.hide_delay_sec)
    reconciler.leave_session()
    if args.live:
        drain_overlay_bus(bus, view, max_items=bus.q.maxsize)

    views = reconciler.views
    if args.export == "csv":
        exported = views.export_csv(args.language)
    elif args.export == "json":
        exported = views.export_json()
    else:
        exported = views.export_text()

    if args.out:
        path = Path(args.out)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(exported if exported.endswith("\n") else exported + "\n", encoding="utf-8")
    else:
        print(exported, file=out)

    logger.info("replay_done", extra={"lines": count, **reconciler.stats.as_dict()})
    return 0


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(level=args.log_level)
    logger.info("app_start", extra={"command": args.command, "argv": argv or []})

    cfg = {
        "speaking_languages": args.speaking_languages,
        "translation_pairs": args.translation_pairs,
        "stt_version": args.stt_version,
    }
    for notice in validate_language_config(cfg):
        logger.warning("config_notice", extra={"code": notice.code})
        print(f"notice: {notice.message}", file=sys.stderr)
    local = language_set_from_config(cfg)

    if args.command == "languages":
        return _print_languages(local, out)
    code = _run_replay(args, local, logger, out)
    if code != 0:
        print(f"See log: {log_path}", file=sys.stderr)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
