"""
Capture files: one JSON object per line, as recorded from a data channel.

    {"t": 0.42, "uid": 1001, "payload_b64": "..."}
    {"t": 9.10, "uid": 42, "event": "unpublished"}

t is seconds since capture start, uid the transport sender. event defaults to
"message"; "unpublished" marks the end of a speaker's media.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from livecaps.overlay.scheduler import ManualScheduler

EVENT_MESSAGE = "message"
EVENT_UNPUBLISHED = "unpublished"
_EVENTS = (EVENT_MESSAGE, EVENT_UNPUBLISHED)


class CaptureFormatError(ValueError):
    pass


@dataclass(frozen=True)
class CaptureLine:
    t: float
    uid: int | str
    payload: bytes = b""
    event: str = EVENT_MESSAGE


def parse_capture_line(text: str, lineno: int = 0) -> CaptureLine:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise CaptureFormatError(f"capture line {lineno}: invalid JSON ({e.msg})") from e
    if not isinstance(raw, dict) or "uid" not in raw:
        raise CaptureFormatError(f"capture line {lineno}: expected an object with uid")
    event = str(raw.get("event", EVENT_MESSAGE))
    if event not in _EVENTS:
        raise CaptureFormatError(f"capture line {lineno}: unknown event {event!r}")
    uid = raw["uid"]
    # an unpublished speaker is an utterance uid, so it must be an integer
    allowed = (int,) if event == EVENT_UNPUBLISHED else (int, str)
    if isinstance(uid, bool) or not isinstance(uid, allowed):
        raise CaptureFormatError(f"capture line {lineno}: bad uid {uid!r} for {event}")
    payload = b""
    if event == EVENT_MESSAGE:
        try:
            payload = base64.b64decode(str(raw.get("payload_b64", "")), validate=True)
        except (binascii.Error, ValueError) as e:
            raise CaptureFormatError(f"capture line {lineno}: bad payload_b64 ({e})") from e
    try:
        t = float(raw.get("t", 0.0))
    except (TypeError, ValueError) as e:
        raise CaptureFormatError(f"capture line {lineno}: bad t") from e
    return CaptureLine(t=t, uid=uid, payload=payload, event=event)


def read_capture(path: str | Path) -> Iterator[CaptureLine]:
    with Path(path).open("r", encoding="utf-8") as f:
        for lineno, text in enumerate(f, start=1):
            if not text.strip():
                continue
            yield parse_capture_line(text, lineno)


def format_capture_line(line: CaptureLine) -> str:
    payload: dict[str, object] = {"t": round(float(line.t), 3), "uid": line.uid}
    if line.event == EVENT_MESSAGE:
        payload["payload_b64"] = base64.b64encode(line.payload).decode("ascii")
    else:
        payload["event"] = line.event
    return json.dumps(payload)


def write_capture(path: str | Path, lines: Iterable[CaptureLine]) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(format_capture_line(line))
            f.write("\n")
    return out


def replay(
    lines: Iterable[CaptureLine],
    reconciler,
    scheduler: ManualScheduler,
    *,
    on_line: Optional[Callable[[CaptureLine], None]] = None,
) -> int:
    """
    Feed capture lines through a reconciler on a virtual clock. Overlay timers
    due before a line's t fire before that line is handled.
    """
    count = 0
    for line in lines:
        scheduler.advance_to(line.t)
        if line.event == EVENT_UNPUBLISHED:
            reconciler.on_media_withdrawn(line.uid)
        else:
            reconciler.handle_message(line.uid, line.payload)
        count += 1
        if on_line is not None:
            on_line(line)
    return count
