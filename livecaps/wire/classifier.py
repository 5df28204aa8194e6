from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from livecaps.contracts import ControlMessage, MessageKind
from livecaps.wire.control import ControlMessageError, parse_control_message

_OPEN_BRACE = 0x7B


@dataclass(frozen=True)
class Classification:
    kind: MessageKind
    control: Optional[ControlMessage] = None


UTTERANCE = Classification(kind=MessageKind.UTTERANCE)


def classify(payload: bytes) -> Classification:
    """
    Tell a JSON control message from a binary utterance sharing the channel.

    A leading '{' only makes the payload a candidate: anything that does not
    parse into a known control message falls through to the utterance path.
    Never raises.
    """
    data = bytes(payload or b"")
    if not data or data[0] != _OPEN_BRACE:
        return UTTERANCE
    try:
        control = parse_control_message(data.decode("utf-8"))
    except (UnicodeDecodeError, ControlMessageError, RecursionError):
        return UTTERANCE
    return Classification(kind=MessageKind.CONTROL, control=control)
