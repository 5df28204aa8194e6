"""
Utterance wire schema (protobuf, proto2 semantics).

The speech agent publishes `agora.audio2text.Text` records on the data stream.
The descriptor is assembled here at import time instead of shipping generated
_pb2 code; field numbers match the agent's published schema.
"""
from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "agora.audio2text"
TEXT_TYPE = f"{PACKAGE}.Text"

_F = descriptor_pb2.FieldDescriptorProto

# (name, number, type, repeated, message type)
_TEXT_FIELDS = (
    ("vendor", 1, _F.TYPE_INT32, False, None),
    ("version", 2, _F.TYPE_INT32, False, None),
    ("seqnum", 3, _F.TYPE_INT32, False, None),
    ("uid", 4, _F.TYPE_UINT32, False, None),
    ("flag", 5, _F.TYPE_INT32, False, None),
    ("time", 6, _F.TYPE_INT64, False, None),
    ("lang", 7, _F.TYPE_INT32, False, None),
    ("starttime", 8, _F.TYPE_INT32, False, None),
    ("offtime", 9, _F.TYPE_INT32, False, None),
    ("words", 10, _F.TYPE_MESSAGE, True, "Word"),
    ("end_of_segment", 11, _F.TYPE_BOOL, False, None),
    ("duration_ms", 12, _F.TYPE_INT32, False, None),
    ("data_type", 13, _F.TYPE_STRING, False, None),
    ("trans", 14, _F.TYPE_MESSAGE, True, "Translation"),
)

_WORD_FIELDS = (
    ("text", 1, _F.TYPE_STRING, False, None),
    ("startMs", 2, _F.TYPE_INT32, False, None),
    ("durationMs", 3, _F.TYPE_INT32, False, None),
    ("isFinal", 4, _F.TYPE_BOOL, False, None),
    ("confidence", 5, _F.TYPE_DOUBLE, False, None),
)

_TRANSLATION_FIELDS = (
    ("isFinal", 1, _F.TYPE_BOOL, False, None),
    ("lang", 2, _F.TYPE_STRING, False, None),
    ("texts", 3, _F.TYPE_STRING, True, None),
)


def _add_message(fdp: descriptor_pb2.FileDescriptorProto, name: str, fields) -> None:
    msg = fdp.message_type.add()
    msg.name = name
    for field_name, number, ftype, repeated, type_name in fields:
        f = msg.field.add()
        f.name = field_name
        f.number = number
        f.type = ftype
        f.label = _F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL
        if type_name:
            f.type_name = f".{PACKAGE}.{type_name}"


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = "livecaps/audio2text.proto"
    fdp.package = PACKAGE
    fdp.syntax = "proto2"
    _add_message(fdp, "Text", _TEXT_FIELDS)
    _add_message(fdp, "Word", _WORD_FIELDS)
    _add_message(fdp, "Translation", _TRANSLATION_FIELDS)
    return fdp


# Private pool so the schema never collides with anything registered globally.
_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(build_file_descriptor().SerializeToString())

Text = message_factory.GetMessageClass(_POOL.FindMessageTypeByName(TEXT_TYPE))
Word = message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.Word"))
Translation = message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.Translation"))
