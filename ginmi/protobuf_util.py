"""Protocol Buffer helpers for gNMI messages.

This module is the single boundary to the generated gNMI schema. The
messages themselves come from the ``pygnmi`` distribution; everything else in
the package imports them from here.

Architectural Boundary: this is transport code.
- NO device or vendor specific logic
- Pure message serialization
"""

from __future__ import annotations

from typing import Any

from google.protobuf import json_format
from google.protobuf.message import Message
from pygnmi.spec.v080 import gnmi_ext_pb2, gnmi_pb2

__all__ = [
    "gnmi_ext_pb2",
    "gnmi_pb2",
    "message_to_dict",
    "serialize_message",
]


def serialize_message(message: Message) -> bytes:
    """Serialize protobuf message to binary.

    Args:
        message: Protobuf message

    Returns:
        Binary-serialized message
    """
    return message.SerializeToString()


def message_to_dict(message: Message) -> dict[str, Any]:
    """Convert a protobuf message to a plain dict.

    Field names are kept as declared in the ``.proto`` files and enum values
    are rendered by name.
    """
    return json_format.MessageToDict(message, preserving_proto_field_name=True)
