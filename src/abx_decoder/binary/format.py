"""Wire-format constants for Android binary XML (ABX)."""

from enum import IntEnum
from typing import Optional, Tuple

MAGIC = b"ABX\x00"

EVENT_MASK = 0x0F
TYPE_MASK = 0xF0


class XmlEvent(IntEnum):
    """Event kinds carried in the low nibble of a framing byte."""

    START_DOCUMENT = 0
    END_DOCUMENT = 1
    START_TAG = 2
    END_TAG = 3
    TEXT = 4
    ATTRIBUTE = 15


class DataType(IntEnum):
    """Value type tags carried in the high nibble of a framing byte."""

    NULL = 1 << 4
    STRING = 2 << 4
    STRING_INTERNED = 3 << 4
    BYTES_HEX = 4 << 4
    BYTES_BASE64 = 5 << 4
    INT = 6 << 4
    INT_HEX = 7 << 4
    LONG = 8 << 4
    LONG_HEX = 9 << 4
    FLOAT = 10 << 4
    DOUBLE = 11 << 4
    BOOLEAN_TRUE = 12 << 4
    BOOLEAN_FALSE = 13 << 4


def split_token(token: int) -> Tuple[int, int]:
    """Split a framing byte into ``(event, type_tag)`` nibbles."""
    return token & EVENT_MASK, token & TYPE_MASK


def event_name(event: int) -> str:
    """Name of an event nibble, or ``EVENT_<n>`` for unassigned codes."""
    try:
        return XmlEvent(event).name
    except ValueError:
        return f"EVENT_{event}"


def type_name(type_tag: int) -> str:
    """Name of a type tag, or its hex value for unassigned tags."""
    data_type = lookup_type(type_tag)
    return data_type.name if data_type is not None else f"0x{type_tag:02x}"


def lookup_type(type_tag: int) -> Optional[DataType]:
    """Return the :class:`DataType` for a tag, or None if it is unassigned."""
    try:
        return DataType(type_tag)
    except ValueError:
        return None
