"""Binary layer for Android binary XML decoding.

This module provides the byte-level building blocks the token decoder is made
of: a big-endian cursor, the string interning table, the typed value codec,
and the header skipper.
"""

from .cursor import ByteCursor
from .format import MAGIC, DataType, XmlEvent
from .header import HeaderSkipper
from .strings import StringTable, read_interned, read_raw_string
from .values import ValueCodec, format_value

__all__ = [
    "ByteCursor",
    "MAGIC",
    "DataType",
    "XmlEvent",
    "HeaderSkipper",
    "StringTable",
    "read_interned",
    "read_raw_string",
    "ValueCodec",
    "format_value",
]
