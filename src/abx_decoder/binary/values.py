"""Typed value decoding for binary XML attributes.

A value's type tag (the high nibble of its framing byte) selects how many
bytes follow and how they are interpreted. Decoded values are rendered to the
text stored on the element; :meth:`ValueCodec.read_typed` exposes the native
Python value for callers that want it.
"""

import base64
import math
import struct
from typing import Any, Callable, Dict

from ..shared.errors import UnsupportedValueTypeError
from .cursor import ByteCursor
from .format import DataType, lookup_type, type_name
from .strings import StringTable, read_interned, read_raw_string

_INT32_MASK = 0xFFFFFFFF
_INT64_MASK = 0xFFFFFFFFFFFFFFFF
_BLOB_LENGTH_MASK = 0xFFFF
_FLOAT32 = struct.Struct(">f")
_FLOAT32_MAX_DIGITS = 9


def format_float32(value: float) -> str:
    """Shortest decimal text that reads back as the same 32-bit float."""
    if math.isnan(value) or math.isinf(value):
        return str(value)
    for digits in range(1, _FLOAT32_MAX_DIGITS + 1):
        candidate = float(f"{value:.{digits}g}")
        try:
            narrowed = _FLOAT32.unpack(_FLOAT32.pack(candidate))[0]
        except OverflowError:
            continue  # rounded past the float32 range
        if narrowed == value:
            return str(candidate)
    return str(value)


def format_value(data_type: DataType, value: Any) -> str:
    """Render a decoded value as attribute text."""
    if data_type is DataType.NULL:
        return "null"
    if data_type is DataType.BOOLEAN_TRUE:
        return "true"
    if data_type is DataType.BOOLEAN_FALSE:
        return "false"
    if data_type is DataType.INT_HEX:
        return format(value & _INT32_MASK, "x")
    if data_type is DataType.LONG_HEX:
        return format(value & _INT64_MASK, "x")
    if data_type is DataType.FLOAT:
        return format_float32(value)
    if data_type is DataType.BYTES_HEX:
        return value.hex()
    if data_type is DataType.BYTES_BASE64:
        return base64.b64encode(value).decode("ascii")
    # INT, LONG, DOUBLE and both string kinds
    return str(value)


class ValueCodec:
    """Decode one typed value from a cursor, resolving interned strings."""

    def __init__(self, cursor: ByteCursor, strings: StringTable) -> None:
        self.cursor = cursor
        self.strings = strings
        self._readers: Dict[DataType, Callable[[], Any]] = {
            DataType.NULL: lambda: None,
            DataType.BOOLEAN_TRUE: lambda: True,
            DataType.BOOLEAN_FALSE: lambda: False,
            DataType.INT: cursor.read_i32,
            DataType.INT_HEX: cursor.read_i32,
            DataType.LONG: cursor.read_i64,
            DataType.LONG_HEX: cursor.read_i64,
            DataType.FLOAT: cursor.read_f32,
            DataType.DOUBLE: cursor.read_f64,
            DataType.STRING: lambda: read_raw_string(cursor),
            DataType.STRING_INTERNED: lambda: read_interned(cursor, strings),
            DataType.BYTES_HEX: self.read_blob,
            DataType.BYTES_BASE64: self.read_blob,
        }

    def read_blob(self) -> bytes:
        """Read a 16-bit length prefix and that many raw bytes.

        The length is written as a short; its bit pattern is read as an
        unsigned count so blobs of 32 KiB and more survive.
        """
        length = self.cursor.read_i16() & _BLOB_LENGTH_MASK
        return self.cursor.read_bytes(length)

    def read_typed(self, type_tag: int) -> Any:
        """Decode the value for ``type_tag`` and return it as a Python object.

        Raises:
            UnsupportedValueTypeError: If the tag names no known value type
        """
        data_type = lookup_type(type_tag)
        if data_type is None:
            raise UnsupportedValueTypeError(
                f"Unexpected attribute data type {type_name(type_tag)}",
                offset=self.cursor.position,
            )
        return self._readers[data_type]()

    def read_text(self, type_tag: int) -> str:
        """Decode the value for ``type_tag`` and render it as text."""
        value = self.read_typed(type_tag)
        return format_value(DataType(type_tag), value)
