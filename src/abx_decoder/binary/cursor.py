"""Sequential big-endian reader over an in-memory byte source."""

import struct
from typing import Union

from ..shared.errors import TruncatedInputError

ByteSource = Union[bytes, bytearray, memoryview]

_U16 = struct.Struct(">H")
_I16 = struct.Struct(">h")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")
_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")


class ByteCursor:
    """Fixed-width and length-prefixed reads with a moving position.

    The wire format is big-endian regardless of host byte order. Every read
    either returns the full value or raises :class:`TruncatedInputError`;
    the position is left unchanged by a failed read.
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: ByteSource) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def __len__(self) -> int:
        return len(self._data)

    def at_end(self) -> bool:
        """Report whether the source is exhausted."""
        return self._pos >= len(self._data)

    def _require(self, size: int, what: str) -> None:
        if size > self.remaining:
            raise TruncatedInputError(
                f"Could not read {what}: needed {size} bytes, "
                f"{self.remaining} available",
                offset=self._pos,
                requested=size,
                available=self.remaining,
            )

    def _unpack(self, codec: struct.Struct, what: str) -> Union[int, float]:
        self._require(codec.size, what)
        value = codec.unpack_from(self._data, self._pos)[0]
        self._pos += codec.size
        return value

    def read_bytes(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        if size < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {size}")
        self._require(size, "bytes")
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def read_u8(self) -> int:
        self._require(1, "byte")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def peek_u8(self) -> int:
        """Read one byte without advancing."""
        self._require(1, "byte")
        return self._data[self._pos]

    def read_u16(self) -> int:
        return self._unpack(_U16, "unsigned short")

    def read_i16(self) -> int:
        return self._unpack(_I16, "short")

    def read_i32(self) -> int:
        return self._unpack(_I32, "int")

    def read_i64(self) -> int:
        return self._unpack(_I64, "long")

    def read_f32(self) -> float:
        return self._unpack(_F32, "float")

    def read_f64(self) -> float:
        return self._unpack(_F64, "double")

    def skip(self, size: int) -> None:
        """Advance by ``size`` bytes without materializing them."""
        if size < 0:
            raise ValueError(f"Cannot skip a negative number of bytes: {size}")
        self._require(size, "skipped bytes")
        self._pos += size

    def rewind(self, size: int = 1) -> None:
        """Move the position back by ``size`` bytes."""
        if not 0 <= size <= self._pos:
            raise ValueError(f"Cannot rewind {size} bytes from offset {self._pos}")
        self._pos -= size
