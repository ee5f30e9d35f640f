"""String interning for binary XML decoding.

Strings are transmitted once and afterwards referenced by a backward index
into a table scoped to one decode session. A reference of -1 means "a new
string follows"; any other value must name an entry that already exists.
"""

from typing import Iterator, List

from ..shared.errors import CorruptInterningError, MalformedStringError
from .cursor import ByteCursor

DEFINE_NEW = -1


class StringTable:
    """Append-only list of previously seen strings."""

    def __init__(self) -> None:
        self._strings: List[str] = []

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)

    def define_next(self, value: str) -> int:
        """Append ``value`` and return its index."""
        self._strings.append(value)
        return len(self._strings) - 1

    def resolve(self, index: int) -> str:
        """Return the string at ``index``.

        Raises:
            CorruptInterningError: If ``index`` does not name an existing entry
        """
        if not 0 <= index < len(self._strings):
            raise CorruptInterningError(
                f"Interned string reference {index} is outside the table "
                f"of {len(self._strings)} entries",
                reference=index,
                table_size=len(self._strings),
            )
        return self._strings[index]


def read_raw_string(cursor: ByteCursor) -> str:
    """Read an unsigned 16-bit length followed by that many UTF-8 bytes."""
    length = cursor.read_u16()
    start = cursor.position
    raw = cursor.read_bytes(length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedStringError(
            f"String of {length} bytes is not valid UTF-8: {e.reason}",
            offset=start + e.start,
        ) from e


def skip_raw_string(cursor: ByteCursor) -> None:
    """Consume a length-prefixed string without decoding it."""
    cursor.skip(cursor.read_u16())


def read_interned(cursor: ByteCursor, table: StringTable) -> str:
    """Read an interned string, defining it first if the reference is -1."""
    offset = cursor.position
    reference = cursor.read_i16()
    if reference == DEFINE_NEW:
        value = read_raw_string(cursor)
        table.define_next(value)
        return value
    try:
        return table.resolve(reference)
    except CorruptInterningError as e:
        e.offset = offset
        raise
