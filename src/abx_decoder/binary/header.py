"""Magic-marker validation and extension-record skipping.

Writers may place vendor records between the magic marker and the first
START_DOCUMENT event. Their layout is not documented, so they are discarded
using the same length rules as attribute values. Unknown tags fall back to
skipping as many bytes as the framing byte's low nibble says; if that guess
is wrong the event loop fails cleanly on the bytes that follow.
"""

from typing import Optional

from ..shared.errors import InvalidMagicError
from ..shared.logging import get_logger
from .cursor import ByteCursor
from .format import MAGIC, DataType, XmlEvent, lookup_type, split_token, type_name
from .strings import skip_raw_string

_FIXED_WIDTHS = {
    DataType.NULL: 0,
    DataType.INT: 4,
    DataType.LONG: 8,
    DataType.FLOAT: 4,
    DataType.DOUBLE: 8,
}


class HeaderSkipper:
    """Consume the magic marker and any extension records after it."""

    def __init__(self, cursor: ByteCursor, correlation_id: Optional[str] = None) -> None:
        self.cursor = cursor
        self.logger = get_logger(__name__, correlation_id, "header_skipper")

    def validate_magic(self) -> None:
        """Check the 4-byte marker at the start of the source.

        Raises:
            InvalidMagicError: If the source is shorter than the marker or
                its first bytes differ
        """
        if self.cursor.remaining < len(MAGIC):
            raise InvalidMagicError(
                f"Input is {self.cursor.remaining} bytes, too short for the "
                "magic marker",
                offset=0,
            )
        magic = self.cursor.read_bytes(len(MAGIC))
        if magic != MAGIC:
            raise InvalidMagicError(
                f"Invalid magic number {magic!r}, expected {MAGIC!r}", offset=0
            )

    def skip_extensions(self) -> int:
        """Discard records until the next byte is a START_DOCUMENT event.

        Returns:
            Number of extension records discarded
        """
        skipped = 0
        while True:
            offset = self.cursor.position
            token = self.cursor.read_u8()
            event, type_tag = split_token(token)
            if event == XmlEvent.START_DOCUMENT:
                self.cursor.rewind(1)
                return skipped

            self._skip_record(token, type_tag)
            skipped += 1
            self.logger.debug(
                "Skipped header extension record",
                extra={"offset": offset, "type": type_name(type_tag)}
            )

    def _skip_record(self, token: int, type_tag: int) -> None:
        data_type = lookup_type(type_tag)
        if data_type in _FIXED_WIDTHS:
            self.cursor.skip(_FIXED_WIDTHS[data_type])
        elif data_type in (DataType.STRING, DataType.STRING_INTERNED):
            # Header strings are never added to the string table
            skip_raw_string(self.cursor)
        elif data_type in (DataType.BYTES_HEX, DataType.BYTES_BASE64):
            self.cursor.skip(self.cursor.read_i16() & 0xFFFF)
        else:
            self.cursor.skip(split_token(token)[0])

    def run(self) -> int:
        """Validate the marker and skip extensions; return records skipped."""
        self.validate_magic()
        return self.skip_extensions()
