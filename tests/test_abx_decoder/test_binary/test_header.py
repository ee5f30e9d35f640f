"""Tests for magic validation and header extension skipping."""

import pytest

from abx_decoder.binary.cursor import ByteCursor
from abx_decoder.binary.format import MAGIC, DataType, XmlEvent
from abx_decoder.binary.header import HeaderSkipper
from abx_decoder.shared.errors import InvalidMagicError, TruncatedInputError
from abx_decoder.tools.testing import AbxStreamBuilder


def skipper_for(data: bytes) -> HeaderSkipper:
    return HeaderSkipper(ByteCursor(data))


class TestMagicValidation:
    """Test the 4-byte magic marker check."""

    def test_valid_magic(self) -> None:
        skipper = skipper_for(MAGIC + b"\x10")
        skipper.validate_magic()

        assert skipper.cursor.position == 4

    def test_wrong_magic(self) -> None:
        with pytest.raises(InvalidMagicError, match="Invalid magic number") as exc_info:
            skipper_for(b"AXB\x00\x10").validate_magic()

        assert exc_info.value.offset == 0
        assert exc_info.value.kind == "InvalidMagic"

    @pytest.mark.parametrize("data", [b"", b"A", b"ABX"])
    def test_input_shorter_than_magic(self, data: bytes) -> None:
        with pytest.raises(InvalidMagicError, match="too short"):
            skipper_for(data).validate_magic()


class TestExtensionSkipping:
    """Test discarding records before START_DOCUMENT."""

    def test_no_extensions(self) -> None:
        data = AbxStreamBuilder().start_document().build()
        skipper = skipper_for(data)

        assert skipper.run() == 0
        assert skipper.cursor.position == 4
        assert skipper.cursor.peek_u8() == 0x10

    def test_int_and_string_records(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(XmlEvent.ATTRIBUTE, DataType.INT).i32(99)
        builder.token(XmlEvent.ATTRIBUTE, DataType.STRING).string("vendor")
        builder.start_document()
        skipper = skipper_for(builder.build())

        assert skipper.run() == 2
        assert skipper.cursor.peek_u8() == 0x10

    def test_fixed_width_records(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(1, DataType.LONG).i64(5)
        builder.token(1, DataType.DOUBLE).f64(2.5)
        builder.token(1, DataType.FLOAT).f32(0.5)
        builder.token(1, DataType.NULL)
        builder.start_document()

        assert skipper_for(builder.build()).run() == 4

    def test_interned_record_skipped_as_raw_string(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(3, DataType.STRING_INTERNED).string("hdr")
        builder.start_document()

        assert skipper_for(builder.build()).run() == 1

    def test_blob_record(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(2, DataType.BYTES_BASE64).blob(b"\x01\x02\x03")
        builder.start_document()

        assert skipper_for(builder.build()).run() == 1

    def test_unknown_type_skips_low_nibble_count(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(3, 0xE0).raw(b"\xaa\xbb\xcc")
        builder.start_document()
        skipper = skipper_for(builder.build())

        assert skipper.run() == 1
        assert skipper.cursor.position == 8

    def test_any_low_zero_nibble_ends_header(self) -> None:
        data = MAGIC + bytes([0x20]) + b"\x00\x00"
        skipper = skipper_for(data)

        assert skipper.run() == 0
        assert skipper.cursor.position == 4

    def test_header_without_start_document_is_truncated(self) -> None:
        builder = AbxStreamBuilder()
        builder.token(1, DataType.INT).i32(1)

        with pytest.raises(TruncatedInputError):
            skipper_for(builder.build()).run()
