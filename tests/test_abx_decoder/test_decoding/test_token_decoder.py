"""Tests for the event-stream decoder state machine."""

import pytest

from abx_decoder.binary.cursor import ByteCursor
from abx_decoder.binary.format import DataType, XmlEvent
from abx_decoder.binary.header import HeaderSkipper
from abx_decoder.decoding.decoder import DecoderState, TokenDecoder
from abx_decoder.shared.config import DecoderConfig
from abx_decoder.shared.errors import (
    CorruptInterningError,
    InvalidFramingError,
    MismatchedEndTagError,
    NestingTooDeepError,
    NoRootElementError,
    TextOutsideElementError,
    TruncatedInputError,
    UnclosedElementsError,
    UnexpectedAttributeError,
    UnexpectedEndTagError,
    UnsupportedEventError,
    UnsupportedValueTypeError,
)
from abx_decoder.shared.result import DiagnosticSeverity
from abx_decoder.tools.testing import AbxStreamBuilder


def make_decoder(builder: AbxStreamBuilder, **config) -> TokenDecoder:
    cursor = ByteCursor(builder.build())
    HeaderSkipper(cursor).run()
    return TokenDecoder(cursor, DecoderConfig(**config))


def decode(builder: AbxStreamBuilder, **config):
    decoder = make_decoder(builder, **config)
    return decoder, decoder.decode()


class TestWellFormedStreams:
    """Test decoding of valid event streams."""

    def test_single_element(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .start_tag("root").end_tag("root").end_document())
        decoder, document = decode(builder)

        assert document.root.tag == "root"
        assert document.root.is_empty
        assert decoder.state is DecoderState.CLOSED
        assert decoder.depth == 0

    def test_nested_elements_and_attributes(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("packages")
            .attribute("version", DataType.INT, 3)
            .start_tag("package")
            .attribute("name", DataType.STRING_INTERNED, "com.example")
            .attribute("enabled", DataType.BOOLEAN_TRUE)
            .end_tag("package")
            .end_tag("packages")
            .end_document()
        )
        decoder, document = decode(builder)

        root = document.root
        assert root.attributes == {"version": "3"}
        package = root.find_child("package")
        assert package.attributes == {"name": "com.example", "enabled": "true"}
        assert decoder.metadata.max_depth == 2
        assert decoder.metadata.interned_strings == 6

    def test_attribute_order_is_preserved(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("e")
            .attribute("z", DataType.STRING, "1")
            .attribute("a", DataType.STRING, "2")
            .attribute("m", DataType.STRING, "3")
            .end_tag("e")
            .end_document()
        )
        _, document = decode(builder)

        assert list(document.root.attributes) == ["z", "a", "m"]

    def test_repeated_attribute_keeps_last_value(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("e")
            .attribute("k", DataType.STRING, "first")
            .attribute("k", DataType.STRING, "second")
            .end_tag("e")
            .end_document()
        )
        _, document = decode(builder)

        assert document.root.attributes == {"k": "second"}

    def test_text_runs_are_concatenated(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("p").text("Hello, ").text("world").end_tag("p")
            .end_document()
        )
        _, document = decode(builder)

        assert document.root.text == "Hello, world"

    def test_whitespace_text_is_dropped(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("root").text("\n  ")
            .element("child")
            .text("\n").end_tag("root")
            .end_document()
        )
        decoder, document = decode(builder)

        assert document.root.text is None
        assert decoder.metadata.whitespace_text_dropped == 2

    def test_unicode_whitespace_text_is_dropped(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .start_tag("root").text("\u00a0\u2003").end_tag("root")
            .end_document()
        )
        decoder, document = decode(builder)

        assert document.root.text is None
        assert decoder.metadata.whitespace_text_dropped == 1

    def test_whitespace_text_outside_element_is_ignored(self) -> None:
        builder = (
            AbxStreamBuilder().start_document()
            .text("\n")
            .element("root")
            .end_document()
        )
        _, document = decode(builder)

        assert document.root.tag == "root"

    def test_event_distribution(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .element("a", {"x": "1"}, "t").end_document())
        decoder, _ = decode(builder)

        assert decoder.metadata.event_distribution == {
            "START_DOCUMENT": 1,
            "START_TAG": 1,
            "ATTRIBUTE": 1,
            "TEXT": 1,
            "END_TAG": 1,
            "END_DOCUMENT": 1,
        }
        assert decoder.metadata.total_events == 6


class TestStateTransitions:
    """Test the document lifecycle states."""

    def test_initial_state(self) -> None:
        decoder = make_decoder(AbxStreamBuilder().start_document())

        assert decoder.state is DecoderState.AWAITING_DOCUMENT

    def test_start_document_enters_document(self) -> None:
        decoder = make_decoder(AbxStreamBuilder().start_document().start_tag("a"))
        decoder.step()

        assert decoder.state is DecoderState.IN_DOCUMENT

    def test_repeated_start_document_is_tolerated(self) -> None:
        builder = (AbxStreamBuilder().start_document().start_tag("r")
                   .start_document().end_tag("r").end_document())
        decoder = make_decoder(builder)
        for _ in range(3):
            decoder.step()

        assert decoder.state is DecoderState.IN_DOCUMENT

        decoder, document = decode(builder)

        assert document.root.tag == "r"
        assert decoder.metadata.event_distribution["START_DOCUMENT"] == 2

    def test_events_stop_after_end_document(self) -> None:
        builder = (AbxStreamBuilder().start_document().element("root")
                   .end_document().raw(b"\xde\xad"))
        decoder, document = decode(builder)

        assert decoder.cursor.remaining == 2
        assert document.root.tag == "root"
        info = [d for d in decoder.diagnostics if d.severity is DiagnosticSeverity.INFO]
        assert len(info) == 1
        assert "2 bytes after END_DOCUMENT" in info[0].message

    def test_missing_end_document_is_tolerated(self) -> None:
        builder = AbxStreamBuilder().start_document().element("root")
        decoder, document = decode(builder)

        assert document.root.tag == "root"
        assert decoder.state is DecoderState.IN_DOCUMENT

    def test_eof_with_open_elements_records_warning(self) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root").start_tag("child")
        decoder, document = decode(builder)

        assert document.root.find_child("child") is not None
        warnings = [d for d in decoder.diagnostics if d.severity is DiagnosticSeverity.WARNING]
        assert len(warnings) == 1
        assert warnings[0].details == {"open_tags": ["root", "child"]}


class TestStructuralErrors:
    """Test that structural violations raise the right error."""

    def test_end_document_with_open_elements(self) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root").end_document()

        with pytest.raises(UnclosedElementsError, match="root"):
            decode(builder)

    def test_end_tag_without_open_element(self) -> None:
        builder = AbxStreamBuilder().start_document().end_tag("root")

        with pytest.raises(UnexpectedEndTagError, match="Unexpected END_TAG"):
            decode(builder)

    def test_mismatched_end_tag(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .start_tag("a").start_tag("b").end_tag("a"))

        with pytest.raises(MismatchedEndTagError) as exc_info:
            decode(builder)

        assert exc_info.value.expected == "b"
        assert exc_info.value.actual == "a"
        assert "expected </b>, found </a>" in str(exc_info.value)

    def test_text_outside_element(self) -> None:
        builder = AbxStreamBuilder().start_document().text("stray")

        with pytest.raises(TextOutsideElementError):
            decode(builder)

    def test_attribute_without_element(self) -> None:
        builder = AbxStreamBuilder().start_document().attribute("a", DataType.INT, 1)

        with pytest.raises(UnexpectedAttributeError, match="Unexpected ATTRIBUTE"):
            decode(builder)

    def test_attribute_after_root_closed(self) -> None:
        builder = (AbxStreamBuilder().start_document().element("root")
                   .attribute("late", DataType.STRING, "x"))

        with pytest.raises(UnexpectedAttributeError):
            decode(builder)

    def test_no_root_element(self) -> None:
        builder = AbxStreamBuilder().start_document().end_document()

        with pytest.raises(NoRootElementError, match="No root element found"):
            decode(builder)

    def test_empty_event_stream(self) -> None:
        with pytest.raises(NoRootElementError):
            TokenDecoder(ByteCursor(b"")).decode()

    def test_error_offset_points_at_framing_byte(self) -> None:
        builder = AbxStreamBuilder().start_document().end_tag("root")

        with pytest.raises(UnexpectedEndTagError) as exc_info:
            decode(builder)

        assert exc_info.value.offset == 5


class TestFraming:
    """Test event/type pairing checks."""

    @pytest.mark.parametrize("event,data_type", [
        (XmlEvent.START_DOCUMENT, DataType.STRING),
        (XmlEvent.END_DOCUMENT, DataType.INT),
        (XmlEvent.START_TAG, DataType.STRING),
        (XmlEvent.END_TAG, DataType.NULL),
        (XmlEvent.TEXT, DataType.STRING_INTERNED),
    ])
    def test_wrong_payload_type(self, event: XmlEvent, data_type: DataType) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root")
        builder.token(event, data_type)

        with pytest.raises(InvalidFramingError, match=f"Invalid {event.name} data type"):
            decode(builder)

    def test_unknown_value_type_in_attribute(self) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root")
        builder.token(XmlEvent.ATTRIBUTE, 0xE0).interned("odd")

        with pytest.raises(UnsupportedValueTypeError):
            decode(builder)

    def test_dangling_tag_reference(self) -> None:
        builder = AbxStreamBuilder().start_document()
        builder.token(XmlEvent.START_TAG, DataType.STRING_INTERNED).reference(0)

        with pytest.raises(CorruptInterningError):
            decode(builder)

    def test_truncated_attribute_value(self) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root")
        builder.token(XmlEvent.ATTRIBUTE, DataType.LONG).interned("n").raw(b"\x00\x01")

        with pytest.raises(TruncatedInputError):
            decode(builder)


class TestUnknownEvents:
    """Test skipping of events the decoder does not handle."""

    @pytest.mark.parametrize("data_type,payload", [
        (0x00, b""),
        (DataType.NULL, b""),
        (DataType.INT, b"\x00\x00\x00\x07"),
        (DataType.STRING, b"\x00\x03abc"),
        (DataType.STRING_INTERNED, b"\x00\x02xy"),
    ])
    def test_skippable_payloads(self, data_type: int, payload: bytes) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root")
        builder.token(7, data_type).raw(payload)
        builder.end_tag("root").end_document()
        decoder, document = decode(builder)

        assert document.root.tag == "root"
        assert decoder.metadata.skipped_events == 1
        assert decoder.metadata.event_distribution["EVENT_7"] == 1

    def test_unskippable_payload(self) -> None:
        builder = AbxStreamBuilder().start_document().start_tag("root")
        builder.token(9, DataType.DOUBLE).f64(1.5)

        with pytest.raises(UnsupportedEventError, match="EVENT_9"):
            decode(builder)


class TestRootHandling:
    """Test single-root and multi-root behavior."""

    def test_second_top_level_element_replaces_root(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .element("first").element("second").end_document())
        decoder, document = decode(builder)

        assert document.root.tag == "second"
        assert len(decoder.diagnostics) == 1
        assert decoder.diagnostics[0].severity is DiagnosticSeverity.WARNING

    def test_multi_root_collects_top_level_elements(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .element("a").element("b").element("c").end_document())
        decoder, document = decode(builder, multi_root=True)

        assert document.multi_root
        assert document.root.tag == "root"
        assert [e.tag for e in document.top_level_elements] == ["a", "b", "c"]
        assert decoder.diagnostics == []

    def test_multi_root_custom_synthetic_tag(self) -> None:
        builder = AbxStreamBuilder().start_document().element("a").end_document()
        _, document = decode(builder, multi_root=True, synthetic_root_tag="wrapper")

        assert document.root.tag == "wrapper"

    def test_multi_root_empty_stream_has_no_content(self) -> None:
        builder = AbxStreamBuilder().start_document().end_document()
        _, document = decode(builder, multi_root=True)

        assert document.top_level_elements == []

    def test_multi_root_end_tag_cannot_close_synthetic_root(self) -> None:
        builder = AbxStreamBuilder().start_document().end_tag("root")

        with pytest.raises(UnexpectedEndTagError):
            decode(builder, multi_root=True)

    def test_multi_root_attribute_at_top_level(self) -> None:
        builder = AbxStreamBuilder().start_document().attribute("a", DataType.INT, 1)

        with pytest.raises(UnexpectedAttributeError):
            decode(builder, multi_root=True)

    def test_multi_root_top_level_text_records_warning(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .text("loose").element("a").end_document())
        decoder, document = decode(builder, multi_root=True)

        assert document.root.text == "loose"
        assert decoder.diagnostics[0].severity is DiagnosticSeverity.WARNING

    def test_multi_root_depth_excludes_synthetic_root(self) -> None:
        decoder = make_decoder(
            AbxStreamBuilder().start_document().start_tag("a"), multi_root=True
        )
        assert decoder.depth == 0
        decoder.step()
        decoder.step()

        assert decoder.depth == 1
        assert decoder.open_tags == ["a"]


class TestDepthLimit:
    """Test the optional nesting limit."""

    def test_within_limit(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .start_tag("a").element("b").end_tag("a").end_document())
        decoder, _ = decode(builder, max_depth=2)

        assert decoder.metadata.max_depth == 2

    def test_exceeding_limit(self) -> None:
        builder = (AbxStreamBuilder().start_document()
                   .start_tag("a").start_tag("b").start_tag("c"))

        with pytest.raises(NestingTooDeepError, match="maximum depth 2"):
            decode(builder, max_depth=2)
