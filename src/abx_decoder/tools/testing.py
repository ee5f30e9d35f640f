"""Test case generation tools for ABX Decoder.

Provides a low-level builder for binary XML token streams and a generator of
malformed streams paired with the error each one must produce. The builder
writes individual framed events exactly as given; it performs no validation,
which is what makes it useful for producing broken input.
"""

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from abx_decoder.binary.format import MAGIC, DataType, XmlEvent
from abx_decoder.shared.logging import get_logger


class AbxStreamBuilder:
    """Fluent writer for binary XML token streams.

    Interned strings are tracked like a real writer does: the first use of a
    string defines it (reference -1), later uses emit its backward index.

    Examples:
        >>> data = (AbxStreamBuilder().start_document().start_tag("root")
        ...         .end_tag("root").end_document().build())
    """

    def __init__(self, magic: bytes = MAGIC) -> None:
        self._buffer = bytearray(magic)
        self._interned: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._buffer)

    def build(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buffer)

    # Raw writers

    def raw(self, data: bytes) -> "AbxStreamBuilder":
        self._buffer.extend(data)
        return self

    def token(self, event: int, data_type: int) -> "AbxStreamBuilder":
        """Write a framing byte from an event nibble and a type tag."""
        self._buffer.append((event & 0x0F) | (data_type & 0xF0))
        return self

    def u16(self, value: int) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">H", value))

    def i16(self, value: int) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">h", value))

    def i32(self, value: int) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">i", value))

    def i64(self, value: int) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">q", value))

    def f32(self, value: float) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">f", value))

    def f64(self, value: float) -> "AbxStreamBuilder":
        return self.raw(struct.pack(">d", value))

    def string(self, value: str) -> "AbxStreamBuilder":
        """Write an unsigned 16-bit length followed by UTF-8 bytes."""
        encoded = value.encode("utf-8")
        return self.u16(len(encoded)).raw(encoded)

    def interned(self, value: str) -> "AbxStreamBuilder":
        """Write an interned string, defining it on first use."""
        if value in self._interned:
            return self.i16(self._interned[value])
        self._interned[value] = len(self._interned)
        return self.i16(-1).string(value)

    def reference(self, index: int) -> "AbxStreamBuilder":
        """Write a bare backward reference, valid or not."""
        return self.i16(index)

    def blob(self, value: bytes) -> "AbxStreamBuilder":
        return self.i16(len(value)).raw(value)

    # Events

    def start_document(self) -> "AbxStreamBuilder":
        return self.token(XmlEvent.START_DOCUMENT, DataType.NULL)

    def end_document(self) -> "AbxStreamBuilder":
        return self.token(XmlEvent.END_DOCUMENT, DataType.NULL)

    def start_tag(self, name: str) -> "AbxStreamBuilder":
        return self.token(XmlEvent.START_TAG, DataType.STRING_INTERNED).interned(name)

    def end_tag(self, name: str) -> "AbxStreamBuilder":
        return self.token(XmlEvent.END_TAG, DataType.STRING_INTERNED).interned(name)

    def text(self, value: str) -> "AbxStreamBuilder":
        return self.token(XmlEvent.TEXT, DataType.STRING).string(value)

    def attribute(self, name: str, data_type: int, value: Any = None) -> "AbxStreamBuilder":
        """Write an ATTRIBUTE event whose payload is encoded per ``data_type``."""
        self.token(XmlEvent.ATTRIBUTE, data_type).interned(name)
        return self.value(data_type, value)

    def value(self, data_type: int, value: Any = None) -> "AbxStreamBuilder":
        """Write a bare payload of the given type."""
        if data_type in (DataType.INT, DataType.INT_HEX):
            return self.i32(value)
        if data_type in (DataType.LONG, DataType.LONG_HEX):
            return self.i64(value)
        if data_type == DataType.FLOAT:
            return self.f32(value)
        if data_type == DataType.DOUBLE:
            return self.f64(value)
        if data_type == DataType.STRING:
            return self.string(value)
        if data_type == DataType.STRING_INTERNED:
            return self.interned(value)
        if data_type in (DataType.BYTES_HEX, DataType.BYTES_BASE64):
            return self.blob(value)
        # NULL and the boolean tags carry no payload
        return self

    def element(
        self,
        name: str,
        attributes: Optional[Dict[str, str]] = None,
        text: Optional[str] = None
    ) -> "AbxStreamBuilder":
        """Write a complete leaf element with string attributes."""
        self.start_tag(name)
        for attr_name, attr_value in (attributes or {}).items():
            self.attribute(attr_name, DataType.STRING, attr_value)
        if text is not None:
            self.text(text)
        return self.end_tag(name)


class MalformationType(Enum):
    """Kinds of broken binary XML streams."""

    BAD_MAGIC = "bad_magic"
    TRUNCATED_STRING = "truncated_string"
    DANGLING_REFERENCE = "dangling_reference"
    BAD_FRAMING = "bad_framing"
    UNCLOSED_ELEMENT = "unclosed_element"
    ORPHANED_END_TAG = "orphaned_end_tag"
    MISMATCHED_END_TAG = "mismatched_end_tag"
    TEXT_OUTSIDE_ELEMENT = "text_outside_element"
    ORPHANED_ATTRIBUTE = "orphaned_attribute"
    UNKNOWN_EVENT_PAYLOAD = "unknown_event_payload"
    UNKNOWN_VALUE_TYPE = "unknown_value_type"
    MISSING_ROOT = "missing_root"


@dataclass
class TestCase:
    """Generated stream with the error kind it must raise."""

    __test__ = False  # not a pytest test class

    id: str
    content: bytes
    malformation_type: MalformationType
    expected_error: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert test case to dictionary representation."""
        return {
            "id": self.id,
            "content": self.content.hex(),
            "malformation_type": self.malformation_type.value,
            "expected_error": self.expected_error,
            "metadata": self.metadata,
        }


class TestCaseGenerator:
    """Generator for malformed binary XML streams."""

    __test__ = False

    def __init__(self) -> None:
        self.logger = get_logger(__name__, None, "test_case_generator")
        self._builders = {
            MalformationType.BAD_MAGIC: self._bad_magic,
            MalformationType.TRUNCATED_STRING: self._truncated_string,
            MalformationType.DANGLING_REFERENCE: self._dangling_reference,
            MalformationType.BAD_FRAMING: self._bad_framing,
            MalformationType.UNCLOSED_ELEMENT: self._unclosed_element,
            MalformationType.ORPHANED_END_TAG: self._orphaned_end_tag,
            MalformationType.MISMATCHED_END_TAG: self._mismatched_end_tag,
            MalformationType.TEXT_OUTSIDE_ELEMENT: self._text_outside_element,
            MalformationType.ORPHANED_ATTRIBUTE: self._orphaned_attribute,
            MalformationType.UNKNOWN_EVENT_PAYLOAD: self._unknown_event_payload,
            MalformationType.UNKNOWN_VALUE_TYPE: self._unknown_value_type,
            MalformationType.MISSING_ROOT: self._missing_root,
        }

    def generate(self, malformation_type: MalformationType) -> TestCase:
        """Build the stream for one malformation."""
        content, expected_error = self._builders[malformation_type]()
        self.logger.debug(
            "Generated malformed stream",
            extra={"malformation": malformation_type.value, "size": len(content)}
        )
        return TestCase(
            id=f"malformed_{malformation_type.value}",
            content=content,
            malformation_type=malformation_type,
            expected_error=expected_error,
            metadata={"size": len(content)},
        )

    def generate_all(self) -> Iterator[TestCase]:
        """Yield one test case per malformation type."""
        for malformation_type in MalformationType:
            yield self.generate(malformation_type)

    def well_formed(self) -> bytes:
        """A small valid document used as the base for malformations."""
        return (
            AbxStreamBuilder()
            .start_document()
            .start_tag("root")
            .attribute("id", DataType.INT, 7)
            .element("item", {"name": "first"}, "hello")
            .end_tag("root")
            .end_document()
            .build()
        )

    @staticmethod
    def _opened(tag: str = "root") -> AbxStreamBuilder:
        return AbxStreamBuilder().start_document().start_tag(tag)

    def _bad_magic(self):
        return b"AXB\x00" + self.well_formed()[len(MAGIC):], "InvalidMagic"

    def _truncated_string(self):
        builder = AbxStreamBuilder().start_document()
        builder.token(XmlEvent.START_TAG, DataType.STRING_INTERNED).i16(-1).u16(4)
        return builder.build(), "TruncatedInput"

    def _dangling_reference(self):
        builder = AbxStreamBuilder().start_document()
        builder.token(XmlEvent.START_TAG, DataType.STRING_INTERNED).reference(3)
        return builder.build(), "CorruptInterning"

    def _bad_framing(self):
        builder = AbxStreamBuilder().start_document()
        builder.token(XmlEvent.START_TAG, DataType.STRING).string("root")
        return builder.build(), "InvalidFraming"

    def _unclosed_element(self):
        return self._opened().end_document().build(), "UnclosedElements"

    def _orphaned_end_tag(self):
        return AbxStreamBuilder().start_document().end_tag("root").build(), "UnexpectedEndTag"

    def _mismatched_end_tag(self):
        return self._opened().end_tag("other").build(), "MismatchedEndTag"

    def _text_outside_element(self):
        return AbxStreamBuilder().start_document().text("stray").build(), "TextOutsideElement"

    def _orphaned_attribute(self):
        builder = AbxStreamBuilder().start_document()
        builder.attribute("id", DataType.INT, 1)
        return builder.build(), "UnexpectedAttribute"

    def _unknown_event_payload(self):
        builder = self._opened()
        builder.token(9, DataType.DOUBLE).f64(1.5)
        return builder.build(), "UnsupportedEvent"

    def _unknown_value_type(self):
        builder = self._opened()
        builder.token(XmlEvent.ATTRIBUTE, 14 << 4).interned("odd")
        return builder.build(), "UnsupportedValueType"

    def _missing_root(self):
        return AbxStreamBuilder().start_document().end_document().build(), "NoRootElement"


def generate_malformed_cases() -> List[TestCase]:
    """Convenience wrapper returning every malformed case."""
    return list(TestCaseGenerator().generate_all())
