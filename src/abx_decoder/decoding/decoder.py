"""Event-stream decoder for Android binary XML.

This module implements the state machine that turns the framed event stream
following the header into an element tree. Each framing byte's low nibble
names an event and its high nibble names the type of the payload that
follows. The decoder validates every pairing, keeps an explicit stack of open
elements, and stops at the first structural error.
"""

from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from ..binary.cursor import ByteCursor
from ..binary.format import (
    DataType,
    XmlEvent,
    event_name,
    split_token,
    type_name,
)
from ..binary.strings import StringTable, read_interned, read_raw_string, skip_raw_string
from ..binary.values import ValueCodec
from ..shared.config import DecoderConfig
from ..shared.errors import (
    InvalidFramingError,
    MismatchedEndTagError,
    NestingTooDeepError,
    NoRootElementError,
    TextOutsideElementError,
    UnclosedElementsError,
    UnexpectedAttributeError,
    UnexpectedEndTagError,
    UnsupportedEventError,
)
from ..shared.logging import get_logger
from ..shared.result import DecodeMetadata, DiagnosticEntry, DiagnosticSeverity
from ..tree.model import XMLDocument, XMLElement

# Payload type each structural event must carry
_REQUIRED_TYPES = {
    XmlEvent.START_DOCUMENT: DataType.NULL,
    XmlEvent.END_DOCUMENT: DataType.NULL,
    XmlEvent.START_TAG: DataType.STRING_INTERNED,
    XmlEvent.END_TAG: DataType.STRING_INTERNED,
    XmlEvent.TEXT: DataType.STRING,
}

# Unassigned type nibble; tolerated on unknown events as "no payload"
_NO_TYPE = 0


class DecoderState(Enum):
    """Lifecycle states of a decode session."""

    AWAITING_DOCUMENT = auto()  # Before START_DOCUMENT
    IN_DOCUMENT = auto()        # Accepting tags, text and attributes
    CLOSED = auto()             # END_DOCUMENT seen; terminal


class TokenDecoder:
    """Single-pass decoder from framed events to an :class:`XMLDocument`.

    The cursor must be positioned on the first event, i.e. after the magic
    marker and any header extension records. One instance decodes one
    document; its string table and element stack are never reused.
    """

    def __init__(
        self,
        cursor: ByteCursor,
        config: Optional[DecoderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize token decoder.

        Args:
            cursor: Cursor positioned on the first event
            config: Decoder configuration (multi-root mode, depth limit)
            correlation_id: Optional correlation ID for request tracking
        """
        self.cursor = cursor
        self.config = config or DecoderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "token_decoder")

        self.strings = StringTable()
        self.values = ValueCodec(cursor, self.strings)
        self.metadata = DecodeMetadata()
        self.diagnostics: List[DiagnosticEntry] = []
        self.state = DecoderState.AWAITING_DOCUMENT

        self.root: Optional[XMLElement] = None
        self._stack: List[XMLElement] = []
        # Stack depth that counts as "no open element"
        self._floor = 0
        if self.config.multi_root:
            self.root = XMLElement(self.config.synthetic_root_tag)
            self._stack.append(self.root)
            self._floor = 1

        self._handlers: Dict[int, Callable[[int, int], None]] = {
            XmlEvent.START_DOCUMENT: self._on_start_document,
            XmlEvent.END_DOCUMENT: self._on_end_document,
            XmlEvent.START_TAG: self._on_start_tag,
            XmlEvent.END_TAG: self._on_end_tag,
            XmlEvent.TEXT: self._on_text,
            XmlEvent.ATTRIBUTE: self._on_attribute,
        }

    @property
    def depth(self) -> int:
        """Number of open elements, excluding the synthetic root."""
        return len(self._stack) - self._floor

    @property
    def open_tags(self) -> List[str]:
        """Tags of the open elements, outermost first."""
        return [element.tag for element in self._stack[self._floor:]]

    def decode(self) -> XMLDocument:
        """Run the event loop to completion.

        Returns:
            The decoded document

        Raises:
            AbxDecodeError: On the first malformed event
        """
        while self.state is not DecoderState.CLOSED and not self.cursor.at_end():
            self.step()

        if self.state is DecoderState.CLOSED:
            if not self.cursor.at_end():
                self._diagnose(
                    DiagnosticSeverity.INFO,
                    f"Ignored {self.cursor.remaining} bytes after END_DOCUMENT",
                    self.cursor.position,
                )
        elif self.depth > 0 and self.root is not None:
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"Input ended with {self.depth} unclosed elements",
                self.cursor.position,
                {"open_tags": self.open_tags},
            )

        if self.root is None:
            raise NoRootElementError("No root element found", offset=self.cursor.position)

        self.metadata.interned_strings = len(self.strings)
        return XMLDocument(
            root=self.root,
            multi_root=self.config.multi_root,
            correlation_id=self.correlation_id,
        )

    def step(self) -> None:
        """Consume and apply exactly one event."""
        offset = self.cursor.position
        event, type_tag = split_token(self.cursor.read_u8())
        self.metadata.add_event(event_name(event))

        if self.state is DecoderState.AWAITING_DOCUMENT:
            self.state = DecoderState.IN_DOCUMENT

        handler = self._handlers.get(event)
        if handler is None:
            self._skip_unknown_event(event, type_tag, offset)
            return

        required = _REQUIRED_TYPES.get(event)
        if required is not None and type_tag != required:
            raise InvalidFramingError(
                f"Invalid {event_name(event)} data type {type_name(type_tag)}, "
                f"expected {required.name}",
                offset=offset,
            )
        handler(type_tag, offset)

    def _on_start_document(self, type_tag: int, offset: int) -> None:
        self.logger.debug("START_DOCUMENT", extra={"offset": offset})

    def _on_end_document(self, type_tag: int, offset: int) -> None:
        if self.depth > 0:
            raise UnclosedElementsError(
                f"Unclosed elements at END_DOCUMENT: {', '.join(self.open_tags)}",
                offset=offset,
            )
        self.state = DecoderState.CLOSED
        self.logger.debug("END_DOCUMENT", extra={"offset": offset})

    def _on_start_tag(self, type_tag: int, offset: int) -> None:
        element = XMLElement(read_interned(self.cursor, self.strings))

        if self._stack:
            self._stack[-1].add_child(element)
        else:
            if self.root is not None:
                self._diagnose(
                    DiagnosticSeverity.WARNING,
                    f"Second top-level element <{element.tag}> replaces "
                    f"<{self.root.tag}> as document root",
                    offset,
                )
            self.root = element
        self._stack.append(element)

        if self.config.max_depth is not None and self.depth > self.config.max_depth:
            raise NestingTooDeepError(
                f"Element nesting exceeds maximum depth {self.config.max_depth}",
                offset=offset,
            )
        self.metadata.record_depth(self.depth)

    def _on_end_tag(self, type_tag: int, offset: int) -> None:
        if self.depth <= 0:
            raise UnexpectedEndTagError("Unexpected END_TAG", offset=offset)

        tag = read_interned(self.cursor, self.strings)
        expected = self._stack[-1].tag
        if tag != expected:
            raise MismatchedEndTagError(
                f"Mismatched END_TAG: expected </{expected}>, found </{tag}>",
                offset=offset,
                expected=expected,
                actual=tag,
            )
        self._stack.pop()

    def _on_text(self, type_tag: int, offset: int) -> None:
        text = read_raw_string(self.cursor)
        if not text or text.isspace():
            self.metadata.whitespace_text_dropped += 1
            return
        if not self._stack:
            raise TextOutsideElementError("Unexpected TEXT outside of element", offset=offset)
        if self.depth == 0:
            self._diagnose(
                DiagnosticSeverity.WARNING,
                "Top-level text is attached to the synthetic root and not rendered",
                offset,
            )
        self._stack[-1].append_text(text)

    def _on_attribute(self, type_tag: int, offset: int) -> None:
        if self.depth <= 0:
            raise UnexpectedAttributeError("Unexpected ATTRIBUTE", offset=offset)

        name = read_interned(self.cursor, self.strings)
        self._stack[-1].attributes[name] = self.values.read_text(type_tag)

    def _skip_unknown_event(self, event: int, type_tag: int, offset: int) -> None:
        if type_tag in (_NO_TYPE, DataType.NULL):
            pass
        elif type_tag == DataType.INT:
            self.cursor.skip(4)
        elif type_tag in (DataType.STRING, DataType.STRING_INTERNED):
            skip_raw_string(self.cursor)
        else:
            raise UnsupportedEventError(
                f"Unexpected XML type {event_name(event)} with data type "
                f"{type_name(type_tag)}",
                offset=offset,
            )
        self.metadata.skipped_events += 1
        self.logger.debug(
            "Skipped unknown event",
            extra={"offset": offset, "event": event, "type": type_name(type_tag)}
        )

    def _diagnose(
        self,
        severity: DiagnosticSeverity,
        message: str,
        offset: Optional[int] = None,
        details: Optional[Dict[str, object]] = None,
    ) -> None:
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component="token_decoder",
                offset=offset,
                details=details,
                correlation_id=self.correlation_id,
            )
        )
        if severity is DiagnosticSeverity.WARNING:
            self.logger.warning(message, extra={"offset": offset})
