"""Exception hierarchy for binary XML decoding.

Every failure the decoder can report is a subclass of :class:`AbxDecodeError`.
Each class carries a stable ``kind`` name so callers (and the CLI) can report
the failure category without matching on class names or messages.
"""

from typing import Optional


class AbxDecodeError(Exception):
    """Base exception for all binary XML decode failures.

    Attributes:
        kind: Stable name of the error category
        offset: Byte offset in the source where the failure was detected
    """

    kind = "DecodeError"

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


class InvalidMagicError(AbxDecodeError):
    """The source does not start with the binary XML magic marker."""

    kind = "InvalidMagic"


class TruncatedInputError(AbxDecodeError):
    """A read ran past the end of the byte source."""

    kind = "TruncatedInput"

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        requested: Optional[int] = None,
        available: Optional[int] = None,
    ) -> None:
        super().__init__(message, offset)
        self.requested = requested
        self.available = available


class CorruptInterningError(AbxDecodeError):
    """An interned-string reference points outside the string table."""

    kind = "CorruptInterning"

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        reference: Optional[int] = None,
        table_size: Optional[int] = None,
    ) -> None:
        super().__init__(message, offset)
        self.reference = reference
        self.table_size = table_size


class MalformedStringError(AbxDecodeError):
    """A length-prefixed string is not valid UTF-8."""

    kind = "MalformedString"


class InvalidFramingError(AbxDecodeError):
    """A framing byte pairs an event with a type tag it does not accept."""

    kind = "InvalidFraming"


class UnclosedElementsError(AbxDecodeError):
    """END_DOCUMENT arrived while elements were still open."""

    kind = "UnclosedElements"


class UnexpectedEndTagError(AbxDecodeError):
    """END_TAG arrived with no open element to close."""

    kind = "UnexpectedEndTag"


class MismatchedEndTagError(AbxDecodeError):
    """END_TAG names a different tag than the innermost open element."""

    kind = "MismatchedEndTag"

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> None:
        super().__init__(message, offset)
        self.expected = expected
        self.actual = actual


class TextOutsideElementError(AbxDecodeError):
    """Non-whitespace TEXT arrived with no open element."""

    kind = "TextOutsideElement"


class UnexpectedAttributeError(AbxDecodeError):
    """ATTRIBUTE arrived with no open element to receive it."""

    kind = "UnexpectedAttribute"


class UnsupportedEventError(AbxDecodeError):
    """An unknown event carries a payload type that cannot be skipped."""

    kind = "UnsupportedEvent"


class UnsupportedValueTypeError(AbxDecodeError):
    """An attribute value uses a type tag the codec does not know."""

    kind = "UnsupportedValueType"


class NoRootElementError(AbxDecodeError):
    """The stream ended without ever establishing a root element."""

    kind = "NoRootElement"


class NestingTooDeepError(AbxDecodeError):
    """Element nesting exceeded the configured maximum depth."""

    kind = "NestingTooDeep"
