"""Public decoding API for Android binary XML.

This module wires the binary layer, the token decoder and the renderer
together, from simple module-level functions to a configurable
:class:`AbxDecoder` class. Unlike a recovering parser, decoding is
all-or-nothing: the first malformed event raises an
:class:`~abx_decoder.shared.errors.AbxDecodeError` and no partial document
or output is produced.
"""

import os
import sys
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

import psutil

from abx_decoder.binary import ByteCursor, HeaderSkipper
from abx_decoder.decoding import TokenDecoder
from abx_decoder.shared import (
    AbxDecodeError,
    ConfigError,
    ConverterConfig,
    DecodeMetadata,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    get_logger,
)
from abx_decoder.tree import XMLDocument, XMLRenderer

# Type definitions for input data
InputType = Union[bytes, bytearray, memoryview, str, Path, BinaryIO]
PathType = Union[str, Path]

STDOUT_TARGET = "-"
MS_PER_SECOND = 1000


@dataclass
class DecodeResult:
    """Outcome of a successful decode.

    Contains the document tree together with the diagnostics, structural
    metadata and performance figures gathered along the way.
    """

    document: XMLDocument
    config: ConverterConfig = field(default_factory=ConverterConfig)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metadata: DecodeMetadata = field(default_factory=DecodeMetadata)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def tree(self) -> XMLDocument:
        """Direct access to the decoded document."""
        return self.document

    @property
    def element_count(self) -> int:
        return self.document.total_elements

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_warnings(self) -> bool:
        """Check whether any tolerated anomaly was recorded."""
        return bool(self.get_diagnostics_by_severity(DiagnosticSeverity.WARNING))

    def to_xml(self) -> str:
        """Render the document with this result's render configuration."""
        return XMLRenderer(self.config.render, self.correlation_id).render(self.document)

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the decode."""
        return {
            "correlation_id": self.correlation_id,
            "multi_root": self.document.multi_root,
            "element_count": self.element_count,
            "attribute_count": self.document.total_attributes,
            "max_depth": self.document.max_depth,
            "processing_time_ms": self.performance.processing_time_ms,
            "bytes_processed": self.performance.bytes_processed,
            "memory_used_bytes": self.performance.memory_used_bytes,
            "metadata": self.metadata.to_dict(),
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


class AbxDecoder:
    """Configurable decoder that can be reused for many documents.

    Each call to :meth:`decode` builds a fresh cursor, string table and
    element stack; the instance itself only holds configuration.

    Examples:
        >>> decoder = AbxDecoder(ConverterConfig.multi_root())
        >>> result = decoder.decode(Path("settings.abx").read_bytes())
        >>> xml_text = decoder.render(result.document)
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ConverterConfig()
        self.correlation_id = correlation_id

    def decode(
        self,
        data: Union[bytes, bytearray, memoryview],
        correlation_id: Optional[str] = None
    ) -> DecodeResult:
        """Decode a complete binary XML byte string.

        Args:
            data: Entire binary XML source
            correlation_id: Overrides the instance correlation ID

        Returns:
            DecodeResult with the document and decode metadata

        Raises:
            AbxDecodeError: If the input is not well-formed binary XML
        """
        correlation_id = correlation_id or self.correlation_id or uuid.uuid4().hex
        logger = get_logger(__name__, correlation_id, "abx_decoder")
        start_time = time.time()
        memory_before = self._memory_usage()

        logger.info(
            "Starting decode",
            extra={
                "input_size": len(data),
                "multi_root": self.config.decoder.multi_root,
            }
        )

        cursor = ByteCursor(data)
        try:
            header_records = HeaderSkipper(cursor, correlation_id).run()
            decoder = TokenDecoder(cursor, self.config.decoder, correlation_id)
            document = decoder.decode()
        except AbxDecodeError as e:
            logger.error(
                f"Decode failed: {e.kind}",
                extra={
                    "error_kind": e.kind,
                    "offset": e.offset,
                    "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
                },
                exc_info=False,
            )
            raise

        decoder.metadata.header_records_skipped = header_records
        performance = PerformanceMetrics(
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
            memory_used_bytes=max(0, self._memory_usage() - memory_before),
            bytes_processed=cursor.position,
            events_decoded=decoder.metadata.total_events,
        )
        result = DecodeResult(
            document=document,
            config=self.config,
            diagnostics=decoder.diagnostics,
            metadata=decoder.metadata,
            performance=performance,
            correlation_id=correlation_id,
        )

        logger.info(
            "Decode completed",
            extra={
                "element_count": result.element_count,
                "events_decoded": performance.events_decoded,
                "processing_time_ms": performance.processing_time_ms,
                "diagnostics_count": len(result.diagnostics),
            }
        )
        return result

    def decode_file(
        self,
        file_path: PathType,
        correlation_id: Optional[str] = None
    ) -> DecodeResult:
        """Read ``file_path`` fully and decode it.

        Raises:
            OSError: If the file cannot be read
            AbxDecodeError: If the content is not well-formed binary XML
        """
        with Path(file_path).open("rb") as source:
            data = source.read()
        return self.decode(data, correlation_id)

    def render(self, document: XMLDocument) -> str:
        """Render a decoded document as textual XML."""
        return XMLRenderer(self.config.render, self.correlation_id).render(document)

    def _memory_usage(self) -> int:
        if not self.config.global_.enable_memory_tracking:
            return 0
        return psutil.Process(os.getpid()).memory_info().rss


def _config_for(multi_root: bool, config: Optional[ConverterConfig]) -> ConverterConfig:
    config = config or ConverterConfig()
    if multi_root and not config.decoder.multi_root:
        config = config.override(decoder__multi_root=True)
    return config


def decode_bytes(
    data: Union[bytes, bytearray, memoryview],
    multi_root: bool = False,
    correlation_id: Optional[str] = None,
    config: Optional[ConverterConfig] = None
) -> DecodeResult:
    """Decode binary XML held in memory.

    Examples:
        >>> result = decode_bytes(Path("packages.abx").read_bytes())
        >>> result.tree.top_level_elements[0].tag
        'packages'
    """
    return AbxDecoder(_config_for(multi_root, config)).decode(data, correlation_id)


def decode_file(
    file_path: PathType,
    multi_root: bool = False,
    correlation_id: Optional[str] = None,
    config: Optional[ConverterConfig] = None
) -> DecodeResult:
    """Decode a binary XML file."""
    return AbxDecoder(_config_for(multi_root, config)).decode_file(file_path, correlation_id)


def decode(
    input_data: InputType,
    multi_root: bool = False,
    correlation_id: Optional[str] = None,
    config: Optional[ConverterConfig] = None
) -> DecodeResult:
    """Decode binary XML from bytes, a file path, or a binary file object.

    Args:
        input_data: Raw bytes, a path (``str`` or ``Path``), or an object
            with a ``read()`` method returning bytes
        multi_root: Wrap top-level elements in a synthetic root
        correlation_id: Optional correlation ID for request tracking
        config: Optional full configuration

    Returns:
        DecodeResult containing the document tree and metadata
    """
    if isinstance(input_data, (bytes, bytearray, memoryview)):
        return decode_bytes(input_data, multi_root, correlation_id, config)
    if isinstance(input_data, (str, Path)):
        return decode_file(input_data, multi_root, correlation_id, config)
    if hasattr(input_data, "read"):
        content = input_data.read()
        if not isinstance(content, (bytes, bytearray)):
            raise TypeError("File-like input must be opened in binary mode")
        return decode_bytes(content, multi_root, correlation_id, config)
    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


def resolve_output_path(
    input_path: PathType,
    output_path: Optional[PathType] = None,
    in_place: bool = False
) -> str:
    """Work out where converted output goes.

    An explicit output wins (``"-"`` means standard output); otherwise
    ``in_place`` reuses the input path, and the default replaces the input's
    extension with ``.xml``.

    Raises:
        ConfigError: If the input has no file name to derive an output from
    """
    if output_path:
        return str(output_path)
    if in_place:
        return str(input_path)
    path = Path(input_path)
    if path.name in ("", ".."):
        raise ConfigError(f"Cannot derive an output file name from {str(input_path)!r}")
    try:
        return str(path.with_suffix(".xml"))
    except ValueError as e:
        raise ConfigError(f"Cannot derive an output file name from {str(input_path)!r}") from e


def convert_file(
    input_path: PathType,
    output_path: Optional[PathType] = None,
    *,
    multi_root: bool = False,
    in_place: bool = False,
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Convert a binary XML file to textual XML.

    Output is rendered completely before anything is written, so a decode
    failure never truncates or replaces the destination.

    Returns:
        The output path written, or ``"-"`` for standard output
    """
    target = resolve_output_path(input_path, output_path, in_place)
    decoder = AbxDecoder(_config_for(multi_root, config), correlation_id)
    result = decoder.decode_file(input_path)
    xml_text = decoder.render(result.document)

    if target == STDOUT_TARGET:
        # Output is always UTF-8, whatever encoding the terminal reports
        sys.stdout.flush()
        sys.stdout.buffer.write(xml_text.encode("utf-8"))
        sys.stdout.buffer.flush()
    else:
        with open(target, "w", encoding="utf-8") as destination:
            destination.write(xml_text)
    return target
