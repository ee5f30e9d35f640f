"""Result objects and diagnostic types for binary XML decoding.

This module defines the metadata, diagnostics, and performance information
attached to every successful decode.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()    # Tolerated anomalies in the input
    ERROR = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with position information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    offset: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")
        if self.offset is not None and self.offset < 0:
            raise ValueError("Diagnostic offset must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry to a JSON-friendly dictionary."""
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "offset": self.offset,
            "details": self.details,
        }


@dataclass
class PerformanceMetrics:
    """Performance metrics for one decode."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    bytes_processed: int = 0
    events_decoded: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate source bytes consumed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_processed * 1000.0) / self.processing_time_ms

    @property
    def events_per_second(self) -> float:
        """Calculate events decoded per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_decoded * 1000.0) / self.processing_time_ms


@dataclass
class DecodeMetadata:
    """Structural statistics gathered while decoding a token stream."""

    header_records_skipped: int = 0
    interned_strings: int = 0
    skipped_events: int = 0
    whitespace_text_dropped: int = 0
    max_depth: int = 0
    event_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def total_events(self) -> int:
        """Total number of framed events seen after the header."""
        return sum(self.event_distribution.values())

    def add_event(self, event_name: str) -> None:
        """Count one occurrence of an event kind."""
        self.event_distribution[event_name] = (
            self.event_distribution.get(event_name, 0) + 1
        )

    def record_depth(self, depth: int) -> None:
        """Track the deepest nesting level reached."""
        if depth > self.max_depth:
            self.max_depth = depth

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to a dictionary."""
        return {
            "header_records_skipped": self.header_records_skipped,
            "interned_strings": self.interned_strings,
            "skipped_events": self.skipped_events,
            "whitespace_text_dropped": self.whitespace_text_dropped,
            "max_depth": self.max_depth,
            "total_events": self.total_events,
            "event_distribution": dict(self.event_distribution),
        }
