"""Shared utilities for binary XML decoding.

This module provides the configuration objects, result types, exceptions and
logging helpers used across all decoding layers.
"""

from .result import (
    DecodeMetadata,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    ConverterConfig,
    DecoderConfig,
    GlobalConfig,
    RenderConfig,
)
from .errors import AbxDecodeError
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "DecodeMetadata",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "ConfigError",
    "ConfigValidationError",
    "ConverterConfig",
    "DecoderConfig",
    "GlobalConfig",
    "RenderConfig",
    "AbxDecodeError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
