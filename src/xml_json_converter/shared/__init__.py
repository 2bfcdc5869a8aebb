"""Shared utilities for XML to JSON conversion.

This module provides configuration objects, diagnostic and metric types, the
exception hierarchy and logging helpers used across the conversion stages.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    ConverterConfig,
    OutputConfig,
    ProjectionConfig,
    TextMode,
    TreeConfig,
)
from .exceptions import (
    ConversionError,
    ParseError,
    SerializationError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
    new_correlation_id,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "ConfigError",
    "ConfigValidationError",
    "ConverterConfig",
    "OutputConfig",
    "ProjectionConfig",
    "TextMode",
    "TreeConfig",
    "ConversionError",
    "ParseError",
    "SerializationError",
    "CorrelationLogger",
    "get_logger",
    "new_correlation_id",
]
