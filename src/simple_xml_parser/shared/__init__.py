"""Shared utilities for simple XML parsing.

This module provides the exception taxonomy, configuration objects, diagnostic
types and logging helpers used across all processing layers.
"""

from .errors import (
    ConfigError,
    ConfigValidationError,
    ErrorKind,
    MalformedTagError,
    StructuralMismatchError,
    TruncatedInputError,
    XMLAllocationError,
    XMLError,
    XMLIOError,
    XMLParseError,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseStatistics,
)
from .config import (
    ParserConfig,
    PrintConfig,
    SAXConfig,
    SourceConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ErrorKind",
    "MalformedTagError",
    "StructuralMismatchError",
    "TruncatedInputError",
    "XMLAllocationError",
    "XMLError",
    "XMLIOError",
    "XMLParseError",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ParseStatistics",
    "ParserConfig",
    "PrintConfig",
    "SAXConfig",
    "SourceConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
