"""Diagnostic and statistics types shared by all parsing layers."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

from .errors import ErrorKind


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Recoverable problems such as quote mismatches
    ERROR = auto()      # Errors that aborted the parse
    CRITICAL = auto()   # Unexpected internal failures


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with location information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    kind: Optional[ErrorKind] = None
    line: Optional[int] = None
    text: Optional[str] = None
    filename: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def format(self) -> str:
        """Render as ``file:line: SEVERITY: message``."""
        location = self.filename or "<input>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.severity.name}: {self.message}"


@dataclass
class ParseStatistics:
    """Counters collected while parsing one document."""

    processing_time_ms: float = 0.0
    lines_read: int = 0
    characters_read: int = 0
    tags_read: int = 0
    continuation_reads: int = 0
    events_dispatched: int = 0
    nodes_created: int = 0

    @property
    def tags_per_second(self) -> float:
        """Calculate tags processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tags_read * 1000.0) / self.processing_time_ms
