"""Structured logging utilities for simple XML parsing.

This module provides correlation-aware logging and the diagnostic channel
used to report parse errors with file and line context.
"""

import logging
from typing import Any, Dict, Optional

from .errors import ErrorKind


class CorrelationLogger:
    """Logger that automatically includes correlation ID and component information."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for request tracking
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def is_enabled_for(self, level: int) -> bool:
        """Check whether messages of ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with correlation info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with correlation info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with correlation info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log error message with correlation info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log exception message with correlation info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))

    def diagnostic(
        self,
        kind: ErrorKind,
        message: str,
        filename: Optional[str] = None,
        line: Optional[int] = None,
        text: Optional[str] = None,
        level: int = logging.ERROR,
    ) -> None:
        """Report a parsing problem as ``file:line: KIND: message (text)``."""
        location = filename or "<input>"
        if line is not None:
            location = f"{location}:{line}"
        snippet = ""
        if text:
            snippet = f" ({text.splitlines()[0] if text.strip() else text})"
        self.logger.log(
            level,
            f"{location}: {kind.name}: {message}{snippet}",
            extra=self._get_extra(
                {"input_file": filename, "line": line, "error_kind": kind.name}
            ),
        )


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance."""
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )
