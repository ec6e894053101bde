"""Exception taxonomy for simple XML parsing.

Every failure that aborts a parse is an ``XMLParseError`` subclass carrying the
1-based input line, the offending text and (when known) the source filename.
Partial tags and quote mismatches are not raised: the former is retried by the
tag reader, the latter is recorded as a warning diagnostic.
"""

from enum import Enum, auto
from typing import Optional


class ErrorKind(Enum):
    """Categories of parsing problems."""

    MALFORMED_TAG = auto()         # No tag grammar matched
    PARTIAL_TAG = auto()           # Continuation signal, never fatal
    QUOTE_MISMATCH = auto()        # Attribute value opened but not closed
    STRUCTURAL_MISMATCH = auto()   # Wrong closing tag, text outside root, second root
    ALLOCATION_FAILURE = auto()    # Resource exhaustion
    IO_FAILURE = auto()            # Underlying source unreadable


class XMLError(Exception):
    """Base exception for the package."""


class XMLParseError(XMLError):
    """Error that aborts the current parse."""

    kind = ErrorKind.MALFORMED_TAG

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        text: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.text = text
        self.filename = filename

    def with_context(
        self,
        line: Optional[int] = None,
        text: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> "XMLParseError":
        """Fill in location fields that are still unknown."""
        if self.line is None:
            self.line = line
        if self.text is None:
            self.text = text
        if self.filename is None:
            self.filename = filename
        return self

    @property
    def location(self) -> str:
        """``file:line`` prefix used by diagnostics."""
        name = self.filename or "<input>"
        if self.line is None:
            return name
        return f"{name}:{self.line}"

    def __str__(self) -> str:
        snippet = ""
        if self.text:
            first_line = self.text.split("\n", 1)[0]
            ellipsis = "..." if len(first_line) < len(self.text) else ""
            snippet = f" ({first_line}{ellipsis})"
        return f"{self.location}: {self.kind.name}: {self.message}{snippet}"


class MalformedTagError(XMLParseError):
    """A tag matched none of the known grammars."""

    kind = ErrorKind.MALFORMED_TAG


class TruncatedInputError(MalformedTagError):
    """Input ended inside a tag or with elements still open."""


class StructuralMismatchError(XMLParseError):
    """Tag structure is inconsistent with the tree being built."""

    kind = ErrorKind.STRUCTURAL_MISMATCH

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        text: Optional[str] = None,
        filename: Optional[str] = None,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> None:
        super().__init__(message, line, text, filename)
        self.expected = expected
        self.found = found


class XMLIOError(XMLParseError):
    """The underlying text source could not be read."""

    kind = ErrorKind.IO_FAILURE


class XMLAllocationError(XMLParseError):
    """Memory was exhausted while parsing."""

    kind = ErrorKind.ALLOCATION_FAILURE


class ConfigError(XMLError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name
