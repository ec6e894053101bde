"""Document tree building for simple XML parsing.

Key Components:
    DOMTreeBuilder: SAX listener maintaining a cursor on the open element
    ParseResult: Document plus success flag, error, diagnostics and statistics
"""

from .builder import DOMTreeBuilder, ParseResult

__all__ = [
    "DOMTreeBuilder",
    "ParseResult",
]
