"""Character layer: text acquisition and the entity codec."""

from .escaping import escape, escape_attribute, unescape, unescape_backslashes
from .source import DelimitedTextSource, InputType, TextChunk

__all__ = [
    "DelimitedTextSource",
    "InputType",
    "TextChunk",
    "escape",
    "escape_attribute",
    "unescape",
    "unescape_backslashes",
]
