"""Simple XML Parser.

A small XML ingestion core: a tag classifier with multi-line tag continuation,
a SAX-style event source, a tree builder and a mutable document model with a
formatting-aware serializer.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file(), sax_parse_string()
- Level 2: Configured parser - XMLParser class with ParserConfig
- Level 3: Building blocks - SAXEventSource, DOMTreeBuilder, classify(), XMLPrinter
"""

import logging

__version__ = "0.1.0"
__author__ = "Simple XML Parser Team"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import (
    XMLParser,
    parse,
    parse_file,
    parse_lines,
    parse_stream,
    parse_string,
    sax_parse_file,
    sax_parse_string,
)

# Level 3: Building blocks
from .dom import DOMTreeBuilder, ParseResult
from .sax import EventType, SAXCallbacks, SAXEventSource
from .tokenization import TagStatus, classify

# Configuration classes and errors
from .shared import (
    ParserConfig,
    PrintConfig,
    SAXConfig,
    SourceConfig,
    StructuralMismatchError,
    MalformedTagError,
    XMLError,
    XMLParseError,
)

# Core data structures
from .tree import (
    NOT_FOUND,
    TagKind,
    XMLAttribute,
    XMLDocument,
    XMLNode,
    XMLPrinter,
    register_user_tag,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "parse_lines",
    "parse_stream",
    "sax_parse_string",
    "sax_parse_file",

    # Level 2: Advanced parser class
    "XMLParser",

    # Level 3: Building blocks
    "DOMTreeBuilder",
    "EventType",
    "SAXCallbacks",
    "SAXEventSource",
    "TagStatus",
    "classify",
    "XMLPrinter",

    # Result objects and data structures
    "ParseResult",
    "NOT_FOUND",
    "TagKind",
    "XMLAttribute",
    "XMLDocument",
    "XMLNode",
    "register_user_tag",

    # Configuration and errors
    "ParserConfig",
    "PrintConfig",
    "SAXConfig",
    "SourceConfig",
    "XMLError",
    "XMLParseError",
    "MalformedTagError",
    "StructuralMismatchError",
]
