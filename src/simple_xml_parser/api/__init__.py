"""Public parsing API.

Level 1: ``parse``, ``parse_string``, ``parse_file``, ``parse_lines``,
``parse_stream``, ``sax_parse_string`` and ``sax_parse_file``.
Level 2: ``XMLParser`` with a ``ParserConfig``.
Level 3: adapters to ElementTree, lxml, BeautifulSoup and pandas.
"""

from .adapters import (
    AdapterMetadata,
    AdapterRegistry,
    AdapterType,
    BeautifulSoupAdapter,
    ConversionResult,
    ElementTreeAdapter,
    IntegrationAdapter,
    LxmlAdapter,
    PandasAdapter,
    get_adapter,
    list_available_adapters,
    register_adapter,
)
from .parser import (
    XMLParser,
    parse,
    parse_file,
    parse_lines,
    parse_stream,
    parse_string,
    sax_parse_file,
    sax_parse_string,
)

__all__ = [
    "AdapterMetadata",
    "AdapterRegistry",
    "AdapterType",
    "BeautifulSoupAdapter",
    "ConversionResult",
    "ElementTreeAdapter",
    "IntegrationAdapter",
    "LxmlAdapter",
    "PandasAdapter",
    "XMLParser",
    "get_adapter",
    "list_available_adapters",
    "parse",
    "parse_file",
    "parse_lines",
    "parse_stream",
    "parse_string",
    "register_adapter",
    "sax_parse_file",
    "sax_parse_string",
]
