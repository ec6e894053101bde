"""Core parser API with progressive disclosure for simple XML parsing.

Module-level functions cover the common cases; ``XMLParser`` bundles a
``ParserConfig`` and a tag registry for repeated use. Tree-building entry
points return a ``ParseResult`` and only raise for malformed input when
``ParserConfig.raise_on_error`` is set. SAX entry points raise
``XMLParseError`` directly since there is no document to carry the error.
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, TextIO, Union

from simple_xml_parser.character.source import InputType
from simple_xml_parser.dom.builder import DOMTreeBuilder, ParseResult
from simple_xml_parser.sax.events import SAXCallbacks
from simple_xml_parser.sax.source import SAXEventSource, SAXResult
from simple_xml_parser.shared.config import ParserConfig, PrintConfig
from simple_xml_parser.shared.errors import XMLIOError, XMLParseError
from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.shared.result import DiagnosticSeverity
from simple_xml_parser.tree.kinds import SpecialTagRegistry, default_registry
from simple_xml_parser.tree.model import XMLDocument
from simple_xml_parser.tree.printer import XMLPrinter

PathType = Union[str, Path]

MS_PER_SECOND = 1000  # Milliseconds per second conversion


class XMLParser:
    """Configurable parser for repeated use.

    Attributes:
        config: Parser configuration
        registry: Special/user tag table used for classification and printing

    Examples:
        Basic usage:
        >>> parser = XMLParser()
        >>> result = parser.parse_string('<root><item>value</item></root>')
        >>> result.root.find('item').text
        'value'

        Pretty printing:
        >>> parser = XMLParser(ParserConfig.pretty())
        >>> print(parser.to_string(result.document))
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        registry: Optional[SpecialTagRegistry] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.registry = registry or default_registry
        self.correlation_id = self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def _event_source(self) -> SAXEventSource:
        return SAXEventSource(
            sax_config=self.config.sax,
            source_config=self.config.source,
            registry=self.registry,
            correlation_id=self.correlation_id,
        )

    def parse(
        self, input_data: InputType, filename: Optional[str] = None
    ) -> ParseResult:
        """Parse a string, text stream or iterable of lines into a document.

        Raises:
            XMLParseError: Only when ``config.raise_on_error`` is set
        """
        start_time = time.time()
        self.logger.info(
            "Starting parse operation",
            extra={
                "input_type": type(input_data).__name__,
                "input_file": filename,
            },
        )

        builder = DOMTreeBuilder(XMLDocument(filename), self.correlation_id)
        result = builder.build(input_data, self._event_source(), filename)
        self._record(result, start_time)
        if self.config.raise_on_error:
            result.raise_for_error()
        return result

    def parse_string(
        self, xml_string: str, filename: Optional[str] = None
    ) -> ParseResult:
        """Parse a document held in a string."""
        return self.parse(xml_string, filename)

    def parse_lines(
        self, lines: Iterable[str], filename: Optional[str] = None
    ) -> ParseResult:
        """Parse a document given as successive lines (newlines included)."""
        return self.parse(iter(lines), filename)

    def parse_stream(
        self, stream: TextIO, filename: Optional[str] = None
    ) -> ParseResult:
        """Parse a document from a text-mode stream."""
        if filename is None:
            filename = getattr(stream, "name", None)
            if not isinstance(filename, str):
                filename = None
        return self.parse(stream, filename)

    def parse_file(self, file_path: PathType, encoding: str = "utf-8") -> ParseResult:
        """Parse a document from a file.

        A file that cannot be opened yields a failed result carrying an
        ``XMLIOError``.
        """
        path_obj = Path(file_path)
        filename = str(path_obj)
        try:
            with path_obj.open(encoding=encoding) as stream:
                return self.parse(stream, filename)
        except OSError as e:
            error = XMLIOError(f"Cannot open file: {e.strerror or e}", filename=filename)
            return self._io_failure(error, filename)

    def sax_parse(
        self,
        input_data: InputType,
        callbacks: Union[SAXCallbacks, Any],
        filename: Optional[str] = None,
    ) -> SAXResult:
        """Raise events for ``input_data`` on ``callbacks``.

        ``callbacks`` may be a ``SAXCallbacks`` or any object with ``on_*``
        methods.

        Raises:
            XMLParseError: On malformed input or a failing callback
        """
        if not isinstance(callbacks, SAXCallbacks):
            callbacks = SAXCallbacks.from_handler(callbacks)
        try:
            return self._event_source().parse(input_data, callbacks, filename)
        except XMLParseError as e:
            self.logger.diagnostic(
                e.kind, e.message, filename=e.filename, line=e.line, text=e.text
            )
            raise

    def sax_parse_file(
        self,
        file_path: PathType,
        callbacks: Union[SAXCallbacks, Any],
        encoding: str = "utf-8",
    ) -> SAXResult:
        """Raise events for the content of a file.

        Raises:
            XMLIOError: When the file cannot be opened
            XMLParseError: On malformed input or a failing callback
        """
        path_obj = Path(file_path)
        try:
            stream = path_obj.open(encoding=encoding)
        except OSError as e:
            raise XMLIOError(
                f"Cannot open file: {e.strerror or e}", filename=str(path_obj)
            ) from e
        with stream:
            return self.sax_parse(stream, callbacks, str(path_obj))

    def to_string(
        self, document: XMLDocument, config: Optional[PrintConfig] = None
    ) -> str:
        """Serialize ``document`` with the configured print options."""
        printer = XMLPrinter(config or self.config.printing, self.registry)
        return printer.document_to_string(document)

    def print(
        self,
        document: XMLDocument,
        stream: TextIO,
        config: Optional[PrintConfig] = None,
    ) -> None:
        printer = XMLPrinter(config or self.config.printing, self.registry)
        printer.print_document(document, stream)

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the parser configuration."""
        self.config = config
        self.correlation_id = config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_parser")
        self.logger.info("Parser reconfigured")

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def _record(self, result: ParseResult, start_time: float) -> None:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._parse_count += 1
        self._total_processing_time += processing_time
        if result.success:
            self._successful_parses += 1

        self.logger.info(
            "Parse completed",
            extra={
                "success": result.success,
                "stopped": result.stopped,
                "processing_time_ms": processing_time,
            },
        )

    def _io_failure(self, error: XMLIOError, filename: str) -> ParseResult:
        self.logger.diagnostic(error.kind, error.message, filename=filename)
        result = ParseResult(
            document=XMLDocument(filename),
            success=False,
            error=error,
            correlation_id=self.correlation_id,
        )
        result.add_diagnostic(
            DiagnosticSeverity.ERROR, error.message, "xml_parser", error=error
        )
        self._parse_count += 1
        if self.config.raise_on_error:
            raise error
        return result


def parse(
    input_data: Union[InputType, Path],
    config: Optional[ParserConfig] = None,
    filename: Optional[str] = None,
) -> ParseResult:
    """Parse XML from a string, text stream, iterable of lines or path.

    Args:
        input_data: XML content, or a ``Path`` naming a file
        config: Optional parser configuration
        filename: Name used in diagnostics

    Returns:
        ParseResult holding the document, or the error that aborted the parse

    Examples:
        >>> result = parse('<root><item>value</item></root>')
        >>> result.success
        True
        >>> result.tree.root.tag
        'root'
    """
    parser = XMLParser(config)
    if isinstance(input_data, Path):
        return parser.parse_file(input_data)
    return parser.parse(input_data, filename)


def parse_string(
    xml_string: str, config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse XML held in a string.

    Examples:
        >>> result = parse_string('<root><item id="1">Hello</item></root>')
        >>> result.root.find('item').get_attribute('id')
        '1'

        Malformed input:
        >>> result = parse_string('<root><a></root>')
        >>> result.success
        False
        >>> result.error.expected
        'a'
    """
    return XMLParser(config).parse_string(xml_string)


def parse_file(
    file_path: PathType,
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
) -> ParseResult:
    """Parse XML from a file.

    Examples:
        >>> result = parse_file('missing.xml')
        >>> result.success
        False
        >>> result.error.kind
        <ErrorKind.IO_FAILURE: 6>
    """
    return XMLParser(config).parse_file(file_path, encoding)


def parse_lines(
    lines: Iterable[str],
    config: Optional[ParserConfig] = None,
    filename: Optional[str] = None,
) -> ParseResult:
    """Parse XML given as successive lines."""
    return XMLParser(config).parse_lines(lines, filename)


def parse_stream(
    stream: TextIO,
    config: Optional[ParserConfig] = None,
    filename: Optional[str] = None,
) -> ParseResult:
    """Parse XML from a text-mode stream."""
    return XMLParser(config).parse_stream(stream, filename)


def sax_parse_string(
    xml_string: str,
    callbacks: Union[SAXCallbacks, Any],
    config: Optional[ParserConfig] = None,
) -> SAXResult:
    """Raise SAX events for XML held in a string.

    Examples:
        >>> tags = []
        >>> callbacks = SAXCallbacks(on_start=lambda n: tags.append(n.tag))
        >>> result = sax_parse_string('<a><b/></a>', callbacks)
        >>> tags
        ['a', 'b']
    """
    return XMLParser(config).sax_parse(xml_string, callbacks)


def sax_parse_file(
    file_path: PathType,
    callbacks: Union[SAXCallbacks, Any],
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
) -> SAXResult:
    """Raise SAX events for the content of a file."""
    return XMLParser(config).sax_parse_file(file_path, callbacks, encoding)
