"""SAX-style event source.

``SAXEventSource`` drives a ``TagReader`` over one input and raises ordered
callbacks on a ``SAXCallbacks`` listener:

* text preceding each tag, as a TEXT event (whitespace-only runs are dropped
  unless raw text was requested);
* element start tags as START (followed by one ATTRIBUTE event per active
  attribute);
* end tags as END, carrying the end-marker node;
* self-closing and auxiliary tags as START immediately followed by END.

A callback returning ``False`` stops the parse cleanly. Malformed tags, end
tags with no open element and end of input outside the DONE state abort the
parse with an ``XMLParseError`` carrying the line and offending text.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from simple_xml_parser.character.escaping import unescape
from simple_xml_parser.character.source import DelimitedTextSource, InputType
from simple_xml_parser.shared.config import SAXConfig, SourceConfig
from simple_xml_parser.shared.errors import (
    ErrorKind,
    MalformedTagError,
    StructuralMismatchError,
    TruncatedInputError,
    XMLAllocationError,
    XMLParseError,
)
from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseStatistics,
)
from simple_xml_parser.tokenization.classifier import TagStatus
from simple_xml_parser.tokenization.reader import RawTag, TagReader
from simple_xml_parser.tree.kinds import SpecialTagRegistry, TagKind
from simple_xml_parser.tree.model import XMLNode

from .events import EventType, SAXCallbacks


class ParserState(Enum):
    """States of the event source."""

    BEFORE_ROOT = auto()
    IN_DOCUMENT = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class SAXResult:
    """Outcome of a completed (or stopped) SAX parse."""

    stopped: bool
    state: ParserState
    statistics: ParseStatistics = field(default_factory=ParseStatistics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return [d for d in self.diagnostics if d.severity == DiagnosticSeverity.WARNING]


class _Stop(Exception):
    """Raised internally when a callback asks to stop."""


class SAXEventSource:
    """Streaming driver raising listener callbacks for one input at a time.

    Not re-entrant: one instance parses one input at a time.
    """

    def __init__(
        self,
        sax_config: Optional[SAXConfig] = None,
        source_config: Optional[SourceConfig] = None,
        registry: Optional[SpecialTagRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.sax_config = sax_config or SAXConfig()
        self.source_config = source_config or SourceConfig()
        self.registry = registry
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "sax_source")

        self.state = ParserState.BEFORE_ROOT
        self.statistics = ParseStatistics()
        self.diagnostics: List[DiagnosticEntry] = []
        self._callbacks = SAXCallbacks()
        self._open_tags: List[str] = []
        self._filename: Optional[str] = None
        self._context_line: Optional[int] = None
        self._context_text: Optional[str] = None

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._open_tags)

    def parse(
        self,
        input_data: InputType,
        callbacks: SAXCallbacks,
        filename: Optional[str] = None,
    ) -> SAXResult:
        """Parse ``input_data`` and raise events on ``callbacks``.

        Raises:
            XMLParseError: On malformed or truncated input, structural errors
                detected here or raised by a callback, and read failures
        """
        self.state = ParserState.BEFORE_ROOT
        self.statistics = ParseStatistics()
        self.diagnostics = []
        self._callbacks = callbacks
        self._open_tags = []
        self._filename = filename
        self._context_line = None
        self._context_text = None

        source = DelimitedTextSource(
            input_data,
            delimiter=self.source_config.tag_delimiter,
            buffer_size=self.source_config.buffer_size,
            filename=filename,
        )
        reader = TagReader(source, self.registry, self.correlation_id)

        self.logger.info("Starting SAX parse", extra={"input_file": filename})
        start_time = time.time()
        stopped = False
        try:
            self._run(reader)
        except _Stop:
            stopped = True
            self.logger.info(
                "Parse stopped by listener",
                extra={"input_file": filename, "line": self._context_line},
            )
        except XMLParseError as e:
            self.state = ParserState.FAILED
            raise e.with_context(self._context_line, self._context_text, filename)
        except MemoryError as e:
            self.state = ParserState.FAILED
            raise XMLAllocationError(
                "Out of memory while parsing",
                line=self._context_line,
                text=self._context_text,
                filename=filename,
            ) from e
        finally:
            self.statistics.processing_time_ms = (time.time() - start_time) * 1000
            self.statistics.lines_read = reader.line
            self.statistics.characters_read = source.characters_read
            self.statistics.tags_read = reader.tags_read
            self.statistics.continuation_reads = reader.continuation_reads

        self.logger.info(
            "SAX parse finished",
            extra={
                "input_file": filename,
                "tags_read": self.statistics.tags_read,
                "stopped": stopped,
            },
        )
        return SAXResult(stopped, self.state, self.statistics, self.diagnostics)

    def _run(self, reader: TagReader) -> None:
        while True:
            raw = reader.read_tag()
            if raw is None:
                break

            self._context_line = raw.text_line
            self._context_text = raw.text_before
            self._handle_text(raw.text_before)
            if raw.is_trailing_text:
                continue

            self._context_line = raw.line
            self._context_text = raw.tag_text
            self._handle_tag(raw)

        self._context_line = reader.line
        self._context_text = None
        if self._open_tags:
            raise TruncatedInputError(
                "Input ended with unclosed elements: " + ", ".join(self._open_tags)
            )
        if self.state == ParserState.BEFORE_ROOT:
            raise TruncatedInputError("Document has no root element")

    def _handle_text(self, text: str) -> None:
        if not text:
            return
        raw_wanted = (
            self._callbacks.wants_raw_text or self.sax_config.deliver_whitespace_text
        )
        if not raw_wanted:
            if not text.strip():
                return
            if self.sax_config.strip_text:
                text = text.strip()

        text = unescape(text)
        self._call(self._callbacks.on_text, text)
        self._call(self._callbacks.on_event, EventType.TEXT, None, text)

    def _handle_tag(self, raw: RawTag) -> None:
        classification = raw.classification
        if classification.status == TagStatus.MALFORMED:
            raise MalformedTagError(classification.reason or "Malformed tag")

        node = classification.node
        for name in classification.quote_mismatches:
            self._warn_quote_mismatch(node, name, raw)

        if node.kind == TagKind.END_MARKER:
            self._close_element(node)
            return

        if node.kind == TagKind.ELEMENT:
            max_depth = self.sax_config.max_depth
            if max_depth is not None and self.depth >= max_depth:
                raise StructuralMismatchError(
                    f"Maximum nesting depth {max_depth} exceeded by <{node.tag}>"
                )

        self._open_node(node)
        if node.kind == TagKind.ELEMENT:
            self._open_tags.append(node.tag)
            self.state = ParserState.IN_DOCUMENT
            return

        self._end_node(node)
        if node.kind == TagKind.SELF_CLOSING and not self._open_tags:
            self.state = ParserState.DONE

    def _close_element(self, node: XMLNode) -> None:
        if not self._open_tags:
            raise StructuralMismatchError(
                f"Closing tag </{node.tag}> without open element", found=node.tag
            )
        self._end_node(node)
        self._open_tags.pop()
        if not self._open_tags:
            self.state = ParserState.DONE

    def _open_node(self, node: XMLNode) -> None:
        callbacks = self._callbacks
        self._call(callbacks.on_start, node)
        self._call(callbacks.on_event, EventType.START, node, None)
        if callbacks.on_attribute is None and callbacks.on_event is None:
            return
        for attribute in node.active_attributes():
            self._call(callbacks.on_attribute, node, attribute)
            self._call(callbacks.on_event, EventType.ATTRIBUTE, node, attribute.name)

    def _end_node(self, node: XMLNode) -> None:
        self._call(self._callbacks.on_end, node)
        self._call(self._callbacks.on_event, EventType.END, node, None)

    def _call(self, callback, *args) -> None:
        if callback is None:
            return
        self.statistics.events_dispatched += 1
        if callback(*args) is False:
            raise _Stop()

    def _warn_quote_mismatch(self, node: XMLNode, name: str, raw: RawTag) -> None:
        message = f"Unterminated quoted value for attribute {name!r} in <{node.tag}>"
        self.logger.diagnostic(
            ErrorKind.QUOTE_MISMATCH,
            message,
            filename=self._filename,
            line=raw.line,
            text=raw.tag_text,
            level=logging.WARNING,
        )
        self.diagnostics.append(
            DiagnosticEntry(
                severity=DiagnosticSeverity.WARNING,
                message=message,
                component="sax_source",
                kind=ErrorKind.QUOTE_MISMATCH,
                line=raw.line,
                text=raw.tag_text,
                filename=self._filename,
                correlation_id=self.correlation_id,
            )
        )
