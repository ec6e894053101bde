"""Tree building from SAX events.

``DOMTreeBuilder`` is a listener over ``SAXEventSource``. It keeps a cursor on
the currently open element: start events attach nodes under the cursor (or to
the document when nothing is open) and move the cursor into elements, end
events check the closing name against the cursor and move it back to its
father, and text events append to the cursor's text.

``build`` runs a complete parse and wraps the outcome in a ``ParseResult``
that never raises for malformed input.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from simple_xml_parser.character.source import InputType
from simple_xml_parser.sax.events import SAXCallbacks
from simple_xml_parser.sax.source import SAXEventSource
from simple_xml_parser.shared.errors import (
    StructuralMismatchError,
    XMLParseError,
)
from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseStatistics,
)
from simple_xml_parser.tree.kinds import TagKind
from simple_xml_parser.tree.model import XMLDocument, XMLNode


@dataclass
class ParseResult:
    """Result of building a document.

    On failure ``success`` is False, ``error`` holds the exception and the
    document has been emptied. ``stopped`` is True when a listener ended the
    parse early; the document then holds what was built so far.
    """

    document: XMLDocument = field(default_factory=XMLDocument)
    success: bool = True
    stopped: bool = False
    error: Optional[XMLParseError] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    statistics: ParseStatistics = field(default_factory=ParseStatistics)
    correlation_id: Optional[str] = None

    @property
    def tree(self) -> XMLDocument:
        """The parsed document.

        Examples:
            >>> result = parse_string('<root><item>value</item></root>')
            >>> result.tree.find('item').text
            'value'
        """
        return self.document

    @property
    def root(self) -> Optional[XMLNode]:
        return self.document.root

    @property
    def processing_time_ms(self) -> float:
        return self.statistics.processing_time_ms

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return self.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        error: Optional[XMLParseError] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            kind=error.kind if error is not None else None,
            line=error.line if error is not None else None,
            text=error.text if error is not None else None,
            filename=error.filename if error is not None else self.document.filename,
            details=details,
            correlation_id=self.correlation_id,
        )
        self.diagnostics.append(entry)

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def raise_for_error(self) -> None:
        """Re-raise the error that aborted the parse, if any."""
        if self.error is not None:
            raise self.error

    def summary(self) -> Dict[str, Any]:
        """Summary of the parse outcome."""
        return {
            "success": self.success,
            "stopped": self.stopped,
            "root": self.root.tag if self.root is not None else None,
            "error": str(self.error) if self.error is not None else None,
            "warning_count": len(self.warnings),
            "lines_read": self.statistics.lines_read,
            "tags_read": self.statistics.tags_read,
            "continuation_reads": self.statistics.continuation_reads,
            "nodes_created": self.statistics.nodes_created,
            "processing_time_ms": self.statistics.processing_time_ms,
        }


class DOMTreeBuilder:
    """Listener materializing SAX events into an ``XMLDocument``."""

    def __init__(
        self,
        document: Optional[XMLDocument] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.document = document if document is not None else XMLDocument()
        self.correlation_id = correlation_id
        self.cursor: Optional[XMLNode] = None
        self.nodes_created = 0
        self.logger = get_logger(__name__, correlation_id, "dom_builder")

    def callbacks(self) -> SAXCallbacks:
        """Listener slots bound to this builder."""
        return SAXCallbacks(
            on_text=self.on_text,
            on_start=self.on_start,
            on_end=self.on_end,
        )

    def on_start(self, node: XMLNode) -> None:
        """Attach ``node`` under the cursor, or to the document."""
        node.father = self.cursor
        if self.cursor is None:
            self.document.add_node(node)
        else:
            self.cursor.add_child(node)
        self.nodes_created += 1

        if node.kind == TagKind.ELEMENT:
            self.cursor = node
            if self.logger.is_enabled_for(logging.DEBUG):
                self.logger.debug(
                    "Cursor moved into element",
                    extra={"tag": node.tag, "depth": node.get_depth()},
                )

    def on_end(self, node: XMLNode) -> None:
        """Close the cursor element when ``node`` is an end marker."""
        if node.kind != TagKind.END_MARKER:
            return
        if self.cursor is None:
            raise StructuralMismatchError(
                f"Closing tag </{node.tag}> without open element", found=node.tag
            )
        if node.tag != self.cursor.tag:
            raise StructuralMismatchError(
                f"Expected </{self.cursor.tag}> but found </{node.tag}>",
                expected=self.cursor.tag,
                found=node.tag,
            )
        self.cursor = self.cursor.father

    def on_text(self, text: str) -> None:
        """Append ``text`` to the cursor element.

        Whitespace-only runs outside the root are ignored.
        """
        if self.cursor is None:
            if not text.strip():
                return
            raise StructuralMismatchError("Text outside of root element")
        self.cursor.text = (self.cursor.text or "") + text

    def build(
        self,
        input_data: InputType,
        event_source: Optional[SAXEventSource] = None,
        filename: Optional[str] = None,
    ) -> ParseResult:
        """Parse ``input_data`` into this builder's document.

        Malformed input does not raise: the returned result carries the error.
        """
        event_source = event_source or SAXEventSource(
            correlation_id=self.correlation_id
        )
        if filename is not None:
            self.document.filename = filename
        self.cursor = None
        self.nodes_created = 0

        result = ParseResult(document=self.document, correlation_id=self.correlation_id)
        start_time = time.time()
        try:
            sax_result = event_source.parse(input_data, self.callbacks(), filename)
        except XMLParseError as e:
            self.logger.diagnostic(
                e.kind, e.message, filename=e.filename, line=e.line, text=e.text
            )
            self.document.clear()
            self.cursor = None
            result.success = False
            result.error = e
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                e.message,
                "dom_builder",
                error=e,
                details={"exception_type": type(e).__name__},
            )
            result.diagnostics[:0] = event_source.diagnostics
            result.statistics = event_source.statistics
        else:
            result.stopped = sax_result.stopped
            result.diagnostics.extend(sax_result.diagnostics)
            result.statistics = sax_result.statistics

        result.statistics.nodes_created = self.nodes_created
        result.statistics.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.info(
            "Tree building completed",
            extra={
                "success": result.success,
                "nodes_created": self.nodes_created,
                "root": result.root.tag if result.root is not None else None,
            },
        )
        return result
