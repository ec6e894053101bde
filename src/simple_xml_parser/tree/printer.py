"""Serialization of document trees.

``XMLPrinter`` writes each node with its kind-specific brackets, children
recursively, skipping inactive nodes and attributes. Formatting is controlled
by ``PrintConfig``: a tag separator written before each tag, a child separator
repeated once per depth level, the number of columns a tab counts for, and a
soft line width past which attribute lists wrap onto a new, further indented
line.
"""

import io
from typing import Optional, TextIO

from simple_xml_parser.character.escaping import escape, escape_attribute
from simple_xml_parser.shared.config import PrintConfig

from .kinds import (
    DOCTYPE_START,
    SpecialTagRegistry,
    TagKind,
    default_registry,
    is_user_kind,
    kind_name,
)
from .model import XMLDocument, XMLNode

_FIXED_BRACKETS = {
    TagKind.INSTRUCTION: ("<?", "?>"),
    TagKind.COMMENT: ("<!--", "-->"),
    TagKind.CDATA: ("<![CDATA[", "]]>"),
    TagKind.DOCTYPE: (DOCTYPE_START, ">"),
}


class XMLPrinter:
    """Write nodes and documents as XML text."""

    def __init__(
        self,
        config: Optional[PrintConfig] = None,
        registry: Optional[SpecialTagRegistry] = None,
    ) -> None:
        self.config = config or PrintConfig()
        self.registry = registry or default_registry
        self._stream: Optional[TextIO] = None
        self._column = 0
        self._at_start = True

    def print_document(self, document: XMLDocument, stream: TextIO) -> None:
        """Write every top-level node of ``document``."""
        self._begin(stream)
        for node in document.nodes:
            self._print_node(node, 0)

    def print_node(self, node: XMLNode, stream: TextIO, depth: int = 0) -> None:
        """Write ``node`` and its subtree, indented for ``depth``."""
        self._begin(stream)
        self._print_node(node, depth)

    def document_to_string(self, document: XMLDocument) -> str:
        buffer = io.StringIO()
        self.print_document(document, buffer)
        return buffer.getvalue()

    def node_to_string(self, node: XMLNode, depth: int = 0) -> str:
        buffer = io.StringIO()
        self.print_node(node, buffer, depth)
        return buffer.getvalue()

    def _begin(self, stream: TextIO) -> None:
        self._stream = stream
        self._column = 0
        self._at_start = True

    def _write(self, text: str) -> None:
        self._stream.write(text)
        for char in text:
            if char == "\n":
                self._column = 0
            elif char == "\t":
                self._column += self.config.tab_width
            else:
                self._column += 1

    def _write_formatting(self, depth: int) -> None:
        if not self._at_start:
            self._write(self.config.tag_separator)
        self._at_start = False
        self._write(self.config.child_separator * depth)

    def _brackets(self, node: XMLNode):
        if node.kind == TagKind.DOCTYPE and "[" in node.tag:
            return DOCTYPE_START, "]>"
        if node.kind in _FIXED_BRACKETS:
            return _FIXED_BRACKETS[node.kind]
        if is_user_kind(node.kind):
            tag = self.registry.delimiters_for(node.kind)
            if tag is not None:
                return tag.start, tag.end
        raise ValueError(f"Cannot print node of kind {kind_name(node.kind)}")

    def _print_node(self, node: XMLNode, depth: int) -> None:
        if not node.active:
            return
        if node.is_end_marker:
            raise ValueError("End markers cannot be printed")

        self._write_formatting(depth)

        if node.is_auxiliary:
            start, end = self._brackets(node)
            self._write(f"{start}{node.tag}{end}")
            return

        self._write(f"<{node.tag}")
        width = self.config.line_width
        for attribute in node.attributes:
            if not attribute.active:
                continue
            piece = f' {attribute.name}="{escape_attribute(attribute.value)}"'
            if width > 0 and self._column + len(piece) > width:
                # Continue on a new line, indented like a child
                self._write_formatting(depth + 1)
            self._write(piece)

        children = node.active_children()
        if not children and not node.text:
            self._write("/>")
            return

        self._write(">")
        if node.text:
            self._write(escape(node.text))
        for child in children:
            self._print_node(child, depth + 1)
        if children:
            self._write_formatting(depth)
        self._write(f"</{node.tag}>")


def to_string(
    document: XMLDocument,
    config: Optional[PrintConfig] = None,
    registry: Optional[SpecialTagRegistry] = None,
) -> str:
    """Serialize ``document`` with the given formatting options."""
    return XMLPrinter(config, registry).document_to_string(document)
