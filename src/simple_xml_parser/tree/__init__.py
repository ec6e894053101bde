"""Document model for simple XML parsing.

This package holds the node kinds and special-tag registry, the node and
document structures with their structural operations, and the serializer.
It has no dependency on the parsing layers.

Key Components:
    XMLNode: Element, comment, instruction, CDATA, doctype or user-tag node
    XMLAttribute: Attribute with a soft-delete flag
    XMLDocument: Pre-root nodes, single root element and trailing nodes
    XMLPrinter: Formatting-aware serializer
    SpecialTagRegistry: Delimiter table used by the tag classifier
"""

from .kinds import (
    USER_TAG_THRESHOLD,
    SpecialTag,
    SpecialTagRegistry,
    TagKind,
    default_registry,
    is_auxiliary_kind,
    is_element_kind,
    kind_name,
    register_user_tag,
)
from .model import (
    NOT_FOUND,
    XMLAttribute,
    XMLDocument,
    XMLNode,
    copy_node,
    deep_equal,
    equal,
    next_node,
)
from .printer import XMLPrinter, to_string

__all__ = [
    "NOT_FOUND",
    "USER_TAG_THRESHOLD",
    "SpecialTag",
    "SpecialTagRegistry",
    "TagKind",
    "XMLAttribute",
    "XMLDocument",
    "XMLNode",
    "XMLPrinter",
    "copy_node",
    "deep_equal",
    "default_registry",
    "equal",
    "is_auxiliary_kind",
    "is_element_kind",
    "kind_name",
    "next_node",
    "register_user_tag",
    "to_string",
]
