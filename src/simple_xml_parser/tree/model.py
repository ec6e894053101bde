"""Document model: nodes, attributes and documents.

Each node exclusively owns its attributes and children. The ``father`` link is
a weak reference used only for upward navigation. Entries are soft-deleted
through their ``active`` flag: inactive attributes and nodes stay in place but
are skipped by searches, equality and printing.
"""

import weakref
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, TextIO

from simple_xml_parser.shared.errors import StructuralMismatchError, XMLError

from .kinds import TagKind, is_auxiliary_kind, is_element_kind, kind_name

# Returned by searches that find nothing
NOT_FOUND = -1


@dataclass
class XMLAttribute:
    """A ``name="value"`` pair with a soft-delete flag."""

    name: str
    value: str = ""
    active: bool = True

    def copy(self) -> "XMLAttribute":
        """Independent copy of this attribute."""
        return XMLAttribute(self.name, self.value, self.active)


@dataclass(eq=False)
class XMLNode:
    """A single node of the document tree.

    For elements ``tag`` is the element name; for comments, instructions,
    CDATA sections, doctypes and user tags it is the raw payload found between
    the delimiters.
    """

    tag: str = ""
    kind: int = TagKind.ELEMENT
    text: Optional[str] = None
    attributes: List[XMLAttribute] = field(default_factory=list)
    children: List["XMLNode"] = field(default_factory=list)
    active: bool = True

    def __post_init__(self) -> None:
        """Establish father links for children passed to the constructor."""
        self._father: Optional["weakref.ReferenceType[XMLNode]"] = None
        for child in self.children:
            child.father = self

    def __repr__(self) -> str:
        return (
            f"XMLNode({kind_name(self.kind)}, {self.tag!r}, "
            f"attributes={len(self.attributes)}, children={len(self.children)})"
        )

    # --- Structure ---

    @property
    def father(self) -> Optional["XMLNode"]:
        """Node holding this one in its children, if any."""
        return self._father() if self._father is not None else None

    @father.setter
    def father(self, node: Optional["XMLNode"]) -> None:
        self._father = weakref.ref(node) if node is not None else None

    @property
    def is_element(self) -> bool:
        return is_element_kind(self.kind)

    @property
    def is_auxiliary(self) -> bool:
        return is_auxiliary_kind(self.kind)

    @property
    def is_end_marker(self) -> bool:
        return self.kind == TagKind.END_MARKER

    @property
    def n_attributes(self) -> int:
        return len(self.attributes)

    @property
    def n_children(self) -> int:
        return len(self.children)

    def get_depth(self) -> int:
        """Depth of this node in the tree (top-level = 0)."""
        depth = 0
        father = self.father
        while father is not None:
            depth += 1
            father = father.father
        return depth

    # --- Simple setters ---

    def set_tag(self, tag: str) -> None:
        """Replace the tag name (or payload)."""
        if not isinstance(tag, str):
            raise TypeError("Tag must be a string")
        self.tag = tag

    def set_comment(self, comment: str) -> None:
        """Turn this node into a comment carrying ``comment``."""
        self.set_tag(comment)
        self.kind = TagKind.COMMENT

    def set_text(self, text: Optional[str]) -> None:
        """Replace the text content; None removes it."""
        self.text = text

    def set_active(self, active: bool) -> None:
        self.active = active

    # --- Attributes ---

    def find_attribute(self, name: str, start: int = 0) -> int:
        """Index of the first active attribute named ``name`` at or after ``start``."""
        if not name or start < 0 or start > len(self.attributes):
            return NOT_FOUND

        for i in range(start, len(self.attributes)):
            attribute = self.attributes[i]
            if attribute.active and attribute.name == name:
                return i
        return NOT_FOUND

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the first active attribute named ``name``."""
        i = self.find_attribute(name)
        return self.attributes[i].value if i != NOT_FOUND else default

    def has_attribute(self, name: str) -> bool:
        return self.find_attribute(name) != NOT_FOUND

    def set_attribute(self, name: str, value: str) -> int:
        """Set ``name`` to ``value`` and return the number of attributes.

        An existing entry (active or not) is updated in place and reactivated;
        otherwise a new attribute is appended.
        """
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        if not name:
            raise ValueError("Attribute name cannot be empty")

        for attribute in self.attributes:
            if attribute.name == name:
                attribute.value = value
                attribute.active = True
                break
        else:
            self.attributes.append(XMLAttribute(name, value))

        return len(self.attributes)

    def remove_attribute(self, index: int) -> int:
        """Remove the attribute at ``index`` and return how many remain."""
        if not 0 <= index < len(self.attributes):
            raise IndexError("Attribute index out of range")

        attribute = self.attributes[index]
        attribute.active = False
        del self.attributes[index]
        return len(self.attributes)

    def active_attributes(self) -> List[XMLAttribute]:
        """Active attributes in order."""
        return [attribute for attribute in self.attributes if attribute.active]

    # --- Children ---

    def add_child(self, child: "XMLNode") -> int:
        """Append ``child`` and return its index."""
        if not isinstance(child, XMLNode):
            raise TypeError("Child must be an XMLNode instance")
        if child.is_end_marker:
            raise ValueError("End markers cannot be inserted in a tree")
        if child.father is not None and child.father is not self:
            raise ValueError("Child already belongs to another node")

        ancestor: Optional[XMLNode] = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("A node cannot become its own descendant")
            ancestor = ancestor.father

        child.father = self
        self.children.append(child)
        return len(self.children) - 1

    def find_child(self, tag: str, start: int = 0) -> int:
        """Index of the first active child tagged ``tag`` at or after ``start``."""
        if not tag or start < 0 or start > len(self.children):
            return NOT_FOUND

        for i in range(start, len(self.children)):
            child = self.children[i]
            if child.active and child.tag == tag:
                return i
        return NOT_FOUND

    def get_child(self, tag: str) -> Optional["XMLNode"]:
        """First active child tagged ``tag``."""
        i = self.find_child(tag)
        return self.children[i] if i != NOT_FOUND else None

    def remove_child(self, index: int) -> int:
        """Remove and release the child at ``index``; return how many remain."""
        if not 0 <= index < len(self.children):
            raise IndexError("Child index out of range")

        child = self.children[index]
        child.active = False
        del self.children[index]
        child.father = None
        child.clear()
        return len(self.children)

    def active_children(self) -> List["XMLNode"]:
        return [child for child in self.children if child.active]

    # --- Traversal ---

    def next_sibling(self) -> Optional["XMLNode"]:
        """Following node in the father's children, if any."""
        father = self.father
        if father is None:
            return None
        for i, sibling in enumerate(father.children):
            if sibling is self:
                return father.children[i + 1] if i + 1 < len(father.children) else None
        return None

    def next(self) -> Optional["XMLNode"]:
        """Pre-order successor: first child, next sibling, or an ancestor's next sibling."""
        if self.children:
            return self.children[0]

        node: Optional[XMLNode] = self
        while node is not None:
            sibling = node.next_sibling()
            if sibling is not None:
                return sibling
            node = node.father
        return None

    def iter(self) -> Iterator["XMLNode"]:
        """Yield this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, tag: str) -> Optional["XMLNode"]:
        """First active descendant element (or self) tagged ``tag``."""
        for node in self.iter():
            if node.active and node.is_element and node.tag == tag:
                return node
        return None

    def find_all(self, tag: str) -> List["XMLNode"]:
        """All active descendant elements (and self) tagged ``tag``."""
        return [
            node for node in self.iter()
            if node.active and node.is_element and node.tag == tag
        ]

    # --- Lifetime ---

    def clear(self) -> None:
        """Release attributes, text and the whole subtree, depth-first."""
        stack = [self]
        while stack:
            node = stack.pop()
            stack.extend(node.children)
            for child in node.children:
                child._father = None
            node.children = []
            node.attributes = []
            node.text = None
            node.tag = ""

    def copy_from(self, source: "XMLNode", deep: bool = False) -> "XMLNode":
        """Overwrite this node with a copy of ``source``.

        Tag, kind, text, attributes and the active flag are always copied;
        children only when ``deep`` is set. The father link is left unchanged.
        """
        if source is self:
            return self
        if any(node is source for node in self.iter()) or any(
            node is self for node in source.iter()
        ):
            # Clearing self would release part of the source
            source = source.clone(deep=deep)

        self.clear()
        self.tag = source.tag
        self.kind = source.kind
        self.text = source.text
        self.active = source.active
        self.attributes = [attribute.copy() for attribute in source.attributes]

        if deep:
            pending = [(self, source)]
            while pending:
                destination, original = pending.pop()
                for child in original.children:
                    duplicate = XMLNode(
                        tag=child.tag,
                        kind=child.kind,
                        text=child.text,
                        attributes=[attribute.copy() for attribute in child.attributes],
                        active=child.active,
                    )
                    duplicate.father = destination
                    destination.children.append(duplicate)
                    pending.append((duplicate, child))
        return self

    def clone(self, deep: bool = False) -> "XMLNode":
        """New detached copy of this node."""
        return XMLNode().copy_from(self, deep=deep)

    def equals(self, other: Optional["XMLNode"], compare_values: bool = False) -> bool:
        return equal(self, other, compare_values=compare_values)


def equal(
    a: Optional[XMLNode], b: Optional[XMLNode], compare_values: bool = False
) -> bool:
    """Compare two nodes by tag and active attribute names.

    By default attribute values are NOT compared: two elements with the same
    tag and the same set of active attribute names are equal even if the
    values differ. Pass ``compare_values=True`` to compare values too.
    Children and text are never considered; see ``deep_equal``.
    """
    if a is b:
        return True
    if a is None or b is None:
        return False
    if a.tag != b.tag:
        return False

    for first, second in ((a, b), (b, a)):
        for attribute in first.attributes:
            if not attribute.active:
                continue
            j = second.find_attribute(attribute.name)
            if j == NOT_FOUND:
                return False
            if compare_values and second.attributes[j].value != first.get_attribute(
                attribute.name
            ):
                return False
    return True


def deep_equal(
    a: Optional[XMLNode], b: Optional[XMLNode], compare_values: bool = False
) -> bool:
    """Compare two subtrees node by node with ``equal``.

    Inactive children are ignored. With ``compare_values`` the kinds and text
    content must match as well.
    """
    pending = [(a, b)]
    while pending:
        first, second = pending.pop()
        if not equal(first, second, compare_values=compare_values):
            return False
        if first is None or second is None or first is second:
            continue
        if compare_values and (
            first.kind != second.kind or (first.text or "") != (second.text or "")
        ):
            return False
        first_children = first.active_children()
        second_children = second.active_children()
        if len(first_children) != len(second_children):
            return False
        pending.extend(zip(first_children, second_children))
    return True


def next_node(node: Optional[XMLNode]) -> Optional[XMLNode]:
    """Pre-order successor of ``node``."""
    return node.next() if node is not None else None


def copy_node(destination: XMLNode, source: XMLNode, deep: bool = False) -> XMLNode:
    """Copy ``source`` into ``destination``."""
    return destination.copy_from(source, deep=deep)


class XMLDocument:
    """A parsed document: pre-root nodes, at most one root element, trailing nodes.

    The document owns every node it holds. After ``reset`` the document is
    invalid and any further use raises ``XMLError``.
    """

    def __init__(self, filename: Optional[str] = None) -> None:
        self.filename = filename
        self.pre_root: List[XMLNode] = []
        self.root: Optional[XMLNode] = None
        self.trailing_nodes: List[XMLNode] = []
        self._valid = True

    def __repr__(self) -> str:
        root = self.root.tag if self.root is not None else None
        return (
            f"XMLDocument(filename={self.filename!r}, root={root!r}, "
            f"pre_root={len(self.pre_root)})"
        )

    @property
    def valid(self) -> bool:
        return self._valid

    def _ensure_valid(self) -> None:
        if not self._valid:
            raise XMLError("Document has been reset and can no longer be used")

    @property
    def nodes(self) -> List[XMLNode]:
        """Top-level nodes in document order."""
        self._ensure_valid()
        nodes = list(self.pre_root)
        if self.root is not None:
            nodes.append(self.root)
        nodes.extend(self.trailing_nodes)
        return nodes

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    def add_node(self, node: XMLNode, kind: Optional[int] = None) -> int:
        """Add a top-level node and return the number of top-level nodes.

        Element kinds install the node as root; other kinds go before the root
        (or after it once a root exists).
        """
        self._ensure_valid()
        if kind is not None:
            node.kind = kind
        if node.is_end_marker:
            raise ValueError("End markers cannot be inserted in a document")

        if node.is_element:
            if self.root is not None:
                raise StructuralMismatchError(
                    f"Document already has root element <{self.root.tag}>",
                    expected=self.root.tag,
                    found=node.tag,
                )
            self.root = node
        elif self.root is None:
            self.pre_root.append(node)
        else:
            self.trailing_nodes.append(node)

        node.father = None
        return self.n_nodes

    def set_root(self, node: XMLNode) -> None:
        """Replace the root element."""
        self._ensure_valid()
        if not node.is_element:
            raise ValueError("Root must be an element node")
        if self.root is not None and self.root is not node:
            self.root.clear()
        node.father = None
        self.root = node

    def iter(self) -> Iterator[XMLNode]:
        """All nodes in document order."""
        for node in self.nodes:
            yield from node.iter()

    def iter_elements(self) -> Iterator[XMLNode]:
        return (node for node in self.iter() if node.is_element)

    def find(self, tag: str) -> Optional[XMLNode]:
        """First active element tagged ``tag``."""
        self._ensure_valid()
        return self.root.find(tag) if self.root is not None else None

    def find_all(self, tag: str) -> List[XMLNode]:
        self._ensure_valid()
        return self.root.find_all(tag) if self.root is not None else []

    def clear(self) -> None:
        """Release every node; the document stays usable."""
        for node in self.pre_root + self.trailing_nodes:
            node.clear()
        if self.root is not None:
            self.root.clear()
        self.pre_root = []
        self.root = None
        self.trailing_nodes = []

    def reset(self) -> None:
        """Release every node and invalidate the document."""
        self.clear()
        self._valid = False

    def print(self, stream: TextIO, config=None, registry=None) -> None:
        """Serialize to ``stream`` (see ``XMLPrinter``).

        ``registry`` supplies the delimiters of user tags; it defaults to the
        process-wide table.
        """
        from .printer import XMLPrinter

        self._ensure_valid()
        XMLPrinter(config, registry).print_document(self, stream)

    def to_string(self, config=None, registry=None) -> str:
        from .printer import XMLPrinter

        self._ensure_valid()
        return XMLPrinter(config, registry).document_to_string(self)
