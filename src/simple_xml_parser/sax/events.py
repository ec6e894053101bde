"""Listener interface for the event source.

Every slot is optional; unset slots are not invoked. A callback stops the
parse by returning ``False``; any other return value (including None)
continues it.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

from simple_xml_parser.tree.model import XMLAttribute, XMLNode


class EventType(Enum):
    """Kinds of events raised by the event source."""

    START = auto()
    END = auto()
    TEXT = auto()
    ATTRIBUTE = auto()


TextCallback = Callable[[str], Optional[bool]]
NodeCallback = Callable[[XMLNode], Optional[bool]]
AttributeCallback = Callable[[XMLNode, XMLAttribute], Optional[bool]]
EventCallback = Callable[[EventType, Optional[XMLNode], Optional[str]], Optional[bool]]


@dataclass
class SAXCallbacks:
    """Optional callback slots of a SAX listener.

    Attributes:
        on_text: Receives each text run
        on_start: Receives each opened node
        on_end: Receives each closed node (end markers for elements)
        on_attribute: Receives each active attribute of an opened node
        on_event: Receives every event as ``(type, node, text)`` after the
            specific slot; ``text`` is the text run, or the attribute name
            for ATTRIBUTE events
        wants_raw_text: Deliver whitespace-only and unstripped text runs
    """
    on_text: Optional[TextCallback] = None
    on_start: Optional[NodeCallback] = None
    on_end: Optional[NodeCallback] = None
    on_attribute: Optional[AttributeCallback] = None
    on_event: Optional[EventCallback] = None
    wants_raw_text: bool = False

    @classmethod
    def from_handler(cls, handler: Any) -> "SAXCallbacks":
        """Build slots from the like-named methods of ``handler``."""
        return cls(
            on_text=getattr(handler, "on_text", None),
            on_start=getattr(handler, "on_start", None),
            on_end=getattr(handler, "on_end", None),
            on_attribute=getattr(handler, "on_attribute", None),
            on_event=getattr(handler, "on_event", None),
            wants_raw_text=bool(getattr(handler, "wants_raw_text", False)),
        )
