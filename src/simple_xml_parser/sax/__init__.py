"""SAX-style event delivery for simple XML parsing.

Key Components:
    SAXEventSource: Streaming driver over one input
    SAXCallbacks: Optional listener slots
    EventType: START, END, TEXT and ATTRIBUTE events
"""

from .events import EventType, SAXCallbacks
from .source import ParserState, SAXEventSource, SAXResult

__all__ = [
    "EventType",
    "ParserState",
    "SAXCallbacks",
    "SAXEventSource",
    "SAXResult",
]
