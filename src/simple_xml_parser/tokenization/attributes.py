"""Attribute decoding.

Decodes one ``name[ws]=[ws]["]value["]`` fragment. A quoted value runs to the
matching quote that is not protected by a backslash; an unquoted value runs to
the next whitespace, ``/``, ``>`` or the end of the fragment. The value is
passed through the entity codec before being stored.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from simple_xml_parser.character.escaping import unescape, unescape_backslashes
from simple_xml_parser.tree.model import XMLAttribute

QUOTE_CHARS = "\"'"
_UNQUOTED_STOP = "/>"


class AttributeStatus(Enum):
    """Outcome of decoding one attribute fragment."""

    OK = auto()
    QUOTE_MISMATCH = auto()   # Attribute still usable
    MALFORMED = auto()


@dataclass
class AttributeDecoding:
    """Result of ``decode_attribute``."""

    status: AttributeStatus
    attribute: Optional[XMLAttribute] = None
    reason: Optional[str] = None

    @property
    def usable(self) -> bool:
        return self.attribute is not None


def find_quoted_end(text: str, start: int, quote: str) -> int:
    """Index of the quote closing a value whose opening quote is at ``start``.

    Returns -1 when the value is never closed.
    """
    i = start + 1
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == quote:
            return i
        i += 1
    return -1


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def decode_attribute(fragment: str) -> AttributeDecoding:
    """Decode one attribute fragment."""
    name_end = 0
    while (
        name_end < len(fragment)
        and fragment[name_end] != "="
        and not fragment[name_end].isspace()
    ):
        name_end += 1

    name = fragment[:name_end]
    if not name:
        return AttributeDecoding(
            AttributeStatus.MALFORMED, reason="Attribute name is empty"
        )

    i = _skip_whitespace(fragment, name_end)
    if i >= len(fragment) or fragment[i] != "=":
        return AttributeDecoding(
            AttributeStatus.MALFORMED, reason=f"Attribute {name!r} has no '='"
        )
    i = _skip_whitespace(fragment, i + 1)

    status = AttributeStatus.OK
    if i < len(fragment) and fragment[i] in QUOTE_CHARS:
        quote = fragment[i]
        close = find_quoted_end(fragment, i, quote)
        if close < 0:
            raw_value = fragment[i + 1:]
            status = AttributeStatus.QUOTE_MISMATCH
        else:
            if fragment[close + 1:].strip():
                return AttributeDecoding(
                    AttributeStatus.MALFORMED,
                    reason=f"Unexpected text after value of attribute {name!r}",
                )
            raw_value = fragment[i + 1:close]
        value = unescape(unescape_backslashes(raw_value))
    else:
        end = i
        while (
            end < len(fragment)
            and not fragment[end].isspace()
            and fragment[end] not in _UNQUOTED_STOP
        ):
            end += 1
        value = unescape(fragment[i:end])

    return AttributeDecoding(status, XMLAttribute(name, value))
