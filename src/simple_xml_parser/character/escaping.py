"""Entity escaping for attribute values and text content.

``escape`` and ``unescape`` are the text codec used by the attribute decoder,
the event source and the serializer. Unescaping understands the predefined
XML entities, the HTML named entities and numeric character references.
"""

import html
from typing import Dict

_ESCAPES: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}

# Backslash sequences accepted inside quoted attribute values
_BACKSLASH_ESCAPES: Dict[str, str] = {
    '"': '"',
    "'": "'",
    "\\": "\\",
}


def escape(text: str) -> str:
    """Replace markup-significant characters with entity references."""
    if not text:
        return text
    return "".join(_ESCAPES.get(char, char) for char in text)


def escape_attribute(text: str) -> str:
    """Escape a value for a double-quoted attribute.

    Backslashes are doubled so that ``unescape_backslashes`` restores them.
    """
    return escape(text).replace("\\", "\\\\") if text else text


def unescape(text: str) -> str:
    """Resolve entity and character references."""
    if not text or "&" not in text:
        return text
    return html.unescape(text)


def unescape_backslashes(text: str) -> str:
    """Remove the backslash protecting a quote inside an attribute value."""
    if "\\" not in text:
        return text

    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text) and text[i + 1] in _BACKSLASH_ESCAPES:
            result.append(_BACKSLASH_ESCAPES[text[i + 1]])
            i += 2
            continue
        result.append(char)
        i += 1
    return "".join(result)
