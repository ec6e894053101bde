"""Node kinds and the special-tag delimiter registry.

Special tags are tags whose payload is stored verbatim between a start and an
end delimiter (processing instructions, comments, CDATA sections and any
user-registered pair). The registry is process-wide: built-in entries are
loaded at import time and user entries are appended with
``register_user_tag``. Registration takes a lock; parsing only reads.
"""

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

# User-defined tag kinds must be at least this value
USER_TAG_THRESHOLD = 100

DOCTYPE_START = "<!DOCTYPE"


class TagKind(IntEnum):
    """Kinds of node produced by the tag classifier."""

    ELEMENT = 1         # <name ...> that may own children and text
    SELF_CLOSING = 2    # <name .../>
    END_MARKER = 3      # </name>, transient closure signal
    INSTRUCTION = 4     # <? ... ?>
    COMMENT = 5         # <!-- ... -->
    CDATA = 6           # <![CDATA[ ... ]]>
    DOCTYPE = 7         # <!DOCTYPE ... >


def is_element_kind(kind: int) -> bool:
    """True for kinds that denote elements."""
    return kind in (TagKind.ELEMENT, TagKind.SELF_CLOSING)


def is_user_kind(kind: int) -> bool:
    """True for user-registered kinds."""
    return kind >= USER_TAG_THRESHOLD


def is_auxiliary_kind(kind: int) -> bool:
    """True for payload-only kinds that never own children."""
    return kind in (
        TagKind.INSTRUCTION,
        TagKind.COMMENT,
        TagKind.CDATA,
        TagKind.DOCTYPE,
    ) or is_user_kind(kind)


def kind_name(kind: int) -> str:
    """Readable name of a kind, including user kinds."""
    try:
        return TagKind(kind).name
    except ValueError:
        return f"USER_{kind}" if is_user_kind(kind) else f"UNKNOWN_{kind}"


@dataclass(frozen=True)
class SpecialTag:
    """A start/end delimiter pair mapped to a node kind."""

    kind: int
    start: str
    end: str

    def matches_start(self, text: str) -> bool:
        """True when ``text`` opens with this tag's start delimiter."""
        return text.startswith(self.start)

    def is_complete(self, text: str) -> bool:
        """True when ``text`` also closes with the end delimiter."""
        return (
            len(text) >= len(self.start) + len(self.end)
            and text.endswith(self.end)
        )

    def payload(self, text: str) -> str:
        """Text between the delimiters."""
        return text[len(self.start):len(text) - len(self.end)]


BUILTIN_SPECIAL_TAGS: Tuple[SpecialTag, ...] = (
    SpecialTag(TagKind.INSTRUCTION, "<?", "?>"),
    SpecialTag(TagKind.COMMENT, "<!--", "-->"),
    SpecialTag(TagKind.CDATA, "<![CDATA[", "]]>"),
    # Terminator written by older versions of this format
    SpecialTag(TagKind.CDATA, "<![CDATA[", "]]/>"),
)


class SpecialTagRegistry:
    """Built-in and user-registered special tags."""

    def __init__(self) -> None:
        self._builtin: Tuple[SpecialTag, ...] = BUILTIN_SPECIAL_TAGS
        self._user: Tuple[SpecialTag, ...] = ()
        self._lock = threading.Lock()

    @property
    def special_tags(self) -> Tuple[SpecialTag, ...]:
        """Built-in entries in classification order."""
        return self._builtin

    @property
    def user_tags(self) -> Tuple[SpecialTag, ...]:
        """User entries in registration order."""
        return self._user

    def register_user_tag(self, kind: int, start: str, end: str) -> bool:
        """Append a user delimiter pair.

        Returns False when ``kind`` is below ``USER_TAG_THRESHOLD`` or when the
        delimiters do not start with ``<`` and end with ``>`` respectively.
        """
        if kind < USER_TAG_THRESHOLD:
            return False
        if not start or not end or not start.startswith("<") or not end.endswith(">"):
            return False

        with self._lock:
            self._user = self._user + (SpecialTag(kind, start, end),)
        return True

    def clear_user_tags(self) -> None:
        """Forget every user registration."""
        with self._lock:
            self._user = ()

    def delimiters_for(self, kind: int) -> Optional[SpecialTag]:
        """First entry registered for ``kind``."""
        for tag in self._builtin + self._user:
            if tag.kind == kind:
                return tag
        return None

    def all_tags(self) -> List[SpecialTag]:
        """Every entry, built-ins first."""
        return list(self._builtin + self._user)


default_registry = SpecialTagRegistry()


def register_user_tag(kind: int, start: str, end: str) -> bool:
    """Register a user tag in the process-wide registry."""
    return default_registry.register_user_tag(kind, start, end)
