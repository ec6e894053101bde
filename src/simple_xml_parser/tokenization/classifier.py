"""Tag classification.

Given one complete ``<...>`` token, determine its kind and extract its payload.
Candidates are tried in priority order:

1. built-in special tags (instruction, comment, CDATA),
2. ``<!DOCTYPE ...>``, terminated by ``]>`` when an internal subset is open,
3. user-registered delimiter pairs,
4. the element grammar: ``</name>``, ``<name .../>``, ``<name ...>``.

A token whose start delimiter matches but whose end delimiter is missing is
reported as PARTIAL rather than MALFORMED: the caller should append more
input and classify again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.tree.kinds import (
    DOCTYPE_START,
    SpecialTag,
    SpecialTagRegistry,
    TagKind,
    default_registry,
)
from simple_xml_parser.tree.model import XMLNode

from .attributes import (
    QUOTE_CHARS,
    AttributeStatus,
    decode_attribute,
    find_quoted_end,
)

logger = get_logger(__name__, component="tag_classifier")

_NAME_STOP = "/>"


class TagStatus(Enum):
    """Outcome of classifying one tag token."""

    COMPLETE = auto()
    PARTIAL = auto()      # Need more input
    MALFORMED = auto()


@dataclass
class TagClassification:
    """Result of ``classify``.

    ``node`` is set for COMPLETE results: its ``kind`` and ``tag`` carry the
    classification and, for start tags, its attributes are decoded.
    ``quote_mismatches`` lists attributes whose value was opened with a quote
    that never closed; they are still present on the node.
    """

    status: TagStatus
    node: Optional[XMLNode] = None
    reason: Optional[str] = None
    quote_mismatches: List[str] = field(default_factory=list)

    @property
    def kind(self) -> Optional[int]:
        return self.node.kind if self.node is not None else None

    @property
    def payload(self) -> Optional[str]:
        return self.node.tag if self.node is not None else None

    @property
    def is_complete(self) -> bool:
        return self.status == TagStatus.COMPLETE

    @property
    def is_partial(self) -> bool:
        return self.status == TagStatus.PARTIAL


def _malformed(reason: str) -> TagClassification:
    return TagClassification(TagStatus.MALFORMED, reason=reason)


def _partial(reason: str) -> TagClassification:
    return TagClassification(TagStatus.PARTIAL, reason=reason)


def _complete(kind: int, tag: str) -> TagClassification:
    return TagClassification(TagStatus.COMPLETE, node=XMLNode(tag=tag, kind=kind))


def _match_delimited(
    text: str, tags: "tuple[SpecialTag, ...]"
) -> Optional[TagClassification]:
    """Try delimiter pairs; PARTIAL only when no pair with a matching start completes."""
    partial: Optional[SpecialTag] = None
    for tag in tags:
        if not tag.matches_start(text):
            continue
        if tag.is_complete(text):
            return _complete(tag.kind, tag.payload(text))
        if partial is None:
            partial = tag
    if partial is not None:
        return _partial(f"Missing {partial.end!r} terminator")
    return None


def _match_doctype(text: str) -> Optional[TagClassification]:
    if not text.startswith(DOCTYPE_START):
        return None

    body = text[len(DOCTYPE_START):-1]
    if "[" not in body:
        return _complete(TagKind.DOCTYPE, body)
    if not text.endswith("]>") or body.count("[") > body.count("]"):
        return _partial("Internal subset of DOCTYPE is not closed")
    # "]>" terminates an internal subset
    return _complete(TagKind.DOCTYPE, body[:-1])


def _scan_name(text: str, start: int) -> int:
    end = start
    while end < len(text) and not text[end].isspace() and text[end] not in _NAME_STOP:
        end += 1
    return end


def _classify_end_tag(text: str) -> TagClassification:
    name_end = _scan_name(text, 2)
    name = text[2:name_end]
    if not name:
        return _malformed("Closing tag has no name")
    if text[name_end:-1].strip():
        return _malformed(f"Unexpected content in closing tag </{name}>")
    return _complete(TagKind.END_MARKER, name)


def _classify_start_tag(text: str) -> TagClassification:
    name_end = _scan_name(text, 1)
    name = text[1:name_end]
    if not name:
        return _malformed("Tag has no name")
    if name[0] in "!?":
        return _malformed(f"Unknown declaration <{name}")

    self_closing = text.endswith("/>")
    # Index of the tag terminator ('>' or '/>')
    limit = len(text) - (2 if self_closing else 1)

    classification = TagClassification(
        TagStatus.COMPLETE,
        node=XMLNode(
            tag=name,
            kind=TagKind.SELF_CLOSING if self_closing else TagKind.ELEMENT,
        ),
    )

    n = name_end
    while True:
        while n < limit and text[n].isspace():
            n += 1
        if n >= limit:
            break

        equals = text.find("=", n, limit)
        if equals < 0:
            return _malformed(f"Attribute without value in <{name}>")

        p = equals + 1
        while p < limit and text[p].isspace():
            p += 1

        if p < limit and text[p] in QUOTE_CHARS:
            close = find_quoted_end(text[:limit], p, text[p])
            end = close + 1 if close >= 0 else limit
        else:
            end = p
            while end < limit and not text[end].isspace() and text[end] != "/":
                end += 1

        decoded = decode_attribute(text[n:end])
        if decoded.status == AttributeStatus.MALFORMED:
            return _malformed(f"{decoded.reason} in <{name}>")
        if decoded.status == AttributeStatus.QUOTE_MISMATCH:
            classification.quote_mismatches.append(decoded.attribute.name)
        classification.node.attributes.append(decoded.attribute)

        if end == p and p < limit and text[p] == "/":
            # Stray '/' inside the attribute list
            return _malformed(f"Unexpected '/' in <{name}>")
        n = end

    return classification


def classify(
    text: str, registry: Optional[SpecialTagRegistry] = None
) -> TagClassification:
    """Classify one tag token (``<`` ... ``>``)."""
    registry = registry or default_registry

    if len(text) < 2 or not text.startswith("<") or not text.endswith(">"):
        # A recognized opening still waiting for its terminator is not an error
        if text.startswith("<"):
            for candidate in registry.all_tags():
                if candidate.matches_start(text):
                    return _partial(f"Missing {candidate.end!r} terminator")
            if text.startswith(DOCTYPE_START):
                return _partial("Missing '>' terminator")
        return _malformed("Tag must start with '<' and end with '>'")

    result = _match_delimited(text, registry.special_tags)
    if result is None:
        result = _match_doctype(text)
    if result is None:
        result = _match_delimited(text, registry.user_tags)
    if result is None:
        if text.startswith("</"):
            result = _classify_end_tag(text)
        else:
            result = _classify_start_tag(text)

    if logger.is_enabled_for(logging.DEBUG):
        logger.debug(
            "Classified tag",
            extra={
                "status": result.status.name,
                "kind": result.kind,
                "length": len(text),
            },
        )
    return result
