"""Tag tokenization for simple XML parsing.

Key Components:
    classify: Tag classifier returning COMPLETE, PARTIAL or MALFORMED
    decode_attribute: Attribute fragment decoder
    TagReader: Continuation-aware reader producing complete tags
"""

from simple_xml_parser.tree.kinds import register_user_tag

from .attributes import (
    AttributeDecoding,
    AttributeStatus,
    decode_attribute,
    find_quoted_end,
)
from .classifier import TagClassification, TagStatus, classify
from .reader import RawTag, TagReader

__all__ = [
    "AttributeDecoding",
    "AttributeStatus",
    "RawTag",
    "TagClassification",
    "TagReader",
    "TagStatus",
    "classify",
    "decode_attribute",
    "find_quoted_end",
    "register_user_tag",
]
