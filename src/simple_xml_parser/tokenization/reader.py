"""Continuation-aware tag reading.

``TagReader`` pulls ``>``-terminated chunks from a ``DelimitedTextSource``,
splits off the text preceding the next ``<`` and keeps appending chunks while
the classifier reports the tag as PARTIAL (comments, CDATA sections and
instructions may contain a literal ``>``). Line numbers are tracked so that
every tag and text run can be located in the input.
"""

from dataclasses import dataclass
from typing import Optional

from simple_xml_parser.character.source import DelimitedTextSource
from simple_xml_parser.shared.errors import MalformedTagError, TruncatedInputError
from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.tree.kinds import SpecialTagRegistry, default_registry

from .classifier import TagClassification, classify


@dataclass
class RawTag:
    """One unit of input: the text preceding a tag and the tag itself.

    Attributes:
        text_before: Raw text between the previous tag and this one
        tag_text: Complete tag token, or None for text trailing the last tag
        classification: Classifier result for ``tag_text``
        line: 1-based line on which the tag starts
        end_line: 1-based line on which the tag ends
        text_line: 1-based line on which ``text_before`` starts
    """
    text_before: str
    tag_text: Optional[str]
    classification: Optional[TagClassification]
    line: int
    end_line: int
    text_line: int

    @property
    def is_trailing_text(self) -> bool:
        return self.tag_text is None


class TagReader:
    """Read complete tags from a delimited text source."""

    def __init__(
        self,
        source: DelimitedTextSource,
        registry: Optional[SpecialTagRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.source = source
        self.registry = registry or default_registry
        self.line = 1
        self.tags_read = 0
        self.continuation_reads = 0
        self.logger = get_logger(__name__, correlation_id, "tag_reader")

    @property
    def filename(self) -> Optional[str]:
        return self.source.filename

    def read_tag(self) -> Optional[RawTag]:
        """Return the next tag with its preceding text.

        Returns None at end of input. Text after the last tag is returned as a
        ``RawTag`` with ``tag_text`` set to None.

        Raises:
            MalformedTagError: A ``>`` appears with no opening ``<``
            TruncatedInputError: Input ended inside a tag
        """
        chunk = self.source.read_chunk()
        if chunk is None:
            return None

        text_line = self.line
        start = chunk.text.find("<")
        if start < 0:
            if chunk.text.endswith(self.source.delimiter):
                raise MalformedTagError(
                    "Unexpected '>' without matching '<'",
                    line=self.line + chunk.newlines,
                    text=chunk.text.strip(),
                    filename=self.filename,
                )
            self.line += chunk.newlines
            if chunk.is_blank:
                return None
            return RawTag(chunk.text, None, None, text_line, self.line, text_line)

        text_before = chunk.text[:start]
        tag_text = chunk.text[start:]
        tag_line = self.line + text_before.count("\n")
        newlines = chunk.newlines

        classification = self._classify(tag_text)
        while classification is None or classification.is_partial:
            more = self.source.read_chunk()
            if more is None:
                raise TruncatedInputError(
                    "Input ended inside tag",
                    line=tag_line,
                    text=tag_text,
                    filename=self.filename,
                )
            tag_text += more.text
            newlines += more.newlines
            self.continuation_reads += 1
            self.logger.debug(
                "Tag continued on next chunk",
                extra={"line": tag_line, "length": len(tag_text)},
            )
            classification = self._classify(tag_text)

        self.line += newlines
        self.tags_read += 1
        return RawTag(text_before, tag_text, classification, tag_line, self.line, text_line)

    def _classify(self, tag_text: str) -> Optional[TagClassification]:
        # Only the last chunk of the input can lack the delimiter
        if not tag_text.endswith(self.source.delimiter):
            return None
        return classify(tag_text, self.registry)
