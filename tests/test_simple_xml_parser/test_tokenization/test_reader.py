"""Tests for continuation-aware tag reading."""

import pytest

from simple_xml_parser.character.source import DelimitedTextSource
from simple_xml_parser.shared.errors import MalformedTagError, TruncatedInputError
from simple_xml_parser.tokenization.reader import TagReader
from simple_xml_parser.tree.kinds import SpecialTagRegistry, TagKind


def reader_for(text, registry=None, **kwargs):
    return TagReader(DelimitedTextSource(text, **kwargs), registry)


def read_all(reader):
    tags = []
    while True:
        tag = reader.read_tag()
        if tag is None:
            return tags
        tags.append(tag)


class TestTagReader:
    """Test splitting input into text runs and tags."""

    def test_tags_and_text(self):
        """Test that each tag carries the text preceding it."""
        tags = read_all(reader_for("<root><a/>text</root>"))

        assert [(t.text_before, t.tag_text) for t in tags] == [
            ("", "<root>"),
            ("", "<a/>"),
            ("text", "</root>"),
        ]
        assert [t.classification.kind for t in tags] == [
            TagKind.ELEMENT,
            TagKind.SELF_CLOSING,
            TagKind.END_MARKER,
        ]

    def test_multiline_comment(self):
        """Test that a comment containing '>' is read across chunks."""
        reader = reader_for("<r><!-- a >\n b >\n c >\n d --></r>")

        tags = read_all(reader)
        comment = tags[1]

        assert comment.classification.kind == TagKind.COMMENT
        assert comment.classification.payload == " a >\n b >\n c >\n d "
        assert comment.line == 1
        assert comment.end_line == 4
        assert reader.continuation_reads == 3
        assert tags[2].line == 4
        assert reader.line == 4

    def test_line_numbers(self):
        """Test tag and text line tracking."""
        tags = read_all(reader_for("<a>\n\ntext</a>"))

        assert tags[1].line == 3
        assert tags[1].text_line == 1
        assert tags[1].text_before == "\n\ntext"

    def test_trailing_text(self):
        """Test that non-blank text after the last tag is returned."""
        reader = reader_for("<a/>  tail")

        reader.read_tag()
        trailing = reader.read_tag()

        assert trailing.is_trailing_text
        assert trailing.text_before == "  tail"
        assert reader.read_tag() is None

    def test_blank_trailing_text_ignored(self):
        reader = reader_for("<a/>\n")

        reader.read_tag()

        assert reader.read_tag() is None
        assert reader.line == 2

    def test_user_tag_continuation(self):
        """Test that user tags also continue across chunks."""
        registry = SpecialTagRegistry()
        registry.register_user_tag(100, "<{{", "}}>")

        tags = read_all(reader_for("<r><{{ a > b }}></r>", registry))

        assert tags[1].classification.kind == 100
        assert tags[1].classification.payload == " a > b "

    def test_small_buffer(self):
        """Test that tiny buffers do not change the result."""
        tags = read_all(reader_for('<root attr="value"><child/></root>', buffer_size=3))

        assert [t.tag_text for t in tags] == [
            '<root attr="value">',
            "<child/>",
            "</root>",
        ]

    def test_counts(self):
        reader = reader_for("<a><b/></a>")

        read_all(reader)

        assert reader.tags_read == 3


class TestTagReaderErrors:
    """Test reading failures."""

    def test_closing_bracket_without_opening(self):
        """Test a '>' with no preceding '<'."""
        reader = reader_for("<a>\ntext>")
        reader.read_tag()

        with pytest.raises(MalformedTagError) as exc_info:
            reader.read_tag()

        assert exc_info.value.line == 2

    def test_input_ends_inside_tag(self):
        """Test truncation inside a comment."""
        reader = reader_for("<r>\n<!-- unfinished")
        reader.read_tag()

        with pytest.raises(TruncatedInputError) as exc_info:
            reader.read_tag()

        assert exc_info.value.line == 2
        assert exc_info.value.text == "<!-- unfinished"

    def test_partial_comment_at_end(self):
        """Test truncation after an inner '>'."""
        reader = reader_for("<!-- a > b")

        with pytest.raises(TruncatedInputError):
            reader.read_tag()
