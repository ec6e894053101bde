"""Tests for the public parsing API."""

import io

import pytest

from simple_xml_parser.api.parser import (
    XMLParser,
    parse,
    parse_file,
    parse_lines,
    parse_stream,
    parse_string,
    sax_parse_file,
    sax_parse_string,
)
from simple_xml_parser.sax.events import SAXCallbacks
from simple_xml_parser.shared.config import ParserConfig, PrintConfig
from simple_xml_parser.shared.errors import (
    ErrorKind,
    MalformedTagError,
    StructuralMismatchError,
    XMLIOError,
)
from simple_xml_parser.tree.kinds import SpecialTagRegistry
from simple_xml_parser.tree.model import deep_equal

SAMPLE = (
    '<?xml version="1.0"?>\n'
    "<root id=\"1\">\n"
    "  <a x=\"1\" y=\"2\"/>\n"
    "  <b>text &amp; more</b>\n"
    "  <!-- note -->\n"
    "</root>\n"
)


class TestParseFunctions:
    """Test the module-level entry points."""

    def test_parse_string(self):
        result = parse_string("<root><item>value</item></root>")

        assert result.success
        assert result.tree.find("item").text == "value"

    def test_parse_mismatch(self):
        """Test that mismatches are reported in the result."""
        result = parse_string("<root>\n<a>\n</root>")

        assert not result.success
        assert result.error.expected == "a"
        assert result.error.line == 3

    def test_raise_on_error(self):
        config = ParserConfig(raise_on_error=True)

        with pytest.raises(StructuralMismatchError):
            parse_string("<root><a></root>", config)

    def test_parse_lines(self):
        result = parse_lines(["<root>\n", "  <!-- a >\n", "  b -->\n", "</root>\n"])

        assert result.success
        assert result.root.children[0].tag == " a >\n  b "

    def test_parse_stream(self):
        result = parse_stream(io.StringIO("<r><c/></r>"))

        assert result.success
        assert result.document.filename is None

    def test_parse_file(self, tmp_path):
        """Test reading a file and recording its name."""
        path = tmp_path / "doc.xml"
        path.write_text("<r>café</r>", encoding="utf-8")

        result = parse_file(path)

        assert result.success
        assert result.root.text == "café"
        assert result.document.filename == str(path)

    def test_parse_path(self, tmp_path):
        """Test that parse() reads files given as Path objects."""
        path = tmp_path / "doc.xml"
        path.write_text("<r/>", encoding="utf-8")

        assert parse(path).root.tag == "r"

    def test_missing_file(self, tmp_path):
        """Test that unreadable files give a failed result."""
        result = parse_file(tmp_path / "missing.xml")

        assert not result.success
        assert isinstance(result.error, XMLIOError)
        assert result.error.kind == ErrorKind.IO_FAILURE
        assert result.has_errors()

    def test_error_filename(self, tmp_path):
        path = tmp_path / "bad.xml"
        path.write_text("<r>\n  <a b>\n</r>", encoding="utf-8")

        result = parse_file(path)

        assert isinstance(result.error, MalformedTagError)
        assert str(result.error).startswith(f"{path}:2: MALFORMED_TAG:")


class TestRoundTrip:
    """Test that printed documents parse back to the same tree."""

    @pytest.mark.parametrize(
        "config",
        [PrintConfig(), PrintConfig(tag_separator="", child_separator=""),
         PrintConfig(child_separator="  ", line_width=12)],
    )
    def test_print_and_reparse(self, config):
        """Test tree equality after print and parse."""
        parser = XMLParser()
        first = parser.parse_string(SAMPLE)

        printed = parser.to_string(first.document, config)
        second = parser.parse_string(printed)

        assert second.success
        assert deep_equal(first.root, second.root, compare_values=True)
        assert len(second.document.pre_root) == 1

    @pytest.mark.parametrize(
        "xml",
        [
            '<a p="x\\\\" q="1"/>',
            '<a p="say \\"hi\\"" q="C:\\temp"/>',
            "<a p='it\\'s \\\\'/>",
        ],
    )
    def test_backslashes_in_attribute_values(self, xml):
        """Test that values holding backslashes survive print and parse."""
        parser = XMLParser()
        first = parser.parse_string(xml)

        second = parser.parse_string(parser.to_string(first.document))

        assert first.success
        assert second.success
        assert deep_equal(first.root, second.root, compare_values=True)

    def test_trailing_backslash_value(self):
        parser = XMLParser(ParserConfig.compact())
        result = parser.parse_string('<a p="x\\\\" q="1"/>')

        assert result.root.get_attribute("p") == "x\\"
        assert parser.to_string(result.document) == '<a p="x\\\\" q="1"/>'

    def test_doctype_internal_subset(self):
        """Test that a DOCTYPE subset prints back unchanged."""
        parser = XMLParser(ParserConfig.compact())
        result = parser.parse_string("<!DOCTYPE r [\n  <!ELEMENT r ANY>\n]>\n<r/>")

        assert result.document.pre_root[0].tag == " r [\n  <!ELEMENT r ANY>\n"
        assert parser.to_string(result.document) == (
            "<!DOCTYPE r [\n  <!ELEMENT r ANY>\n]><r/>"
        )

    def test_whitespace_text_delivery(self):
        """Test building with whitespace delivery switched on."""
        config = ParserConfig().override(sax__deliver_whitespace_text=True)

        result = parse_string('<?xml version="1.0"?>\n<root><a/></root>\n', config)

        assert result.success
        assert result.root.find("a") is not None

    def test_compact_preset(self):
        parser = XMLParser(ParserConfig.compact())
        result = parser.parse_string("<root>\n  <a/>\n  <b>text</b>\n</root>")

        assert parser.to_string(result.document) == "<root><a/><b>text</b></root>"

    def test_print_to_stream(self):
        parser = XMLParser(ParserConfig.compact())
        stream = io.StringIO()

        parser.print(parser.parse_string("<r><a/></r>").document, stream)

        assert stream.getvalue() == "<r><a/></r>"


class TestXMLParser:
    """Test the configurable parser."""

    def test_user_tags(self):
        """Test parsing and printing with a local tag registry."""
        registry = SpecialTagRegistry()
        registry.register_user_tag(100, "<{{", "}}>")
        parser = XMLParser(ParserConfig.compact(), registry)

        result = parser.parse_string("<r><{{ name }}></r>")

        assert result.root.children[0].kind == 100
        assert result.root.children[0].tag == " name "
        assert parser.to_string(result.document) == "<r><{{ name }}></r>"

    def test_statistics(self):
        parser = XMLParser()
        parser.parse_string("<r/>")
        parser.parse_string("<r>")

        stats = parser.statistics

        assert stats["total_parses"] == 2
        assert stats["successful_parses"] == 1
        assert stats["success_rate"] == 0.5

        parser.reset_statistics()
        assert parser.statistics["total_parses"] == 0

    def test_reconfigure(self):
        parser = XMLParser()

        parser.reconfigure(ParserConfig(correlation_id="req-9"))

        assert parser.correlation_id == "req-9"
        assert parser.parse_string("<r/>").correlation_id == "req-9"

    def test_small_buffer_configuration(self):
        config = ParserConfig().override(source__buffer_size=1)

        result = XMLParser(config).parse_string(SAMPLE)

        assert result.success
        assert result.root.find("b").text == "text & more"


class TestSAXFunctions:
    """Test the SAX entry points."""

    def test_sax_parse_string(self):
        tags = []

        result = sax_parse_string(
            "<a><b/></a>", SAXCallbacks(on_start=lambda node: tags.append(node.tag))
        )

        assert tags == ["a", "b"]
        assert not result.stopped

    def test_handler_object(self):
        """Test that plain objects with on_* methods are accepted."""
        class Counter:
            def __init__(self):
                self.ends = 0

            def on_end(self, node):
                self.ends += 1

        counter = Counter()
        sax_parse_string("<a><b/></a>", counter)

        assert counter.ends == 2

    def test_sax_errors_raise(self):
        with pytest.raises(MalformedTagError):
            sax_parse_string("<a><b c></a>", SAXCallbacks())

    def test_sax_parse_file(self, tmp_path):
        path = tmp_path / "doc.xml"
        path.write_text("<a>\n<b/>\n</a>", encoding="utf-8")
        texts = []

        result = sax_parse_file(path, SAXCallbacks(on_text=texts.append))

        assert texts == []
        assert result.statistics.lines_read == 3

    def test_sax_missing_file(self, tmp_path):
        with pytest.raises(XMLIOError):
            sax_parse_file(tmp_path / "missing.xml", SAXCallbacks())
