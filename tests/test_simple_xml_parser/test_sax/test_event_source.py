"""Tests for the SAX event source."""

import logging

import pytest

from simple_xml_parser.sax.events import EventType, SAXCallbacks
from simple_xml_parser.sax.source import ParserState, SAXEventSource
from simple_xml_parser.shared.config import SAXConfig, SourceConfig
from simple_xml_parser.shared.errors import (
    ErrorKind,
    MalformedTagError,
    StructuralMismatchError,
    TruncatedInputError,
)
from simple_xml_parser.tree.kinds import SpecialTagRegistry, TagKind


class Recorder:
    """Listener collecting every event as a readable tuple."""

    def __init__(self, stop_on=None):
        self.events = []
        self.stop_on = stop_on

    def on_event(self, event_type, node, text):
        if event_type == EventType.TEXT:
            self.events.append(("TEXT", text))
        elif event_type == EventType.ATTRIBUTE:
            self.events.append(("ATTRIBUTE", text, node.get_attribute(text)))
        else:
            self.events.append((event_type.name, node.kind, node.tag))
        if self.stop_on is not None and node is not None and node.tag == self.stop_on:
            return False
        return None


def run(xml, recorder=None, **config):
    recorder = recorder or Recorder()
    source = SAXEventSource(SAXConfig(**config))
    result = source.parse(xml, SAXCallbacks(on_event=recorder.on_event))
    return recorder.events, result


class TestEventOrder:
    """Test the sequence of raised events."""

    def test_element_events(self):
        """Test start, attribute, text, auxiliary and end events in order."""
        events, result = run('<root a="1"><b/>hi<!-- c --></root>')

        assert events == [
            ("START", TagKind.ELEMENT, "root"),
            ("ATTRIBUTE", "a", "1"),
            ("START", TagKind.SELF_CLOSING, "b"),
            ("END", TagKind.SELF_CLOSING, "b"),
            ("TEXT", "hi"),
            ("START", TagKind.COMMENT, " c "),
            ("END", TagKind.COMMENT, " c "),
            ("END", TagKind.END_MARKER, "root"),
        ]
        assert result.state == ParserState.DONE
        assert not result.stopped

    def test_prolog_and_self_closing_root(self):
        """Test a document made of a prolog and an empty root."""
        events, result = run('<?xml version="1.0"?>\n<r/>')

        assert events[0] == ("START", TagKind.INSTRUCTION, 'xml version="1.0"')
        assert events[-1] == ("END", TagKind.SELF_CLOSING, "r")
        assert result.state == ParserState.DONE

    def test_specific_slots(self):
        """Test that specific slots fire before the generic one."""
        calls = []
        callbacks = SAXCallbacks(
            on_start=lambda node: calls.append(("start", node.tag)),
            on_end=lambda node: calls.append(("end", node.tag)),
            on_text=lambda text: calls.append(("text", text)),
            on_attribute=lambda node, attribute: calls.append(
                ("attribute", attribute.name, attribute.value)
            ),
            on_event=lambda event_type, node, text: calls.append(event_type),
        )

        SAXEventSource().parse('<a k="v">t</a>', callbacks)

        assert calls == [
            ("start", "a"),
            EventType.START,
            ("attribute", "k", "v"),
            EventType.ATTRIBUTE,
            ("text", "t"),
            EventType.TEXT,
            ("end", "a"),
            EventType.END,
        ]

    def test_handler_object(self):
        """Test building slots from a handler's methods."""
        recorder = Recorder()

        SAXEventSource().parse("<a/>", SAXCallbacks.from_handler(recorder))

        assert recorder.events == [
            ("START", TagKind.SELF_CLOSING, "a"),
            ("END", TagKind.SELF_CLOSING, "a"),
        ]

    def test_user_tag_events(self):
        """Test that user tags are reported as auxiliary nodes."""
        registry = SpecialTagRegistry()
        registry.register_user_tag(100, "<{{", "}}>")
        recorder = Recorder()

        SAXEventSource(registry=registry).parse(
            "<r><{{x}}></r>", SAXCallbacks(on_event=recorder.on_event)
        )

        assert ("START", 100, "x") in recorder.events


class TestTextDelivery:
    """Test text stripping, unescaping and whitespace handling."""

    def test_whitespace_only_text_dropped(self):
        events, _ = run("<a>  \n </a>")

        assert [e for e in events if e[0] == "TEXT"] == []

    def test_raw_text_requested_by_listener(self):
        """Test that wants_raw_text delivers whitespace unchanged."""
        texts = []
        callbacks = SAXCallbacks(on_text=texts.append, wants_raw_text=True)

        SAXEventSource().parse("<a>  x  </a>", callbacks)

        assert texts == ["  x  "]

    def test_whitespace_text_by_configuration(self):
        events, _ = run("<a> </a>", deliver_whitespace_text=True)

        assert ("TEXT", " ") in events

    def test_text_stripped(self):
        events, _ = run("<a>  x  </a>")

        assert ("TEXT", "x") in events

    def test_strip_disabled(self):
        events, _ = run("<a>  x  </a>", strip_text=False)

        assert ("TEXT", "  x  ") in events

    def test_entities_resolved(self):
        events, _ = run("<a>&lt;&amp;&#33;</a>")

        assert ("TEXT", "<&!") in events


class TestStopping:
    """Test listener-requested stops."""

    def test_false_stops_parse(self):
        """Test that returning False ends the parse without error."""
        recorder = Recorder(stop_on="b")

        events, result = run("<root><a/><b/><c/></root>", recorder)

        assert result.stopped
        assert events[-1] == ("START", TagKind.SELF_CLOSING, "b")
        assert ("START", TagKind.SELF_CLOSING, "c") not in events

    def test_stop_on_malformed_tail(self):
        """Test that input after the stop point is never read."""
        recorder = Recorder(stop_on="root")

        _, result = run("<root><<<", recorder)

        assert result.stopped


class TestErrors:
    """Test parse failures and their locations."""

    def test_malformed_tag_line(self):
        """Test that malformed tags report the line they start on."""
        source = SAXEventSource()

        with pytest.raises(MalformedTagError) as exc_info:
            source.parse("<a>\n\n<b c>", SAXCallbacks(), filename="doc.xml")

        error = exc_info.value
        assert error.line == 3
        assert error.text == "<b c>"
        assert error.filename == "doc.xml"
        assert source.state == ParserState.FAILED

    def test_end_tag_without_open_element(self):
        with pytest.raises(StructuralMismatchError):
            SAXEventSource().parse("</a>", SAXCallbacks())

    def test_unclosed_elements(self):
        """Test that open elements at end of input are reported."""
        with pytest.raises(TruncatedInputError, match="unclosed elements: a, b"):
            SAXEventSource().parse("<a><b>", SAXCallbacks())

    def test_empty_document(self):
        with pytest.raises(TruncatedInputError, match="no root element"):
            SAXEventSource().parse("", SAXCallbacks())

    def test_max_depth(self):
        """Test the nesting limit."""
        source = SAXEventSource(SAXConfig(max_depth=2))

        with pytest.raises(StructuralMismatchError, match="Maximum nesting depth"):
            source.parse("<a><b><c></c></b></a>", SAXCallbacks())

    def test_callback_error_located(self):
        """Test that errors raised by a callback get the tag's location."""
        def reject(node):
            if node.tag == "bad":
                raise StructuralMismatchError("Rejected element")

        with pytest.raises(StructuralMismatchError) as exc_info:
            SAXEventSource().parse("<r>\n<bad/></r>", SAXCallbacks(on_start=reject))

        assert exc_info.value.line == 2
        assert exc_info.value.text == "<bad/>"


class TestDiagnosticsAndStatistics:
    """Test warnings and counters."""

    def test_quote_mismatch_warning(self, caplog):
        """Test that an unterminated quote is reported but not fatal."""
        with caplog.at_level(logging.WARNING, logger="simple_xml_parser"):
            _, result = run('<a b="x></a>')

        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.kind == ErrorKind.QUOTE_MISMATCH
        assert warning.line == 1
        assert any(record.levelno == logging.WARNING for record in caplog.records)

    def test_statistics(self):
        """Test reader and dispatch counters."""
        _, result = run("<r>\n<a/>\n</r>")

        assert result.statistics.tags_read == 3
        assert result.statistics.lines_read == 3
        assert result.statistics.events_dispatched == 4
        assert result.statistics.processing_time_ms >= 0

    def test_small_buffer(self):
        """Test that the buffer size does not change the events."""
        recorder = Recorder()
        source = SAXEventSource(source_config=SourceConfig(buffer_size=2))

        source.parse(
            "<root><!-- x > y --><a/></root>", SAXCallbacks(on_event=recorder.on_event)
        )

        assert recorder.events[1] == ("START", TagKind.COMMENT, " x > y ")
