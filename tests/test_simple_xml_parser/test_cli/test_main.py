"""Tests for the simple-xml command-line tool."""

import json

import pytest

from simple_xml_parser import __version__
from simple_xml_parser.cli.main import create_argument_parser, main


@pytest.fixture
def xml_file(tmp_path):
    def write(content, name="doc.xml"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return write


class TestArgumentParser:
    """Test argument parsing."""

    def test_print_arguments(self):
        """Test that separators are unescaped."""
        args = create_argument_parser().parse_args(
            ["print", "doc.xml", "--tag-sep", "\\n", "--child-sep", "\\t", "--line-width", "40"]
        )

        assert args.command == "print"
        assert args.tag_sep == "\n"
        assert args.child_sep == "\t"
        assert args.line_width == 40
        assert args.preset == "default"

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])

        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestPrintCommand:
    """Test the print subcommand."""

    def test_compact_preset(self, xml_file, capsys):
        path = xml_file("<root>\n  <a/>\n  <b>text</b>\n</root>\n")

        assert main(["print", str(path), "--preset", "compact"]) == 0
        assert capsys.readouterr().out == "<root><a/><b>text</b></root>\n"

    def test_custom_separators(self, xml_file, capsys):
        path = xml_file("<root><a/></root>")

        assert main(["print", str(path), "--child-sep", "  "]) == 0
        assert capsys.readouterr().out == "<root>\n  <a/>\n</root>\n"

    def test_output_file(self, xml_file, tmp_path, capsys):
        path = xml_file("<root/>")
        output = tmp_path / "out.xml"

        assert main(["print", str(path), "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8") == "<root/>\n"
        assert "Document written to" in capsys.readouterr().err

    def test_parse_failure(self, xml_file, capsys):
        """Test that errors are reported with file and line."""
        path = xml_file("<root>\n<a>\n</root>")

        assert main(["print", str(path)]) == 1
        assert f"{path}:3: STRUCTURAL_MISMATCH" in capsys.readouterr().err

    def test_config_file(self, xml_file, capsys):
        """Test that a JSON configuration replaces the preset."""
        config = xml_file(
            json.dumps({"printing": {"tag_separator": "", "child_separator": ""}}),
            "config.json",
        )
        path = xml_file("<root>\n  <a/>\n</root>")

        assert main(["--config", str(config), "print", str(path)]) == 0
        assert capsys.readouterr().out == "<root><a/></root>\n"

    def test_invalid_config(self, xml_file, capsys):
        config = xml_file(json.dumps({"bogus": 1}), "config.json")
        path = xml_file("<root/>")

        assert main(["--config", str(config), "print", str(path)]) == 2
        assert "Invalid configuration" in capsys.readouterr().err


class TestEventsCommand:
    """Test the events subcommand."""

    def test_event_dump(self, xml_file, capsys):
        path = xml_file('<r a="1">hi<!-- c --></r>')

        assert main(["events", str(path)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "START r",
            "ATTRIBUTE a='1'",
            "TEXT 'hi'",
            "START COMMENT ' c '",
            "END COMMENT ' c '",
            "END r",
        ]

    def test_raw_text(self, xml_file, capsys):
        path = xml_file("<r> </r>")

        assert main(["events", str(path), "--raw-text"]) == 0
        assert "TEXT ' '" in capsys.readouterr().out

    def test_event_failure(self, xml_file, capsys):
        path = xml_file("<r><a b></r>")

        assert main(["events", str(path)]) == 1
        assert "MALFORMED_TAG" in capsys.readouterr().err


class TestCheckCommand:
    """Test the check subcommand."""

    def test_all_ok(self, xml_file, capsys):
        path = xml_file("<r/>")

        assert main(["check", str(path)]) == 0
        assert capsys.readouterr().out == f"{path}: OK\n"

    def test_mixed_results(self, xml_file, capsys):
        """Test a summary over good and bad files."""
        good = xml_file("<r/>", "good.xml")
        bad = xml_file("<r>", "bad.xml")

        assert main(["check", str(good), str(bad)]) == 1
        captured = capsys.readouterr()
        assert f"{good}: OK" in captured.out
        assert "1/2 files OK" in captured.out
        assert "unclosed elements: r" in captured.err

    def test_warnings_reported(self, xml_file, capsys):
        path = xml_file('<r b="x></r>')

        assert main(["check", str(path)]) == 0
        assert f"{path}:1: WARNING:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["check", str(tmp_path / "missing.xml")]) == 1
        assert "IO_FAILURE" in capsys.readouterr().err
