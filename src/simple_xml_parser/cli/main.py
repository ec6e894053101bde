"""Main CLI entry point for the simple-xml command-line tool.

Subcommands:
    print   Parse a file and write it back with formatting options
    events  Dump the SAX event stream of a file
    check   Parse files and report errors with file and line context
"""

import argparse
import codecs
import sys
from pathlib import Path
from typing import List, Optional

from simple_xml_parser import __version__
from simple_xml_parser.api.parser import XMLParser
from simple_xml_parser.sax.events import EventType, SAXCallbacks
from simple_xml_parser.shared.config import ParserConfig
from simple_xml_parser.shared.errors import ConfigError, XMLParseError
from simple_xml_parser.shared.logging import configure_logging
from simple_xml_parser.tree.kinds import kind_name
from simple_xml_parser.tree.model import XMLNode

_PRESETS = {
    "default": ParserConfig,
    "compact": ParserConfig.compact,
    "pretty": ParserConfig.pretty,
}


def _separator(value: str) -> str:
    """Decode backslash escapes such as ``\\t`` and ``\\n``."""
    return codecs.decode(value, "unicode_escape")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="simple-xml",
        description="Parse, check and re-serialize simple XML documents"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Print command
    print_parser = subparsers.add_parser(
        "print", help="Parse a file and print it with formatting options"
    )
    print_parser.add_argument("path", type=Path, help="XML file to print")
    print_parser.add_argument(
        "--preset",
        choices=sorted(_PRESETS),
        default="default",
        help="Formatting preset (default: default)"
    )
    print_parser.add_argument(
        "--tag-sep",
        type=_separator,
        help="Separator written before each tag, with backslash escapes"
    )
    print_parser.add_argument(
        "--child-sep",
        type=_separator,
        help="Indentation written once per depth level, with backslash escapes"
    )
    print_parser.add_argument(
        "--line-width",
        type=int,
        help="Column after which attribute lists wrap (0 disables)"
    )
    print_parser.add_argument(
        "--tab-width",
        type=int,
        help="Columns counted for a tab character"
    )
    print_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Events command
    events_parser = subparsers.add_parser("events", help="Dump SAX events of a file")
    events_parser.add_argument("path", type=Path, help="XML file to read")
    events_parser.add_argument(
        "--raw-text",
        action="store_true",
        help="Also report whitespace-only and unstripped text runs"
    )

    # Check command
    check_parser = subparsers.add_parser("check", help="Check XML files for errors")
    check_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to check"
    )

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file"
    )
    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Input file encoding (default: utf-8)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from ``--config`` and ``--preset``."""
    preset = getattr(args, "preset", None)
    config = _PRESETS[preset]() if preset else ParserConfig()
    if args.config is not None:
        config = ParserConfig.from_json(args.config.read_text(encoding="utf-8"))
    return config


def cmd_print(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle print command."""
    overrides = {
        "printing__tag_separator": args.tag_sep,
        "printing__child_separator": args.child_sep,
        "printing__line_width": args.line_width,
        "printing__tab_width": args.tab_width,
    }
    config = config.override(
        **{key: value for key, value in overrides.items() if value is not None}
    )

    parser = XMLParser(config)
    result = parser.parse_file(args.path, args.encoding)
    if not result.success:
        print(result.error, file=sys.stderr)
        return 1

    output = parser.to_string(result.document) + "\n"
    if args.output:
        try:
            args.output.write_text(output, encoding="utf-8")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        if not args.quiet:
            print(f"Document written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)
    return 0


def _describe(node: XMLNode) -> str:
    if node.is_element or node.is_end_marker:
        return node.tag
    return f"{kind_name(node.kind)} {node.tag!r}"


def cmd_events(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle events command."""
    def on_event(event_type: EventType, node: Optional[XMLNode], text: Optional[str]) -> None:
        if event_type == EventType.TEXT:
            print(f"TEXT {text!r}")
        elif event_type == EventType.ATTRIBUTE:
            print(f"ATTRIBUTE {text}={node.get_attribute(text)!r}")
        else:
            print(f"{event_type.name} {_describe(node)}")

    callbacks = SAXCallbacks(on_event=on_event, wants_raw_text=args.raw_text)
    try:
        XMLParser(config).sax_parse_file(args.path, callbacks, args.encoding)
    except XMLParseError as e:
        print(e, file=sys.stderr)
        return 1
    return 0


def cmd_check(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle check command."""
    parser = XMLParser(config)
    failures = 0
    for path in args.paths:
        result = parser.parse_file(path, args.encoding)
        for warning in result.warnings:
            print(warning.format(), file=sys.stderr)
        if result.success:
            if not args.quiet:
                print(f"{path}: OK")
        else:
            failures += 1
            print(result.error, file=sys.stderr)

    if not args.quiet and len(args.paths) > 1:
        print(f"{len(args.paths) - failures}/{len(args.paths)} files OK")
    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except (ConfigError, ValueError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("CRITICAL")
    elif args.config is not None:
        configure_logging(config.logging_level)

    # Route to appropriate command handler
    try:
        if args.command == "print":
            return cmd_print(args, config)
        elif args.command == "events":
            return cmd_events(args, config)
        elif args.command == "check":
            return cmd_check(args, config)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
