"""Tests for the configuration system."""

import dataclasses
import json

import pytest

from simple_xml_parser.shared.config import (
    ParserConfig,
    PrintConfig,
    SAXConfig,
    SourceConfig,
)
from simple_xml_parser.shared.errors import ConfigError, ConfigValidationError


class TestSectionConfigs:
    """Test suite for the per-layer configuration sections."""

    def test_source_defaults(self):
        """Test default text acquisition settings."""
        config = SourceConfig()

        assert config.buffer_size == 8192
        assert config.tag_delimiter == ">"

    def test_source_validation(self):
        """Test that invalid source settings are rejected."""
        with pytest.raises(ValueError, match="buffer_size"):
            SourceConfig(buffer_size=0)
        with pytest.raises(ValueError, match="tag_delimiter"):
            SourceConfig(tag_delimiter=">>")

    def test_sax_defaults(self):
        """Test default event delivery settings."""
        config = SAXConfig()

        assert config.strip_text is True
        assert config.deliver_whitespace_text is False
        assert config.max_depth is None

    def test_sax_validation(self):
        """Test that a non-positive depth limit is rejected."""
        with pytest.raises(ValueError, match="max_depth"):
            SAXConfig(max_depth=0)

    def test_print_defaults(self):
        """Test default serializer settings."""
        config = PrintConfig()

        assert config.tag_separator == "\n"
        assert config.child_separator == "\t"
        assert config.line_width == 0
        assert config.tab_width == 4

    def test_print_validation(self):
        """Test that invalid widths are rejected."""
        with pytest.raises(ValueError, match="line_width"):
            PrintConfig(line_width=-1)
        with pytest.raises(ValueError, match="tab_width"):
            PrintConfig(tab_width=0)


class TestParserConfig:
    """Test suite for the immutable ParserConfig."""

    def test_default_configuration(self):
        """Test default parser configuration values."""
        config = ParserConfig()

        assert config.source == SourceConfig()
        assert config.sax == SAXConfig()
        assert config.printing == PrintConfig()
        assert config.raise_on_error is False
        assert config.logging_level == "INFO"
        assert config.correlation_id is None

    def test_frozen(self):
        """Test that the configuration cannot be mutated in place."""
        config = ParserConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.raise_on_error = True

    def test_invalid_logging_level(self):
        """Test logging level validation."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(logging_level="LOUD")

        assert exc_info.value.field_name == "logging_level"
        assert isinstance(exc_info.value, ConfigError)

    def test_override_nested_and_top_level(self):
        """Test creating a variant with section__field overrides."""
        config = ParserConfig()

        new_config = config.override(
            printing__line_width=80,
            sax__strip_text=False,
            raise_on_error=True,
        )

        assert new_config.printing.line_width == 80
        assert new_config.sax.strip_text is False
        assert new_config.raise_on_error is True
        # Original untouched
        assert config.printing.line_width == 0
        assert config.sax.strip_text is True

    def test_override_unknown_section(self):
        """Test that unknown sections are rejected."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(network__timeout=3)

    def test_override_invalid_value(self):
        """Test that overrides are validated."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(source__buffer_size=-5)

    def test_json_round_trip(self):
        """Test serialization to JSON and back."""
        config = ParserConfig(
            printing=PrintConfig(child_separator="  ", line_width=72),
            sax=SAXConfig(max_depth=10),
            correlation_id="abc",
        )

        data = json.loads(config.to_json())
        restored = ParserConfig.from_json(config.to_json())

        assert data["printing"]["child_separator"] == "  "
        assert restored == config

    def test_from_dict_partial(self):
        """Test that missing keys keep their defaults."""
        config = ParserConfig.from_dict({"printing": {"line_width": 40}})

        assert config.printing.line_width == 40
        assert config.printing.tab_width == 4
        assert config.source == SourceConfig()

    def test_from_dict_unknown_key(self):
        """Test that typos in configuration data surface."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig.from_dict({"prnting": {}})

        assert exc_info.value.field_name == "prnting"

    def test_from_dict_bad_section(self):
        """Test section type and field validation."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"sax": []})
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"sax": {"unknown": 1}})

    def test_presets(self):
        """Test compact and pretty presets."""
        compact = ParserConfig.compact()
        pretty = ParserConfig.pretty()

        assert compact.printing.tag_separator == ""
        assert compact.printing.child_separator == ""
        assert pretty.printing.child_separator == "  "
        assert pretty.printing.line_width == 80
