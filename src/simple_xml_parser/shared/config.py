"""Configuration classes for simple XML parsing.

This module provides configuration objects for text acquisition, event
delivery and serialization, plus the immutable ``ParserConfig`` that bundles
them for the public API.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .errors import ConfigValidationError

_VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_SECTIONS = ["source", "sax", "printing"]


@dataclass
class SourceConfig:
    """Configuration for raw text acquisition."""

    buffer_size: int = 8192
    tag_delimiter: str = ">"

    def __post_init__(self) -> None:
        """Validate source configuration."""
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")
        if len(self.tag_delimiter) != 1:
            raise ValueError("tag_delimiter must be a single character")


@dataclass
class SAXConfig:
    """Configuration for event delivery."""

    strip_text: bool = True
    deliver_whitespace_text: bool = False
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate event configuration."""
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")


@dataclass
class PrintConfig:
    """Configuration for tree serialization.

    ``line_width`` of 0 disables attribute wrapping.
    """

    tag_separator: str = "\n"
    child_separator: str = "\t"
    line_width: int = 0
    tab_width: int = 4

    def __post_init__(self) -> None:
        """Validate print configuration."""
        if self.line_width < 0:
            raise ValueError("line_width must be >= 0")
        if self.tab_width <= 0:
            raise ValueError("tab_width must be > 0")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for the parser API.

    Thread-safe due to frozen dataclass implementation; derive variants with
    ``override``.
    """

    source: SourceConfig = field(default_factory=SourceConfig)
    sax: SAXConfig = field(default_factory=SAXConfig)
    printing: PrintConfig = field(default_factory=PrintConfig)

    raise_on_error: bool = False
    logging_level: str = "INFO"
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.source.__post_init__()
            self.sax.__post_init__()
            self.printing.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.logging_level not in _VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {_VALID_LOGGING_LEVELS}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig()
            >>> new_config = config.override(
            ...     printing__line_width=80,
            ...     raise_on_error=True
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                section, field_name = key.split("__", 1)
                if section not in _SECTIONS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {section}", field_name=key
                    )
                nested_overrides.setdefault(section, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for section, values in nested_overrides.items():
            try:
                new_fields[section] = replace(getattr(self, section), **values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=section) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so typos in configuration files surface.
        """
        section_classes = {
            "source": SourceConfig,
            "sax": SAXConfig,
            "printing": PrintConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in section_classes:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Section {key} must be a mapping", field_name=key
                    )
                try:
                    values[key] = section_classes[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in cls.__dataclass_fields__:
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def compact(cls) -> "ParserConfig":
        """Preset that serializes documents on a single line."""
        return cls(
            printing=PrintConfig(tag_separator="", child_separator="", line_width=0)
        )

    @classmethod
    def pretty(cls) -> "ParserConfig":
        """Preset for indented output with attribute wrapping at 80 columns."""
        return cls(
            printing=PrintConfig(
                tag_separator="\n", child_separator="  ", line_width=80, tab_width=4
            )
        )
