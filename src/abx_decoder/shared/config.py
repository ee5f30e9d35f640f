"""Configuration classes for binary XML decoding.

This module provides configuration objects for the decoder, the textual
renderer, and process-wide settings, plus an immutable aggregate used by the
public API and the command-line tool.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_COMPONENTS = ("decoder", "render", "global_")
_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _require_type(name: str, value: Any, expected: type) -> None:
    # JSON config files can carry any value type, e.g. "no" for a flag
    if not isinstance(value, expected):
        raise ValueError(
            f"{name} must be of type {expected.__name__}, got {type(value).__name__}"
        )


@dataclass
class DecoderConfig:
    """Configuration for the token decoder."""

    multi_root: bool = False
    synthetic_root_tag: str = "root"
    max_depth: Optional[int] = None  # None means unbounded

    def __post_init__(self) -> None:
        """Validate decoder configuration."""
        _require_type("multi_root", self.multi_root, bool)
        _require_type("synthetic_root_tag", self.synthetic_root_tag, str)
        if not self.synthetic_root_tag:
            raise ValueError("synthetic_root_tag cannot be empty")
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise ValueError("max_depth must be an integer or None")
            if self.max_depth <= 0:
                raise ValueError("max_depth must be > 0 or None")


@dataclass
class RenderConfig:
    """Configuration for textual XML output."""

    xml_declaration: bool = True
    indent: str = "  "
    escape_values: bool = True

    def __post_init__(self) -> None:
        """Validate render configuration."""
        _require_type("xml_declaration", self.xml_declaration, bool)
        _require_type("indent", self.indent, str)
        _require_type("escape_values", self.escape_values, bool)
        if self.indent.strip():
            raise ValueError("indent must contain only whitespace")


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "INFO"
    enable_memory_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        _require_type("enable_memory_tracking", self.enable_memory_tracking, bool)
        if self.logging_level not in _VALID_LOG_LEVELS:
            raise ValueError(f"logging_level must be one of {_VALID_LOG_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ConverterConfig:
    """Complete configuration for a binary-to-textual XML conversion.

    Frozen so a single instance can be shared between decoders; use
    :meth:`override` to derive a modified copy.
    """

    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-validate component configurations after construction."""
        try:
            self.decoder.__post_init__()
            self.render.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ConverterConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use the
                ``component__field`` notation

        Returns:
            New ConverterConfig instance with overrides applied

        Example:
            >>> config = ConverterConfig().override(decoder__multi_root=True)
            >>> config.decoder.multi_root
            True
        """
        component_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.rsplit("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"{name}__{field_name}" for name in _COMPONENTS],
                    )
                component_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, values in component_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        result: Dict[str, Any] = {"name": self.name}
        for component in _COMPONENTS:
            section = getattr(self, component)
            result[component] = {
                name: getattr(section, name)
                for name in section.__dataclass_fields__
            }
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from a dictionary.

        Unknown component fields and values of the wrong type raise
        :class:`ConfigValidationError`.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Configuration must be a JSON object, got {type(data).__name__}"
            )
        sections = {
            "decoder": DecoderConfig,
            "render": RenderConfig,
            "global_": GlobalConfig,
        }
        kwargs: Dict[str, Any] = {}
        for component, section_class in sections.items():
            if component in data:
                if not isinstance(data[component], dict):
                    raise ConfigValidationError(
                        f"Invalid {component} configuration: expected an object",
                        field_name=component,
                    )
                try:
                    kwargs[component] = section_class(**data[component])
                except (TypeError, ValueError, AttributeError) as e:
                    raise ConfigValidationError(
                        f"Invalid {component} configuration: {e}",
                        field_name=component,
                    ) from e
        if "name" in data:
            kwargs["name"] = data["name"]
        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "ConverterConfig":
        """Create configuration from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ConverterConfig":
        """Single-root decoding with escaped output."""
        return cls(name="default")

    @classmethod
    def multi_root(cls) -> "ConverterConfig":
        """Decoding that wraps several top-level elements in a synthetic root."""
        return cls(decoder=DecoderConfig(multi_root=True), name="multi_root")

    @classmethod
    def raw_output(cls) -> "ConverterConfig":
        """Render text and attribute values without XML escaping."""
        return cls(render=RenderConfig(escape_values=False), name="raw_output")
