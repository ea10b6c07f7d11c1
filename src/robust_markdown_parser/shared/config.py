"""Configuration classes for robust Markdown parsing.

This module provides immutable configuration objects for the tree builder and
the public API. Defaults reproduce the dialect's standard behavior; presets
trade diagnostic detail for speed.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

# Markdown never defines more than six header levels
MAX_HEADER_LEVEL = 6

_COMPONENTS = ("tree", "api")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Raised when a configuration value is out of range."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TreeConfig:
    """Configuration for tree building."""

    max_header_level: int = MAX_HEADER_LEVEL
    record_recoveries: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not 1 <= self.max_header_level <= MAX_HEADER_LEVEL:
            raise ConfigValidationError(
                f"max_header_level must be between 1 and {MAX_HEADER_LEVEL}, "
                f"got {self.max_header_level}",
                field_name="max_header_level",
            )


@dataclass(frozen=True)
class ApiConfig:
    """Configuration for the public parsing API."""

    include_tokens: bool = False
    default_encoding: str = "utf-8"
    collect_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate API configuration."""
        if not self.default_encoding:
            raise ConfigValidationError(
                "default_encoding cannot be empty",
                field_name="default_encoding",
                suggestions=["Use 'utf-8'"],
            )


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for all parser components.

    Thread-safe due to frozen dataclass implementation. Use :meth:`override`
    to derive a modified copy.
    """

    tree: TreeConfig = field(default_factory=TreeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, using ``component__field`` notation
                for component settings

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> config.override(tree__max_header_level=3).tree.max_header_level
            3
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of: {', '.join(_COMPONENTS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, overrides in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except TypeError as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    f.name: _dataclass_to_dict(getattr(obj, f.name))
                    for f in fields(obj)
                }
            return obj

        result: Dict[str, Any] = _dataclass_to_dict(self)
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files surface
        instead of being silently ignored.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            known = {f.name: f for f in fields(target_class)}
            unknown = set(data_dict) - set(known)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown {target_class.__name__} fields: {sorted(unknown)}",
                    field_name=sorted(unknown)[0],
                )
            field_values: Dict[str, Any] = {}
            for field_name, value in data_dict.items():
                field_type = known[field_name].type
                if hasattr(field_type, "__dataclass_fields__") and isinstance(value, dict):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                else:
                    field_values[field_name] = value
            return target_class(**field_values)

        result = _dict_to_dataclass(data, cls)
        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Standard dialect behavior with recovery records and metrics."""
        return cls(name="default")

    @classmethod
    def diagnostic(cls) -> "ParserConfig":
        """Keep the token stream on the result for editor and linter tooling."""
        return cls(
            api=ApiConfig(include_tokens=True),
            name="diagnostic",
            description="Keeps tokens and recovery records for inspection",
        )

    @classmethod
    def minimal(cls) -> "ParserConfig":
        """Produce only the tree, skipping recovery records and metrics."""
        return cls(
            tree=TreeConfig(record_recoveries=False),
            api=ApiConfig(collect_metrics=False),
            name="minimal",
            description="Tree only, no recovery records or metrics",
        )
