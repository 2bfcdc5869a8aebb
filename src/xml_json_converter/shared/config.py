"""Configuration classes for XML to JSON conversion.

This module provides configuration objects for the tree builder, the JSON
projector and the serializer, plus the immutable :class:`ConverterConfig`
that bundles them.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class TextMode(Enum):
    """How several text runs directly under one element are combined."""

    LAST = auto()      # Keep the last non-blank run
    CONCAT = auto()    # Join every non-blank run in document order


@dataclass
class TreeConfig:
    """Configuration for the tree builder."""

    root_name: str = "root"
    strict: bool = False
    text_mode: TextMode = TextMode.LAST
    include_namespace_declarations: bool = True
    resolve_entities: bool = True
    huge_tree: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.root_name:
            raise ValueError("root_name cannot be empty")
        if not isinstance(self.text_mode, TextMode):
            raise ValueError("text_mode must be a TextMode member")


@dataclass
class ProjectionConfig:
    """Configuration for the tree to JSON projection."""

    attribute_prefix: str = "_"
    text_key: str = "__text"
    include_object_name: bool = False
    object_name_key: str = "_objectName"

    def __post_init__(self) -> None:
        """Validate projection configuration."""
        if not self.text_key:
            raise ValueError("text_key cannot be empty")
        if not self.object_name_key:
            raise ValueError("object_name_key cannot be empty")
        if self.text_key == self.object_name_key:
            raise ValueError("text_key and object_name_key must differ")


@dataclass
class OutputConfig:
    """Configuration for JSON serialization."""

    indent: Optional[int] = None
    sort_keys: bool = True
    ensure_ascii: bool = False

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if self.indent is not None and self.indent < 0:
            raise ValueError("indent must be >= 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("tree", "projection", "output")


@dataclass(frozen=True)
class ConverterConfig:
    """Complete configuration for an XML to JSON conversion.

    Immutable, so a single instance can be shared by several converters.
    Use :meth:`override` to derive variants.
    """

    tree: TreeConfig = field(default_factory=TreeConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete converter configuration."""
        try:
            self.tree.__post_init__()
            self.projection.__post_init__()
            self.output.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ConverterConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; component fields use ``component__field``

        Returns:
            New ConverterConfig instance with overrides applied

        Example:
            >>> config = ConverterConfig().override(
            ...     tree__strict=True,
            ...     output__indent=2,
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
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
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component in _COMPONENTS:
                current = getattr(self, component)
                if component in nested_overrides:
                    new_fields[component] = replace(current, **nested_overrides[component])
                else:
                    new_fields[component] = current

            for key, value in nested_overrides.items():
                if key not in _COMPONENTS:
                    new_fields[key] = value

            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.
        """
        def _dict_to_dataclass(data_dict: Any, target_class: type, path: str) -> Any:
            if not isinstance(data_dict, dict):
                raise ConfigValidationError(
                    f"Expected an object for {path or 'configuration'}",
                    field_name=path or None,
                )

            fields = target_class.__dataclass_fields__
            unknown = sorted(set(data_dict) - set(fields))
            if unknown:
                raise ConfigValidationError(
                    f"Unknown configuration field(s): {', '.join(unknown)}",
                    field_name=f"{path}.{unknown[0]}" if path else unknown[0],
                    suggestions=[f"Valid fields: {', '.join(fields)}"],
                )

            field_values: Dict[str, Any] = {}
            for field_name, value in data_dict.items():
                field_type = fields[field_name].type
                dotted = f"{path}.{field_name}" if path else field_name

                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_type, dotted)
                elif hasattr(field_type, "__members__") and isinstance(value, str):
                    try:
                        field_values[field_name] = field_type[value.upper()]
                    except KeyError:
                        raise ConfigValidationError(
                            f"Invalid value {value!r} for {dotted}",
                            field_name=dotted,
                            suggestions=list(field_type.__members__),
                        ) from None
                else:
                    field_values[field_name] = value

            try:
                return target_class(**field_values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=path or None) from e

        result = _dict_to_dataclass(data, cls, "")
        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "ConverterConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ConverterConfig":
        """Load configuration from a JSON file.

        ``OSError`` from reading the file propagates unchanged.
        """
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create the default configuration: lenient parsing, compact output."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ConverterConfig":
        """Create a configuration that raises on malformed XML."""
        return cls(tree=TreeConfig(strict=True), name="strict")

    @classmethod
    def legacy(cls) -> "ConverterConfig":
        """Create a configuration that also emits the ``_objectName`` annotation."""
        return cls(projection=ProjectionConfig(include_object_name=True), name="legacy")

    @classmethod
    def pretty(cls) -> "ConverterConfig":
        """Create a configuration producing indented output."""
        return cls(output=OutputConfig(indent=2), name="pretty")
