"""JSON serialization of projected values."""

import json
from typing import Optional

from xml_json_converter.projection.projector import JsonValue
from xml_json_converter.shared import OutputConfig, SerializationError

_COMPACT_SEPARATORS = (",", ":")


class JsonSerializer:
    """Encodes projected values as UTF-8 JSON bytes."""

    def __init__(self, config: Optional[OutputConfig] = None) -> None:
        self.config = config or OutputConfig()

    def dumps(self, value: JsonValue) -> str:
        """Serialize a value to JSON text.

        Raises:
            SerializationError: If the value contains non-JSON data or is
                nested deeper than the encoder supports
        """
        try:
            return json.dumps(
                value,
                ensure_ascii=self.config.ensure_ascii,
                sort_keys=self.config.sort_keys,
                indent=self.config.indent,
                separators=None if self.config.indent is not None else _COMPACT_SEPARATORS,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Value is not JSON serializable: {e}") from e
        except RecursionError as e:
            raise SerializationError(f"Value is nested too deeply to encode: {e}") from e

    def serialize(self, value: JsonValue) -> bytes:
        """Serialize a value to UTF-8 encoded JSON bytes.

        Raises:
            SerializationError: If the value cannot be encoded, e.g. strings
                holding lone surrogates
        """
        text = self.dumps(value)
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise SerializationError(f"JSON output is not valid UTF-8: {e.reason}") from e


def serialize(value: JsonValue, config: Optional[OutputConfig] = None) -> bytes:
    """Serialize a projected value with the given (or default) output settings."""
    return JsonSerializer(config).serialize(value)
