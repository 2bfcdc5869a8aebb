"""Public conversion API."""

from .converter import (
    XmlJsonConverter,
    convert,
    convert_file,
    convert_to_value,
    read_file,
)

__all__ = [
    "XmlJsonConverter",
    "convert",
    "convert_file",
    "convert_to_value",
    "read_file",
]
