"""XML to JSON converter.

Builds an element tree from an XML document and projects it onto JSON:
attributes become ``_name`` keys, mixed text becomes ``__text``, child
elements become keys named after their tag, and repeated children fold into
arrays in document order.

Progressive API Disclosure:
- Level 1: Simple functions - convert(), convert_file(), convert_to_value()
- Level 2: Configured converter - XmlJsonConverter with ConverterConfig
- Level 3: Individual stages - XmlTreeBuilder, JsonProjector, JsonSerializer
"""

__version__ = "0.1.0"
__author__ = "XML JSON Converter Team"

from .api import XmlJsonConverter, convert, convert_file, convert_to_value, read_file
from .projection import JsonProjector, JsonSerializer, JsonValue, project, serialize
from .shared.config import (
    ConfigValidationError,
    ConverterConfig,
    OutputConfig,
    ProjectionConfig,
    TextMode,
    TreeConfig,
)
from .shared.exceptions import ConversionError, ParseError, SerializationError
from .tree import BuildResult, XmlElementNode, XmlTreeBuilder, build_tree

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "convert",
    "convert_file",
    "convert_to_value",
    "read_file",

    # Level 2: Configured converter
    "XmlJsonConverter",

    # Level 3: Individual stages
    "XmlTreeBuilder",
    "JsonProjector",
    "JsonSerializer",
    "build_tree",
    "project",
    "serialize",

    # Data structures
    "BuildResult",
    "XmlElementNode",
    "JsonValue",

    # Configuration
    "ConverterConfig",
    "TreeConfig",
    "ProjectionConfig",
    "OutputConfig",
    "TextMode",

    # Errors
    "ConfigValidationError",
    "ConversionError",
    "ParseError",
    "SerializationError",
]
