"""Conversion API composing tree building, projection and serialization.

Module-level functions cover one-shot conversions; :class:`XmlJsonConverter`
keeps a configuration and usage statistics across several conversions.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from xml_json_converter.projection import JsonProjector, JsonSerializer, JsonValue
from xml_json_converter.shared import (
    ConverterConfig,
    ParseError,
    SerializationError,
    get_logger,
    new_correlation_id,
)
from xml_json_converter.tree import BuildResult, XmlTreeBuilder
from xml_json_converter.tree.builder import XmlInput

PathLike = Union[str, Path]

MS_PER_SECOND = 1000


def read_file(path: PathLike) -> bytes:
    """Read a file's raw bytes.

    ``OSError`` (missing file, permission denied, directory) propagates
    unchanged.
    """
    return Path(path).read_bytes()


def convert(xml: XmlInput, config: Optional[ConverterConfig] = None) -> bytes:
    """Convert an XML document to JSON bytes.

    Args:
        xml: XML document as bytes (or str, encoded as UTF-8)
        config: Optional converter configuration

    Returns:
        UTF-8 encoded JSON document

    Raises:
        ParseError: Malformed XML with ``tree.strict`` enabled
        SerializationError: Output could not be encoded

    Examples:
        >>> convert(b'<root><item>1</item><item>2</item></root>')
        b'{"root":{"item":["1","2"]}}'
    """
    return XmlJsonConverter(config).convert(xml)


def convert_to_value(xml: XmlInput, config: Optional[ConverterConfig] = None) -> JsonValue:
    """Convert an XML document to its projected JSON value.

    Examples:
        >>> convert_to_value('<a id="x">hi<b>1</b></a>')
        {'a': {'_id': 'x', '__text': 'hi', 'b': '1'}}
    """
    return XmlJsonConverter(config).convert_to_value(xml)


def convert_file(path: PathLike, config: Optional[ConverterConfig] = None) -> bytes:
    """Read an XML file and convert it to JSON bytes."""
    return XmlJsonConverter(config).convert_file(path)


class XmlJsonConverter:
    """Reusable XML to JSON converter.

    Attributes:
        config: Current converter configuration
        correlation_id: Correlation ID attached to log records and diagnostics;
            generated when neither the caller nor the configuration sets one

    Examples:
        >>> converter = XmlJsonConverter(ConverterConfig.pretty())
        >>> outputs = [converter.convert(doc) for doc in documents]
        >>> converter.statistics["total_conversions"] == len(documents)
        True
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ConverterConfig()
        self.correlation_id = (
            correlation_id or self.config.correlation_id or new_correlation_id()
        )
        self.logger = get_logger(__name__, self.correlation_id, "xml_json_converter")

        self._configure_components()

        self._conversion_count = 0
        self._successful_conversions = 0
        self._partial_conversions = 0
        self._total_processing_time = 0.0

    def _configure_components(self) -> None:
        self._tree_builder = XmlTreeBuilder(self.config.tree, self.correlation_id)
        self._projector = JsonProjector(self.config.projection)
        self._serializer = JsonSerializer(self.config.output)

    def build(self, xml: XmlInput) -> BuildResult:
        """Build the node tree without projecting it."""
        return self._tree_builder.build(xml)

    def convert_to_value(self, xml: XmlInput) -> JsonValue:
        """Convert an XML document to its projected JSON value."""
        return self._run(xml, serialize=False)

    def convert(self, xml: XmlInput) -> bytes:
        """Convert an XML document to JSON bytes."""
        return self._run(xml, serialize=True)

    def convert_file(self, path: PathLike) -> bytes:
        """Read an XML file and convert it to JSON bytes.

        ``OSError`` from reading propagates unchanged.
        """
        try:
            data = read_file(path)
        except OSError:
            self.logger.error(
                "Could not read input file",
                extra={"file_path": str(path)},
                exc_info=True
            )
            raise

        self.logger.debug(
            "Input file read",
            extra={"file_path": str(path), "input_bytes": len(data)}
        )
        return self.convert(data)

    def _run(self, xml: XmlInput, serialize: bool) -> Any:
        start_time = time.time()
        self._conversion_count += 1

        try:
            build_result = self._tree_builder.build(xml)
            value = self._projector.project(build_result.root)
            output = self._serializer.serialize(value) if serialize else value

        except ParseError as e:
            self._record_time(start_time)
            self.logger.error(
                "Conversion rejected malformed XML",
                extra={"error": str(e), "position": e.position}
            )
            raise

        except SerializationError:
            self._record_time(start_time)
            self.logger.exception("Conversion failed during serialization")
            raise

        processing_time = self._record_time(start_time)
        self._successful_conversions += 1
        if not build_result.complete:
            self._partial_conversions += 1

        self.logger.info(
            "Conversion completed",
            extra={
                "complete": build_result.complete,
                "element_count": build_result.performance.elements_created,
                "processing_time_ms": processing_time,
                "total_conversions": self._conversion_count,
            }
        )

        return output

    def _record_time(self, start_time: float) -> float:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._total_processing_time += processing_time
        return processing_time

    def reconfigure(self, config: ConverterConfig) -> None:
        """Replace the configuration and rebuild the pipeline components."""
        self.config = config
        if config.correlation_id:
            self.correlation_id = config.correlation_id
            self.logger = self.logger.bind(self.correlation_id)
        self._configure_components()

        self.logger.info(
            "Converter reconfigured",
            extra={"config_name": config.name}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get converter usage statistics."""
        return {
            "total_conversions": self._conversion_count,
            "successful_conversions": self._successful_conversions,
            "partial_conversions": self._partial_conversions,
            "failed_conversions": self._conversion_count - self._successful_conversions,
            "success_rate": (
                self._successful_conversions / self._conversion_count
                if self._conversion_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._conversion_count
                if self._conversion_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset converter usage statistics."""
        self._conversion_count = 0
        self._successful_conversions = 0
        self._partial_conversions = 0
        self._total_processing_time = 0.0
