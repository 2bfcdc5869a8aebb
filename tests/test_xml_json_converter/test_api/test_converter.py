"""Tests for the conversion API."""

import json
import logging
from pathlib import Path

import pytest

from xml_json_converter.api import (
    XmlJsonConverter,
    convert,
    convert_file,
    convert_to_value,
    read_file,
)
from xml_json_converter.shared import (
    ConversionError,
    ConverterConfig,
    ParseError,
    SerializationError,
    TextMode,
)


class TestReadFile:
    """Test raw file reading."""

    def test_returns_file_bytes(self, tmp_path: Path) -> None:
        """Test the file content is returned unchanged."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<a>\xc3\xa9</a>")

        assert read_file(path) == b"<a>\xc3\xa9</a>"
        assert read_file(str(path)) == b"<a>\xc3\xa9</a>"

    def test_missing_file_propagates(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError unchanged."""
        with pytest.raises(FileNotFoundError):
            read_file(tmp_path / "missing.xml")

    def test_directory_propagates_os_error(self, tmp_path: Path) -> None:
        """Test reading a directory raises an OSError."""
        with pytest.raises(OSError):
            read_file(tmp_path)


class TestConvert:
    """Test the composed conversion pipeline."""

    @pytest.mark.parametrize(
        ("xml", "expected"),
        [
            (b"<a></a>", b'{"a":""}'),
            (b"<a>hello</a>", b'{"a":"hello"}'),
            (b'<a id="1"></a>', b'{"a":{"_id":"1"}}'),
            (b"<root><item>1</item><item>2</item></root>", b'{"root":{"item":["1","2"]}}'),
            (b'<a id="x">hi<b>1</b></a>', b'{"a":{"__text":"hi","_id":"x","b":"1"}}'),
        ],
    )
    def test_output_bytes(self, xml: bytes, expected: bytes) -> None:
        """Test the JSON output for the basic projection shapes."""
        assert convert(xml) == expected

    def test_realistic_document(self) -> None:
        """Test a document mixing every rule."""
        xml = b"""<?xml version="1.0" encoding="UTF-8"?>
<library xmlns:dc="http://purl.org/dc/elements/1.1/" name="city">
  <!-- inventory -->
  <book id="b1" lang="en">
    <dc:title>Dune</dc:title>
    <author>Frank Herbert</author>
  </book>
  <book id="b2">
    <dc:title>Solaris</dc:title>
    <author>Stanislaw Lem</author>
    <tag>classic</tag>
    <tag>sci-fi</tag>
  </book>
  <empty/>
</library>
"""
        assert json.loads(convert(xml)) == {
            "library": {
                "_dc": "http://purl.org/dc/elements/1.1/",
                "_name": "city",
                "book": [
                    {"_id": "b1", "_lang": "en", "title": "Dune", "author": "Frank Herbert"},
                    {
                        "_id": "b2",
                        "title": "Solaris",
                        "author": "Stanislaw Lem",
                        "tag": ["classic", "sci-fi"],
                    },
                ],
                "empty": "",
            }
        }

    def test_conversion_is_deterministic(self) -> None:
        """Test converting the same input twice gives identical bytes."""
        xml = b'<a z="1" b="2"><c/><d>x</d><c>y</c></a>'

        assert convert(xml) == convert(xml)

    def test_str_input(self) -> None:
        """Test text input is converted like its UTF-8 encoding."""
        assert convert("<a>ü</a>") == '{"a":"ü"}'.encode("utf-8")

    def test_str_input_with_declared_encoding(self) -> None:
        """Test text input is converted as text whatever it declares."""
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>'

        assert convert(xml) == '{"a":"café"}'.encode("utf-8")

    @pytest.mark.parametrize("config", [None, ConverterConfig.strict()])
    def test_str_input_with_lone_surrogate(self, config) -> None:
        """Test text that is not valid Unicode raises a conversion error."""
        with pytest.raises(ConversionError):
            convert("<a>\ud800</a>", config)

    def test_several_top_level_elements(self) -> None:
        """Test every top-level element appears in the output."""
        assert convert_to_value(b"<a>1</a><b>2</b>") == {"a": "1", "b": "2"}

    def test_deeply_nested_document(self) -> None:
        """Test documents deeper than the decoder's default limit convert fully."""
        levels = 300
        value = json.loads(convert(b"<a>" * levels + b"x" + b"</a>" * levels))

        for _ in range(levels):
            value = value["a"]
        assert value == "x"

    def test_empty_input_converts_to_empty_string(self) -> None:
        """Test empty input produces the empty-node projection."""
        assert convert(b"") == b'""'

    def test_malformed_input_is_converted_partially(self) -> None:
        """Test lenient conversion returns the tree read before the error."""
        assert json.loads(convert(b"<a><b>1</b><c>")) == {"a": {"b": "1", "c": ""}}

    def test_strict_config_raises_parse_error(self) -> None:
        """Test strict conversion surfaces malformed XML."""
        with pytest.raises(ParseError):
            convert(b"<a><b>1</b><c>", ConverterConfig.strict())

    def test_config_is_applied(self) -> None:
        """Test every configuration component reaches its stage."""
        config = ConverterConfig().override(
            tree__root_name="doc",
            tree__text_mode=TextMode.CONCAT,
            projection__include_object_name=True,
            output__indent=1,
        )

        output = convert(b"<a>x<b/>y</a>", config)

        assert output.startswith(b"{\n ")
        assert json.loads(output) == {
            "_objectName": "doc",
            "a": {"_objectName": "a", "__text": "xy", "b": ""},
        }


class TestConvertToValue:
    """Test the in-memory projection entry point."""

    def test_returns_projected_value(self) -> None:
        """Test the value matches the serialized output."""
        xml = b'<a id="x">hi<b>1</b><b>2</b></a>'

        value = convert_to_value(xml)

        assert value == {"a": {"_id": "x", "__text": "hi", "b": ["1", "2"]}}
        assert json.loads(convert(xml)) == value


class TestConvertFile:
    """Test file conversion."""

    def test_converts_file(self, tmp_path: Path) -> None:
        """Test a file on disk is read and converted."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<a><b>1</b></a>")

        assert convert_file(path) == b'{"a":{"b":"1"}}'

    def test_missing_file_aborts_conversion(self, tmp_path: Path) -> None:
        """Test read errors propagate without producing output."""
        with pytest.raises(FileNotFoundError):
            convert_file(tmp_path / "missing.xml")


class TestXmlJsonConverter:
    """Test the reusable converter class."""

    def test_default_configuration(self) -> None:
        """Test a converter without arguments uses the default configuration."""
        converter = XmlJsonConverter()

        assert converter.config == ConverterConfig()
        assert len(converter.correlation_id) == 12
        assert XmlJsonConverter().correlation_id != converter.correlation_id

    def test_correlation_id_from_config(self) -> None:
        """Test the correlation ID falls back to the configuration."""
        converter = XmlJsonConverter(ConverterConfig(correlation_id="cfg-1"))

        assert converter.correlation_id == "cfg-1"
        assert converter.build(b"<a>").diagnostics[0].correlation_id == "cfg-1"

    def test_statistics(self) -> None:
        """Test usage counters track complete, partial and failed conversions."""
        converter = XmlJsonConverter()

        converter.convert(b"<a/>")
        converter.convert(b"<a>")
        converter.reconfigure(ConverterConfig.strict())
        with pytest.raises(ParseError):
            converter.convert(b"<a>")

        stats = converter.statistics
        assert stats["total_conversions"] == 3
        assert stats["successful_conversions"] == 2
        assert stats["partial_conversions"] == 1
        assert stats["failed_conversions"] == 1
        assert stats["success_rate"] == pytest.approx(2 / 3)
        assert stats["total_processing_time_ms"] >= 0.0

    def test_reset_statistics(self) -> None:
        """Test statistics can be reset."""
        converter = XmlJsonConverter()
        converter.convert(b"<a/>")

        converter.reset_statistics()

        assert converter.statistics["total_conversions"] == 0
        assert converter.statistics["success_rate"] == 0.0
        assert converter.statistics["average_processing_time_ms"] == 0.0

    def test_reconfigure_changes_output(self) -> None:
        """Test reconfiguring rebuilds the pipeline stages."""
        converter = XmlJsonConverter()
        assert converter.convert(b"<a><b/></a>") == b'{"a":{"b":""}}'

        converter.reconfigure(ConverterConfig.legacy())

        assert converter.convert(b"<a><b/></a>") == (
            b'{"_objectName":"root","a":{"_objectName":"a","b":""}}'
        )

    def test_serialization_error_propagates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test serializer failures are surfaced to the caller."""
        converter = XmlJsonConverter()
        monkeypatch.setattr(converter._projector, "project", lambda node: {"a": "\ud800"})

        with pytest.raises(SerializationError):
            converter.convert(b"<a/>")

        assert converter.statistics["failed_conversions"] == 1

    def test_conversion_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test completed conversions are logged with correlation info."""
        converter = XmlJsonConverter(correlation_id="req-42")

        with caplog.at_level(logging.INFO, logger="xml_json_converter.api.converter"):
            converter.convert(b"<a/>")

        records = [r for r in caplog.records if r.getMessage() == "Conversion completed"]
        assert len(records) == 1
        assert records[0].correlation_id == "req-42"
        assert records[0].component == "xml_json_converter"
