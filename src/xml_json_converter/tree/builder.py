"""Tree building from XML input.

The builder drives an lxml parser with a callback *target*: every start tag
becomes an :class:`XmlElementNode` appended to the node currently being
populated, every end tag pops back to its ancestor, and character data is
collected into text runs. Decoding stops at end of input or at the first
syntax error; what has been built up to that point is the tree. Elements
after the document element are decoded too and attach to the root.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from lxml import etree

from xml_json_converter.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseError,
    PerformanceMetrics,
    TextMode,
    TreeConfig,
    get_logger,
)
from xml_json_converter.tree.encoding import detect_encoding
from xml_json_converter.tree.node import XmlElementNode, local_name

XmlInput = Union[bytes, bytearray, str]

# Attribute key used for a default namespace declaration (xmlns="...")
_DEFAULT_NAMESPACE_KEY = "xmlns"

# Wraps content found after the document element when it is decoded again
_CONTINUATION_START = "<document-continuation>"
_CONTINUATION_END = "</document-continuation>"


def _locate_extra_content(
    data: bytes,
    encoding: Optional[str],
    line: Optional[int],
    column: Optional[int]
) -> Optional[Tuple[str, int, int]]:
    """Find the content the decoder rejected after the document element.

    ``line`` and ``column`` are the 1-based position of the error. Returns
    the remaining text with the 0-based line and column it starts at, or
    None when the position cannot be matched to the input.
    """
    if line is None or column is None:
        return None

    try:
        text = data.decode(encoding or detect_encoding(data))
    except (LookupError, UnicodeDecodeError):
        return None

    lines = text.split("\n")
    if not 1 <= line <= len(lines):
        return None
    line_start = sum(len(previous) + 1 for previous in lines[:line - 1])
    current = lines[line - 1]

    # Columns count characters; fall back to UTF-8 bytes if that misses
    index = max(column - 1, 0)
    candidates = [
        index,
        len(current.encode("utf-8")[:index].decode("utf-8", errors="ignore")),
    ]
    for candidate in candidates:
        offset = line_start + candidate
        if (
            offset < len(text)
            and not text[offset].isspace()
            and text[:offset].rstrip().endswith(">")
        ):
            return text[offset:], line - 1, candidate

    return None


@dataclass
class BuildResult:
    """Result of a tree building operation.

    ``complete`` is False when decoding stopped at a syntax error before the
    end of input; ``root`` then holds the partial tree.
    """

    root: XmlElementNode
    complete: bool = True
    error: Optional[ParseError] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Number of elements in the tree, excluding the synthetic root."""
        return sum(1 for _ in self.root.iter()) - 1

    @property
    def max_depth(self) -> int:
        """Nesting depth of the document below the synthetic root."""
        return self.root.depth()

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                position=position,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the build."""
        return {
            "complete": self.complete,
            "element_count": self.element_count,
            "max_depth": self.max_depth,
            "processing_time_ms": self.performance.processing_time_ms,
            "bytes_processed": self.performance.bytes_processed,
            "text_runs": self.performance.text_runs,
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


class _TreeBuildingTarget:
    """lxml parser target that assembles the node tree from parse events."""

    def __init__(self, root: XmlElementNode, config: TreeConfig) -> None:
        self.root = root
        self._config = config

        self._current = root
        self._stack: List[XmlElementNode] = []
        self._text_buffer: List[str] = []
        self._pending_namespaces: List[Tuple[str, str]] = []

        self.elements_created = 0
        self.text_runs = 0
        self._skip_next_element = False

    def skip_next_element(self) -> None:
        """Let the next start tag through without creating a node.

        Its children attach to the current node and its end tag finds an
        empty stack, so the element leaves no trace in the tree.
        """
        self._skip_next_element = True

    def start_ns(self, prefix: Optional[str], uri: str) -> None:
        if self._config.include_namespace_declarations:
            self._pending_namespaces.append((prefix or _DEFAULT_NAMESPACE_KEY, uri))

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        """Open a node for a start tag.

        The decoder reports namespace declarations separately from the
        attributes and without their position in the tag, so declarations
        are stored first and an attribute with the same local name
        overwrites them, whatever the order in the document.
        """
        self._flush_text()

        if self._skip_next_element:
            self._skip_next_element = False
            self._pending_namespaces.clear()
            return

        node = XmlElementNode(name=local_name(tag))
        for key, uri in self._pending_namespaces:
            node.attributes[key] = uri
        self._pending_namespaces.clear()
        for key, value in attrib.items():
            node.attributes[local_name(key)] = value

        self._current.add_child(node)
        self._stack.append(self._current)
        self._current = node
        self.elements_created += 1

    def end(self, tag: str) -> None:
        # Structural only: the closing tag name is not compared.
        self._flush_text()
        if self._stack:
            self._current = self._stack.pop()

    def data(self, data: str) -> None:
        self._text_buffer.append(data)

    def comment(self, text: str) -> None:
        self._flush_text()

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self._flush_text()

    def close(self) -> XmlElementNode:
        self._flush_text()
        return self.root

    def _flush_text(self) -> None:
        """Apply the buffered text run to the current node."""
        if not self._text_buffer:
            return

        run = "".join(self._text_buffer)
        self._text_buffer.clear()
        if not run.strip():
            return

        self.text_runs += 1
        if self._config.text_mode is TextMode.CONCAT:
            self._current.content += run
        else:
            self._current.content = run


class XmlTreeBuilder:
    """Builds an :class:`XmlElementNode` tree from XML bytes.

    Malformed input is handled according to ``TreeConfig.strict``: lenient
    builders return the partial tree and record the failure on the result,
    strict builders raise :class:`ParseError`.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree building configuration (defaults to lenient)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_builder")

    def build(self, xml: XmlInput) -> BuildResult:
        """Build the node tree for an XML document.

        Args:
            xml: XML document; ``str`` input is encoded as UTF-8

        Returns:
            BuildResult whose ``root`` is the synthetic root node

        Raises:
            ParseError: In strict mode, when the input is empty or malformed;
                in any mode, when ``str`` input holds lone surrogates
        """
        start_time = time.time()

        root = XmlElementNode(name=self.config.root_name)
        result = BuildResult(root=root, correlation_id=self.correlation_id)
        target = _TreeBuildingTarget(root, self.config)

        if isinstance(xml, str):
            try:
                data = xml.encode("utf-8")
            except UnicodeEncodeError as e:
                self.logger.warning(
                    "Rejecting text input that is not valid Unicode",
                    extra={"error": str(e)}
                )
                raise ParseError(
                    f"Input text cannot be encoded as UTF-8: {e.reason}",
                    partial_root=root,
                ) from e
            # The text is already decoded; a declared encoding no longer applies
            encoding: Optional[str] = "utf-8"
        else:
            data = bytes(xml)
            encoding = None

        self.logger.debug(
            "Starting tree building",
            extra={"input_bytes": len(data), "strict": self.config.strict}
        )

        if not data.strip():
            self._handle_parse_error(
                ParseError("Document is empty", line=1, column=1, partial_root=root),
                result,
            )
        else:
            self._decode(data, encoding, target, result)

        processing_time = (time.time() - start_time) * 1000
        result.performance.processing_time_ms = processing_time
        result.performance.bytes_processed = len(data)
        result.performance.elements_created = target.elements_created
        result.performance.text_runs = target.text_runs

        self.logger.info(
            "Tree building completed",
            extra={
                "complete": result.complete,
                "element_count": target.elements_created,
                "processing_time_ms": processing_time,
            }
        )

        return result

    def _create_parser(
        self,
        target: _TreeBuildingTarget,
        encoding: Optional[str]
    ) -> etree.XMLParser:
        return etree.XMLParser(
            target=target,
            encoding=encoding,
            resolve_entities=self.config.resolve_entities,
            huge_tree=self.config.huge_tree,
            no_network=True,
        )

    def _decode(
        self,
        data: bytes,
        encoding: Optional[str],
        target: _TreeBuildingTarget,
        result: BuildResult
    ) -> None:
        """Feed the document to ``target``, including top-level elements
        that follow the document element.

        The decoder stops with "Extra content at the end of the document"
        after the first top-level element. The rest of the input is then
        decoded again inside a continuation element that the target skips,
        so later top-level elements attach to the root as well.
        """
        line_offset, column_offset = 0, 0
        continued = False

        while True:
            try:
                etree.fromstring(data, self._create_parser(target, encoding))
                return
            except etree.XMLSyntaxError as e:
                target.close()
                line, column = e.position if e.position else (None, None)

                rest = None
                if not continued and e.code == etree.ErrorTypes.ERR_DOCUMENT_END:
                    rest = _locate_extra_content(data, encoding, line, column)

                if rest is None:
                    if continued and line == 1 and column is not None:
                        column -= len(_CONTINUATION_START)
                    if line is not None:
                        if line == 1 and column is not None:
                            column += column_offset
                        line += line_offset
                    self._handle_parse_error(
                        ParseError(
                            f"Malformed XML: {e}",
                            line=line,
                            column=column,
                            partial_root=result.root,
                        ),
                        result,
                    )
                    return

            text, line_offset, column_offset = rest
            self.logger.debug(
                "Decoding top-level content after the document element",
                extra={"position": {"line": line_offset + 1, "column": column_offset + 1}}
            )
            target.skip_next_element()
            data = (_CONTINUATION_START + text + _CONTINUATION_END).encode("utf-8")
            encoding = "utf-8"
            continued = True

    def _handle_parse_error(self, error: ParseError, result: BuildResult) -> None:
        """Raise the error in strict mode, otherwise record it on the result."""
        if self.config.strict:
            self.logger.warning(
                "Rejecting malformed XML",
                extra={"error": str(error), "position": error.position}
            )
            raise error

        self.logger.warning(
            "Decoding stopped early, returning partial tree",
            extra={"error": str(error), "position": error.position}
        )
        result.complete = False
        result.error = error
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            str(error),
            "xml_tree_builder",
            position=error.position,
        )


def build_tree(xml: XmlInput, config: Optional[TreeConfig] = None) -> XmlElementNode:
    """Build the node tree for an XML document and return its synthetic root.

    Examples:
        >>> root = build_tree(b'<a id="1"><b>x</b></a>')
        >>> root.children[0].name, root.children[0].attributes
        ('a', {'id': '1'})
        >>> root.children[0].children[0].content
        'x'
    """
    return XmlTreeBuilder(config).build(xml).root
