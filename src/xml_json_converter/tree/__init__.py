"""Tree building for XML to JSON conversion.

Key Components:
    XmlTreeBuilder: Builds the node tree from XML bytes using lxml parse events
    XmlElementNode: Element with local name, attributes, children and text content
    BuildResult: Tree plus completion flag, diagnostics and metrics
    build_tree: Convenience function returning the synthetic root node
    detect_encoding: Codec detection from byte order mark or XML declaration
"""

from .builder import (
    BuildResult,
    XmlTreeBuilder,
    build_tree,
)
from .encoding import detect_encoding
from .node import XmlElementNode, local_name

__all__ = [
    "BuildResult",
    "XmlElementNode",
    "XmlTreeBuilder",
    "build_tree",
    "detect_encoding",
    "local_name",
]
