"""Projection of the node tree onto JSON values.

A node projects to one of three shapes:

* ``""`` when it has no children, no content and no attributes;
* its raw content string when content is all it has;
* otherwise an object holding ``<prefix><attribute>`` keys, the text key for
  content, and one key per child name. Same-named children fold into a list
  in document order.
"""

from typing import Dict, List, Optional, Union

from xml_json_converter.shared import ProjectionConfig
from xml_json_converter.tree.node import XmlElementNode

JsonValue = Union[str, Dict[str, "JsonValue"], List["JsonValue"]]


class JsonProjector:
    """Maps :class:`XmlElementNode` trees to JSON values."""

    def __init__(self, config: Optional[ProjectionConfig] = None) -> None:
        self.config = config or ProjectionConfig()

    def project(self, node: XmlElementNode) -> JsonValue:
        """Project a node and its descendants.

        Nodes are visited in reverse document order, which projects every
        child before its parent without recursion. The tree is only read,
        so projecting the same tree twice yields equal values.
        """
        projected: Dict[int, JsonValue] = {}

        for current in reversed(list(node.iter())):
            projected[id(current)] = self._project_node(
                current, [projected[id(child)] for child in current.children]
            )

        return projected[id(node)]

    def _project_node(self, node: XmlElementNode, child_values: List[JsonValue]) -> JsonValue:
        """Project one node given the projections of its children."""
        if node.is_empty:
            return ""

        if node.content and not node.children and not node.attributes:
            return node.content

        obj: Dict[str, JsonValue] = {}

        for key, value in node.attributes.items():
            obj[self.config.attribute_prefix + key] = value

        if node.content:
            obj[self.config.text_key] = node.content

        if node.children and self.config.include_object_name:
            obj[self.config.object_name_key] = node.name

        for child, value in zip(node.children, child_values):
            self._merge(obj, child.name, value)

        return obj

    @staticmethod
    def _merge(obj: Dict[str, JsonValue], key: str, value: JsonValue) -> None:
        """Set ``key`` or fold ``value`` into the list already stored there."""
        if key not in obj:
            obj[key] = value
            return

        existing = obj[key]
        if isinstance(existing, list):
            existing.append(value)
        else:
            obj[key] = [existing, value]


def project(node: XmlElementNode, config: Optional[ProjectionConfig] = None) -> JsonValue:
    """Project a node with the given (or default) projection settings.

    Examples:
        >>> project(XmlElementNode(name="a"))
        ''
        >>> project(XmlElementNode(name="a", attributes={"id": "1"}))
        {'_id': '1'}
    """
    return JsonProjector(config).project(node)
