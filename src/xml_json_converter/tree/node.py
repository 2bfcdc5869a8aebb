"""Element node type for the intermediate XML tree."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


def local_name(name: str) -> str:
    """Strip a namespace URI (``{uri}tag``) or prefix (``p:tag``) from a name."""
    if name.startswith("{"):
        name = name.rpartition("}")[2]
    if ":" in name:
        name = name.split(":", 1)[1]
    return name


@dataclass
class XmlElementNode:
    """Represents a single XML element in the intermediate tree.

    Nodes own their children and carry only the *name* of their parent, so
    the tree can be walked top-down but never navigated upwards.
    """

    name: str
    parent_name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["XmlElementNode"] = field(default_factory=list)
    content: str = ""

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.name:
            raise ValueError("Element name cannot be empty")

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def is_empty(self) -> bool:
        """Check if the node has no children, no content and no attributes."""
        return not self.children and not self.content and not self.attributes

    def add_child(self, child: "XmlElementNode") -> None:
        """Append a child in document order and record this node as its parent."""
        if not isinstance(child, XmlElementNode):
            raise TypeError("Child must be an XmlElementNode instance")

        child.parent_name = self.name
        self.children.append(child)

    def find_child(self, name: str) -> Optional["XmlElementNode"]:
        """Find first direct child with matching name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_children(self, name: str) -> List["XmlElementNode"]:
        """Find all direct children with matching name."""
        return [child for child in self.children if child.name == name]

    def iter(self) -> Iterator["XmlElementNode"]:
        """Iterate over this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, name: str) -> List["XmlElementNode"]:
        """Find all descendant nodes with matching name."""
        return [node for node in self.iter() if node is not self and node.name == name]

    def depth(self) -> int:
        """Get the number of levels below this node (a leaf has depth 0)."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.children)
        return deepest

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to a structural dictionary for debugging."""
        converted: Dict[int, Dict[str, Any]] = {}

        # Reverse document order visits children before their parent
        for node in reversed(list(self.iter())):
            result: Dict[str, Any] = {
                "name": node.name,
                "parent_name": node.parent_name,
            }

            if node.attributes:
                result["attributes"] = dict(node.attributes)

            if node.content:
                result["content"] = node.content

            if node.children:
                result["children"] = [converted[id(child)] for child in node.children]

            converted[id(node)] = result

        return converted[id(self)]
