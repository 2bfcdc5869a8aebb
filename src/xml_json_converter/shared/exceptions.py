"""Exception hierarchy for XML to JSON conversion.

File access errors are not part of this hierarchy: ``OSError`` raised while
reading input propagates to the caller unchanged.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from xml_json_converter.tree.node import XmlElementNode


class ConversionError(Exception):
    """Base exception for conversion failures."""


class ParseError(ConversionError):
    """Raised when the input cannot be decoded as XML.

    Malformed XML raises it in strict mode only; text input that is not
    valid Unicode raises it in every mode.

    Attributes:
        line: 1-based line of the failure, when the decoder reports one
        column: 1-based column of the failure, when the decoder reports one
        partial_root: Tree built from the events decoded before the failure
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        partial_root: Optional["XmlElementNode"] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.partial_root = partial_root

    @property
    def position(self) -> Optional[dict]:
        """Position of the failure as a diagnostic-friendly mapping."""
        if self.line is None:
            return None
        position = {"line": self.line}
        if self.column is not None:
            position["column"] = self.column
        return position


class SerializationError(ConversionError):
    """Raised when a projected value cannot be encoded as JSON bytes."""
