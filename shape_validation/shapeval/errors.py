"""Error taxonomy for schema loading, shape extraction and compilation."""

from __future__ import annotations


class ShapevalError(Exception):
    """Base class for faults raised by the validation engine."""


class ResourceError(ShapevalError):
    """The specification document could not be located or read."""


class ParseError(ShapevalError):
    """The specification document is malformed or its references cannot be resolved."""


class ShapeNotFoundError(ShapevalError):
    """The requested shape is not declared in the document."""

    def __init__(self, shape_name: str) -> None:
        super().__init__(f"Target schema '{shape_name}' not found in document components.")
        self.shape_name = shape_name


class CompileError(ShapevalError):
    """A shape could not be turned into a runtime validator."""


class InputParseError(ShapevalError):
    """The candidate payload is not well-formed JSON."""
