"""Compile a resolved shape into a jsonschema validator."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator

from jsonschema import Draft4Validator, FormatChecker
from jsonschema.exceptions import SchemaError
from jsonschema.protocols import Validator
from pydantic import BaseModel, ConfigDict

from shapeval.errors import CompileError
from shapeval.resolver.models import ShapeDefinition

logger = logging.getLogger(__name__)

# Top-level authoring markers the runtime validator does not need
AUTHORING_ONLY_FIELDS = ("$schema",)


class ValidatorHandle(BaseModel):
    """A compiled, stateless validator. Safe to reuse across payloads."""

    model_config = ConfigDict(frozen=True)

    validator: Any
    definition: dict[str, Any]


def serialize_shape(shape: ShapeDefinition) -> dict[str, Any]:
    """Canonical JSON form of a shape, without authoring-only markers."""
    try:
        schema = json.loads(json.dumps(shape.to_schema()))
    except (TypeError, ValueError) as e:
        raise CompileError(f"Shape '{shape.name}' cannot be serialised to JSON: {e}") from e

    for field in AUTHORING_ONLY_FIELDS:
        schema.pop(field, None)
    return schema


def _iter_patterns(node: Any) -> Iterator[str]:
    """Yield every regular expression a schema hands to the validator."""
    if isinstance(node, dict):
        pattern = node.get("pattern")
        if isinstance(pattern, str):
            yield pattern
        pattern_properties = node.get("patternProperties")
        if isinstance(pattern_properties, dict):
            yield from pattern_properties
        for value in node.values():
            yield from _iter_patterns(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_patterns(item)


def check_patterns(schema: dict[str, Any], shape_name: str | None) -> None:
    """Raise CompileError for any pattern Python's regex engine rejects."""
    for pattern in _iter_patterns(schema):
        try:
            re.compile(pattern)
        except re.error as e:
            raise CompileError(
                f"Shape '{shape_name}' has an unsupported pattern {pattern!r}: {e}"
            ) from e


def compile_shape(
    shape: ShapeDefinition,
    *,
    validator_class: type[Validator] = Draft4Validator,
) -> ValidatorHandle:
    """Build a reusable validator for ``shape``.

    Raises CompileError when the shape cannot be serialised or is not a valid
    schema for the validator dialect, including patterns the regex engine
    cannot compile.
    """
    schema = serialize_shape(shape)
    try:
        validator_class.check_schema(schema)
    except SchemaError as e:
        raise CompileError(f"Shape '{shape.name}' is not a valid schema: {e.message}") from e
    check_patterns(schema, shape.name)

    validator = validator_class(schema, format_checker=FormatChecker())
    logger.debug("Compiled validator for shape %s", shape.name)
    return ValidatorHandle(validator=validator, definition=schema)
