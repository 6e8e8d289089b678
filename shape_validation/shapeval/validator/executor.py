"""Run a compiled validator against candidate JSON and build its failure report."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from jsonschema.exceptions import ValidationError

from shapeval.errors import InputParseError
from shapeval.resolver.extractor import composition_pointer
from shapeval.validator.compiler import ValidatorHandle
from shapeval.validator.models import FailureEntry, FailureReport

logger = logging.getLogger(__name__)

COMPOSITION_KEYWORD = "allOf"


def parse_input(raw_json: str) -> Any:
    """Parse candidate JSON text, raising InputParseError when malformed."""
    try:
        return json.loads(raw_json)
    except (TypeError, ValueError, RecursionError) as e:
        raise InputParseError(f"Input is not valid JSON: {e}") from e


def to_pointer(path: Iterable[Any]) -> str:
    """Render a path as a JSON pointer ('' for the root)."""
    return "".join("/" + str(token).replace("~", "~0").replace("/", "~1") for token in path)


def _schema_at(schema: Any, path: tuple[Any, ...]) -> Any:
    node = schema
    for token in path:
        try:
            node = node[token]
        except (KeyError, IndexError, TypeError):
            return None
    return node


def _composition_split(path: tuple[Any, ...]) -> int | None:
    """Index of the first ``allOf, <n>`` pair in ``path`` that has segments after it."""
    for pos in range(len(path) - 2):
        if path[pos] == COMPOSITION_KEYWORD and isinstance(path[pos + 1], int):
            return pos
    return None


class _PendingComposition:
    """Errors collected under one allOf keyword, bucketed by slot index."""

    def __init__(self, owner: tuple[Any, ...]) -> None:
        self.owner = owner
        self.slots: dict[int, list[ValidationError]] = {}


def _leaf_entry(error: ValidationError) -> FailureEntry:
    pointer = to_pointer(error.schema_path)
    instance_pointer = to_pointer(error.absolute_path)

    if error.validator == "required" and isinstance(error.instance, dict):
        required = list(error.validator_value)
        missing = [name for name in required if name not in error.instance]
        return FailureEntry(
            keyword="required",
            message="object has missing required properties ([%s])"
            % ",".join(json.dumps(name) for name in missing),
            pointer=pointer,
            instance_pointer=instance_pointer,
            detail={"required": required, "missing": missing},
        )

    detail: dict[str, Any] = {"value": error.validator_value}
    if error.context:
        detail["causes"] = [cause.message for cause in error.context]
    return FailureEntry(
        keyword=str(error.validator),
        message=error.message,
        pointer=pointer,
        instance_pointer=instance_pointer,
        detail=detail,
    )


def _composite_entry(pending: _PendingComposition, schema: dict[str, Any]) -> FailureEntry:
    members = _schema_at(schema, pending.owner + (COMPOSITION_KEYWORD,))
    total = len(members) if isinstance(members, list) else len(pending.slots)
    matched = total - len(pending.slots)

    owner_pointer = to_pointer(pending.owner)
    reports = {
        owner_pointer + composition_pointer(index): collect_entries(
            pending.slots[index], schema, pending.owner + (COMPOSITION_KEYWORD, index)
        )
        for index in sorted(pending.slots)
    }
    return FailureEntry(
        keyword=COMPOSITION_KEYWORD,
        message=f"instance failed to match all required schemas (matched only {matched} out of {total})",
        pointer=owner_pointer,
        detail={"matched": matched, "nrSchemas": total},
        reports=reports,
    )


def collect_entries(
    errors: list[ValidationError],
    schema: dict[str, Any],
    base: tuple[Any, ...] = (),
) -> list[FailureEntry]:
    """Group jsonschema errors into failure entries.

    Errors raised under ``allOf/<n>`` are gathered into one composition entry
    whose ``reports`` are keyed by slot pointer. ``required`` errors for the
    same keyword and instance collapse into one entry listing every missing
    property. ``base`` is the schema path already consumed by the caller.
    """
    items: list[FailureEntry | _PendingComposition] = []
    compositions: dict[tuple[Any, ...], _PendingComposition] = {}
    seen_required: set[tuple[tuple[Any, ...], tuple[Any, ...]]] = set()

    for error in errors:
        path = tuple(error.schema_path)
        relative = path[len(base):]

        split = _composition_split(relative)
        if split is not None:
            owner = base + relative[:split]
            pending = compositions.get(owner)
            if pending is None:
                pending = compositions[owner] = _PendingComposition(owner)
                items.append(pending)
            pending.slots.setdefault(relative[split + 1], []).append(error)
            continue

        if error.validator == "required":
            key = (path, tuple(error.absolute_path))
            if key in seen_required:
                continue
            seen_required.add(key)

        items.append(_leaf_entry(error))

    return [
        item if isinstance(item, FailureEntry) else _composite_entry(item, schema)
        for item in items
    ]


def execute(handle: ValidatorHandle, raw_json: str) -> FailureReport:
    """Validate ``raw_json`` with a compiled handle.

    Raises InputParseError when the text is not JSON. The returned report is
    empty on success.
    """
    instance = parse_input(raw_json)
    errors = list(handle.validator.iter_errors(instance))
    report = FailureReport(entries=collect_entries(errors, handle.definition))
    logger.debug("Validator reported %d errors in %d entries", len(errors), len(report.entries))
    return report
