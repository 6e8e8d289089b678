"""Validation pipeline: load, extract, compile, execute, translate.

``validate_payload`` is the outer boundary. Engine faults (unreadable or
malformed document, unknown shape, uncompilable shape, malformed input) are
logged there and returned as ``ValidationOutcome.error``; callers never see
them raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from shapeval.config import COMPONENTS_PREFIX, EngineSettings
from shapeval.errors import (
    CompileError,
    InputParseError,
    ParseError,
    ResourceError,
    ShapeNotFoundError,
    ShapevalError,
)
from shapeval.naming import ActionType, is_matching_action, normalize_title_case
from shapeval.resolver.extractor import extract_shape
from shapeval.resolver.loader import load_document, locate_resource
from shapeval.validator.cache import ValidatorCache
from shapeval.validator.compiler import ValidatorHandle, compile_shape
from shapeval.validator.executor import execute
from shapeval.validator.models import ErrorKind, ValidationOutcome
from shapeval.validator.translator import translate

logger = logging.getLogger(__name__)

_ERROR_KINDS: tuple[tuple[type[ShapevalError], ErrorKind], ...] = (
    (ResourceError, ErrorKind.resource),
    (ParseError, ErrorKind.parse),
    (ShapeNotFoundError, ErrorKind.shape_not_found),
    (CompileError, ErrorKind.compile),
    (InputParseError, ErrorKind.input_parse),
)


class CompiledValidationContext(BaseModel):
    """Everything needed to validate one payload against one shape."""

    model_config = ConfigDict(frozen=True)

    handle: ValidatorHandle
    fragment_names: dict[str, str]
    shape_name: str
    raw_input: str


def _compile(
    document_path: str | Path,
    shape_name: str,
    components_prefix: str,
    search_paths: Sequence[str | Path] | None,
) -> tuple[ValidatorHandle, Mapping[str, str]]:
    document = load_document(document_path, search_paths=search_paths)
    shape, names = extract_shape(document, shape_name, components_prefix=components_prefix)
    return compile_shape(shape), names


def prepare_context(
    document_path: str | Path,
    shape_name: str,
    raw_input: str,
    *,
    components_prefix: str = COMPONENTS_PREFIX,
    search_paths: Sequence[str | Path] | None = None,
    cache: ValidatorCache | None = None,
) -> CompiledValidationContext:
    """Load the document and compile ``shape_name``.

    Raises ResourceError, ParseError, ShapeNotFoundError or CompileError.
    """
    if cache is not None:
        source = locate_resource(document_path, search_paths)
        handle, names = cache.get_or_compile(
            source,
            shape_name,
            lambda: _compile(source, shape_name, components_prefix, search_paths),
            components_prefix=components_prefix,
        )
    else:
        handle, names = _compile(document_path, shape_name, components_prefix, search_paths)

    return CompiledValidationContext(
        handle=handle,
        fragment_names=dict(names),
        shape_name=shape_name,
        raw_input=raw_input,
    )


def run_context(
    context: CompiledValidationContext,
    *,
    elaborate_nested: bool = False,
) -> ValidationOutcome:
    """Validate the context's payload. Raises InputParseError for malformed JSON."""
    logger.info("Starting validation for target: %s", context.shape_name)

    report = execute(context.handle, context.raw_input)
    if report.success:
        logger.info("Validation successful for %s payload", context.shape_name)
        return ValidationOutcome(shape_name=context.shape_name, valid=True)

    logger.warning(
        "Validation failed for %s payload. Reporting detailed errors...", context.shape_name
    )
    diagnostics = translate(report, context.fragment_names, elaborate_nested=elaborate_nested)
    for diagnostic in diagnostics:
        logger.error("VALIDATION FAILED: %s", diagnostic.render())

    return ValidationOutcome(
        shape_name=context.shape_name,
        valid=False,
        diagnostics=diagnostics,
    )


def serialize_payload(payload: Any) -> str:
    """Return JSON text for ``payload``; strings are taken as already serialised."""
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload)
    except (TypeError, ValueError, RecursionError) as e:
        raise InputParseError(f"Failed to serialise input to JSON: {e}") from e


def _error_kind(error: ShapevalError) -> ErrorKind:
    for cls, kind in _ERROR_KINDS:
        if isinstance(error, cls):
            return kind
    raise error


def validate_payload(
    shape_name: str | None,
    payload: Any,
    *,
    settings: EngineSettings | None = None,
    cache: ValidatorCache | None = None,
) -> ValidationOutcome:
    """Validate ``payload`` against ``shape_name`` in the configured document."""
    settings = settings or EngineSettings()

    if shape_name is None or payload is None:
        logger.warning("Validation skipped. Shape name or JSON input is null.")
        return ValidationOutcome(
            shape_name=shape_name or "",
            error=ErrorKind.input_missing,
            detail="Shape name or JSON input is null",
        )

    try:
        raw_input = serialize_payload(payload)
    except InputParseError as e:
        logger.error("Failed to serialise input object to JSON for type %s: %s", shape_name, e)
        return ValidationOutcome(shape_name=shape_name, error=ErrorKind.input_parse, detail=str(e))

    if not raw_input.strip():
        logger.warning("JSON input is empty for type: %s", shape_name)
        return ValidationOutcome(
            shape_name=shape_name,
            error=ErrorKind.input_missing,
            detail="JSON input is empty",
        )

    try:
        context = prepare_context(
            settings.document_path,
            shape_name,
            raw_input,
            components_prefix=settings.components_prefix,
            search_paths=settings.search_paths or None,
            cache=cache,
        )
        logger.info("Schema '%s' successfully loaded and compiled", shape_name)
        return run_context(context, elaborate_nested=settings.elaborate_nested)
    except InputParseError as e:
        logger.warning("Input for %s is not valid JSON: %s", shape_name, e)
        return ValidationOutcome(shape_name=shape_name, error=ErrorKind.input_parse, detail=str(e))
    except ShapevalError as e:
        kind = _error_kind(e)
        logger.error(
            "Failed during schema resolution or loading for type %s (%s)",
            shape_name,
            kind.value,
            exc_info=True,
        )
        return ValidationOutcome(shape_name=shape_name, error=kind, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error while validating type %s", shape_name, exc_info=True)
        return ValidationOutcome(shape_name=shape_name, error=ErrorKind.internal, detail=str(e))


def is_json_valid(
    shape_name: str | None,
    payload: Any,
    *,
    settings: EngineSettings | None = None,
    cache: ValidatorCache | None = None,
) -> bool:
    """Boolean form of validate_payload."""
    return validate_payload(shape_name, payload, settings=settings, cache=cache).valid


def resolve_target_shape(
    action_type: str | None,
    option_type: str,
    settings: EngineSettings,
) -> str:
    """DELETE validates against the base shape; anything else uses the title-cased option type."""
    if is_matching_action(action_type, ActionType.DELETE):
        return settings.delete_base_schema
    return normalize_title_case(option_type) or option_type


def validate_for_type(
    action_type: str | None,
    option_type: str | None,
    payload: Any,
    *,
    settings: EngineSettings | None = None,
    cache: ValidatorCache | None = None,
) -> ValidationOutcome:
    """Validate a business-object payload for the given action and option type."""
    settings = settings or EngineSettings()

    if option_type is None or payload is None:
        logger.warning("Validation skipped. OptionType or JSON input object is null.")
        return ValidationOutcome(
            shape_name=option_type or "",
            error=ErrorKind.input_missing,
            detail="OptionType or JSON input object is null",
        )

    target = resolve_target_shape(action_type, option_type, settings)
    return validate_payload(target, payload, settings=settings, cache=cache)


def is_json_valid_for_type(
    action_type: str | None,
    option_type: str | None,
    payload: Any,
    *,
    settings: EngineSettings | None = None,
    cache: ValidatorCache | None = None,
) -> bool:
    """Boolean form of validate_for_type."""
    return validate_for_type(
        action_type, option_type, payload, settings=settings, cache=cache
    ).valid
