"""Validation pipeline for payloads checked against named shapes."""

from shapeval.validator.models import (
    Diagnostic,
    ErrorKind,
    FailureEntry,
    FailureReport,
    Severity,
    ValidationOutcome,
)
from shapeval.validator.pipeline import (
    is_json_valid,
    is_json_valid_for_type,
    validate_for_type,
    validate_payload,
)

__all__ = [
    "Diagnostic",
    "ErrorKind",
    "FailureEntry",
    "FailureReport",
    "Severity",
    "ValidationOutcome",
    "is_json_valid",
    "is_json_valid_for_type",
    "validate_for_type",
    "validate_payload",
]
