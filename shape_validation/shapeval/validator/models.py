"""Validation data models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Severity level of a failure entry, lowest first."""

    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    fatal = "fatal"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.debug: 0,
    Severity.info: 1,
    Severity.warning: 2,
    Severity.error: 3,
    Severity.fatal: 4,
}


class FailureEntry(BaseModel):
    """One failure reported by the runtime validator.

    Composition failures (keyword ``allOf``) carry ``reports``: nested
    entries keyed by composition-slot pointer such as ``/allOf/1``.
    """

    severity: Severity = Severity.error
    keyword: str
    message: str
    pointer: str = ""
    instance_pointer: str = ""
    detail: dict[str, Any] = Field(default_factory=dict)
    reports: dict[str, list[FailureEntry]] | None = None


class FailureReport(BaseModel):
    """Ordered failure entries for one validation run."""

    entries: list[FailureEntry] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not any(e.severity.rank >= Severity.error.rank for e in self.entries)


class Diagnostic(BaseModel):
    """A human-facing explanation of one validation failure."""

    severity: Severity
    keyword: str
    message: str
    component: str | None = None
    pointer: str | None = None
    missing: list[str] = Field(default_factory=list)

    def render(self) -> str:
        if self.keyword == "required" and self.component is not None:
            return (
                f"Required property missing. Level: {self.severity.value} | "
                f"Component: {self.component} | Missing: [{','.join(self.missing)}] | "
                f"Details: {self.message}"
            )
        if self.component is not None:
            return (
                f"Level: {self.severity.value} | Component: {self.component} | "
                f"Keyword: {self.keyword} | Details: {self.message}"
            )
        return f"Level={self.severity.value} | Message={self.message} | Keyword={self.keyword}"


class ErrorKind(str, Enum):
    """Why a validation call could not produce a verdict on the payload itself."""

    input_missing = "input_missing"
    input_parse = "input_parse"
    resource = "resource"
    parse = "parse"
    shape_not_found = "shape_not_found"
    compile = "compile"
    internal = "internal"


class ValidationOutcome(BaseModel):
    """Result of one top-level validation call.

    ``error`` is set when the engine itself failed (document, shape or input
    problems); ``valid`` is then False and ``diagnostics`` empty. A payload
    that is well-formed but violates the shape has ``error=None``,
    ``valid=False`` and at least one diagnostic in the normal case.
    """

    shape_name: str = ""
    valid: bool = False
    error: ErrorKind | None = None
    detail: str | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
