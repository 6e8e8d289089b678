"""Translate failure reports into diagnostics naming the failing fragment."""

from __future__ import annotations

from typing import Mapping

from shapeval.validator.models import Diagnostic, FailureEntry, FailureReport, Severity

COMPOSITION_KEYWORD = "allOf"
REQUIRED_KEYWORD = "required"


def unknown_component(pointer: str) -> str:
    return f"Unknown Component ({pointer})"


def _missing(entry: FailureEntry) -> list[str]:
    missing = entry.detail.get("missing", [])
    return [str(name).replace('"', "") for name in missing]


def _slot_diagnostics(
    entries: list[FailureEntry],
    component: str,
    pointer: str,
    elaborate_nested: bool,
) -> list[Diagnostic]:
    """Diagnostics for the nested entries of one composition slot."""
    diagnostics: list[Diagnostic] = []

    for entry in entries:
        if entry.keyword == REQUIRED_KEYWORD:
            diagnostics.append(
                Diagnostic(
                    severity=entry.severity,
                    keyword=entry.keyword,
                    message=entry.message,
                    component=component,
                    pointer=pointer,
                    missing=_missing(entry),
                )
            )
        elif not elaborate_nested:
            # Only missing-property failures are explained per fragment
            continue
        elif entry.keyword == COMPOSITION_KEYWORD and entry.reports:
            for nested in entry.reports.values():
                diagnostics.extend(_slot_diagnostics(nested, component, pointer, elaborate_nested))
        else:
            diagnostics.append(
                Diagnostic(
                    severity=entry.severity,
                    keyword=entry.keyword,
                    message=entry.message,
                    component=component,
                    pointer=pointer,
                )
            )

    return diagnostics


def translate(
    report: FailureReport,
    fragment_names: Mapping[str, str],
    *,
    elaborate_nested: bool = False,
) -> list[Diagnostic]:
    """Turn a failure report into an ordered list of diagnostics.

    Entries below error severity are skipped. Composition failures are
    expanded per slot, with the slot pointer replaced by its friendly name.
    Nested failures other than missing required properties are dropped
    unless ``elaborate_nested`` is set. Everything else becomes one generic
    diagnostic.
    """
    diagnostics: list[Diagnostic] = []

    for entry in report.entries:
        if entry.severity.rank < Severity.error.rank:
            continue

        if entry.keyword == COMPOSITION_KEYWORD and entry.reports is not None:
            for pointer, nested in entry.reports.items():
                component = fragment_names.get(pointer, unknown_component(pointer))
                diagnostics.extend(_slot_diagnostics(nested, component, pointer, elaborate_nested))
            continue

        diagnostics.append(
            Diagnostic(
                severity=entry.severity,
                keyword=entry.keyword,
                message=entry.message,
            )
        )

    return diagnostics
