"""Text rendering of findings and suggestions for the terminal."""

from __future__ import annotations

from .baseline import BaselineReport
from .models import Severity, Suggestion, ValidationResult

ICONS = {
    Severity.ERROR: "[X]",
    Severity.WARNING: "[!]",
    Severity.INFO: "[i]",
}


def format_result(result: ValidationResult) -> str:
    """Render one finding as three lines.

    [X] Error: LINK_MISSING in fn login (src/auth.py:12)
        -> documentation id 'auth-logn' was not found ...
        -> Linked id: 'auth-logn' | Next: did you mean 'auth-login'? ...
    """
    head = (
        f"{ICONS[result.severity]} {result.severity.value.capitalize()}: "
        f"{result.kind.name} in fn {result.entity.name} ({result.location})"
    )
    if result.baselined:
        head += " [baseline]"

    trailer = []
    if result.doc_id:
        trailer.append(f"Linked id: '{result.doc_id}'")
    if result.hint:
        trailer.append(f"Next: {result.hint}")

    lines = [head, f"    -> {result.message}"]
    if trailer:
        lines.append(f"    -> {' | '.join(trailer)}")
    return "\n".join(lines)


def summary_line(report: BaselineReport) -> str:
    new = report.new_findings
    errors = sum(1 for r in new if r.severity is Severity.ERROR)
    warnings = sum(1 for r in new if r.severity is Severity.WARNING)
    return f"Summary: {errors} errors, {warnings} warnings, {report.known_count} known (baseline)"


def format_report(report: BaselineReport, show_info: bool = False) -> str:
    """Render all findings followed by the summary line.

    Info findings (verified links) are hidden unless `show_info`.
    """
    blocks = [
        format_result(r)
        for r in report.results
        if show_info or r.severity is not Severity.INFO
    ]
    blocks.append(summary_line(report))
    return "\n\n".join(blocks)


def format_suggestion(suggestion: Suggestion, index: int, total: int) -> str:
    entity, section = suggestion.entity, suggestion.section
    return "\n".join(
        [
            f"-- Suggestion {index}/{total} --",
            f"  Function: {entity.name} ({entity.location})",
            f"  Section:  '{section.display_title}' [id: {section.id}] ({section.file}:{section.line})",
            f"  Score:    {suggestion.score:.0%}",
        ]
    )
