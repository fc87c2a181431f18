"""Cross-reference validation between code entities and doc sections.

Checks:
1. Links: does the entity's doc id exist among the sections?
2. Missing arguments: code parameters the section does not document.
3. Ghost arguments: documented arguments the signature does not have.
4. Type mismatches: both sides typed, normalized types disagree.

Entities and sections are correlated only through the doc id string,
via an index built once per run. Results are returned in a fixed order
(entity order, then finding kind) so that unchanged input always gives
identical output.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import DuplicateDocIdError
from .heuristic import DEFAULT_THRESHOLD, closest_section_id
from .models import (
    KIND_ORDER,
    CodeEntity,
    DocSection,
    FindingKind,
    Severity,
    ValidationResult,
)
from .types import BUILTIN_ALIASES, CanonicalType, normalize, types_conflict


def build_index(sections: list[DocSection]) -> dict[str, DocSection]:
    """Map doc id -> section.

    Raises:
        DuplicateDocIdError: If two sections share an id. Annotations do
            not name a document, so ids must be unique across all the
            documentation given to one run.
    """
    index: dict[str, DocSection] = {}
    for section in sections:
        previous = index.get(section.id)
        if previous is not None:
            path = section.file if previous.file == section.file else f"{previous.file}, {section.file}"
            raise DuplicateDocIdError(section.id, path, previous.line, section.line)
        index[section.id] = section
    return index


def _link_missing(entity: CodeEntity, sections: list[DocSection], threshold: float) -> ValidationResult:
    doc_id = entity.doc_id
    suggested = closest_section_id(doc_id, sections, threshold)
    if suggested:
        hint = f"did you mean '{suggested}'? Fix the @docs annotation on fn {entity.name}."
    else:
        hint = f"add `<!-- @docs-id: {doc_id} -->` above the section documenting fn {entity.name}."
    return ValidationResult(
        severity=Severity.ERROR,
        kind=FindingKind.LINK_MISSING,
        file=entity.file,
        line=entity.line,
        message=f"documentation id '{doc_id}' was not found in any documentation file.",
        entity=entity,
        doc_id=doc_id,
        subject=doc_id,
        shape=f"link:{doc_id}",
        hint=hint,
        suggested_id=suggested,
    )


def _link_verified(entity: CodeEntity, section: DocSection) -> ValidationResult:
    return ValidationResult(
        severity=Severity.INFO,
        kind=FindingKind.LINK_VERIFIED,
        file=entity.file,
        line=entity.line,
        message=f"link verified: fn {entity.name} <-> section '{section.display_title}' ({section.file}:{section.line}).",
        entity=entity,
        section=section,
        doc_id=section.id,
        shape=f"link:{section.id}",
    )


def _compare_arguments(
    entity: CodeEntity,
    section: DocSection,
    aliases: Mapping[str, CanonicalType],
) -> dict[FindingKind, list[ValidationResult]]:
    found: dict[FindingKind, list[ValidationResult]] = {kind: [] for kind in KIND_ORDER}
    documented = {arg.name: arg for arg in section.args}
    declared = {param.name for param in entity.params}

    for param in entity.params:
        arg = documented.get(param.name)
        if arg is None:
            found[FindingKind.MISSING_ARGUMENT].append(
                ValidationResult(
                    severity=Severity.WARNING,
                    kind=FindingKind.MISSING_ARGUMENT,
                    file=entity.file,
                    line=entity.line,
                    message=f"argument '{param.name}' exists in code but is missing from the documentation.",
                    entity=entity,
                    section=section,
                    doc_id=section.id,
                    subject=param.name,
                    shape=f"missing:{param.name}",
                    hint=f"document '{param.name}' in section '{section.display_title}' ({section.file}:{section.line}).",
                )
            )
            continue

        if not types_conflict(param.type_token, arg.type_token, aliases):
            continue
        code_type = normalize(param.type_token, aliases)
        doc_type = normalize(arg.type_token, aliases)
        found[FindingKind.TYPE_MISMATCH].append(
            ValidationResult(
                severity=Severity.WARNING,
                kind=FindingKind.TYPE_MISMATCH,
                file=entity.file,
                line=entity.line,
                message=(
                    f"type mismatch on argument '{param.name}': code has '{param.type_token}' "
                    f"({code_type.value}), docs say '{arg.type_token}' ({doc_type.value})."
                ),
                entity=entity,
                section=section,
                doc_id=section.id,
                subject=param.name,
                shape=f"type:{param.name}:{code_type.value}:{doc_type.value}",
                hint=(
                    f"change the documented type of '{param.name}' to '{param.type_token}', "
                    f"or add an alias to type_aliases if both spellings are the same type."
                ),
            )
        )

    for arg in section.args:
        if arg.name in declared:
            continue
        found[FindingKind.GHOST_ARGUMENT].append(
            ValidationResult(
                severity=Severity.WARNING,
                kind=FindingKind.GHOST_ARGUMENT,
                file=entity.file,
                line=entity.line,
                message=f"ghost argument: '{arg.name}' is documented but fn {entity.name} has no such parameter.",
                entity=entity,
                section=section,
                doc_id=section.id,
                subject=arg.name,
                shape=f"ghost:{arg.name}",
                hint=f"remove '{arg.name}' from section '{section.display_title}' or add it to the signature.",
            )
        )
    return found


def validate_links(
    entities: list[CodeEntity],
    sections: list[DocSection],
    aliases: Mapping[str, CanonicalType] | None = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[ValidationResult]:
    """Validate every linked entity against the documentation.

    Args:
        entities: Fully parsed code entities, in source order.
        sections: Fully parsed documentation sections.
        aliases: Type alias table from types.build_alias_table().
        threshold: Similarity needed to suggest an id for a dangling link.

    Returns:
        Findings ordered by entity, then kind. Unlinked entities and
        untargeted sections produce nothing.

    Raises:
        DuplicateDocIdError: Before any validation, if ids collide.
    """
    index = build_index(sections)
    aliases = aliases if aliases is not None else BUILTIN_ALIASES

    results: list[ValidationResult] = []
    for entity in entities:
        if not entity.doc_id:
            continue

        section = index.get(entity.doc_id)
        if section is None:
            results.append(_link_missing(entity, sections, threshold))
            continue

        found = _compare_arguments(entity, section, aliases)
        found[FindingKind.LINK_VERIFIED].append(_link_verified(entity, section))
        for kind in KIND_ORDER:
            results.extend(found[kind])
    return results


def has_blocking(results: list[ValidationResult]) -> bool:
    """True if any finding should fail the build."""
    return any(r.blocking for r in results)
