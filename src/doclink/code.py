"""Code entity extraction.

Language adapters in `doclink.lang` walk a syntax tree and hand back
Declaration records. This module turns them into CodeEntity values,
reading the `@docs: [id]` annotation from the comment block that sits
directly above each declaration.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ParseError, UnsupportedFileError
from .models import CodeEntity, Parameter

log = logging.getLogger(__name__)

DEFAULT_ANNOTATION = "@docs"

# Comment leaders stripped before looking for the annotation
_COMMENT_PREFIX_RE = re.compile(r"^\s*(?:///?|#|--|/\*\*?|\*/?)\s?")

LANGUAGES: dict[str, str] = {
    ".py": "python",
    ".sql": "sql",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".jsx": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".rs": "rust",
}


@dataclass
class Declaration:
    """A function declaration as reported by a language adapter."""

    name: str
    line: int
    params: list[Parameter] = field(default_factory=list)
    leading_comment: str | None = None  # Contiguous comment block, no blank gap


def _annotation_pattern(annotation: str) -> re.Pattern[str]:
    return re.compile(r"^" + re.escape(annotation) + r"\s*:\s*\[?\s*([^\]\s]+)\s*\]?\s*$")


def parse_annotation(comment: str | None, annotation: str = DEFAULT_ANNOTATION) -> str | None:
    """Extract the documentation id from a comment block.

    Accepts `/// @docs: [auth-login]`, `# @docs: auth-login` and the
    same forms inside block comments.

    Raises:
        ParseError: If the block names two different ids.
    """
    if not comment:
        return None
    pattern = _annotation_pattern(annotation)
    found: list[str] = []
    for line in comment.splitlines():
        content = _COMMENT_PREFIX_RE.sub("", line, count=1).strip()
        content = content.removesuffix("*/").strip()
        match = pattern.match(content)
        if match and match.group(1) not in found:
            found.append(match.group(1))
    if len(found) > 1:
        raise ParseError(
            f"declaration is linked to more than one documentation id: {', '.join(found)}"
        )
    return found[0] if found else None


def extract_entities(
    declarations: list[Declaration],
    file: str,
    language: str = "",
    annotation: str = DEFAULT_ANNOTATION,
) -> list[CodeEntity]:
    """Convert adapter declarations into CodeEntity values.

    Every declaration becomes an entity; only annotated ones carry a
    doc_id. Unlinked entities stay eligible for heuristic matching.
    """
    entities = []
    for decl in declarations:
        try:
            doc_id = parse_annotation(decl.leading_comment, annotation)
        except ParseError as e:
            raise ParseError(f"{file}:{decl.line}: fn {decl.name}: {e}", file) from e
        entities.append(
            CodeEntity(
                name=decl.name,
                file=file,
                line=decl.line,
                params=list(decl.params),
                doc_id=doc_id,
                language=language,
            )
        )
    linked = sum(1 for e in entities if e.doc_id)
    log.debug(f"{file}: {len(entities)} functions, {linked} linked")
    return entities


def detect_language(path: str | Path) -> str:
    """Map a file extension to an adapter name.

    Raises:
        UnsupportedFileError: For extensions no adapter handles.
    """
    suffix = Path(path).suffix.lower()
    if not suffix:
        raise UnsupportedFileError(
            f"{path}: file has no extension, cannot determine its language", str(path)
        )
    try:
        return LANGUAGES[suffix]
    except KeyError:
        supported = ", ".join(sorted(LANGUAGES))
        raise UnsupportedFileError(
            f"{path}: unsupported extension '{suffix}' (supported: {supported})", str(path)
        ) from None


def parse_declarations(source: str, file: str, language: str) -> list[Declaration]:
    """Run the adapter for `language` over `source`."""
    # Imported here: the adapters import Declaration from this module
    if language == "python":
        from .lang.python import parse_python

        return parse_python(source, file)
    if language == "sql":
        from .lang.sql import parse_sql

        return parse_sql(source, file)
    if language in ("typescript", "rust"):
        from .lang.clike import parse_clike

        return parse_clike(source, file, language)
    raise UnsupportedFileError(f"{file}: no adapter for language '{language}'", file)


def parse_code(
    source: str,
    file: str,
    language: str | None = None,
    annotation: str = DEFAULT_ANNOTATION,
) -> list[CodeEntity]:
    """Parse source text into CodeEntity values.

    Args:
        source: File contents.
        file: Path recorded on each entity; also used to pick the
            language when `language` is None.
        language: Adapter name, see LANGUAGES.
        annotation: Token that introduces the documentation id.

    Raises:
        ParseError: If the source cannot be parsed.
        UnsupportedFileError: If no adapter handles the file.
    """
    language = language or detect_language(file)
    declarations = parse_declarations(source, file, language)
    return extract_entities(declarations, file, language, annotation)
