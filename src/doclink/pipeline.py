"""End-to-end runs: read files, extract both sides, validate, apply baseline."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .baseline import BaselineReport, BaselineSnapshot, apply_baseline
from .code import LANGUAGES, parse_code
from .config import DoclinkConfig
from .errors import ParseError
from .heuristic import find_candidates
from .models import CodeEntity, DocSection, Suggestion
from .sections import parse_markdown
from .validator import validate_links

log = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")

# Never descended into when walking a directory
SKIP_DIRS = frozenset(
    {".git", ".hg", ".doclink", "node_modules", "target", "__pycache__", ".venv", "venv"}
)

MB = 1024 * 1024
# Larger files are reported as parse failures without being read
MAX_FILE_SIZE = 10 * MB

EXIT_OK = 0
EXIT_BLOCKING = 1
EXIT_FATAL = 2


@dataclass
class CheckOutcome:
    """Everything one validation run produced."""

    entities: list[CodeEntity]
    sections: list[DocSection]
    report: BaselineReport
    failures: list[ParseError] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.failures:
            return EXIT_FATAL
        if self.report.has_blocking:
            return EXIT_BLOCKING
        return EXIT_OK


def collect_files(paths: Iterable[Path], suffixes: Iterable[str]) -> list[Path]:
    """Expand files and directories into a sorted list of matching files.

    Explicitly named files are kept whatever their suffix, so that an
    unsupported file is reported rather than silently ignored.
    """
    suffixes = tuple(s.lower() for s in suffixes)
    found: set[Path] = set()
    for path in paths:
        path = Path(path)
        if path.is_file():
            found.add(path)
            continue
        if not path.is_dir():
            log.warning(f"Skipping {path}: no such file or directory")
            continue
        for candidate in path.rglob("*"):
            if any(part in SKIP_DIRS for part in candidate.relative_to(path).parts[:-1]):
                continue
            if candidate.is_file() and candidate.suffix.lower() in suffixes:
                found.add(candidate)
    return sorted(found)


def _relative(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _read(path: Path, rel: str) -> str:
    """Read a source or markdown file, refusing anything over MAX_FILE_SIZE."""
    try:
        size = path.stat().st_size
        if size > MAX_FILE_SIZE:
            raise ParseError(
                f"{rel}: file too large ({size / MB:.1f} MB, limit {MAX_FILE_SIZE / MB:.0f} MB)", rel
            )
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"{rel}: cannot read file: {e}", rel) from e


def load_entities(
    paths: Iterable[Path],
    root: Path,
    config: DoclinkConfig,
) -> tuple[list[CodeEntity], list[ParseError]]:
    """Parse every source file under `paths`.

    A file that fails to parse is recorded and skipped; the others are
    still processed.

    Returns:
        (entities ordered by file then line, per-file failures)
    """
    entities: list[CodeEntity] = []
    failures: list[ParseError] = []
    for path in collect_files(paths, LANGUAGES):
        rel = _relative(path, root)
        try:
            entities.extend(parse_code(_read(path, rel), rel, annotation=config.annotation))
        except ParseError as e:
            log.warning(f"Skipping {rel}: {e}")
            failures.append(e)
    entities.sort(key=lambda e: (e.file, e.line))
    log.debug(f"Extracted {len(entities)} code entities")
    return entities, failures


def load_sections(
    paths: Iterable[Path],
    root: Path,
    config: DoclinkConfig,
) -> tuple[list[DocSection], list[ParseError]]:
    """Parse every markdown file under `paths`.

    DuplicateDocIdError is not a per-file failure and propagates.

    Returns:
        (sections ordered by file then line, per-file failures)
    """
    sections: list[DocSection] = []
    failures: list[ParseError] = []
    for path in collect_files(paths, MARKDOWN_SUFFIXES):
        rel = _relative(path, root)
        try:
            sections.extend(parse_markdown(_read(path, rel), rel, marker=config.marker))
        except ParseError as e:
            log.warning(f"Skipping {rel}: {e}")
            failures.append(e)
    sections.sort(key=lambda s: (s.file, s.line))
    log.debug(f"Extracted {len(sections)} documentation sections")
    return sections, failures


def run_check(
    code_paths: Iterable[Path],
    doc_paths: Iterable[Path],
    root: Path,
    config: DoclinkConfig,
    snapshot: BaselineSnapshot | None = None,
) -> CheckOutcome:
    """Validate code against documentation and apply the baseline.

    Raises:
        DuplicateDocIdError: If two sections share an id.
    """
    entities, code_failures = load_entities(code_paths, root, config)
    sections, doc_failures = load_sections(doc_paths, root, config)

    results = validate_links(
        entities,
        sections,
        aliases=config.aliases(),
        threshold=config.similarity_threshold,
    )
    report = apply_baseline(results, snapshot)
    log.debug(
        f"Validated {len(entities)} entities against {len(sections)} sections: "
        f"{len(results)} findings, {report.known_count} known"
    )
    return CheckOutcome(
        entities=entities,
        sections=sections,
        report=report,
        failures=code_failures + doc_failures,
    )


def suggest(
    code_paths: Iterable[Path],
    doc_paths: Iterable[Path],
    root: Path,
    config: DoclinkConfig,
) -> tuple[list[Suggestion], list[ParseError]]:
    """Propose links for unlinked functions.

    Returns:
        (suggestions in entity order, per-file failures)
    """
    entities, code_failures = load_entities(code_paths, root, config)
    sections, doc_failures = load_sections(doc_paths, root, config)
    suggestions = find_candidates(entities, sections, config.similarity_threshold)
    return suggestions, code_failures + doc_failures
