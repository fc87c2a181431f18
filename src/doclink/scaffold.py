"""Interactive linking: confirm suggestions, then write annotations.

The only part of doclink that edits source files, and only for
suggestions the user accepted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .code import DEFAULT_ANNOTATION
from .models import Suggestion
from .report import format_suggestion

log = logging.getLogger(__name__)

COMMENT_PREFIXES = {
    "python": "#",
    "sql": "--",
    "typescript": "//",
    "rust": "///",
}

ANSWERS = {
    "y": "accept",
    "yes": "accept",
    "n": "reject",
    "no": "reject",
    "s": "skip",
    "skip": "skip",
    "q": "quit",
    "quit": "quit",
}

PROMPT = "Link this function to this section? [y]es / [n]o / [s]kip / [q]uit: "


def confirm(
    suggestions: list[Suggestion],
    ask: Callable[[str], str],
    assume_yes: bool = False,
    echo: Callable[[str], None] = print,
) -> list[Suggestion]:
    """Walk the user through each suggestion.

    Args:
        suggestions: Proposals from heuristic.find_candidates().
        ask: Shows a prompt and returns the user's answer (e.g. input).
        assume_yes: Accept everything without asking.
        echo: Output sink for the suggestion text.

    Returns:
        The accepted suggestions, in the order given. `q` stops asking
        and keeps what was accepted so far.
    """
    accepted = []
    total = len(suggestions)
    for index, suggestion in enumerate(suggestions, 1):
        echo(format_suggestion(suggestion, index, total))
        if assume_yes:
            accepted.append(suggestion)
            continue

        decision = None
        while decision is None:
            decision = ANSWERS.get(ask(PROMPT).strip().lower())
        if decision == "quit":
            break
        if decision == "accept":
            accepted.append(suggestion)
    log.debug(f"{len(accepted)} of {total} suggestions accepted")
    return accepted


def annotation_line(
    language: str,
    doc_id: str,
    indent: str = "",
    annotation: str = DEFAULT_ANNOTATION,
) -> str:
    """`/// @docs: [auth-login]` with the comment leader for `language`."""
    prefix = COMMENT_PREFIXES.get(language, "//")
    return f"{indent}{prefix} {annotation}: [{doc_id}]"


def _is_decoration(line: str) -> bool:
    stripped = line.lstrip()
    return stripped.startswith(("@", "#["))


def _bracket_balance(line: str) -> int:
    return sum(line.count(c) for c in ")]}") - sum(line.count(c) for c in "([{")


def _decoration_start(lines: list[str], index: int) -> int:
    """First line of the decorators or attributes above `lines[index]`.

    A decorator may span several lines (`@route(\\n "/x",\\n)`); its
    continuation lines are stepped over until the brackets balance.
    """
    start = index
    open_brackets = 0
    i = index - 1
    while i >= 0:
        open_brackets += _bracket_balance(lines[i])
        if open_brackets <= 0:
            if not _is_decoration(lines[i]):
                break
            start = i
            open_brackets = 0
        i -= 1
    return start


def apply_links(
    path: Path,
    accepted: list[Suggestion],
    language: str,
    annotation: str = DEFAULT_ANNOTATION,
) -> int:
    """Insert an annotation comment above each accepted declaration.

    The comment goes above any decorators or attributes, indented like
    the declaration itself. Line endings and the trailing newline of
    the file are preserved.

    Returns:
        Number of annotations written.
    """
    path = Path(path)
    with open(path, encoding="utf-8", newline="") as f:
        text = f.read()
    lines = text.splitlines(keepends=True)
    newline = "\r\n" if "\r\n" in text else "\n"

    inserts: dict[int, str] = {}
    for suggestion in accepted:
        index = suggestion.entity.line - 1
        if not 0 <= index < len(lines):
            log.warning(f"{path}: line {suggestion.entity.line} out of range, skipping {suggestion.entity.name}")
            continue
        declaration = lines[index]
        indent = declaration[: len(declaration) - len(declaration.lstrip())]
        index = _decoration_start(lines, index)
        inserts[index] = annotation_line(language, suggestion.section.id, indent, annotation) + newline

    for index in sorted(inserts, reverse=True):
        lines.insert(index, inserts[index])

    if inserts:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write("".join(lines))
        log.info(f"Wrote {len(inserts)} annotations to {path}")
    return len(inserts)
