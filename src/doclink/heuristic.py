"""Name-similarity link suggestions.

Proposes a documentation section for each function that has no
`@docs` annotation, comparing the function name with the titles of
sections nobody links to yet. Suggestions are only proposals; the
scaffold command asks before anything is written.
"""

from __future__ import annotations

import re

from .models import CodeEntity, DocSection, Suggestion

DEFAULT_THRESHOLD = 0.80

_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_WORD_RE = re.compile(r"[^0-9a-zA-Z]+")


def split_identifier(name: str) -> str:
    """`createUser`, `create_user`, `HTTPServer.start` -> words, lowercased."""
    spaced = _ACRONYM_RE.sub(r"\1 \2", name)
    spaced = _CAMEL_RE.sub(r"\1 \2", spaced)
    return " ".join(_NON_WORD_RE.sub(" ", spaced).lower().split())


def normalize_title(title: str) -> str:
    """Lowercase and strip punctuation: `Create User()` -> `create user`."""
    return " ".join(_NON_WORD_RE.sub(" ", title).lower().split())


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1].

    Identical non-empty strings score 1.0. Two empty strings carry no
    evidence of a match and score 0.0.
    """
    if not a and not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def section_key(section: DocSection) -> str:
    if section.title:
        return normalize_title(section.title)
    return normalize_title(section.id)


def find_candidates(
    entities: list[CodeEntity],
    sections: list[DocSection],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Suggestion]:
    """Suggest links for unlinked entities.

    Only entities without a doc_id and sections no entity targets take
    part. A pair is proposed when its score is strictly above
    `threshold`; per entity the best score wins, ties going to the
    section that appears first in document order.

    Returns:
        Suggestions in entity order.
    """
    targeted = {e.doc_id for e in entities if e.doc_id}
    open_sections = [s for s in sections if s.id not in targeted]
    keys = [(s, section_key(s)) for s in open_sections]

    suggestions = []
    for entity in entities:
        if entity.doc_id:
            continue
        name_key = split_identifier(entity.name)
        best: Suggestion | None = None
        for section, key in keys:
            score = similarity(name_key, key)
            if score <= threshold:
                continue
            if best is None or score > best.score:
                best = Suggestion(entity=entity, section=section, score=score)
        if best is not None:
            suggestions.append(best)
    return suggestions


def closest_section_id(
    doc_id: str,
    sections: list[DocSection],
    threshold: float = DEFAULT_THRESHOLD,
) -> str | None:
    """Best existing id for a dangling link, e.g. a typo in `@docs`."""
    target = normalize_title(doc_id)
    best_id = None
    best_score = threshold
    for section in sections:
        score = similarity(target, normalize_title(section.id))
        if score > best_score:
            best_id, best_score = section.id, score
    return best_id
