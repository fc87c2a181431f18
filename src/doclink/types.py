"""Type token normalization.

Code and documentation spell the same type in different ways (`&str`,
`String`, `text`). Both sides are reduced to a small canonical set
before comparison. Anything we do not recognise becomes UNKNOWN, and
UNKNOWN never produces a mismatch.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum


class CanonicalType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    UNKNOWN = "unknown"


_STRING_TOKENS = (
    "string",
    "str",
    "&str",
    "&string",
    "text",
    "varchar",
    "char",
    "character varying",
    "uuid",
    "citext",
    "bpchar",
)

_NUMBER_TOKENS = (
    "number",
    "int",
    "integer",
    "float",
    "double",
    "double precision",
    "decimal",
    "numeric",
    "real",
    "bigint",
    "smallint",
    "long",
    "short",
    "int2",
    "int4",
    "int8",
    "float4",
    "float8",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "isize",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "usize",
    "f32",
    "f64",
)

_BOOLEAN_TOKENS = ("bool", "boolean")

_OBJECT_TOKENS = (
    "object",
    "dict",
    "map",
    "record",
    "json",
    "jsonb",
    "hashmap",
    "mapping",
)

BUILTIN_ALIASES: dict[str, CanonicalType] = {
    **{t: CanonicalType.STRING for t in _STRING_TOKENS},
    **{t: CanonicalType.NUMBER for t in _NUMBER_TOKENS},
    **{t: CanonicalType.BOOLEAN for t in _BOOLEAN_TOKENS},
    **{t: CanonicalType.OBJECT for t in _OBJECT_TOKENS},
    # Canonical names map to themselves so normalize() is idempotent
    **{c.value: c for c in CanonicalType},
}

# Optional[T], Option<T>, T | None, None | T, T?
_OPTIONAL_PATTERNS = (
    re.compile(r"^optional\[(.+)\]$"),
    re.compile(r"^option<(.+)>$"),
    re.compile(r"^(.+?)\s*\|\s*(?:none|null|undefined)$"),
    re.compile(r"^(?:none|null|undefined)\s*\|\s*(.+)$"),
    re.compile(r"^(.+)\?$"),
)


def _clean(token: str) -> str:
    cleaned = token.strip().strip("`").strip().lower()
    return re.sub(r"\s+", " ", cleaned)


def _unwrap_optional(token: str) -> str:
    for pattern in _OPTIONAL_PATTERNS:
        match = pattern.match(token)
        if match:
            return _unwrap_optional(match.group(1).strip())
    return token


def build_alias_table(
    overrides: Mapping[str, CanonicalType | str] | None = None,
) -> dict[str, CanonicalType]:
    """Merge caller-supplied aliases over the built-in table.

    Args:
        overrides: Raw token -> canonical type. Keys are matched
            case-insensitively. Values may be enum members or names.

    Returns:
        A new lookup table; configuration entries win over built-ins.

    Raises:
        ValueError: If an override names a type outside the canonical set.
    """
    table = dict(BUILTIN_ALIASES)
    for raw, canonical in (overrides or {}).items():
        table[_clean(raw)] = CanonicalType(canonical)
    return table


def normalize(
    raw_token: str | None,
    aliases: Mapping[str, CanonicalType] | None = None,
) -> CanonicalType:
    """Map a raw type token to its canonical type.

    Args:
        raw_token: The type as written in code or documentation.
        aliases: A table from build_alias_table(). Defaults to the
            built-in table.

    Returns:
        The canonical type, or UNKNOWN for absent or unrecognised tokens.
    """
    if raw_token is None:
        return CanonicalType.UNKNOWN
    if isinstance(raw_token, CanonicalType):
        return raw_token
    table = aliases if aliases is not None else BUILTIN_ALIASES

    token = _clean(raw_token)
    if not token:
        return CanonicalType.UNKNOWN
    if token in table:
        return table[token]

    unwrapped = _unwrap_optional(token)
    if unwrapped in table:
        return table[unwrapped]
    return CanonicalType.UNKNOWN


def types_conflict(
    code_token: str | None,
    doc_token: str | None,
    aliases: Mapping[str, CanonicalType] | None = None,
) -> bool:
    """True when both tokens are known and normalize differently."""
    if code_token is None or doc_token is None:
        return False
    code_type = normalize(code_token, aliases)
    doc_type = normalize(doc_token, aliases)
    if CanonicalType.UNKNOWN in (code_type, doc_type):
        return False
    return code_type is not doc_type
