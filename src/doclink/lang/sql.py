"""SQL function declarations via pglast."""

from __future__ import annotations

import re

import pglast
from pglast.enums import FunctionParameterMode

from ..code import Declaration
from ..errors import ParseError
from ..models import Parameter

# Output columns are not inputs the caller passes
_OUTPUT_MODES = frozenset(
    {FunctionParameterMode.FUNC_PARAM_OUT, FunctionParameterMode.FUNC_PARAM_TABLE}
)

# Whitespace and comments between the previous ';' and the next statement
_LEADING_TRIVIA_RE = re.compile(r"(?:\s+|--[^\n]*|/\*.*?\*/)*", re.DOTALL)


def _type_name_to_str(tn) -> str | None:
    """Convert pglast TypeName to string."""
    if tn is None:
        return None
    names = [n.sval for n in tn.names]
    # Skip common schema prefixes for cleaner output
    if names and names[0] in ("pg_catalog", "public"):
        names = names[1:]
    base = ".".join(names)
    if tn.arrayBounds:
        base += "[]"
    if tn.setof:
        return f"setof {base}"
    return base


def _statement_line(source: str, byte_offset: int) -> int:
    """1-based line of the first token at or after `byte_offset`.

    pglast reports byte offsets, and the first statement always starts
    at offset 0 even when comments precede it.
    """
    prefix = source.encode()[:byte_offset].decode(errors="ignore")
    rest = source[len(prefix) :]
    skip = _LEADING_TRIVIA_RE.match(rest).end()
    return source[: len(prefix) + skip].count("\n") + 1


def _leading_comment(lines: list[str], line: int) -> str | None:
    collected = []
    i = line - 2
    while i >= 0 and lines[i].strip().startswith("--"):
        collected.append(lines[i].strip())
        i -= 1
    if not collected:
        return None
    return "\n".join(reversed(collected))


def parse_sql(source: str, file: str) -> list[Declaration]:
    """Extract CREATE FUNCTION declarations from SQL source.

    Raises:
        ParseError: If pglast cannot parse the file.
    """
    try:
        stmts = pglast.parse_sql(source)
    except pglast.Error as e:
        raise ParseError(f"{file}: {e}", file) from e

    lines = source.splitlines()
    declarations = []
    for stmt in stmts:
        if not isinstance(stmt.stmt, pglast.ast.CreateFunctionStmt):
            continue

        func = stmt.stmt
        func_name = ".".join(n.sval for n in func.funcname)

        params = []
        for p in func.parameters or ():
            if not p.name or p.mode in _OUTPUT_MODES:
                continue
            params.append(Parameter(name=p.name, type_token=_type_name_to_str(p.argType)))

        line = _statement_line(source, stmt.stmt_location or 0)
        declarations.append(
            Declaration(
                name=func_name,
                line=line,
                params=params,
                leading_comment=_leading_comment(lines, line),
            )
        )
    return declarations
