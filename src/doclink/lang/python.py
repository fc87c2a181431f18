"""Python declarations via the standard library `ast` module."""

from __future__ import annotations

import ast

from ..code import Declaration
from ..errors import ParseError
from ..models import Parameter

_RECEIVERS = ("self", "cls")


def _parameter(arg: ast.arg) -> Parameter:
    type_token = ast.unparse(arg.annotation) if arg.annotation is not None else None
    return Parameter(name=arg.arg, type_token=type_token)


def _parameters(node: ast.FunctionDef | ast.AsyncFunctionDef, in_class: bool) -> list[Parameter]:
    args = node.args
    positional = [*args.posonlyargs, *args.args]
    if in_class and positional and positional[0].arg in _RECEIVERS:
        positional = positional[1:]

    params = [_parameter(a) for a in positional]
    if args.vararg is not None:
        params.append(_parameter(args.vararg))
    params.extend(_parameter(a) for a in args.kwonlyargs)
    if args.kwarg is not None:
        params.append(_parameter(args.kwarg))
    return params


def _leading_comment(lines: list[str], first_line: int) -> str | None:
    """Collect the `#` comment lines directly above `first_line` (1-based)."""
    collected = []
    i = first_line - 2
    while i >= 0 and lines[i].strip().startswith("#"):
        collected.append(lines[i].strip())
        i -= 1
    if not collected:
        return None
    return "\n".join(reversed(collected))


def _collect(nodes, lines: list[str], out: list[Declaration], in_class: bool) -> None:
    for node in nodes:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            # Comments sit above the decorators, not between them and `def`
            first = min([d.lineno for d in node.decorator_list] + [node.lineno])
            out.append(
                Declaration(
                    name=node.name,
                    line=node.lineno,
                    params=_parameters(node, in_class),
                    leading_comment=_leading_comment(lines, first),
                )
            )
            _collect(node.body, lines, out, in_class=False)
        elif isinstance(node, ast.ClassDef):
            _collect(node.body, lines, out, in_class=True)
        else:
            children = [
                c
                for c in ast.iter_child_nodes(node)
                if isinstance(c, (ast.stmt, ast.excepthandler))
            ]
            _collect(children, lines, out, in_class)


def parse_python(source: str, file: str) -> list[Declaration]:
    """Extract function and method declarations from Python source.

    Raises:
        ParseError: If the source is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=file)
    except SyntaxError as e:
        raise ParseError(f"{file}:{e.lineno}: {e.msg}", file) from e
    except ValueError as e:  # e.g. source containing null bytes
        raise ParseError(f"{file}: {e}", file) from e

    declarations: list[Declaration] = []
    _collect(tree.body, source.splitlines(), declarations, in_class=False)
    declarations.sort(key=lambda d: d.line)
    return declarations
