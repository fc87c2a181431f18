"""TypeScript/JavaScript and Rust declarations via tree-sitter.

TypeScript files use the typescript grammar; JavaScript and JSX files
use the tsx grammar, which also accepts untyped parameters and JSX.
JavaScript parameters carry no type token.
"""

from __future__ import annotations

from pathlib import Path

import tree_sitter_rust
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..code import Declaration
from ..errors import ParseError
from ..models import Parameter

TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())
RUST = Language(tree_sitter_rust.language())

_TS_SUFFIXES = (".ts", ".mts", ".cts")

TS_FUNCTIONS = frozenset({"function_declaration", "generator_function_declaration", "method_definition"})
TS_FUNCTION_VALUES = frozenset({"arrow_function", "function_expression", "function", "generator_function"})
TS_PARAMETERS = frozenset({"required_parameter", "optional_parameter"})

# Nodes that may wrap a declaration without moving its comment block
_WRAPPERS = frozenset({"export_statement", "lexical_declaration", "variable_declaration"})
# Lines allowed between the comment block and the declaration
_DECORATIONS = frozenset({"decorator", "attribute_item"})
_COMMENTS = frozenset({"comment", "line_comment", "block_comment"})


def _grammar(file: str, language: str) -> Language:
    if language == "rust":
        return RUST
    if Path(file).suffix.lower() in _TS_SUFFIXES:
        return TYPESCRIPT
    return TSX


def _text(node: Node, data: bytes) -> str:
    return data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _row(node: Node) -> int:
    return node.start_point[0]


def _last_row(node: Node, data: bytes) -> int:
    # Rust line comments include their newline
    return _row(node) + _text(node, data).rstrip("\n").count("\n")


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


# =============================================================================
# Leading comments
# =============================================================================


def _anchor(node: Node) -> Node:
    while node.parent is not None and node.parent.type in _WRAPPERS:
        node = node.parent
    return node


def _is_trailing(comment: Node) -> bool:
    """A comment that ends a line of code, e.g. `x = 1; // note`."""
    previous = comment.prev_sibling
    return (
        previous is not None
        and previous.type not in _COMMENTS
        and previous.end_point[0] == _row(comment)
    )


def _leading_comment(node: Node, data: bytes) -> str | None:
    """Comment nodes directly above `node`, skipping decorators and attributes."""
    anchor = _anchor(node)
    next_row = _row(anchor)
    collected: list[str] = []
    sibling = anchor.prev_named_sibling
    while sibling is not None:
        if _last_row(sibling, data) < next_row - 1:
            break
        if sibling.type in _DECORATIONS:
            if collected:
                break
        elif sibling.type in _COMMENTS and not _is_trailing(sibling):
            text = _text(sibling, data).rstrip("\n")
            collected.extend(reversed([line.strip() for line in text.splitlines()]))
        else:
            break
        next_row = _row(sibling)
        sibling = sibling.prev_named_sibling

    if not collected:
        return None
    return "\n".join(reversed(collected))


# =============================================================================
# Parameters
# =============================================================================


def _type_annotation(node: Node | None, data: bytes) -> str | None:
    """`: string` -> `string`."""
    if node is None:
        return None
    named = node.named_children
    return _text(named[0], data) if named else None


def _ts_parameter(node: Node, data: bytes) -> Parameter | None:
    pattern = node.child_by_field_name("pattern")
    if pattern is None:
        return None
    if pattern.type == "rest_pattern" and pattern.named_children:
        pattern = pattern.named_children[0]
    # `this` typing and destructuring have no single name to document
    if pattern.type != "identifier":
        return None
    return Parameter(
        name=_text(pattern, data),
        type_token=_type_annotation(node.child_by_field_name("type"), data),
    )


def _ts_parameters(function: Node, data: bytes) -> list[Parameter]:
    single = function.child_by_field_name("parameter")
    if single is not None:  # x => x
        return [Parameter(name=_text(single, data))]
    params_node = function.child_by_field_name("parameters")
    if params_node is None:
        return []
    params = []
    for child in params_node.named_children:
        if child.type in TS_PARAMETERS:
            param = _ts_parameter(child, data)
            if param is not None:
                params.append(param)
    return params


def _rust_parameters(function: Node, data: bytes) -> list[Parameter]:
    params_node = function.child_by_field_name("parameters")
    if params_node is None:
        return []
    params = []
    for child in params_node.named_children:
        # self_parameter is the receiver, not an argument
        if child.type != "parameter":
            continue
        pattern = child.child_by_field_name("pattern")
        if pattern is None or pattern.type != "identifier":
            continue
        type_node = child.child_by_field_name("type")
        params.append(
            Parameter(
                name=_text(pattern, data),
                type_token=_text(type_node, data) if type_node is not None else None,
            )
        )
    return params


# =============================================================================
# Declarations
# =============================================================================


def _declaration(node: Node, name: Node, params: list[Parameter], data: bytes) -> Declaration:
    return Declaration(
        name=_text(name, data),
        line=_row(name) + 1,
        params=params,
        leading_comment=_leading_comment(node, data),
    )


def _collect_typescript(node: Node, data: bytes, out: list[Declaration]) -> None:
    for child in node.named_children:
        if child.type in TS_FUNCTIONS:
            name = child.child_by_field_name("name")
            if name is not None:
                out.append(_declaration(child, name, _ts_parameters(child, data), data))
        elif child.type == "variable_declarator":
            name = child.child_by_field_name("name")
            value = child.child_by_field_name("value")
            is_function = value is not None and value.type in TS_FUNCTION_VALUES
            if is_function and name is not None and name.type == "identifier":
                out.append(_declaration(child, name, _ts_parameters(value, data), data))
        _collect_typescript(child, data, out)


def _collect_rust(node: Node, data: bytes, out: list[Declaration]) -> None:
    for child in node.named_children:
        if child.type == "function_item":
            name = child.child_by_field_name("name")
            if name is not None:
                out.append(_declaration(child, name, _rust_parameters(child, data), data))
        _collect_rust(child, data, out)


def parse_clike(source: str, file: str, language: str) -> list[Declaration]:
    """Extract function declarations from TypeScript/JavaScript or Rust source.

    TypeScript: function declarations, functions and arrows bound to a
    `const`/`let`/`var`, and class methods. Rust: every `fn` item,
    including those in `impl`, `trait` and `mod` blocks.

    Args:
        source: File contents.
        file: Path used in error messages and to pick the grammar.
        language: "typescript" or "rust".

    Raises:
        ParseError: If the source has a syntax error.
    """
    data = source.encode("utf-8")
    tree = Parser(_grammar(file, language)).parse(data)
    root = tree.root_node

    if root.has_error:
        error = _first_error(root) or root
        what = f"missing '{error.type}'" if error.is_missing else "syntax error"
        raise ParseError(f"{file}:{_row(error) + 1}: {what}", file)

    declarations: list[Declaration] = []
    if language == "rust":
        _collect_rust(root, data, declarations)
    else:
        _collect_typescript(root, data, declarations)
    declarations.sort(key=lambda d: d.line)
    return declarations
