"""Documentation section extraction.

A section opens at a hidden marker (`<!-- @docs-id: auth-login -->`)
and runs to the next marker or the end of the document. Its argument
list comes from the first argument block recognised by one of a fixed
family of shapes, tried in priority order:

1. TableShape      | Param | Type | Description |
2. ListShape       - `name` (`type`): description
3. DefinitionShape `name` (type): description, one per line

The order matters because a body can satisfy more than one shape; the
table is the most explicit, so it always wins.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

from .errors import DuplicateDocIdError
from .markdown import Block, tokenize
from .models import Arg, DocSection

log = logging.getLogger(__name__)

DEFAULT_MARKER = "@docs-id"

IDENT_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
TERM_RE = re.compile(r"^(?:`(?P<code>[^`]+)`|(?P<bare>[A-Za-z_$*.][\w$.*]*\??))(?P<rest>.*)$")
DELIM_RE = re.compile(r"^(?:\s*:|\s+[-—–])\s*")
INLINE_TYPE_RE = re.compile(r"^(`[^`]+`|[A-Za-z_&][\w&<>\[\]|?.,]*)\s*:\s*(.*)$")
SEPARATOR_CELL_RE = re.compile(r"^:?-{1,}:?$")
CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")


def _clean_name(raw: str) -> str:
    """Strip markup around an argument name (`**name**`, `...args`, `name?`)."""
    name = raw.strip().strip("`").strip("*").strip()
    if name.startswith("..."):
        name = name[3:]
    return name.rstrip("?")


def parse_term(text: str, require_description: bool = False) -> Arg | None:
    """Parse `name [(type)|`type`] <delim> description` into an Arg.

    Also accepts the list form `name: type: description`. Returns None
    when the text does not start with a single identifier followed by a
    delimiter, which keeps ordinary prose out.
    """
    match = TERM_RE.match(text.strip())
    if not match:
        return None
    name = _clean_name(match.group("code") or match.group("bare"))
    if not IDENT_RE.match(name):
        return None

    rest = match.group("rest")
    type_token = None
    lead = rest.lstrip()
    if lead.startswith("("):
        close = lead.find(")")
        if close == -1:
            return None
        type_token = lead[1:close].strip().strip("`").strip() or None
        rest = lead[close + 1 :]
    elif lead.startswith("`"):
        close = lead.find("`", 1)
        if close == -1:
            return None
        type_token = lead[1:close].strip() or None
        rest = lead[close + 1 :]

    delim = DELIM_RE.match(rest)
    if not delim:
        return None
    description = rest[delim.end() :].strip()

    if type_token is None and delim.group(0).strip() == ":":
        inline = INLINE_TYPE_RE.match(description)
        if inline:
            type_token = inline.group(1).strip("`")
            description = inline.group(2).strip()

    if require_description and not description:
        return None
    return Arg(name=name, type_token=type_token, description=description)


# =============================================================================
# ARGUMENT SHAPES
# =============================================================================


class ArgumentShape(ABC):
    """One way of writing an argument block.

    Subclasses scan the section body and return the arguments of the
    first block they recognise, or an empty list.
    """

    name: str

    @abstractmethod
    def extract(self, blocks: list[Block]) -> list[Arg]:
        """Return the arguments of the first matching block, or []."""


class TableShape(ArgumentShape):
    name = "table"

    @staticmethod
    def _cells(row: str) -> list[str]:
        row = row.strip()
        if row.startswith("|"):
            row = row[1:]
        if row.endswith("|") and not row.endswith("\\|"):
            row = row[:-1]
        return [c.strip().replace("\\|", "|") for c in CELL_SPLIT_RE.split(row)]

    @staticmethod
    def _find_column(headers: list[str], needles: tuple[str, ...]) -> int | None:
        for i, header in enumerate(headers):
            lower = header.lower()
            if any(n in lower for n in needles):
                return i
        return None

    def _extract_table(self, block: Block) -> list[Arg]:
        if len(block.lines) < 2:
            return []
        headers = [h.strip("`*_ ") for h in self._cells(block.lines[0])]
        separator = self._cells(block.lines[1])
        if not all(SEPARATOR_CELL_RE.match(c) for c in separator if c):
            return []

        name_col = self._find_column(headers, ("param", "name", "arg"))
        if name_col is None:
            return []
        type_col = self._find_column(headers, ("type",))
        desc_col = self._find_column(headers, ("desc",))

        args = []
        for row in block.lines[2:]:
            cells = self._cells(row)
            if name_col >= len(cells):
                continue
            name = _clean_name(cells[name_col])
            if not name or " " in name:
                continue
            type_token = None
            if type_col is not None and type_col < len(cells):
                type_token = cells[type_col].strip("`").strip() or None
            description = ""
            if desc_col is not None and desc_col < len(cells):
                description = cells[desc_col]
            args.append(Arg(name=name, type_token=type_token, description=description))
        return args

    def extract(self, blocks: list[Block]) -> list[Arg]:
        for block in blocks:
            if block.kind == "table":
                args = self._extract_table(block)
                if args:
                    return args
        return []


class ListShape(ArgumentShape):
    name = "list"

    def extract(self, blocks: list[Block]) -> list[Arg]:
        for block in blocks:
            if block.kind != "list" or not block.lines:
                continue
            args = [parse_term(item) for item in block.lines]
            if all(arg is not None for arg in args):
                return args
        return []


class DefinitionShape(ArgumentShape):
    """Definition lines in a paragraph.

    A lone `Word: text` line reads as prose ("Returns: 200 when up."),
    so a single bare untyped term only counts under a caption line.
    """

    name = "definition"

    @staticmethod
    def _is_explicit(line: str, arg: Arg) -> bool:
        return line.lstrip().startswith("`") or arg.type_token is not None

    def extract(self, blocks: list[Block]) -> list[Arg]:
        for block in blocks:
            if block.kind != "paragraph":
                continue
            lines = list(block.lines)
            # A lead-in caption such as "Parameters:" is not a definition
            captioned = bool(lines) and lines[0].endswith(":") and parse_term(lines[0], True) is None
            if captioned:
                lines = lines[1:]
            if not lines:
                continue
            args = [parse_term(line, require_description=True) for line in lines]
            if not all(arg is not None for arg in args):
                continue
            if captioned or len(args) > 1 or self._is_explicit(lines[0], args[0]):
                return args
        return []


SHAPES: tuple[ArgumentShape, ...] = (TableShape(), ListShape(), DefinitionShape())


def extract_arguments(blocks: list[Block]) -> tuple[list[Arg], str | None]:
    """Try each shape in priority order; first non-empty result wins.

    Returns:
        (args, shape name). A body with no argument block gives ([], None),
        which is legal: a parameterless endpoint documents no arguments.
    """
    for shape in SHAPES:
        args = shape.extract(blocks)
        if args:
            return args, shape.name
    return [], None


# =============================================================================
# SECTIONS
# =============================================================================


def _marker_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(r"<!--\s*" + re.escape(marker) + r"\s*:\s*(.*?)\s*-->", re.DOTALL)


def extract_sections(
    blocks: list[Block],
    file: str,
    marker: str = DEFAULT_MARKER,
) -> list[DocSection]:
    """Group blocks into sections and extract their arguments.

    Args:
        blocks: Output of markdown.tokenize().
        file: Path recorded on each section.
        marker: Token inside the HTML comment that carries the id.

    Returns:
        Sections in document order.

    Raises:
        DuplicateDocIdError: If two markers in the document share an id.
    """
    pattern = _marker_pattern(marker)
    opened: list[tuple[str, int, list[Block]]] = []
    seen: dict[str, int] = {}

    for block in blocks:
        if block.kind == "html":
            match = pattern.search(block.text)
            if match:
                doc_id = match.group(1).strip()
                if not doc_id:
                    log.warning(f"{file}:{block.line}: empty {marker} marker ignored")
                    continue
                if doc_id in seen:
                    raise DuplicateDocIdError(doc_id, file, seen[doc_id], block.line)
                seen[doc_id] = block.line
                opened.append((doc_id, block.line, []))
                continue
        if opened:
            opened[-1][2].append(block)

    sections = []
    for doc_id, line, body in opened:
        title = next((b.text.strip() for b in body if b.kind == "heading"), None)
        args, shape = extract_arguments(body)
        sections.append(
            DocSection(
                id=doc_id,
                file=file,
                line=line,
                title=title or None,
                args=args,
                shape=shape,
            )
        )
    log.debug(f"{file}: {len(sections)} documentation sections")
    return sections


def parse_markdown(text: str, file: str, marker: str = DEFAULT_MARKER) -> list[DocSection]:
    """Tokenize markdown text and extract its sections."""
    return extract_sections(tokenize(text), file, marker)
