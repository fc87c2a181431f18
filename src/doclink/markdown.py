"""Line-based markdown tokenizer.

Produces the coarse block sequence the section extractor works on:
headings, HTML comments, tables, bulleted lists, paragraphs and fenced
code. Inline markup is left in the block text untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
LIST_ITEM_RE = re.compile(r"^(\s*)(?:[-*+]|\d+[.)])\s+(.*)$")
TABLE_LINE_RE = re.compile(r"^\s*\|")
HTML_COMMENT_START = "<!--"
HTML_COMMENT_END = "-->"


@dataclass
class Block:
    """A block-level markdown token."""

    kind: str  # "heading" | "html" | "table" | "list" | "paragraph" | "code"
    line: int  # 1-based line of the first source line
    lines: list[str] = field(default_factory=list)
    level: int = 0  # Heading level, 0 for other kinds

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def tokenize(text: str) -> list[Block]:
    """Split markdown text into blocks.

    List blocks hold one entry per item, with continuation lines folded
    into the item they belong to. Table blocks hold raw row lines.
    """
    blocks: list[Block] = []
    current: Block | None = None
    lines = text.splitlines()
    i = 0

    def close() -> None:
        nonlocal current
        if current is not None:
            blocks.append(current)
            current = None

    while i < len(lines):
        raw = lines[i]
        lineno = i + 1
        stripped = raw.strip()

        fence = FENCE_RE.match(raw)
        if fence:
            close()
            marker = fence.group(1)[0] * 3
            body = [raw]
            i += 1
            while i < len(lines):
                body.append(lines[i])
                if lines[i].strip().startswith(marker):
                    i += 1
                    break
                i += 1
            blocks.append(Block("code", lineno, body))
            continue

        if stripped.startswith(HTML_COMMENT_START):
            close()
            body = [raw]
            while HTML_COMMENT_END not in body[-1] and i + 1 < len(lines):
                i += 1
                body.append(lines[i])
            blocks.append(Block("html", lineno, body))
            i += 1
            continue

        heading = HEADING_RE.match(raw)
        if heading:
            close()
            blocks.append(
                Block("heading", lineno, [heading.group(2)], len(heading.group(1)))
            )
            i += 1
            continue

        if not stripped:
            close()
            i += 1
            continue

        if TABLE_LINE_RE.match(raw):
            if current is None or current.kind != "table":
                close()
                current = Block("table", lineno)
            current.lines.append(stripped)
            i += 1
            continue

        item = LIST_ITEM_RE.match(raw)
        if item:
            if current is None or current.kind != "list":
                close()
                current = Block("list", lineno)
            current.lines.append(item.group(2).strip())
            i += 1
            continue

        if current is not None and current.kind == "list" and raw[:1].isspace():
            # Continuation of the previous list item
            current.lines[-1] = f"{current.lines[-1]} {stripped}"
            i += 1
            continue

        if current is None or current.kind != "paragraph":
            close()
            current = Block("paragraph", lineno)
        current.lines.append(stripped)
        i += 1

    close()
    return blocks
