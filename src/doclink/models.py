"""Data models shared by the extractors, validator, matcher and baseline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Parameter:
    """A parameter of a code declaration."""

    name: str
    type_token: str | None = None  # None for untyped languages


@dataclass
class CodeEntity:
    """A function or method extracted from source code."""

    name: str
    file: str  # Project-relative path
    line: int
    params: list[Parameter] = field(default_factory=list)
    doc_id: str | None = None  # From the @docs annotation
    language: str = ""  # "python" | "sql" | "typescript" | "rust"

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Arg:
    """An argument documented inside a markdown section."""

    name: str
    type_token: str | None = None
    description: str = ""


@dataclass
class DocSection:
    """A markdown section opened by a documentation id marker."""

    id: str
    file: str
    line: int  # Line of the marker comment
    title: str | None = None
    args: list[Arg] = field(default_factory=list)
    shape: str | None = None  # "table" | "list" | "definition"

    @property
    def display_title(self) -> str:
        return self.title or self.id


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class FindingKind(str, Enum):
    LINK_VERIFIED = "link_verified"
    LINK_MISSING = "link_missing"
    MISSING_ARGUMENT = "missing_argument"
    GHOST_ARGUMENT = "ghost_argument"
    TYPE_MISMATCH = "type_mismatch"


# Order in which findings for one entity are emitted.
KIND_ORDER = (
    FindingKind.LINK_VERIFIED,
    FindingKind.LINK_MISSING,
    FindingKind.MISSING_ARGUMENT,
    FindingKind.GHOST_ARGUMENT,
    FindingKind.TYPE_MISMATCH,
)


@dataclass
class ValidationResult:
    """A single finding produced by the link validator.

    `shape` is the stable part of the finding used for baseline
    fingerprints: it never contains line numbers or free-form text.
    """

    severity: Severity
    kind: FindingKind
    file: str
    line: int
    message: str
    entity: CodeEntity
    section: DocSection | None = None
    doc_id: str | None = None
    subject: str | None = None  # Offending argument or id
    shape: str = ""
    hint: str | None = None
    suggested_id: str | None = None
    baselined: bool = False  # Set by the baseline engine only

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    @property
    def blocking(self) -> bool:
        return self.severity is Severity.ERROR and not self.baselined


@dataclass(frozen=True)
class Suggestion:
    """A proposed link between an unlinked entity and an untargeted section."""

    entity: CodeEntity
    section: DocSection
    score: float
