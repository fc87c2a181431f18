"""Exception hierarchy for doclink.

Validation findings are never raised; they are returned as
ValidationResult values. The exceptions here cover the failure modes
of the engine itself: unreadable inputs, ambiguous documentation ids,
and a corrupt baseline.
"""

from __future__ import annotations


class DoclinkError(Exception):
    """Base exception for doclink operations."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ParseError(DoclinkError):
    """Raised when a source or markdown file cannot be parsed.

    Fatal for that single file only; callers report it and move on.
    """


class UnsupportedFileError(ParseError):
    """Raised when no language adapter handles a file extension."""


class DuplicateDocIdError(DoclinkError):
    """Raised when two documentation sections share one id.

    The link target is ambiguous, so validation against the document
    must stop rather than guess.
    """

    def __init__(
        self,
        doc_id: str,
        path: str | None = None,
        first_line: int | None = None,
        line: int | None = None,
    ):
        where = f" in {path}" if path else ""
        lines = ""
        if first_line is not None and line is not None:
            lines = f" (lines {first_line} and {line})"
        super().__init__(f"duplicate documentation id '{doc_id}'{where}{lines}", path)
        self.doc_id = doc_id
        self.first_line = first_line
        self.line = line


class BaselineCorruptionError(DoclinkError):
    """Raised when the baseline file exists but cannot be trusted.

    Never downgraded to "no baseline": that would hide every regression
    the baseline had previously accepted.
    """


class ConfigError(DoclinkError):
    """Raised when the configuration file is unreadable or invalid."""

    def __init__(self, message: str, path: str | None = None, details=None):
        super().__init__(message, path)
        self.details = details or []
