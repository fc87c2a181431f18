"""doclink: keep source code and its markdown documentation in sync."""

from .baseline import (
    BaselineReport,
    BaselineSnapshot,
    apply_baseline,
    dump_baseline,
    fingerprint,
    load_snapshot,
)
from .code import parse_annotation, parse_code
from .config import DoclinkConfig, load_config
from .errors import (
    BaselineCorruptionError,
    ConfigError,
    DoclinkError,
    DuplicateDocIdError,
    ParseError,
    UnsupportedFileError,
)
from .heuristic import find_candidates
from .models import (
    Arg,
    CodeEntity,
    DocSection,
    FindingKind,
    Parameter,
    Severity,
    Suggestion,
    ValidationResult,
)
from .pipeline import CheckOutcome, run_check
from .sections import parse_markdown
from .types import CanonicalType, normalize
from .validator import has_blocking, validate_links

__all__ = [
    # Models
    "Arg",
    "CodeEntity",
    "DocSection",
    "FindingKind",
    "Parameter",
    "Severity",
    "Suggestion",
    "ValidationResult",
    "CanonicalType",
    # Parsing
    "parse_code",
    "parse_annotation",
    "parse_markdown",
    # Validation
    "normalize",
    "validate_links",
    "has_blocking",
    "find_candidates",
    # Baseline
    "BaselineReport",
    "BaselineSnapshot",
    "apply_baseline",
    "dump_baseline",
    "fingerprint",
    "load_snapshot",
    # Runs
    "CheckOutcome",
    "DoclinkConfig",
    "load_config",
    "run_check",
    # Exceptions
    "DoclinkError",
    "ParseError",
    "UnsupportedFileError",
    "DuplicateDocIdError",
    "BaselineCorruptionError",
    "ConfigError",
]
