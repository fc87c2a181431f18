"""Baseline of accepted findings.

Lets a legacy project adopt doclink with a green build on day one: the
`baseline` command records every current finding, and `check` then
blocks only on findings that are not in that record.

Findings are matched by fingerprint, which deliberately ignores line
numbers and message wording, so moving a function or rewording a
message does not turn a known finding into a new one.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError

from .errors import BaselineCorruptionError
from .models import ValidationResult

log = logging.getLogger(__name__)

BASELINE_VERSION = 1


# =============================================================================
# File format
# =============================================================================


class BaselineEntry(BaseModel):
    fingerprint: str
    kind: str
    severity: str
    entity: str
    doc_id: str | None = None


class BaselineFile(BaseModel):
    version: Literal[1]
    generated_at: str
    entries: list[BaselineEntry] = []


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class BaselineSnapshot:
    """Accepted findings, loaded once and never mutated during a run."""

    fingerprints: frozenset[str]
    entries: tuple[BaselineEntry, ...] = ()
    generated_at: str | None = None

    def __contains__(self, result: ValidationResult) -> bool:
        return fingerprint(result) in self.fingerprints

    def __len__(self) -> int:
        return len(self.fingerprints)


@dataclass
class BaselineReport:
    """Findings after the baseline has been applied."""

    results: list[ValidationResult] = field(default_factory=list)
    known_count: int = 0

    @property
    def new_findings(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.baselined]

    @property
    def has_blocking(self) -> bool:
        return any(r.blocking for r in self.results)


def fingerprint(result: ValidationResult) -> str:
    """Stable identity of a finding.

    Covers kind, the entity's file and name, the doc id, the offending
    subject and the result's shape. Line numbers and message text are
    left out.
    """
    parts = (
        result.kind.value,
        result.entity.file,
        result.entity.name,
        result.doc_id or "",
        result.subject or "",
        result.shape,
    )
    return hashlib.sha256("\x1f".join(parts).encode()).hexdigest()


# =============================================================================
# Load / apply / dump
# =============================================================================


def load_snapshot(path: Path) -> BaselineSnapshot | None:
    """Read the baseline file.

    Returns:
        None when the file does not exist (no baseline configured).

    Raises:
        BaselineCorruptionError: If the file exists but cannot be read,
            is not valid YAML, or does not match the supported format.
    """
    path = Path(path)
    if not path.exists():
        log.debug(f"No baseline at {path}")
        return None

    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise BaselineCorruptionError(f"cannot read baseline {path}: {e}", str(path)) from e

    if not isinstance(raw, dict):
        raise BaselineCorruptionError(f"baseline {path} is not a mapping", str(path))
    if raw.get("version") != BASELINE_VERSION:
        raise BaselineCorruptionError(
            f"unsupported baseline version {raw.get('version')!r} in {path} (expected {BASELINE_VERSION})",
            str(path),
        )

    try:
        data = BaselineFile.model_validate(raw)
    except ValidationError as e:
        raise BaselineCorruptionError(f"malformed baseline {path}: {e}", str(path)) from e

    log.info(f"Loaded baseline {path}: {len(data.entries)} known findings")
    return BaselineSnapshot(
        fingerprints=frozenset(e.fingerprint for e in data.entries),
        entries=tuple(data.entries),
        generated_at=data.generated_at,
    )


def apply_baseline(
    results: list[ValidationResult],
    snapshot: BaselineSnapshot | None,
) -> BaselineReport:
    """Mark findings already present in the baseline.

    Without a snapshot every finding passes through unchanged. With one,
    matching findings are copied with `baselined=True`: they are still
    reported but no longer block. The input list is not modified.
    """
    if snapshot is None:
        return BaselineReport(results=list(results))

    marked = []
    known = 0
    for result in results:
        if fingerprint(result) in snapshot.fingerprints:
            marked.append(replace(result, baselined=True))
            known += 1
        else:
            marked.append(result)
    return BaselineReport(results=marked, known_count=known)


def snapshot_from_results(results: list[ValidationResult]) -> BaselineSnapshot:
    entries = {}
    for result in results:
        fp = fingerprint(result)
        entries.setdefault(
            fp,
            BaselineEntry(
                fingerprint=fp,
                kind=result.kind.value,
                severity=result.severity.value,
                entity=result.entity.name,
                doc_id=result.doc_id,
            ),
        )
    ordered = tuple(entries[fp] for fp in sorted(entries))
    return BaselineSnapshot(
        fingerprints=frozenset(entries),
        entries=ordered,
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )


def dump_baseline(results: list[ValidationResult], path: Path) -> BaselineSnapshot:
    """Record every finding as accepted, overwriting any previous baseline.

    Runs regardless of how many Errors the findings contain; that is the
    point of taking a baseline.
    """
    path = Path(path)
    snapshot = snapshot_from_results(results)
    data = BaselineFile(
        version=BASELINE_VERSION,
        generated_at=snapshot.generated_at,
        entries=list(snapshot.entries),
    )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data.model_dump(), sort_keys=False))
    log.info(f"Wrote baseline {path}: {len(snapshot)} findings")
    return snapshot
