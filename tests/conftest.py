"""Shared pytest fixtures for doclink tests."""

import pytest

from doclink.models import (
    Arg,
    CodeEntity,
    DocSection,
    FindingKind,
    Parameter,
    Severity,
    ValidationResult,
)

from tests.helpers import API_MD, AUTH_PY, ProjectFiles


@pytest.fixture
def project(tmp_path):
    """
    Empty project tree in a temporary directory.

    Example:
        def test_check(project):
            project.write("src/auth.py", "def login(): pass")
    """
    return ProjectFiles(tmp_path)


@pytest.fixture
def auth_project(project):
    """Project with one linked function, one unlinked, and two sections."""
    project.write("src/auth.py", AUTH_PY)
    project.write("docs/api.md", API_MD)
    return project


@pytest.fixture
def make_entity():
    """
    Factory for CodeEntity values.

    Params are given as "name" or "name:type" strings.

    Example:
        make_entity("login", ["username:str", "password"], doc_id="auth-login")
    """

    def _make(name="login", params=(), doc_id=None, file="src/auth.py", line=1, language="python"):
        parsed = []
        for raw in params:
            pname, _, ptype = raw.partition(":")
            parsed.append(Parameter(pname, ptype or None))
        return CodeEntity(
            name=name,
            file=file,
            line=line,
            params=parsed,
            doc_id=doc_id,
            language=language,
        )

    return _make


@pytest.fixture
def make_section():
    """
    Factory for DocSection values.

    Args are given as "name" or "name:type" strings.
    """

    def _make(doc_id="auth-login", args=(), title=None, file="docs/api.md", line=1):
        parsed = []
        for raw in args:
            aname, _, atype = raw.partition(":")
            parsed.append(Arg(aname, atype or None, f"{aname} description"))
        return DocSection(id=doc_id, file=file, line=line, title=title, args=parsed)

    return _make


@pytest.fixture
def make_result(make_entity):
    """Factory for ValidationResult values with sensible defaults."""

    def _make(
        kind=FindingKind.LINK_MISSING,
        severity=Severity.ERROR,
        entity=None,
        doc_id="auth-login",
        subject=None,
        line=12,
        message="something is wrong",
        hint="fix it",
    ):
        entity = entity or make_entity(doc_id=doc_id, line=line)
        return ValidationResult(
            severity=severity,
            kind=kind,
            file=entity.file,
            line=line,
            message=message,
            entity=entity,
            doc_id=doc_id,
            subject=subject,
            shape=f"{kind.value}:{subject or doc_id}",
            hint=hint,
        )

    return _make
