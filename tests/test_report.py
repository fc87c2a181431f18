"""Report rendering tests."""

from dataclasses import replace

from doclink.baseline import BaselineReport
from doclink.models import FindingKind, Severity, Suggestion
from doclink.report import format_report, format_result, format_suggestion


class TestFormatResult:
    """Every finding renders as three lines: what, why, what next."""

    def test_three_lines(self, make_result):
        result = make_result(
            doc_id="auth-logn",
            message="documentation id 'auth-logn' was not found in any documentation file.",
            hint="did you mean 'auth-login'?",
        )
        lines = format_result(result).splitlines()
        assert lines == [
            "[X] Error: LINK_MISSING in fn login (src/auth.py:12)",
            "    -> documentation id 'auth-logn' was not found in any documentation file.",
            "    -> Linked id: 'auth-logn' | Next: did you mean 'auth-login'?",
        ]

    def test_warning_icon(self, make_result):
        result = make_result(kind=FindingKind.GHOST_ARGUMENT, severity=Severity.WARNING, subject="x")
        assert format_result(result).startswith("[!] Warning: GHOST_ARGUMENT in fn login")

    def test_info_without_hint(self, make_result):
        result = make_result(kind=FindingKind.LINK_VERIFIED, severity=Severity.INFO, hint=None)
        lines = format_result(result).splitlines()
        assert lines[0].startswith("[i] Info: LINK_VERIFIED")
        assert lines[2] == "    -> Linked id: 'auth-login'"

    def test_baselined_marked(self, make_result):
        result = replace(make_result(), baselined=True)
        assert format_result(result).splitlines()[0].endswith("[baseline]")


class TestFormatReport:
    def test_info_hidden_by_default(self, make_result):
        info = make_result(kind=FindingKind.LINK_VERIFIED, severity=Severity.INFO)
        error = make_result()
        text = format_report(BaselineReport(results=[info, error]))
        assert "LINK_VERIFIED" not in text
        assert "LINK_MISSING" in text

    def test_show_info(self, make_result):
        info = make_result(kind=FindingKind.LINK_VERIFIED, severity=Severity.INFO)
        assert "LINK_VERIFIED" in format_report(BaselineReport(results=[info]), show_info=True)

    def test_summary_counts_new_findings_only(self, make_result):
        warning = make_result(kind=FindingKind.MISSING_ARGUMENT, severity=Severity.WARNING, subject="p")
        known = replace(make_result(), baselined=True)
        new_error = make_result(doc_id="other")
        report = BaselineReport(results=[warning, known, new_error], known_count=1)
        summary = format_report(report).splitlines()[-1]
        assert summary == "Summary: 1 errors, 1 warnings, 1 known (baseline)"

    def test_empty(self):
        assert format_report(BaselineReport()) == "Summary: 0 errors, 0 warnings, 0 known (baseline)"


class TestFormatSuggestion:
    def test_contents(self, make_entity, make_section):
        suggestion = Suggestion(
            entity=make_entity("createUser", line=7),
            section=make_section("users-create", title="Create User", line=12),
            score=0.9166,
        )
        text = format_suggestion(suggestion, 1, 3)
        assert "Suggestion 1/3" in text
        assert "createUser (src/auth.py:7)" in text
        assert "'Create User' [id: users-create]" in text
        assert "92%" in text
