"""Unit tests for TerminalCheckReporter."""

import io
import json
from unittest.mock import MagicMock

from conftest import GATEWAY, find_violations, parse
from rich.console import Console

from refactorkit.domain.entities import CheckReport, FileFixReport, ScanResult
from refactorkit.domain.rules.command_type import CommandTypeRule
from refactorkit.domain.rules.notified_property import NotifiedSetterRule
from refactorkit.infrastructure.reporters import TerminalCheckReporter
from refactorkit.infrastructure.services.guidance_service import GuidanceService

LEGACY = """public class MainViewModel
{
    private int _count;
    public int Count { get { return _count; } set { SetProperty(ref _count, value); } }
}
"""


def make_reporter() -> tuple[TerminalCheckReporter, io.StringIO, MagicMock]:
    buffer = io.StringIO()
    telemetry = MagicMock()
    reporter = TerminalCheckReporter(
        guidance_service=GuidanceService(),
        telemetry=telemetry,
        console=Console(file=buffer, width=200),
    )
    return reporter, buffer, telemetry


def report_for(text: str) -> CheckReport:
    findings = find_violations(NotifiedSetterRule(), parse(text, "Main.cs"))
    return CheckReport(results=(ScanResult(path="Main.cs", findings=tuple(findings)),))


class TestReportCheck:
    def test_json(self) -> None:
        reporter, buffer, _ = make_reporter()
        reporter.report_check(report_for(LEGACY), format="json")
        payload = json.loads(buffer.getvalue())
        assert payload["files"] == 1
        assert payload["findings"][0]["code"] == "MRK0001"
        assert payload["findings"][0]["path"] == "Main.cs"

    def test_table(self) -> None:
        reporter, buffer, telemetry = make_reporter()
        reporter.report_check(report_for(LEGACY))
        output = buffer.getvalue()
        assert "Main.cs:4:" in output
        assert "MRK0001 (notified-setter)" in output
        assert "auto" in output
        telemetry.step.assert_called_once_with("1 finding(s): MRK0001 Notified Setter: 1")

    def test_clean_report(self) -> None:
        reporter, buffer, telemetry = make_reporter()
        reporter.report_check(CheckReport(results=(ScanResult(path="A.cs"),)))
        assert buffer.getvalue() == ""
        telemetry.step.assert_called_once_with("No legacy MVVM patterns found in 1 file(s).")


class TestReportFixes:
    def test_nothing_to_fix(self) -> None:
        reporter, _, telemetry = make_reporter()
        reporter.report_fixes([])
        telemetry.step.assert_called_once_with("Nothing to fix.")

    def test_declined_reasons_are_warnings(self) -> None:
        reporter, buffer, telemetry = make_reporter()
        report = FileFixReport(
            path="A.cs",
            original_text="a",
            text="b",
            applied=("MRK0001",),
            declined=("MRK0002 A.cs:3:4: fix declined",),
        )
        reporter.report_fixes([report], dry_run=True, diffs={"A.cs": "--- a/A.cs\n+++ b/A.cs\n-a\n+b\n"})
        output = buffer.getvalue()
        assert "Fixes (dry run)" in output
        assert "+++ b/A.cs" in output
        telemetry.warning.assert_called_once_with("MRK0002 A.cs:3:4: fix declined")


class TestReportRules:
    def test_lists_each_rule(self) -> None:
        reporter, buffer, _ = make_reporter()
        reporter.report_rules([NotifiedSetterRule(), CommandTypeRule(type_resolver=GATEWAY)])
        output = buffer.getvalue()
        assert "MRK0001" in output
        assert "simple-command-type" in output
        assert "manual" in output
