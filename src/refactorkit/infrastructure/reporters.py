"""Terminal reporter implementation - rich tables on stdout, JSON for machines."""

import json
from collections import Counter
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from refactorkit.interface.reporters import CheckReporter

if TYPE_CHECKING:
    from refactorkit.domain.entities import CheckReport, FileFixReport
    from refactorkit.domain.protocols import GuidanceServiceProtocol, TelemetryPort
    from refactorkit.domain.rules import BaseRule


class TerminalCheckReporter(CheckReporter):
    """Terminal reporter using rich tables. Implements CheckReporter."""

    def __init__(
        self,
        guidance_service: "GuidanceServiceProtocol",
        telemetry: "TelemetryPort",
        console: Console | None = None,
    ) -> None:
        self._guidance = guidance_service
        self._telemetry = telemetry
        self._console = console or Console(highlight=False)

    def report_check(self, report: "CheckReport", format: str = "table") -> None:
        """Report scan findings as a table (grouped summary below) or as JSON."""
        findings = report.findings
        if format == "json":
            payload = {
                "files": len(report.results),
                "findings": [v.to_dict() for v in findings],
            }
            self._console.print_json(json.dumps(payload))
            return

        if not findings:
            self._telemetry.step(f"No legacy MVVM patterns found in {len(report.results)} file(s).")
            return

        table = Table(title="Legacy MVVM patterns", show_lines=False)
        table.add_column("Location", style="cyan", no_wrap=True)
        table.add_column("Rule", style="bold")
        table.add_column("Severity")
        table.add_column("Fix")
        table.add_column("Message")
        for violation in findings:
            table.add_row(
                escape(violation.location),
                f"{violation.code} ({violation.symbol})",
                f"[red]{violation.severity}[/]",
                "auto" if violation.fixable else "manual",
                escape(violation.message),
            )
        self._console.print(table)

        counts = Counter(v.code for v in findings)
        summary = ", ".join(
            f"{code} {self._guidance.get_display_name(code)}: {count}"
            for code, count in sorted(counts.items())
        )
        self._telemetry.step(f"{len(findings)} finding(s): {summary}")

    def report_fixes(
        self,
        reports: "list[FileFixReport]",
        dry_run: bool = False,
        diffs: "dict[str, str] | None" = None,
    ) -> None:
        """Report per-file fix outcomes; diffs are printed when given (dry run)."""
        if not reports:
            self._telemetry.step("Nothing to fix.")
            return

        table = Table(title="Fixes (dry run)" if dry_run else "Fixes")
        table.add_column("File", style="cyan", no_wrap=True)
        table.add_column("Applied", justify="right")
        table.add_column("Declined", justify="right")
        for report in reports:
            table.add_row(escape(report.path), str(len(report.applied)), str(len(report.declined)))
        self._console.print(table)

        for report in reports:
            for reason in report.declined:
                self._telemetry.warning(reason)
            diff = (diffs or {}).get(report.path)
            if diff:
                self._console.print(Syntax(diff, "diff", theme="ansi_dark", word_wrap=False))

    def report_rules(self, rules: "list[BaseRule]") -> None:
        """List rules with severity, fixability, description and documentation link."""
        table = Table(title="refactorkit rules")
        table.add_column("Code", style="bold")
        table.add_column("Symbol")
        table.add_column("Severity")
        table.add_column("Fix")
        table.add_column("Description")
        table.add_column("Docs", overflow="fold")
        for rule in rules:
            entry = self._guidance.get_entry(rule.code) or {}
            table.add_row(
                rule.code,
                rule.symbol,
                rule.severity,
                "auto" if rule.fix_type == "code" else "manual",
                escape(str(entry.get("short_description") or rule.description)),
                str(entry.get("help_uri") or ""),
            )
        self._console.print(table)
