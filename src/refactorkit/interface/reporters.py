"""Protocol for check/fix reporting - no infrastructure imports."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from refactorkit.domain.entities import CheckReport, FileFixReport
    from refactorkit.domain.rules import BaseRule


class CheckReporter(Protocol):
    """Protocol for presenting findings, fix outcomes and the rule catalogue."""

    def report_check(self, report: "CheckReport", format: str = "table") -> None:
        """Report scan findings. format: 'table' (default) or 'json'."""
        ...

    def report_fixes(
        self, reports: "list[FileFixReport]", dry_run: bool = False, diffs: "dict[str, str] | None" = None
    ) -> None:
        """Report applied and declined fixes; print diffs in dry-run mode."""
        ...

    def report_rules(self, rules: "list[BaseRule]") -> None:
        """List rules with severity, fixability and description."""
        ...
