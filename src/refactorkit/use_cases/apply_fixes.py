"""Use Case: Apply Fixes - Rewrite findings one at a time against fresh snapshots."""

import difflib
import logging
from typing import TYPE_CHECKING

from refactorkit.domain.entities import FileFixReport, FixResult
from refactorkit.domain.errors import (
    OperationCancelledError,
    StaleSnapshotError,
    UnfixableError,
)
from refactorkit.use_cases.check_source import BOM

if TYPE_CHECKING:
    from refactorkit.domain.config import ConfigurationLoader
    from refactorkit.domain.entities import SourceDocument
    from refactorkit.domain.protocols import (
        CancellationSignal,
        FileSystemProtocol,
        SyntaxGatewayProtocol,
        TelemetryPort,
        TreeEditorProtocol,
    )
    from refactorkit.domain.rules import Violation
    from refactorkit.use_cases.check_source import CheckSourceUseCase

logger = logging.getLogger(__name__)


class ApplyFixesUseCase:
    """
    Plan and apply rule fixes.

    Only one rewrite is in flight per document version: every applied fix produces new
    text, which is re-parsed and re-scanned before the next finding is attempted.
    """

    def __init__(
        self,
        check_use_case: "CheckSourceUseCase",
        syntax_gateway: "SyntaxGatewayProtocol",
        editor: "TreeEditorProtocol",
        filesystem: "FileSystemProtocol",
        telemetry: "TelemetryPort",
        config_loader: "ConfigurationLoader",
    ) -> None:
        self.check_use_case = check_use_case
        self.syntax_gateway = syntax_gateway
        self.editor = editor
        self.filesystem = filesystem
        self.telemetry = telemetry
        self.config_loader = config_loader
        self._rules = {rule.code: rule for rule in check_use_case.rules}

    @staticmethod
    def _check_cancelled(cancel: "CancellationSignal | None", what: str) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(f"{what} cancelled")

    def fix_violation(
        self,
        violation: "Violation",
        document: "SourceDocument",
        cancel: "CancellationSignal | None" = None,
    ) -> FixResult:
        """
        Fix one finding against the given snapshot.

        Returns the replacement text, or an explicit no-change result carrying the reason
        (no automatic fix, fix declined, stale snapshot, nothing to change).
        """
        rule = self._rules.get(violation.code)
        if rule is None:
            return FixResult.no_change(document, f"{violation.code} is not an enabled rule")

        self._check_cancelled(cancel, f"{violation.code} fix")
        try:
            edits = rule.fix(violation, document)
        except StaleSnapshotError as e:
            logger.info("%s: %s; re-scan the current text and retry", violation.location, e)
            return FixResult.no_change(document, f"stale snapshot: {e}")
        except UnfixableError as e:
            logger.debug("%s: fix declined: %s", violation.location, e)
            return FixResult.no_change(document, f"fix declined: {e}")

        if edits is None:
            return FixResult.no_change(
                document, f"no automatic fix: {rule.get_fix_instructions(violation)}"
            )
        if not edits:
            return FixResult.no_change(document, "nothing to change")

        self._check_cancelled(cancel, f"{violation.code} fix")
        try:
            text = self.editor.apply(document, edits)
        except StaleSnapshotError as e:
            logger.info("%s: %s; re-scan the current text and retry", violation.location, e)
            return FixResult.no_change(document, f"stale snapshot: {e}")

        if text == document.text:
            return FixResult.no_change(document, "nothing to change")
        return FixResult(path=document.path, changed=True, text=text)

    @staticmethod
    def _selected(violation: "Violation", codes: list[str] | None) -> bool:
        return not codes or violation.code in codes or violation.symbol in codes

    def fix_document(
        self,
        document: "SourceDocument",
        codes: list[str] | None = None,
        cancel: "CancellationSignal | None" = None,
    ) -> FileFixReport:
        """
        Apply every available fix in one document, first finding first.

        After each applied fix the new text is parsed and scanned again. Findings whose
        fix was declined are remembered by (code, message, occurrence) and skipped.
        """
        original = document.text
        applied: list[str] = []
        declined: list[str] = []
        skipped: set[tuple[str, str, int]] = set()
        remaining = 2 * len(self.check_use_case.scan(document, cancel).findings) + 1

        while remaining > 0:
            remaining -= 1
            scan = self.check_use_case.scan(document, cancel)
            candidate = None
            seen: dict[tuple[str, str], int] = {}
            for violation in scan.findings:
                if not self._selected(violation, codes):
                    continue
                occurrence = seen.get((violation.code, violation.message), 0)
                seen[(violation.code, violation.message)] = occurrence + 1
                key = (violation.code, violation.message, occurrence)
                if key not in skipped:
                    candidate = (violation, key)
                    break
            if candidate is None:
                break

            violation, key = candidate
            result = self.fix_violation(violation, document, cancel)
            if result.changed:
                applied.append(violation.code)
                document = self.syntax_gateway.parse(result.text, document.path)
            else:
                skipped.add(key)
                declined.append(f"{violation.location} {violation.code}: {result.reason}")
        else:
            logger.warning("%s: stopped after repeated fixes; re-run to continue", document.path)

        return FileFixReport(
            path=document.path,
            original_text=original,
            text=document.text,
            applied=tuple(applied),
            declined=tuple(declined),
        )

    @staticmethod
    def diff(report: FileFixReport) -> str:
        """Unified diff between the original and fixed text."""
        return "".join(
            difflib.unified_diff(
                report.original_text.splitlines(keepends=True),
                report.text.splitlines(keepends=True),
                fromfile=f"a/{report.path}",
                tofile=f"b/{report.path}",
            )
        )

    def execute(
        self,
        target_path: str,
        codes: list[str] | None = None,
        dry_run: bool = False,
        backup: bool | None = None,
        cancel: "CancellationSignal | None" = None,
    ) -> list[FileFixReport]:
        """
        Fix every selected file under target_path.

        Args:
            target_path: File or directory.
            codes: Restrict to these rule codes or symbols.
            dry_run: Compute fixes without writing files.
            backup: Write '<file>.bak' first; defaults to the 'backup' setting.
            cancel: Optional cooperative cancellation signal, checked between files and steps.

        Returns:
            One FileFixReport per file that had selected findings.
        """
        make_backup = self.config_loader.create_backups if backup is None else backup
        reports: list[FileFixReport] = []
        for path in self.check_use_case.source_files(target_path):
            self._check_cancelled(cancel, "fix run")
            had_bom = self.filesystem.read_text(path).startswith(BOM)
            document = self.check_use_case.load(path)
            report = self.fix_document(document, codes, cancel)
            if not report.applied and not report.declined:
                continue
            reports.append(report)
            if not report.changed:
                continue
            if dry_run:
                self.telemetry.step(f"{report.path}: {len(report.applied)} fix(es) (dry run)")
                continue
            if make_backup:
                self.filesystem.backup(path)
            self.filesystem.write_text(path, (BOM if had_bom else "") + report.text)
            self.telemetry.step(f"{report.path}: applied {', '.join(report.applied)}")
        return reports
