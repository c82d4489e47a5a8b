"""Use Case: Check Source - Scan C# documents for legacy MVVM shapes."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from refactorkit.domain.entities import CheckReport, ScanResult
from refactorkit.domain.errors import OperationCancelledError
from refactorkit.domain.syntax import CSharpSyntax

if TYPE_CHECKING:
    from refactorkit.domain.config import ConfigurationLoader
    from refactorkit.domain.entities import SourceDocument
    from refactorkit.domain.protocols import (
        CancellationSignal,
        FileSystemProtocol,
        SyntaxGatewayProtocol,
        TelemetryPort,
    )
    from refactorkit.domain.rules import BaseRule, Violation

logger = logging.getLogger(__name__)

BOM = "\ufeff"


class CheckSourceUseCase:
    """
    Run the enabled rules over documents.

    Scans are read-only and keep their findings local, so one instance may scan many
    documents concurrently.
    """

    def __init__(
        self,
        syntax_gateway: "SyntaxGatewayProtocol",
        rules: "list[BaseRule]",
        filesystem: "FileSystemProtocol",
        telemetry: "TelemetryPort",
        config_loader: "ConfigurationLoader",
    ) -> None:
        self.syntax_gateway = syntax_gateway
        self.filesystem = filesystem
        self.telemetry = telemetry
        self.config_loader = config_loader
        self.rules = [r for r in rules if config_loader.is_rule_enabled(r.code, r.symbol)]
        self._dispatch: dict[str, list["BaseRule"]] = {}
        for rule in self.rules:
            for kind in rule.node_kinds:
                self._dispatch.setdefault(kind, []).append(rule)

    def scan(
        self, document: "SourceDocument", cancel: "CancellationSignal | None" = None
    ) -> ScanResult:
        """
        Visit every node once and hand it to the rules registered for its kind.

        Findings come back in document order. Raises OperationCancelledError when the
        signal is set between rule invocations.
        """
        findings: list["Violation"] = []
        for node in CSharpSyntax.walk(document.root):
            for rule in self._dispatch.get(node.type, ()):
                if cancel is not None and cancel.is_set():
                    raise OperationCancelledError(f"Scan of {document.path} cancelled")
                findings.extend(rule.check(node, document))
        return ScanResult(
            path=document.path, findings=tuple(findings), parse_errors=document.has_errors
        )

    def load(self, path: str) -> "SourceDocument":
        """Read and parse one file. A byte-order mark is not part of the parsed text."""
        text = self.filesystem.read_text(path)
        if text.startswith(BOM):
            text = text[len(BOM):]
        return self.syntax_gateway.parse(text, self.filesystem.relative_to_cwd(path))

    def check_file(self, path: str, cancel: "CancellationSignal | None" = None) -> ScanResult:
        """Load and scan one file."""
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(f"Scan of {path} cancelled")
        document = self.load(path)
        if document.has_errors:
            logger.debug("%s has syntax errors; shapes inside them are not reported", document.path)
        return self.scan(document, cancel)

    def source_files(self, target_path: str) -> list[str]:
        """Files under target_path selected by include/exclude configuration."""
        return self.filesystem.glob_source_files(
            self.filesystem.resolve_path(target_path),
            self.config_loader.include,
            self.config_loader.exclude,
        )

    def execute(
        self,
        target_path: str,
        jobs: int | None = None,
        cancel: "CancellationSignal | None" = None,
    ) -> CheckReport:
        """
        Scan every selected file under target_path.

        Args:
            target_path: File or directory to scan.
            jobs: Worker threads; defaults to the configured 'jobs'.
            cancel: Optional cooperative cancellation signal.

        Returns:
            CheckReport with one ScanResult per file, in path order.
        """
        files = self.source_files(target_path)
        workers = max(1, jobs or self.config_loader.jobs)
        self.telemetry.step(f"Scanning {len(files)} file(s) in {target_path}")

        if workers == 1 or len(files) < 2:
            results = [self.check_file(path, cancel) for path in files]
        else:
            signal = cancel if cancel is not None else threading.Event()
            with ThreadPoolExecutor(max_workers=workers) as executor:
                try:
                    results = list(executor.map(lambda p: self.check_file(p, signal), files))
                except KeyboardInterrupt:
                    # running scans stop at their next rule invocation
                    signal.set()
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise

        for result in results:
            if result.parse_errors:
                self.telemetry.warning(f"{result.path}: syntax errors, results may be incomplete")
        return CheckReport(results=tuple(results))
