"""CLI entry points for refactorkit - Thin Controller using Typer."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import typer

from refactorkit.domain.config import ConfigurationLoader
from refactorkit.domain.constants import REFACTORKIT_BANNER
from refactorkit.domain.errors import OperationCancelledError, RefactorKitError
from refactorkit.domain.protocols import GuidanceServiceProtocol, TelemetryPort
from refactorkit.domain.rules import BaseRule
from refactorkit.interface.reporters import CheckReporter
from refactorkit.use_cases.apply_fixes import ApplyFixesUseCase
from refactorkit.use_cases.check_source import CheckSourceUseCase

EXIT_FINDINGS = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    config_loader: ConfigurationLoader
    telemetry: TelemetryPort
    reporter: CheckReporter
    guidance_service: GuidanceServiceProtocol
    rules: list[BaseRule]
    check_use_case: CheckSourceUseCase
    fix_use_case: ApplyFixesUseCase


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def resolve_rule_codes(
        rules: list[str] | None, guidance_service: GuidanceServiceProtocol
    ) -> list[str] | None:
        """Map --rule values (codes or symbols) to codes. Raises typer.BadParameter for unknown ones."""
        if not rules:
            return None
        codes: list[str] = []
        for value in rules:
            code = guidance_service.resolve_code(value)
            if code is None:
                raise typer.BadParameter(f"Unknown rule '{value}'", param_hint="--rule")
            codes.append(code)
        return codes

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="refactorkit",
            help=(
                "refactorkit: migrate hand-written MVVM boilerplate to CommunityToolkit.Mvvm. "
                "Run 'refactorkit check' to report; 'refactorkit fix' to rewrite."
            ),
            add_completion=False,
        )

        @app.callback()
        def main(
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
        ) -> None:
            """Configure logging before any command runs."""
            logging.basicConfig(
                level=logging.DEBUG if verbose else logging.WARNING,
                format="%(levelname)s %(name)s: %(message)s",
            )

        def _session_start() -> None:
            """Print banner then handshake. Use at start of each command (not in --help)."""
            typer.echo(REFACTORKIT_BANNER, err=True)
            deps.telemetry.handshake()

        @app.command()
        def check(
            path: Path = typer.Argument(Path("."), help="File or directory to scan"),  # noqa: B008
            format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
            jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Worker threads"),
        ) -> None:
            """Report legacy MVVM patterns. Exits 1 when any are found."""
            if format not in ("table", "json"):
                raise typer.BadParameter("must be 'table' or 'json'", param_hint="--format")
            if format == "table":
                _session_start()
            cancel = threading.Event()
            try:
                report = deps.check_use_case.execute(str(path), jobs=jobs, cancel=cancel)
            except KeyboardInterrupt:
                cancel.set()
                deps.telemetry.error("Interrupted.")
                raise typer.Exit(EXIT_INTERRUPTED) from None
            except OperationCancelledError as e:
                deps.telemetry.error(str(e))
                raise typer.Exit(EXIT_INTERRUPTED) from e
            deps.reporter.report_check(report, format=format)
            if report.has_findings():
                raise typer.Exit(EXIT_FINDINGS)

        @app.command()
        def fix(
            path: Path = typer.Argument(Path("."), help="File or directory to rewrite"),  # noqa: B008
            rule: list[str] | None = typer.Option(  # noqa: B008
                None, "--rule", "-r", help="Only fix this rule (code or symbol); repeatable"
            ),
            dry_run: bool = typer.Option(False, "--dry-run", help="Show a diff instead of writing"),
            no_backup: bool = typer.Option(False, "--no-backup", help="Do not write .bak files"),
        ) -> None:
            """Apply every available automatic fix, file by file."""
            _session_start()
            codes = CLIAppFactory.resolve_rule_codes(rule, deps.guidance_service)
            cancel = threading.Event()
            try:
                reports = deps.fix_use_case.execute(
                    str(path),
                    codes=codes,
                    dry_run=dry_run,
                    backup=False if no_backup else None,
                    cancel=cancel,
                )
            except KeyboardInterrupt:
                cancel.set()
                deps.telemetry.error("Interrupted.")
                raise typer.Exit(EXIT_INTERRUPTED) from None
            except OperationCancelledError as e:
                deps.telemetry.error(str(e))
                raise typer.Exit(EXIT_INTERRUPTED) from e
            except RefactorKitError as e:
                deps.telemetry.error(str(e))
                raise typer.Exit(EXIT_USAGE) from e

            diffs = (
                {r.path: deps.fix_use_case.diff(r) for r in reports if r.changed} if dry_run else None
            )
            deps.reporter.report_fixes(reports, dry_run=dry_run, diffs=diffs)
            applied = sum(len(r.applied) for r in reports)
            verb = "would apply" if dry_run else "applied"
            deps.telemetry.step(f"{verb} {applied} fix(es) in {sum(1 for r in reports if r.changed)} file(s)")

        @app.command()
        def rules() -> None:
            """List the rules, their severity and whether they fix automatically."""
            enabled = {r.code for r in deps.check_use_case.rules}
            deps.reporter.report_rules(deps.rules)
            disabled = [r.code for r in deps.rules if r.code not in enabled]
            if disabled:
                deps.telemetry.step(f"Disabled by configuration: {', '.join(disabled)}")

        return app
