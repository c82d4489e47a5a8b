"""Terminal telemetry: the TelemetryPort rendered with rich and mirrored to logging."""

import logging

from rich.console import Console
from rich.markup import escape

from refactorkit.domain.protocols import TelemetryPort


class ProjectTelemetry(TelemetryPort):
    """Prefixed status lines on stderr so stdout stays clean for reports."""

    def __init__(
        self,
        project_name: str,
        color: str = "cyan",
        welcome: str = "",
        console: Console | None = None,
    ) -> None:
        self.project_name = project_name
        self.color = color
        self.welcome = welcome
        self.console = console or Console(stderr=True, highlight=False)
        self.logger = logging.getLogger(project_name.lower())

    def handshake(self) -> None:
        """Print the banner line once per run."""
        message = f" {escape(self.welcome)}" if self.welcome else ""
        self.console.print(f"[bold {self.color}]\\[ {self.project_name} ][/]{message}")
        self.logger.info("%s session started", self.project_name)

    def step(self, message: str) -> None:
        self.console.print(f"[{self.color}]>[/] {escape(message)}")
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]warning:[/] {escape(message)}")
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]error:[/] {escape(message)}")
        self.logger.error(message)
