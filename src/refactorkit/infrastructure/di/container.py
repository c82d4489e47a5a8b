from typing import TYPE_CHECKING, Any, Optional, cast

from refactorkit.domain.config import ConfigurationLoader
from refactorkit.domain.rules.command_type import CommandTypeRule
from refactorkit.domain.rules.delegate_command import DelegateCommandRule
from refactorkit.domain.rules.notified_property import NotifiedSetterRule
from refactorkit.infrastructure.config_file_loader import ConfigFileLoader
from refactorkit.infrastructure.gateways.csharp_printer import CSharpPrinter
from refactorkit.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from refactorkit.infrastructure.gateways.tree_editor import TreeSitterEditGateway
from refactorkit.infrastructure.gateways.tree_sitter_gateway import TreeSitterGateway
from refactorkit.infrastructure.reporters import TerminalCheckReporter
from refactorkit.infrastructure.services.guidance_service import GuidanceService
from refactorkit.interface.telemetry import ProjectTelemetry
from refactorkit.use_cases.apply_fixes import ApplyFixesUseCase
from refactorkit.use_cases.check_source import CheckSourceUseCase

if TYPE_CHECKING:
    from refactorkit.domain.protocols import (
        FileSystemProtocol,
        GuidanceServiceProtocol,
        SyntaxGatewayProtocol,
        TelemetryPort,
        TreeEditorProtocol,
    )
    from refactorkit.domain.rules import BaseRule
    from refactorkit.interface.reporters import CheckReporter


class RefactorKitContainer:
    """Dependency Injection Container for refactorkit."""

    _instance: Optional["RefactorKitContainer"] = None

    def __init__(self, config_dict: dict[str, object] | None = None) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults(config_dict)

    def _register_defaults(self, config_dict: dict[str, object] | None) -> None:
        """Register default implementations for protocols."""
        if config_dict is None:
            config_dict = ConfigFileLoader.load_config_from_fs()
        config_loader = ConfigurationLoader(config_dict)
        self.register_singleton("ConfigurationLoader", config_loader)

        telemetry = ProjectTelemetry("REFACTORKIT", "cyan", "MVVM boilerplate migration")
        self.register_singleton("TelemetryPort", telemetry)

        guidance_service = GuidanceService()
        self.register_singleton("GuidanceService", guidance_service)

        syntax_gateway = TreeSitterGateway()
        self.register_singleton("TreeSitterGateway", syntax_gateway)
        self.register_singleton(
            "TreeSitterEditGateway",
            TreeSitterEditGateway(
                printer=CSharpPrinter(),
                strict_import_check=config_loader.strict_import_check,
            ),
        )
        self.register_singleton("FileSystemGateway", FileSystemGateway())

        # Rules in code order; the type-based rules resolve types through the syntax gateway
        rules: list["BaseRule"] = [
            NotifiedSetterRule(guidance=guidance_service),
            DelegateCommandRule(type_resolver=syntax_gateway, guidance=guidance_service),
            CommandTypeRule(type_resolver=syntax_gateway, guidance=guidance_service),
        ]
        self.register_singleton("Rules", rules)

        self.register_singleton(
            "CheckReporter",
            TerminalCheckReporter(guidance_service=guidance_service, telemetry=telemetry),
        )

    # JUSTIFICATION: DI Container must handle any type of service
    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    # JUSTIFICATION: DI Container must return any type of service
    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_config_loader(self) -> ConfigurationLoader:
        """Return the configuration loader (created at composition root)."""
        return cast(ConfigurationLoader, self.get("ConfigurationLoader"))

    def get_telemetry_port(self) -> "TelemetryPort":
        """Return the telemetry/UI port."""
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_guidance_service(self) -> "GuidanceServiceProtocol":
        """Return the guidance service (rule registry)."""
        return cast(GuidanceService, self.get("GuidanceService"))

    def get_syntax_gateway(self) -> "SyntaxGatewayProtocol":
        """Return the tree-sitter syntax gateway."""
        return cast("SyntaxGatewayProtocol", self.get("TreeSitterGateway"))

    def get_tree_editor(self) -> "TreeEditorProtocol":
        """Return the tree editor gateway."""
        return cast("TreeEditorProtocol", self.get("TreeSitterEditGateway"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        """Return the filesystem gateway."""
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_rules(self) -> "list[BaseRule]":
        """Return every rule, enabled or not."""
        return list(cast("list[BaseRule]", self.get("Rules")))

    def get_reporter(self) -> "CheckReporter":
        """Return the check/fix reporter."""
        return cast("CheckReporter", self.get("CheckReporter"))

    def get_check_use_case(self) -> CheckSourceUseCase:
        """Return the scan use case (lazy; honours 'disable')."""
        if "CheckSourceUseCase" not in self._singletons:
            self.register_singleton(
                "CheckSourceUseCase",
                CheckSourceUseCase(
                    syntax_gateway=self.get_syntax_gateway(),
                    rules=self.get_rules(),
                    filesystem=self.get_filesystem_gateway(),
                    telemetry=self.get_telemetry_port(),
                    config_loader=self.get_config_loader(),
                ),
            )
        return cast(CheckSourceUseCase, self.get("CheckSourceUseCase"))

    def get_fix_use_case(self) -> ApplyFixesUseCase:
        """Return the fix use case (lazy)."""
        if "ApplyFixesUseCase" not in self._singletons:
            self.register_singleton(
                "ApplyFixesUseCase",
                ApplyFixesUseCase(
                    check_use_case=self.get_check_use_case(),
                    syntax_gateway=self.get_syntax_gateway(),
                    editor=self.get_tree_editor(),
                    filesystem=self.get_filesystem_gateway(),
                    telemetry=self.get_telemetry_port(),
                    config_loader=self.get_config_loader(),
                ),
            )
        return cast(ApplyFixesUseCase, self.get("ApplyFixesUseCase"))

    @classmethod
    def get_instance(cls) -> "RefactorKitContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = RefactorKitContainer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None
