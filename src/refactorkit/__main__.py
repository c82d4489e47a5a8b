"""Package entry point - composition root. Wire dependencies and run the CLI app."""

import sys

from refactorkit.domain.errors import ConfigurationError
from refactorkit.infrastructure.di.container import RefactorKitContainer
from refactorkit.interface.cli import EXIT_USAGE, CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    try:
        container = RefactorKitContainer()
    except ConfigurationError as e:
        print(f"refactorkit: configuration error: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    deps = CLIDependencies(
        config_loader=container.get_config_loader(),
        telemetry=container.get_telemetry_port(),
        reporter=container.get_reporter(),
        guidance_service=container.get_guidance_service(),
        rules=container.get_rules(),
        check_use_case=container.get_check_use_case(),
        fix_use_case=container.get_fix_use_case(),
    )

    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
