"""Load [tool.refactorkit] from pyproject.toml. Infrastructure I/O only."""

import tomllib
from pathlib import Path

from refactorkit.domain.errors import ConfigurationError


class ConfigFileLoader:
    """
    Loads config from the nearest pyproject.toml, walking up from a start directory.
    """

    @staticmethod
    def find_pyproject(start: str | None = None) -> Path | None:
        """Return the nearest pyproject.toml at or above start (default: CWD)."""
        current_path = Path(start).resolve() if start else Path.cwd()
        if current_path.is_file():
            current_path = current_path.parent
        while True:
            config_file = current_path / "pyproject.toml"
            if config_file.exists():
                return config_file
            if current_path.parent == current_path:
                return None
            current_path = current_path.parent

    @staticmethod
    def load_config_from_fs(start: str | None = None) -> dict[str, object]:
        """Load [tool.refactorkit]; empty when no pyproject.toml or no such table."""
        config_file = ConfigFileLoader.find_pyproject(start)
        empty: dict[str, object] = {}
        if config_file is None:
            return empty
        try:
            with config_file.open("rb") as f:
                data = tomllib.load(f)
        except OSError:
            return empty
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"{config_file}: {e}") from e
        tool_section = data.get("tool", {}) or {}
        config_dict = tool_section.get("refactorkit", {}) or {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"{config_file}: [tool.refactorkit] must be a table")
        return config_dict
