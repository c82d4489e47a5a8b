"""Configuration for refactorkit. Immutable value object created by Infrastructure."""

from __future__ import annotations

import logging

from refactorkit.domain.constants import DEFAULT_EXCLUDE, DEFAULT_INCLUDE
from refactorkit.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset(
    {"disable", "include", "exclude", "strict_import_check", "backup", "jobs"}
)


class ConfigurationLoader:
    """
    Immutable configuration for refactorkit settings.

    Created by Infrastructure from the [tool.refactorkit] table. Domain does not
    read the filesystem; Infrastructure calls ConfigFileLoader.load_config_from_fs()
    and constructs ConfigurationLoader(config_dict) at composition root.
    """

    def __init__(self, config_dict: dict[str, object] | None = None) -> None:
        """Set config once at construction. No mutable state after init."""
        self._config: dict[str, object] = dict(config_dict or {})
        if self._config:
            self.validate_config(self._config)

    def validate_config(self, config: dict[str, object]) -> None:
        """Validate configuration values. Unknown keys only warn."""
        for key in config:
            if key not in _KNOWN_KEYS:
                logger.warning("Configuration Warning: unknown key '%s' in [tool.refactorkit]", key)

        for key in ("disable", "include", "exclude"):
            raw = config.get(key)
            if raw is not None and not (
                isinstance(raw, list) and all(isinstance(x, str) for x in raw)
            ):
                raise ConfigurationError(f"[tool.refactorkit] '{key}' must be a list of strings")

        for key in ("strict_import_check", "backup"):
            raw = config.get(key)
            if raw is not None and not isinstance(raw, bool):
                raise ConfigurationError(f"[tool.refactorkit] '{key}' must be true or false")

        jobs = config.get("jobs")
        if jobs is not None and (isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1):
            raise ConfigurationError("[tool.refactorkit] 'jobs' must be a positive integer")

    @property
    def config(self) -> dict[str, object]:
        """Return the loaded configuration."""
        return dict(self._config)

    @property
    def disabled_rules(self) -> list[str]:
        """Rule codes or symbols switched off for this project."""
        raw = self._config.get("disable", [])
        return [str(x) for x in raw] if isinstance(raw, list) else []

    @property
    def include(self) -> list[str]:
        """Glob patterns (relative to the target directory) of files to scan."""
        raw = self._config.get("include")
        if isinstance(raw, list) and raw:
            return [str(x) for x in raw]
        return list(DEFAULT_INCLUDE)

    @property
    def exclude(self) -> list[str]:
        """Directory names never descended into."""
        raw = self._config.get("exclude")
        if isinstance(raw, list):
            return [str(x) for x in raw]
        return list(DEFAULT_EXCLUDE)

    @property
    def strict_import_check(self) -> bool:
        """Compare using directives by exact namespace instead of containment."""
        return bool(self._config.get("strict_import_check", False))

    @property
    def create_backups(self) -> bool:
        """Write '<file>.bak' before a fix overwrites a file."""
        return bool(self._config.get("backup", True))

    @property
    def jobs(self) -> int:
        """Default number of worker threads for scanning."""
        raw = self._config.get("jobs", 1)
        return raw if isinstance(raw, int) and not isinstance(raw, bool) else 1

    def is_rule_enabled(self, code: str, symbol: str) -> bool:
        """A rule is enabled unless its code or symbol is listed under 'disable'."""
        disabled = set(self.disabled_rules)
        return code not in disabled and symbol not in disabled
