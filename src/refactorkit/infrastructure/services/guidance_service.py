"""GuidanceService: loads the rule registry and provides messages, titles and manual_instructions."""

from pathlib import Path
from typing import cast

import yaml

from refactorkit.domain.constants import HELP_URI_TEMPLATE, REFACTORKIT_PREFIX
from refactorkit.domain.protocols import GuidanceServiceProtocol
from refactorkit.domain.registry_types import RuleRegistryEntry

_DEFAULT_ID = f"{REFACTORKIT_PREFIX}_default"


class GuidanceService(GuidanceServiceProtocol):
    """Loads rule_registry.yaml and answers lookups by rule code or symbol."""

    def __init__(self, registry_path: str | None = None) -> None:
        if registry_path is not None:
            self._path = Path(registry_path)
        else:
            # Default: packaged resource next to this package
            _base = Path(__file__).resolve().parent.parent
            self._path = _base / "resources" / "rule_registry.yaml"
        self._registry: dict[str, RuleRegistryEntry] = {}
        self._load()

    def _load(self) -> None:
        if self._path.exists():
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                self._registry = (
                    cast(dict[str, RuleRegistryEntry], data) if isinstance(data, dict) else {}
                )
        else:
            self._registry = {}

    def get_registry(self) -> dict[str, RuleRegistryEntry]:
        """Return a shallow copy of the loaded registry."""
        return dict(self._registry)

    def resolve_code(self, code_or_symbol: str) -> str | None:
        """Map a rule code or symbol to its code; None when the registry has no such rule."""
        rule_id = f"{REFACTORKIT_PREFIX}{code_or_symbol}"
        if rule_id != _DEFAULT_ID and rule_id in self._registry:
            return code_or_symbol
        for key, entry in self._registry.items():
            if key == _DEFAULT_ID:
                continue
            if entry.get("symbol") == code_or_symbol:
                return key[len(REFACTORKIT_PREFIX):]
        return None

    def get_entry(self, rule_code: str) -> RuleRegistryEntry | None:
        """Return the full registry entry for a rule by code or symbol."""
        code = self.resolve_code(rule_code)
        if code is None:
            return None
        return cast(RuleRegistryEntry, dict(self._registry[f"{REFACTORKIT_PREFIX}{code}"]))

    def get_message_template(self, rule_code: str) -> str | None:
        """Return the diagnostic message template, or None."""
        entry = self.get_entry(rule_code)
        if not entry or not entry.get("message_template"):
            return None
        return str(entry["message_template"])

    def get_display_name(self, rule_code: str) -> str:
        """Return display name for a rule (rule tables, fix titles)."""
        entry = self.get_entry(rule_code)
        if not entry:
            return rule_code.replace("-", " ").title()
        return str(
            entry.get("display_name")
            or entry.get("short_description")
            or rule_code.replace("-", " ").title()
        )

    def get_manual_instructions(self, rule_code: str) -> str:
        """Return manual fix instructions for the rule, falling back to the default entry."""
        entry = self.get_entry(rule_code)
        if entry and "manual_instructions" in entry:
            return str(entry["manual_instructions"])
        default_entry = self._registry.get(_DEFAULT_ID)
        if default_entry and "manual_instructions" in default_entry:
            return str(default_entry["manual_instructions"])
        return "See project docs. Fix the violation at the reported location."

    def get_help_uri(self, rule_code: str) -> str:
        """Return the documentation link for a rule."""
        entry = self.get_entry(rule_code)
        if entry and entry.get("help_uri"):
            return str(entry["help_uri"])
        return HELP_URI_TEMPLATE.format(code=self.resolve_code(rule_code) or rule_code)
