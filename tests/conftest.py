"""Shared fixtures: real tree-sitter parsing and small helpers for fix round trips.

Run pytest from the project root; pythonpath in pyproject.toml puts src/ on the path.
"""

from unittest.mock import MagicMock

import pytest

from refactorkit.domain.config import ConfigurationLoader
from refactorkit.domain.entities import SourceDocument
from refactorkit.domain.rules import BaseRule, Violation
from refactorkit.domain.syntax import CSharpSyntax
from refactorkit.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from refactorkit.infrastructure.gateways.tree_editor import TreeSitterEditGateway
from refactorkit.infrastructure.gateways.tree_sitter_gateway import TreeSitterGateway
from refactorkit.infrastructure.services.guidance_service import GuidanceService

GATEWAY = TreeSitterGateway()


def parse(text: str, path: str = "ViewModel.cs") -> SourceDocument:
    """Parse C# text with the real grammar."""
    return GATEWAY.parse(text, path)


def find_violations(rule: BaseRule, document: SourceDocument) -> list[Violation]:
    """Run one rule over every node of the kinds it asks for, in document order."""
    found: list[Violation] = []
    for node in CSharpSyntax.walk(document.root, *rule.node_kinds):
        found.extend(rule.check(node, document))
    return found


def fix_first(rule: BaseRule, text: str, strict_import_check: bool = False) -> str:
    """Fix the first finding of rule in text and return the rewritten source."""
    document = parse(text)
    violations = find_violations(rule, document)
    assert violations, "expected at least one finding"
    edits = rule.fix(violations[0], document)
    assert edits is not None
    return TreeSitterEditGateway(strict_import_check=strict_import_check).apply(document, edits)


def fix_all(rule: BaseRule, text: str) -> str:
    """Fix findings one by one, re-parsing after every rewrite."""
    for _ in range(20):
        document = parse(text)
        violations = find_violations(rule, document)
        if not violations:
            return text
        edits = rule.fix(violations[0], document)
        if not edits:
            return text
        text = TreeSitterEditGateway().apply(document, edits)
    return text


def use_case_deps(**overrides: object) -> dict[str, object]:
    """Return CheckSourceUseCase dependencies with a real parser and mock telemetry."""
    base: dict[str, object] = {
        "syntax_gateway": GATEWAY,
        "rules": [],
        "filesystem": FileSystemGateway(),
        "telemetry": MagicMock(),
        "config_loader": ConfigurationLoader({}),
    }
    base.update(overrides)
    return base


@pytest.fixture
def gateway() -> TreeSitterGateway:
    return GATEWAY


@pytest.fixture(scope="session")
def guidance() -> GuidanceService:
    return GuidanceService()
