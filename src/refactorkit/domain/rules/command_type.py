"""Simple Command Type Rule (MRK0003) - Detection only."""

from typing import TYPE_CHECKING, Literal

from refactorkit.domain.constants import (
    COMMAND_TYPE,
    SEVERITY_ERROR,
    SIMPLE_COMMAND_CODE,
    SIMPLE_COMMAND_SYMBOL,
)
from refactorkit.domain.matches import SimpleCommandMatch
from refactorkit.domain.rules import BaseRule, Violation
from refactorkit.domain.rules.rewrite_support import RewriteSupport
from refactorkit.domain.syntax import CSharpSyntax

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import Edit, SourceDocument
    from refactorkit.domain.protocols import GuidanceServiceProtocol, TypeResolverProtocol


class CommandTypeRule(BaseRule):
    """
    Rule for MRK0003: properties typed as the bare Command.

    A Command property carries no backing-field or lambda shape a method signature could
    be derived from, so the rule only reports; fix() always answers None.
    """

    code: str = SIMPLE_COMMAND_CODE
    symbol: str = SIMPLE_COMMAND_SYMBOL
    severity: str = SEVERITY_ERROR
    description: str = (
        "Command property: ICommand properties built on Command. "
        "Manual migration to [RelayCommand]."
    )
    fix_type: Literal["none"] = "none"
    node_kinds: tuple[str, ...] = ("property_declaration",)
    command_type: str = COMMAND_TYPE

    def __init__(
        self,
        type_resolver: "TypeResolverProtocol | None" = None,
        guidance: "GuidanceServiceProtocol | None" = None,
    ) -> None:
        self._type_resolver = type_resolver
        self._guidance = guidance

    def extract(
        self, prop: "tree_sitter.Node", document: "SourceDocument"
    ) -> SimpleCommandMatch | None:
        """Identify the shape; nothing beyond the type name is extracted."""
        if prop.type != "property_declaration":
            return None
        type_name = RewriteSupport.declared_type_name(prop, document, self._type_resolver)
        if type_name != self.command_type:
            return None
        return SimpleCommandMatch(
            property_name=CSharpSyntax.name_of(prop), command_type_name=type_name
        )

    def check(self, node: "tree_sitter.Node", document: "SourceDocument") -> list[Violation]:
        """Report the property name token when the declared type is Command."""
        match = self.extract(node, document)
        name_node = CSharpSyntax.name_node(node)
        if match is None or name_node is None:
            return []
        return [
            Violation.from_node(
                code=self.code,
                symbol=self.symbol,
                message=RewriteSupport.format_message(
                    self._guidance,
                    self.code,
                    "Property '{name}' uses {type}; migrate it to a [RelayCommand] method.",
                    name=match.property_name,
                    type=match.command_type_name,
                ),
                node=name_node,
                document=document,
                anchor=node,
                severity=self.severity,
                fixable=False,
                fix_failure_reason="Command properties carry no structure to rebuild a method from",
            )
        ]

    def fix(self, violation: Violation, document: "SourceDocument") -> "list[Edit] | None":
        """No automatic fix for this rule."""
        return None

    def get_fix_instructions(self, violation: Violation) -> str:
        """Provide human instructions for a manual fix."""
        return RewriteSupport.instructions(
            self._guidance,
            self.code,
            "Move the command's execute logic into a method, mark it [RelayCommand] and delete "
            "the Command property and its backing field.",
        )
