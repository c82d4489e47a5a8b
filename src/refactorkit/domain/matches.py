"""Structured descriptions of the three legacy shapes. Built fresh per fix request, never cached."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from refactorkit.domain.constants import COMMAND_SUFFIX

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import ParameterSpec


@dataclass(frozen=True)
class NotifiedPropertyMatch:
    """A property whose setter announces changes by hand."""

    property_name: str
    property_type: str
    property_node: "tree_sitter.Node"
    class_node: "tree_sitter.Node"
    backing_field_name: str | None = None
    field_initializer: str | None = None
    property_initializer: str | None = None
    notify_targets: tuple[str, ...] = ()
    field_declaration: "tree_sitter.Node | None" = None
    field_declarator: "tree_sitter.Node | None" = None

    @property
    def initializer(self) -> str | None:
        """The property's own initializer wins over the backing field's."""
        if self.property_initializer is not None:
            return self.property_initializer
        return self.field_initializer


@dataclass(frozen=True)
class SimpleCommandMatch:
    """A property typed as the bare command type. Identification only."""

    property_name: str
    command_type_name: str


@dataclass(frozen=True)
class DelegateCommandMatch:
    """A property typed as the delegating command type, plus everything needed to rewrite it."""

    property_name: str
    property_node: "tree_sitter.Node"
    class_node: "tree_sitter.Node"
    backing_field_name: str | None = None
    field_declaration: "tree_sitter.Node | None" = None
    field_declarator: "tree_sitter.Node | None" = None
    execute_method: "tree_sitter.Node | None" = None
    can_execute_method: "tree_sitter.Node | None" = None
    command_body: tuple[str, ...] = ()
    parameters: tuple["ParameterSpec", ...] = ()
    is_async: bool = False
    can_execute_target_name: str | None = None
    can_execute_method_removable: bool = False
    unrecognised_guard: str | None = None
    """Text of a constructor can-execute guard that cannot be referenced by name."""

    @property
    def has_body(self) -> bool:
        """A rewrite needs either an execute method or a lambda body."""
        return self.execute_method is not None or bool(self.command_body)

    @property
    def stem(self) -> str:
        """Property name without its trailing 'Command' (case-sensitive)."""
        return self.stem_of(self.property_name)

    @staticmethod
    def stem_of(property_name: str) -> str:
        """Strip one trailing 'Command'; a name that is only 'Command' is kept."""
        if property_name.endswith(COMMAND_SUFFIX) and property_name != COMMAND_SUFFIX:
            return property_name[: -len(COMMAND_SUFFIX)]
        return property_name
