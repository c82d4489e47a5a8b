"""Notified Setter Rule (MRK0001) - Detection + auto-fix to [ObservableProperty]."""

import logging
from typing import TYPE_CHECKING, Literal

from refactorkit.domain.constants import (
    NAMEOF,
    NOTIFIED_SETTER_CODE,
    NOTIFIED_SETTER_SYMBOL,
    NOTIFY_PROPERTY_CHANGED_FOR_ATTRIBUTE,
    OBSERVABLE_MODULE,
    OBSERVABLE_PROPERTY_ATTRIBUTE,
    ON_PROPERTY_CHANGED,
    SET_PROPERTY,
    SEVERITY_ERROR,
)
from refactorkit.domain.entities import AttributeSpec, Edit, NodeRef, PropertySpec
from refactorkit.domain.matches import NotifiedPropertyMatch
from refactorkit.domain.rules import BaseRule, Violation
from refactorkit.domain.rules.rewrite_support import RewriteSupport
from refactorkit.domain.syntax import CSharpSyntax

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import SourceDocument
    from refactorkit.domain.protocols import GuidanceServiceProtocol

logger = logging.getLogger(__name__)


class NotifiedSetterRule(BaseRule):
    """
    Rule for MRK0001: property setters that announce changes by hand.

    - Detection: a top-level setter statement calls OnPropertyChanged (0 or 1 args) or
      SetProperty(ref field, value). Plain identifier text equality, no type resolution.
    - Fix: replaces the property and its backing field with a partial auto-property
      carrying [ObservableProperty] and one [NotifyPropertyChangedFor] per other member
      the setter announced.
    """

    code: str = NOTIFIED_SETTER_CODE
    symbol: str = NOTIFIED_SETTER_SYMBOL
    severity: str = SEVERITY_ERROR
    description: str = (
        "Notified setter: property setters calling OnPropertyChanged/SetProperty. "
        "Auto-fix: converts to [ObservableProperty]."
    )
    fix_type: Literal["code"] = "code"
    node_kinds: tuple[str, ...] = ("property_declaration",)

    def __init__(self, guidance: "GuidanceServiceProtocol | None" = None) -> None:
        self._guidance = guidance

    # --------------------------------------------------------------------- #
    # Detection
    # --------------------------------------------------------------------- #

    def check(self, node: "tree_sitter.Node", document: "SourceDocument") -> list[Violation]:
        """Report the property name token when the setter notifies by hand."""
        if node.type != "property_declaration" or not self.matches(node):
            return []
        name_node = CSharpSyntax.name_node(node)
        if name_node is None:
            return []
        name = CSharpSyntax.text(name_node)
        return [
            Violation.from_node(
                code=self.code,
                symbol=self.symbol,
                message=RewriteSupport.format_message(
                    self._guidance,
                    self.code,
                    "Property '{name}' raises change notification manually; use [ObservableProperty].",
                    name=name,
                ),
                node=name_node,
                document=document,
                anchor=node,
                severity=self.severity,
                fixable=True,
            )
        ]

    @staticmethod
    def matches(prop: "tree_sitter.Node") -> bool:
        """True when any top-level statement of the setter is a recognised notify call."""
        setter = CSharpSyntax.accessor(prop, "set")
        if setter is None:
            return False
        statements = CSharpSyntax.statement_expressions(CSharpSyntax.body(setter))
        return any(
            NotifiedSetterRule.is_announce_call(expr) or NotifiedSetterRule.is_compare_and_assign(expr)
            for expr in statements
        )

    @staticmethod
    def is_announce_call(expr: "tree_sitter.Node") -> bool:
        """OnPropertyChanged() or OnPropertyChanged(x)."""
        if CSharpSyntax.invoked_name(expr) != ON_PROPERTY_CHANGED:
            return False
        return len(CSharpSyntax.arguments(expr)) <= 1

    @staticmethod
    def is_compare_and_assign(expr: "tree_sitter.Node") -> bool:
        """SetProperty(ref field, value)."""
        if CSharpSyntax.invoked_name(expr) != SET_PROPERTY:
            return False
        arguments = CSharpSyntax.arguments(expr)
        return len(arguments) == 2 and CSharpSyntax.is_ref_argument(arguments[0])

    # --------------------------------------------------------------------- #
    # Extraction
    # --------------------------------------------------------------------- #

    def extract(
        self, prop: "tree_sitter.Node", document: "SourceDocument"
    ) -> NotifiedPropertyMatch | None:
        """
        Fold over the setter statements in source order.

        Assignments and SetProperty overwrite the backing field (last write wins);
        one-argument OnPropertyChanged appends its target unless it names the property.
        Returns None without an enclosing class or a recognisable setter.
        """
        class_node = CSharpSyntax.enclosing_class(prop)
        setter = CSharpSyntax.accessor(prop, "set")
        if class_node is None or setter is None:
            return None

        property_name = CSharpSyntax.name_of(prop)
        backing: str | None = None
        targets: list[str] = []
        for expr in CSharpSyntax.statement_expressions(CSharpSyntax.body(setter)):
            if expr.type == "assignment_expression" and CSharpSyntax.operator(expr) == "=":
                assigned = self._assigned_field(expr)
                if assigned is not None:
                    backing = assigned
            elif self.is_compare_and_assign(expr):
                referenced = CSharpSyntax.referenced_identifier(CSharpSyntax.arguments(expr)[0])
                if referenced is not None:
                    backing = referenced
            elif CSharpSyntax.invoked_name(expr) == ON_PROPERTY_CHANGED:
                arguments = CSharpSyntax.arguments(expr)
                if len(arguments) != 1:
                    continue
                target = self._announced_member(arguments[0])
                if target and target != property_name and target not in targets:
                    targets.append(target)

        declaration, declarator = (None, None)
        field_initializer = None
        if backing is not None:
            declaration, declarator = CSharpSyntax.find_field(class_node, backing)
            if declarator is not None:
                initializer = CSharpSyntax.initializer_after_equals(declarator)
                if initializer is not None:
                    field_initializer = CSharpSyntax.text(initializer)

        property_initializer = CSharpSyntax.property_initializer(prop)
        return NotifiedPropertyMatch(
            property_name=property_name,
            property_type=CSharpSyntax.text(CSharpSyntax.property_type(prop)),
            property_node=prop,
            class_node=class_node,
            backing_field_name=backing,
            field_initializer=field_initializer,
            property_initializer=(
                CSharpSyntax.text(property_initializer) if property_initializer is not None else None
            ),
            notify_targets=tuple(targets),
            field_declaration=declaration,
            field_declarator=declarator,
        )

    @staticmethod
    def _assigned_field(assignment: "tree_sitter.Node") -> str | None:
        """Field name of 'field = ...' or 'this.field = ...'."""
        left = assignment.child_by_field_name("left")
        if left is None:
            return None
        if left.type == "identifier":
            return CSharpSyntax.text(left)
        if left.type == "member_access_expression":
            receiver = left.child_by_field_name("expression")
            if receiver is not None and CSharpSyntax.text(receiver) == "this":
                return CSharpSyntax.text(left.child_by_field_name("name")) or None
        return None

    @staticmethod
    def _announced_member(argument: "tree_sitter.Node") -> str | None:
        """Member named by nameof(X) or "X"; None for any other argument shape."""
        expr = CSharpSyntax.argument_expression(argument)
        if expr is None:
            return None
        literal = CSharpSyntax.string_literal_value(expr)
        if literal is not None:
            return literal
        if CSharpSyntax.invoked_name(expr) == NAMEOF:
            inner = CSharpSyntax.arguments(expr)
            if len(inner) != 1:
                return None
            named = CSharpSyntax.argument_expression(inner[0])
            if named is None:
                return None
            # nameof(this.Foo) names Foo; other qualifiers are kept as written
            if named.type == "member_access_expression":
                receiver = named.child_by_field_name("expression")
                if receiver is not None and CSharpSyntax.text(receiver) == "this":
                    return CSharpSyntax.text(named.child_by_field_name("name")) or None
            return CSharpSyntax.text(named).strip() or None
        return None

    # --------------------------------------------------------------------- #
    # Planning
    # --------------------------------------------------------------------- #

    def plan(self, match: NotifiedPropertyMatch, document: "SourceDocument") -> list[Edit]:
        """Insert the auto-property, drop the old property and field, ensure the import."""
        name = match.property_name[:1].upper() + match.property_name[1:]
        attributes = [AttributeSpec(OBSERVABLE_PROPERTY_ATTRIBUTE)]
        attributes.extend(
            AttributeSpec(NOTIFY_PROPERTY_CHANGED_FOR_ATTRIBUTE, (f"{NAMEOF}({target})",))
            for target in match.notify_targets
        )
        new_property = PropertySpec(
            type_name=match.property_type,
            name=name,
            attributes=tuple(attributes),
            initializer=match.initializer,
            leading_comments=tuple(
                RewriteSupport.dedented_text(c) for c in CSharpSyntax.leading_comments(match.property_node)
            ),
        )

        anchor = NodeRef.of(match.property_node, document)
        edits = [Edit.insert_before(anchor, new_property), Edit.remove(anchor)]
        edits.extend(
            RewriteSupport.remove_field(match.field_declaration, match.field_declarator, document)
        )
        edits.extend(RewriteSupport.ensure_partial(match.class_node, document))
        edits.append(Edit.ensure_import(OBSERVABLE_MODULE))
        return edits

    def fix(self, violation: Violation, document: "SourceDocument") -> list[Edit]:
        """Re-derive the match from this snapshot and plan it. No class: no edits."""
        prop = RewriteSupport.locate(violation, document)
        match = self.extract(prop, document)
        if match is None:
            logger.debug("%s: no enclosing class for %s, nothing to change", self.code, violation.location)
            return []
        return self.plan(match, document)

    def get_fix_instructions(self, violation: Violation) -> str:
        """Provide human instructions for a manual fix."""
        return RewriteSupport.instructions(
            self._guidance,
            self.code,
            "Replace the property and its backing field with a partial auto-property marked "
            "[ObservableProperty]; add [NotifyPropertyChangedFor(nameof(X))] for every other "
            "member the setter notified.",
        )
