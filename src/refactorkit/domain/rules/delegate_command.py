"""Delegate Command Rule (MRK0002) - Detection + auto-fix to [RelayCommand] methods."""

import logging
from typing import TYPE_CHECKING, Literal

from refactorkit.domain.constants import (
    ASYNC_SUFFIX,
    CAN_EXECUTE_ARGUMENT,
    CAN_EXECUTE_PREFIX,
    DELEGATE_COMMAND_CODE,
    DELEGATE_COMMAND_SYMBOL,
    DELEGATE_COMMAND_TYPE,
    EXECUTE_PREFIX,
    NAMEOF,
    OBJECT_TYPE,
    RELAY_COMMAND_ATTRIBUTE,
    RELAY_COMMAND_MODULE,
    SEVERITY_ERROR,
    TASK_TYPE,
    VOID_TYPE,
)
from refactorkit.domain.entities import (
    AttributeSpec,
    Edit,
    MethodSpec,
    NodeRef,
    ParameterSpec,
    TokenSpec,
)
from refactorkit.domain.errors import UnfixableError
from refactorkit.domain.matches import DelegateCommandMatch
from refactorkit.domain.rules import BaseRule, Violation
from refactorkit.domain.rules.rewrite_support import RewriteSupport
from refactorkit.domain.syntax import CSharpSyntax

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import SourceDocument
    from refactorkit.domain.protocols import GuidanceServiceProtocol, TypeResolverProtocol

logger = logging.getLogger(__name__)


class DelegateCommandRule(BaseRule):
    """
    Rule for MRK0002: properties typed as DelegateCommand.

    - Detection: the property's declared type resolves to DelegateCommand.
    - Fix, variant B: an Execute<Stem> method exists. It is renamed to <Stem> (+Async),
      marked [RelayCommand] (with CanExecute when a guard is known) and the property,
      its backing field and a trivial CanExecute<Stem> wrapper are removed.
    - Fix, variant A: no execute method, but the property holds a lambda. A new
      [RelayCommand] method is generated from the lambda and the property and its
      backing field are removed.
    - Neither: the fix is declined (UnfixableError), the diagnostic stays.
    """

    code: str = DELEGATE_COMMAND_CODE
    symbol: str = DELEGATE_COMMAND_SYMBOL
    severity: str = SEVERITY_ERROR
    description: str = (
        "DelegateCommand property: commands built from execute/can-execute delegates. "
        "Auto-fix: converts to a [RelayCommand] method."
    )
    fix_type: Literal["code"] = "code"
    node_kinds: tuple[str, ...] = ("property_declaration",)

    def __init__(
        self,
        type_resolver: "TypeResolverProtocol | None" = None,
        guidance: "GuidanceServiceProtocol | None" = None,
    ) -> None:
        self._type_resolver = type_resolver
        self._guidance = guidance

    # --------------------------------------------------------------------- #
    # Detection
    # --------------------------------------------------------------------- #

    def check(self, node: "tree_sitter.Node", document: "SourceDocument") -> list[Violation]:
        """Report the property name token when the declared type is DelegateCommand."""
        if node.type != "property_declaration":
            return []
        type_name = RewriteSupport.declared_type_name(node, document, self._type_resolver)
        name_node = CSharpSyntax.name_node(node)
        if type_name != DELEGATE_COMMAND_TYPE or name_node is None:
            return []
        return [
            Violation.from_node(
                code=self.code,
                symbol=self.symbol,
                message=RewriteSupport.format_message(
                    self._guidance,
                    self.code,
                    "Property '{name}' uses {type}; convert it to a [RelayCommand] method.",
                    name=CSharpSyntax.text(name_node),
                    type=type_name,
                ),
                node=name_node,
                document=document,
                anchor=node,
                severity=self.severity,
                fixable=True,
            )
        ]

    # --------------------------------------------------------------------- #
    # Extraction
    # --------------------------------------------------------------------- #

    def extract(
        self, prop: "tree_sitter.Node", document: "SourceDocument"
    ) -> DelegateCommandMatch | None:
        """Collect backing field, lambda, execute/can-execute methods. None without a class."""
        class_node = CSharpSyntax.enclosing_class(prop)
        if class_node is None:
            return None

        property_name = CSharpSyntax.name_of(prop)
        backing = self._backing_field_name(prop, class_node)
        declaration, declarator = (
            CSharpSyntax.find_field(class_node, backing) if backing else (None, None)
        )

        parameters: tuple[ParameterSpec, ...] = ()
        body: tuple[str, ...] = ()
        is_async = False
        lam = self._command_lambda(prop)
        if lam is not None:
            parameters = self._lambda_parameters(lam, CSharpSyntax.property_type(prop))
            body = self._lambda_body_lines(lam)
            is_async = CSharpSyntax.lambda_is_async(lam)

        stem = DelegateCommandMatch.stem_of(property_name)
        execute = CSharpSyntax.find_method(class_node, f"{EXECUTE_PREFIX}{stem}")
        can_execute = CSharpSyntax.find_method(class_node, f"{CAN_EXECUTE_PREFIX}{stem}")

        target: str | None = None
        removable = False
        unrecognised_guard: str | None = None
        if can_execute is not None:
            wrapped = self._wrapped_identifier(can_execute)
            if wrapped is not None:
                target, removable = wrapped, True
            else:
                target = CSharpSyntax.name_of(can_execute)
        else:
            target, unrecognised_guard = self._constructor_can_execute(prop)

        return DelegateCommandMatch(
            property_name=property_name,
            property_node=prop,
            class_node=class_node,
            backing_field_name=backing,
            field_declaration=declaration,
            field_declarator=declarator,
            execute_method=execute,
            can_execute_method=can_execute,
            command_body=body,
            parameters=parameters,
            is_async=is_async,
            can_execute_target_name=target,
            can_execute_method_removable=removable,
            unrecognised_guard=unrecognised_guard,
        )

    @staticmethod
    def _backing_field_name(prop: "tree_sitter.Node", class_node: "tree_sitter.Node") -> str | None:
        """
        Left operand of 'field ?? (field = ...)' or 'field ??= ...'.

        Falls back to a returned field, then to the '_camelCaseCommand' convention, when
        those name a field of the class.
        """
        value = CSharpSyntax.unwrap_parentheses(CSharpSyntax.property_value_expression(prop))
        if value is not None:
            coalesced = (value.type == "binary_expression" and CSharpSyntax.operator(value) == "??") or (
                value.type == "assignment_expression" and CSharpSyntax.operator(value) == "??="
            )
            if coalesced:
                left = CSharpSyntax.unwrap_parentheses(value.child_by_field_name("left"))
                if left is not None and left.type == "identifier":
                    return CSharpSyntax.text(left)
            if value.type == "identifier":
                candidate = CSharpSyntax.text(value)
                if CSharpSyntax.find_field(class_node, candidate)[0] is not None:
                    return candidate

        name = CSharpSyntax.name_of(prop)
        conventional = f"_{name[:1].lower()}{name[1:]}"
        if CSharpSyntax.find_field(class_node, conventional)[0] is not None:
            return conventional
        return None

    @staticmethod
    def _command_lambda(prop: "tree_sitter.Node") -> "tree_sitter.Node | None":
        """The execute lambda: first DelegateCommand argument, else the first lambda in the property."""
        for creation in CSharpSyntax.walk(prop, "object_creation_expression"):
            if CSharpSyntax.simple_type_name(creation.child_by_field_name("type")) != DELEGATE_COMMAND_TYPE:
                continue
            arguments = CSharpSyntax.arguments(creation)
            first = CSharpSyntax.argument_expression(arguments[0]) if arguments else None
            first = CSharpSyntax.unwrap_parentheses(first)
            return first if first is not None and first.type == "lambda_expression" else None
        return next(CSharpSyntax.walk(prop, "lambda_expression"), None)

    @staticmethod
    def _lambda_parameters(
        lam: "tree_sitter.Node", type_node: "tree_sitter.Node | None"
    ) -> tuple[ParameterSpec, ...]:
        """Lambda parameters; implicit types come from DelegateCommand<T>, else object."""
        type_arguments = CSharpSyntax.type_arguments(type_node)
        implicit = type_arguments[0] if len(type_arguments) == 1 else OBJECT_TYPE
        return tuple(
            ParameterSpec(name=name, type_name=type_name or implicit)
            for name, type_name in CSharpSyntax.lambda_parameters(lam)
        )

    @staticmethod
    def _lambda_body_lines(lam: "tree_sitter.Node") -> tuple[str, ...]:
        """Statements of a block lambda, or its expression as one statement."""
        body = CSharpSyntax.lambda_body(lam)
        if body is None:
            return ()
        if body.type == "block":
            return tuple(RewriteSupport.dedented_text(s) for s in body.named_children)
        return (f"{RewriteSupport.dedented_text(body)};",)

    @staticmethod
    def _wrapped_identifier(method: "tree_sitter.Node") -> str | None:
        """The identifier of a can-execute body that is exactly 'return x;' (or '=> x;')."""
        body = CSharpSyntax.body(method)
        if body is None:
            return None
        if body.type == "arrow_expression_clause":
            expr = CSharpSyntax.unwrap_parentheses(CSharpSyntax.arrow_expression(body))
        else:
            statements = CSharpSyntax.named(body)
            if len(statements) != 1 or statements[0].type != "return_statement":
                return None
            returned = CSharpSyntax.named(statements[0])
            expr = CSharpSyntax.unwrap_parentheses(returned[0]) if returned else None
        if expr is None or expr.type != "identifier":
            return None
        return CSharpSyntax.text(expr)

    @staticmethod
    def _constructor_can_execute(prop: "tree_sitter.Node") -> tuple[str | None, str | None]:
        """
        Guard passed as the second DelegateCommand constructor argument.

        Returns (target, None) for an identifier, '() => Flag' or '() => Method()';
        (None, guard text) for any other guard; (None, None) when there is no guard.
        """
        for creation in CSharpSyntax.walk(prop, "object_creation_expression"):
            type_node = creation.child_by_field_name("type")
            if CSharpSyntax.simple_type_name(type_node) != DELEGATE_COMMAND_TYPE:
                continue
            arguments = CSharpSyntax.arguments(creation)
            if len(arguments) < 2:
                return None, None
            guard = CSharpSyntax.argument_expression(arguments[1])
            if guard is None:
                return None, None
            expr = CSharpSyntax.unwrap_parentheses(guard)
            if expr is not None and expr.type == "lambda_expression" and not CSharpSyntax.lambda_parameters(expr):
                expr = CSharpSyntax.unwrap_parentheses(CSharpSyntax.lambda_body(expr))
                if (
                    expr is not None
                    and expr.type == "invocation_expression"
                    and not CSharpSyntax.arguments(expr)
                ):
                    name = CSharpSyntax.invoked_name(expr)
                    if name is not None:
                        return name, None
            if expr is not None and expr.type == "identifier":
                return CSharpSyntax.text(expr), None
            return None, CSharpSyntax.text(guard)
        return None, None

    # --------------------------------------------------------------------- #
    # Planning
    # --------------------------------------------------------------------- #

    @staticmethod
    def method_name(stem: str, is_async: bool) -> str:
        """<Stem>, with 'Async' appended for async commands."""
        if is_async and not stem.endswith(ASYNC_SUFFIX):
            return f"{stem}{ASYNC_SUFFIX}"
        return stem

    @staticmethod
    def relay_attribute(can_execute_target: str | None) -> AttributeSpec:
        """[RelayCommand] or [RelayCommand(CanExecute = nameof(target))]."""
        if can_execute_target:
            return AttributeSpec(
                RELAY_COMMAND_ATTRIBUTE,
                (f"{CAN_EXECUTE_ARGUMENT} = {NAMEOF}({can_execute_target})",),
            )
        return AttributeSpec(RELAY_COMMAND_ATTRIBUTE)

    def plan(self, match: DelegateCommandMatch, document: "SourceDocument") -> list[Edit]:
        """
        Plan variant B when an execute method exists, variant A when a lambda was found.

        Raises UnfixableError when neither body is available, or when the command has a
        can-execute guard that the marker attribute cannot reference.
        """
        if not match.has_body:
            raise UnfixableError(
                f"{match.property_name}: no lambda or {EXECUTE_PREFIX}{match.stem} method to build a command from"
            )
        if match.unrecognised_guard is not None:
            raise UnfixableError(
                f"{match.property_name}: can-execute guard '{match.unrecognised_guard}' is not a member name; "
                f"move it into a {CAN_EXECUTE_PREFIX}{match.stem} method first"
            )
        if match.execute_method is not None:
            edits = self._plan_execute_method(match, match.execute_method, document)
        else:
            edits = self._plan_lambda(match, document)

        edits.append(Edit.remove(NodeRef.of(match.property_node, document)))
        edits.extend(
            RewriteSupport.remove_field(match.field_declaration, match.field_declarator, document)
        )
        edits.extend(RewriteSupport.ensure_partial(match.class_node, document))
        edits.append(Edit.ensure_import(RELAY_COMMAND_MODULE))
        return edits

    def _plan_execute_method(
        self, match: DelegateCommandMatch, method: "tree_sitter.Node", document: "SourceDocument"
    ) -> list[Edit]:
        """Rename Execute<Stem>, attach the marker, drop a trivial can-execute wrapper."""
        is_async = "async" in CSharpSyntax.modifiers(method)
        new_name = self.method_name(match.stem, is_async)

        edits = [
            Edit.insert_before(
                NodeRef.of(method, document), self.relay_attribute(match.can_execute_target_name)
            )
        ]
        name_node = CSharpSyntax.name_node(method)
        if name_node is not None and CSharpSyntax.text(name_node) != new_name:
            edits.append(Edit.replace(NodeRef.of(name_node, document), TokenSpec(new_name)))
        if match.can_execute_method is not None and match.can_execute_method_removable:
            edits.append(Edit.remove(NodeRef.of(match.can_execute_method, document)))
        return edits

    def _plan_lambda(self, match: DelegateCommandMatch, document: "SourceDocument") -> list[Edit]:
        """Generate a [RelayCommand] method from the lambda before the property."""
        modifiers = ("private", "async") if match.is_async else ("private",)
        method = MethodSpec(
            name=self.method_name(match.stem, match.is_async),
            return_type=TASK_TYPE if match.is_async else VOID_TYPE,
            modifiers=modifiers,
            parameters=match.parameters,
            attributes=(self.relay_attribute(match.can_execute_target_name),),
            body=match.command_body,
            leading_comments=tuple(
                RewriteSupport.dedented_text(c) for c in CSharpSyntax.leading_comments(match.property_node)
            ),
        )
        return [Edit.insert_before(NodeRef.of(match.property_node, document), method)]

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
            "Turn the command's execute delegate into a method marked [RelayCommand] "
            "(CanExecute = nameof(guard) when it has a guard) and delete the property and "
            "its backing field.",
        )
