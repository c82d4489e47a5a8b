"""Edit-planning pieces shared by the MVVM rewrite rules."""

from typing import TYPE_CHECKING

from refactorkit.domain.entities import Edit, NodeRef, TokenSpec
from refactorkit.domain.errors import StaleSnapshotError
from refactorkit.domain.syntax import CSharpSyntax

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import SourceDocument
    from refactorkit.domain.protocols import GuidanceServiceProtocol, TypeResolverProtocol
    from refactorkit.domain.rules import Violation

PARTIAL = "partial"


class RewriteSupport:
    """Static helpers: anchor lookup, backing-field removal, partial class, messages."""

    @staticmethod
    def locate(violation: "Violation", document: "SourceDocument") -> "tree_sitter.Node":
        """
        Re-locate the violation's declaration in the snapshot that will be edited.

        Raises StaleSnapshotError when the snapshot changed or the node vanished.
        """
        anchor = violation.anchor
        if anchor.snapshot_id != document.snapshot_id:
            raise StaleSnapshotError(
                f"{violation.code} finding belongs to another snapshot",
                expected=anchor.snapshot_id,
                actual=document.snapshot_id,
            )
        node = document.node_at(anchor)
        if node is None:
            raise StaleSnapshotError(
                f"{anchor.kind} at bytes {anchor.start_byte}-{anchor.end_byte} no longer exists"
            )
        return node

    @staticmethod
    def remove_field(
        declaration: "tree_sitter.Node | None",
        declarator: "tree_sitter.Node | None",
        document: "SourceDocument",
    ) -> list[Edit]:
        """Remove a backing field; only its declarator when the declaration has siblings."""
        if declaration is None:
            return []
        if declarator is not None and len(CSharpSyntax.declarators(declaration)) > 1:
            return [Edit.remove(NodeRef.of(declarator, document))]
        return [Edit.remove(NodeRef.of(declaration, document))]

    @staticmethod
    def ensure_partial(class_node: "tree_sitter.Node", document: "SourceDocument") -> list[Edit]:
        """Generated members need a partial class, and so does every class nesting it."""
        edits: list[Edit] = []
        current: "tree_sitter.Node | None" = class_node
        while current is not None:
            keyword = CSharpSyntax.class_keyword(current)
            if PARTIAL not in CSharpSyntax.modifiers(current) and keyword is not None:
                edits.append(Edit.insert_before(NodeRef.of(keyword, document), TokenSpec(f"{PARTIAL} ")))
            current = CSharpSyntax.enclosing_class(current)
        return edits

    @staticmethod
    def dedented_text(node: "tree_sitter.Node") -> str:
        """Node text with continuation lines shifted left by the node's start column."""
        lines = CSharpSyntax.text(node).replace("\r\n", "\n").split("\n")
        column = node.start_point[1]
        result = [lines[0]]
        for line in lines[1:]:
            stripped = len(line) - len(line.lstrip(" \t"))
            result.append(line[min(column, stripped):])
        return "\n".join(result)

    @staticmethod
    def format_message(
        guidance: "GuidanceServiceProtocol | None", code: str, default: str, **values: str
    ) -> str:
        """Render the registry message template for a rule, falling back to default."""
        template = guidance.get_message_template(code) if guidance is not None else None
        if not template:
            template = default
        try:
            return template.format(**values)
        except (KeyError, IndexError):
            return default.format(**values)

    @staticmethod
    def instructions(guidance: "GuidanceServiceProtocol | None", code: str, default: str) -> str:
        """Manual migration instructions for a rule."""
        if guidance is None:
            return default
        return guidance.get_manual_instructions(code) or default

    @staticmethod
    def declared_type_name(
        prop: "tree_sitter.Node",
        document: "SourceDocument",
        resolver: "TypeResolverProtocol | None",
    ) -> str | None:
        """Resolved simple name of a property's declared type."""
        type_node = CSharpSyntax.property_type(prop)
        if type_node is None:
            return None
        if resolver is not None:
            return resolver.resolve_type_name(type_node, document)
        return CSharpSyntax.simple_type_name(type_node)
