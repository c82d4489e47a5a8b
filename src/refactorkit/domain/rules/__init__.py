"""Domain models for rules and violations."""

from dataclasses import dataclass

__all__ = [
    "BaseRule",
    "Checkable",
    "Fixable",
    "Violation",
]

from typing import TYPE_CHECKING, Literal, Protocol

from refactorkit.domain.constants import SEVERITY_ERROR

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import Edit, NodeRef, SourceDocument


@dataclass(frozen=True)
class Violation:
    """A rule violation with code, message, location, and fixability."""

    code: str
    symbol: str
    message: str
    location: str
    node: "tree_sitter.Node"
    anchor: "NodeRef"
    """The declaration the finding is about; fixes re-locate it in the current snapshot."""
    severity: str = SEVERITY_ERROR
    fixable: bool = False
    fix_failure_reason: str | None = None

    @property
    def path(self) -> str:
        """File part of the location."""
        return self.location.rsplit(":", 2)[0]

    @property
    def line(self) -> int:
        """1-based line of the reported token."""
        return self.node.start_point[0] + 1

    @property
    def column(self) -> int:
        """0-based column of the reported token."""
        return self.node.start_point[1]

    @staticmethod
    def _location_from_node(node: "tree_sitter.Node", path: str) -> str:
        """Compute path:line:col from a node. Used by from_node."""
        row, col = node.start_point
        return f"{path}:{row + 1}:{col}"

    @classmethod
    def from_node(
        cls,
        *,
        code: str,
        symbol: str,
        message: str,
        node: "tree_sitter.Node",
        document: "SourceDocument",
        anchor: "tree_sitter.Node | None" = None,
        severity: str = SEVERITY_ERROR,
        fixable: bool = False,
        fix_failure_reason: str | None = None,
    ) -> "Violation":
        """Build a Violation with location derived from node. Prefer over manual location=."""
        from refactorkit.domain.entities import NodeRef

        return cls(
            code=code,
            symbol=symbol,
            message=message,
            location=cls._location_from_node(node, document.path),
            node=node,
            anchor=NodeRef.of(anchor if anchor is not None else node, document),
            severity=severity,
            fixable=fixable,
            fix_failure_reason=fix_failure_reason,
        )

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON output."""
        return {
            "code": self.code,
            "symbol": self.symbol,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "fixable": self.fixable,
        }


# -----------------------------------------------------------------------------
# Rule protocols: Checkable (detection) and Fixable (optional). BaseRule is both.
# Rules are stateless; every call receives the document snapshot it works on.
# -----------------------------------------------------------------------------


class Checkable(Protocol):
    """One-and-done check: given a node, return violations. No fix required."""

    code: str
    symbol: str
    description: str
    node_kinds: tuple[str, ...]
    """Syntax node types this rule wants to see."""

    def check(self, node: "tree_sitter.Node", document: "SourceDocument") -> list[Violation]:
        """Interrogate a node for a legacy shape."""
        ...


class Fixable(Protocol):
    """Optional capability: rule can produce edits or human fix instructions."""

    fix_type: Literal["code", "none"]
    """'code' when the rule plans edits, 'none' when it only reports."""

    def fix(self, violation: Violation, document: "SourceDocument") -> "list[Edit] | None":
        """
        Plan the edits that resolve a violation against the given snapshot.

        Returns:
            - list[Edit]: edits to apply (empty list: nothing to change)
            - None: the rule offers no automatic fix

        Raises:
            StaleSnapshotError: the violation's anchor is not part of this snapshot.
            UnfixableError: the shape was detected but cannot be rebuilt.
        """
        ...

    def get_fix_instructions(self, violation: Violation) -> str:
        """Provide human instructions for a manual fix."""
        ...


class BaseRule(Checkable, Fixable, Protocol):
    """
    One-shot check + fix: Checkable + Fixable combined.

    All refactorkit rules implement this; rules without an automatic fix return None
    from fix().
    """

    code: str
    symbol: str
    description: str
    severity: str
    fix_type: Literal["code", "none"]
    node_kinds: tuple[str, ...]

    def check(self, node: "tree_sitter.Node", document: "SourceDocument") -> list[Violation]:
        """Interrogate a node for a legacy shape."""
        ...

    def fix(self, violation: Violation, document: "SourceDocument") -> "list[Edit] | None":
        """Plan the edits that resolve a violation, or None when there is no automatic fix."""
        ...
