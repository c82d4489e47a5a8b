from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.rules import Violation


@dataclass(frozen=True)
class SourceDocument:
    """
    One parsed snapshot of a C# source file.

    The snapshot id is derived from the source bytes, so two documents with identical
    text are interchangeable and node references stay valid across them.
    """

    path: str
    text: str
    tree: "tree_sitter.Tree"
    snapshot_id: str

    @property
    def root(self) -> "tree_sitter.Node":
        """Return the compilation unit node."""
        return self.tree.root_node

    @property
    def source(self) -> bytes:
        """Return the UTF-8 bytes the tree was parsed from."""
        return self.text.encode("utf-8")

    @property
    def has_errors(self) -> bool:
        """True when the parser had to recover from syntax errors."""
        return bool(self.tree.root_node.has_error)

    def node_at(self, ref: "NodeRef") -> "tree_sitter.Node | None":
        """Return the node a reference points at, or None when it is not in this snapshot."""
        if ref.snapshot_id != self.snapshot_id:
            return None
        node = self.root.descendant_for_byte_range(ref.start_byte, ref.end_byte)
        while node is not None:
            if node.start_byte < ref.start_byte or node.end_byte > ref.end_byte:
                return None
            if node.type == ref.kind:
                return node
            node = node.parent
        return None


@dataclass(frozen=True)
class NodeRef:
    """A node located by span and kind inside one snapshot."""

    start_byte: int
    end_byte: int
    kind: str
    snapshot_id: str

    @classmethod
    def of(cls, node: "tree_sitter.Node", document: SourceDocument) -> "NodeRef":
        """Reference a node of the given document."""
        return cls(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            kind=node.type,
            snapshot_id=document.snapshot_id,
        )


# -----------------------------------------------------------------------------
# New nodes. Planners describe what to synthesise; the printer renders them.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AttributeSpec:
    """A single attribute, e.g. [NotifyPropertyChangedFor(nameof(FullName))]."""

    name: str
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParameterSpec:
    """A method parameter. type_name is empty when the source had no type."""

    name: str
    type_name: str = ""


@dataclass(frozen=True)
class PropertySpec:
    """An auto-implemented property declaration."""

    type_name: str
    name: str
    modifiers: tuple[str, ...] = ("public", "partial")
    attributes: tuple[AttributeSpec, ...] = ()
    initializer: str | None = None
    leading_comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class MethodSpec:
    """A method declaration with a block body made of the given statements."""

    name: str
    return_type: str
    modifiers: tuple[str, ...] = ("private",)
    parameters: tuple[ParameterSpec, ...] = ()
    attributes: tuple[AttributeSpec, ...] = ()
    body: tuple[str, ...] = ()
    leading_comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class TokenSpec:
    """Raw token text, e.g. a replacement identifier or a 'partial ' modifier."""

    text: str


NewNode = Union[PropertySpec, MethodSpec, AttributeSpec, TokenSpec]


class EditType(Enum):
    """Kinds of tree edits a rewrite planner can request."""

    INSERT_BEFORE = "insert_before"
    REMOVE = "remove"
    REPLACE = "replace"
    ENSURE_IMPORT = "ensure_import"


@dataclass(frozen=True)
class Edit:
    """
    Pure data structure describing one tree edit.

    Rules return these instead of touching text. The tree editor gateway interprets
    them against the snapshot they reference.
    """

    edit_type: EditType
    target: NodeRef | None = None
    node: NewNode | None = None
    module: str | None = None

    @classmethod
    def insert_before(cls, anchor: NodeRef, node: NewNode) -> "Edit":
        """Create edit inserting a new node before the anchor."""
        return cls(edit_type=EditType.INSERT_BEFORE, target=anchor, node=node)

    @classmethod
    def remove(cls, target: NodeRef) -> "Edit":
        """Create edit removing a node together with its leading comments."""
        return cls(edit_type=EditType.REMOVE, target=target)

    @classmethod
    def replace(cls, target: NodeRef, node: NewNode) -> "Edit":
        """Create edit replacing a node's exact span."""
        return cls(edit_type=EditType.REPLACE, target=target, node=node)

    @classmethod
    def ensure_import(cls, module: str) -> "Edit":
        """Create edit adding a using directive if the file lacks it."""
        return cls(edit_type=EditType.ENSURE_IMPORT, module=module)


@dataclass(frozen=True)
class ScanResult:
    """Findings for one document, in source order."""

    path: str
    findings: tuple["Violation", ...] = ()
    parse_errors: bool = False

    def has_findings(self) -> bool:
        """Check if any rule fired."""
        return bool(self.findings)


@dataclass(frozen=True)
class FixResult:
    """Outcome of one fix request: a replacement document text or an explicit no-change."""

    path: str
    changed: bool
    text: str
    reason: str | None = None

    @classmethod
    def no_change(cls, document: SourceDocument, reason: str) -> "FixResult":
        """Build the explicit 'no change' result."""
        return cls(path=document.path, changed=False, text=document.text, reason=reason)


@dataclass(frozen=True)
class FileFixReport:
    """Summary of fixing one file: applied codes and declined findings."""

    path: str
    original_text: str
    text: str
    applied: tuple[str, ...] = ()
    declined: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        """True when at least one fix changed the text."""
        return self.text != self.original_text

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "path": self.path,
            "changed": self.changed,
            "applied": list(self.applied),
            "declined": list(self.declined),
        }


@dataclass(frozen=True)
class CheckReport:
    """Result of scanning a set of files."""

    results: tuple[ScanResult, ...] = field(default_factory=tuple)

    def has_findings(self) -> bool:
        """Check if any file has findings."""
        return any(r.has_findings() for r in self.results)

    @property
    def findings(self) -> list["Violation"]:
        """All findings across files in file order."""
        return [v for r in self.results for v in r.findings]
