"""Tree editor gateway: applies Edit sets to a tree-sitter snapshot as byte-span rewrites."""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from refactorkit.domain.entities import AttributeSpec, Edit, EditType, NewNode, NodeRef
from refactorkit.domain.errors import StaleSnapshotError
from refactorkit.domain.protocols import EditSessionProtocol, TreeEditorProtocol
from refactorkit.domain.syntax import CSharpSyntax
from refactorkit.infrastructure.gateways.csharp_printer import CSharpPrinter

if TYPE_CHECKING:
    from tree_sitter import Node

    from refactorkit.domain.entities import SourceDocument

logger = logging.getLogger(__name__)

_USING_NAME = re.compile(r"using\s+(?:static\s+)?(?P<name>[\w.]+)\s*;")


@dataclass(frozen=True)
class _Splice:
    """One byte-range replacement. Zero-width splices are insertions."""

    start: int
    end: int
    text: bytes
    order: int
    index: int

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.start, self.order, self.index)


class EditSession(EditSessionProtocol):
    """Builder API over one document snapshot; materialize() hands the edits to the gateway."""

    def __init__(self, document: "SourceDocument", editor: "TreeSitterEditGateway") -> None:
        self._document = document
        self._editor = editor
        self._edits: list[Edit] = []

    @property
    def edits(self) -> list[Edit]:
        return list(self._edits)

    def insert_before(self, anchor: NodeRef, node: NewNode) -> None:
        self._edits.append(Edit.insert_before(anchor, node))

    def remove(self, target: NodeRef) -> None:
        self._edits.append(Edit.remove(target))

    def replace(self, target: NodeRef, node: NewNode) -> None:
        self._edits.append(Edit.replace(target, node))

    def ensure_import(self, module: str) -> None:
        self._edits.append(Edit.ensure_import(module))

    def extend(self, edits: list[Edit]) -> None:
        self._edits.extend(edits)

    def materialize(self) -> str:
        """Apply the collected edits and return the new source text."""
        return self._editor.apply(self._document, self._edits)


class TreeSitterEditGateway(TreeEditorProtocol):
    """
    Interprets Edit values against the snapshot they reference.

    Splices are applied in one forward sweep. A splice inside a range that is already
    replaced is subsumed (removing a container removes its members); a splice that
    partially overlaps one is skipped with a warning.
    """

    def __init__(
        self, printer: CSharpPrinter | None = None, strict_import_check: bool = False
    ) -> None:
        self._printer = printer or CSharpPrinter()
        self._strict_import_check = strict_import_check

    def session(self, document: "SourceDocument") -> EditSession:
        """Start collecting edits against a snapshot."""
        return EditSession(document, self)

    def apply(self, document: "SourceDocument", edits: list[Edit]) -> str:
        """Apply edits to the document and return the new source text."""
        nodes = self._resolve_targets(document, edits)
        source = document.source
        newline = "\r\n" if "\r\n" in document.text else "\n"

        anchored = {
            (e.target.start_byte, e.target.kind)
            for e in edits
            if e.edit_type is EditType.INSERT_BEFORE
            and e.target is not None
            and e.node is not None
            and self._printer.is_block(e.node)
        }

        splices: list[_Splice] = []
        imported: set[str] = set()
        for index, edit in enumerate(edits):
            node = nodes.get(index)
            if edit.edit_type is EditType.INSERT_BEFORE and node is not None and edit.node is not None:
                splices.append(self._insert_splice(source, node, edit.node, newline, index))
            elif edit.edit_type is EditType.REMOVE and node is not None:
                tight = (node.start_byte, node.type) in anchored
                start, end = self.removal_extent(source, node, tight=tight)
                splices.append(_Splice(start, end, b"", 1, index))
            elif edit.edit_type is EditType.REPLACE and node is not None and edit.node is not None:
                text = self._printer.render(edit.node, self.indent_at(source, node.start_byte), newline)
                splices.append(_Splice(node.start_byte, node.end_byte, text.encode("utf-8"), 1, index))
            elif edit.edit_type is EditType.ENSURE_IMPORT and edit.module:
                if edit.module in imported or self.has_import(document, edit.module):
                    continue
                imported.add(edit.module)
                splices.append(self._import_splice(document, edit.module, newline, index))

        return self._splice(source, splices).decode("utf-8")

    # --------------------------------------------------------------------- #
    # Validation
    # --------------------------------------------------------------------- #

    @staticmethod
    def _resolve_targets(document: "SourceDocument", edits: list[Edit]) -> dict[int, "Node"]:
        """Map edit index -> live node. Raises StaleSnapshotError for any stale reference."""
        nodes: dict[int, "Node"] = {}
        for index, edit in enumerate(edits):
            if edit.target is None:
                continue
            if edit.target.snapshot_id != document.snapshot_id:
                raise StaleSnapshotError(
                    f"{edit.edit_type.value} edit was planned against another snapshot",
                    expected=edit.target.snapshot_id,
                    actual=document.snapshot_id,
                )
            node = document.node_at(edit.target)
            if node is None:
                raise StaleSnapshotError(
                    f"{edit.target.kind} at bytes {edit.target.start_byte}-{edit.target.end_byte} "
                    "no longer exists"
                )
            nodes[index] = node
        return nodes

    # --------------------------------------------------------------------- #
    # Splice construction
    # --------------------------------------------------------------------- #

    def _insert_splice(
        self, source: bytes, node: "Node", new_node: NewNode, newline: str, index: int
    ) -> _Splice:
        indent = self.indent_at(source, node.start_byte)
        if self._printer.is_block(new_node):
            start, _ = self.removal_extent(source, node, tight=True)
            text = self._printer.render(new_node, indent, newline)
            if not self._starts_line(source, start):
                text = text[len(indent):] + indent
            return _Splice(start, start, text.encode("utf-8"), 0, index)

        text = self._printer.render(new_node, indent, newline)
        if isinstance(new_node, AttributeSpec):
            separator = newline + indent if self._starts_line(source, node.start_byte) else " "
            text = text + separator
        return _Splice(node.start_byte, node.start_byte, text.encode("utf-8"), 0, index)

    def _import_splice(
        self, document: "SourceDocument", module: str, newline: str, index: int
    ) -> _Splice:
        source = document.source
        line = f"using {module};{newline}"
        usings = [c for c in document.root.named_children if c.type == "using_directive"]
        if usings:
            position = self._line_end(source, usings[-1].end_byte)
            return _Splice(position, position, line.encode("utf-8"), 0, index)
        for child in document.root.named_children:
            if child.type != "comment":
                position = self._line_start(source, child.start_byte)
                return _Splice(position, position, (line + newline).encode("utf-8"), 0, index)
        return _Splice(len(source), len(source), line.encode("utf-8"), 0, index)

    @staticmethod
    def _splice(source: bytes, splices: list[_Splice]) -> bytes:
        out: list[bytes] = []
        cursor = 0
        covered = 0
        for splice in sorted(splices, key=lambda s: s.sort_key):
            if splice.start < covered:
                if splice.end > covered:
                    logger.warning(
                        "Skipping edit at bytes %d-%d: overlaps an earlier edit", splice.start, splice.end
                    )
                continue
            out.append(source[cursor:splice.start])
            out.append(splice.text)
            cursor = splice.end
            covered = max(covered, splice.end)
        out.append(source[cursor:])
        return b"".join(out)

    # --------------------------------------------------------------------- #
    # Layout queries
    # --------------------------------------------------------------------- #

    def has_import(self, document: "SourceDocument", module: str) -> bool:
        """
        Whether the file already imports module.

        Default comparison is containment of the module text in a directive's name;
        strict_import_check compares names exactly.
        """
        for directive in CSharpSyntax.walk(document.root, "using_directive"):
            found = _USING_NAME.search(CSharpSyntax.text(directive))
            if found is None:
                continue
            name = found.group("name")
            if name == module or (not self._strict_import_check and module in name):
                return True
        return False

    @staticmethod
    def _line_start(source: bytes, position: int) -> int:
        return source.rfind(b"\n", 0, position) + 1

    @staticmethod
    def _line_end(source: bytes, position: int) -> int:
        """Offset just past the newline ending the line that contains position."""
        newline = source.find(b"\n", position)
        return len(source) if newline < 0 else newline + 1

    @classmethod
    def _starts_line(cls, source: bytes, position: int) -> bool:
        return not source[cls._line_start(source, position):position].strip()

    @classmethod
    def indent_at(cls, source: bytes, position: int) -> str:
        """Leading whitespace of the line containing position."""
        line = source[cls._line_start(source, position):position]
        return line[: len(line) - len(line.lstrip(b" \t"))].decode("utf-8")

    @staticmethod
    def _is_blank(line: bytes) -> bool:
        return not line.strip()

    @classmethod
    def removal_extent(cls, source: bytes, node: "Node", tight: bool = False) -> tuple[int, int]:
        """
        Byte range removed for a node.

        Covers the node's own-line leading comments, its indentation and its line
        break. Unless tight, one surrounding blank line is absorbed so the gap left
        behind is not doubled. A variable declarator takes its separating comma.
        """
        if node.type == "variable_declarator":
            return cls._declarator_extent(source, node)

        comments = CSharpSyntax.leading_comments(node)
        start = comments[0].start_byte if comments else node.start_byte
        end = node.end_byte

        line_start = cls._line_start(source, start)
        own_line = not source[line_start:start].strip()
        if own_line:
            start = line_start

        while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
            end += 1
        if source[end:end + 2] == b"\r\n":
            end += 2
        elif source[end:end + 1] == b"\n":
            end += 1
        else:
            return start, end

        if tight or not own_line:
            return start, end

        previous_start = cls._line_start(source, max(start - 1, 0))
        previous = source[previous_start:start] if start > 0 else b"{"
        next_end = cls._line_end(source, end)
        following = source[end:next_end]
        previous_blank = cls._is_blank(previous)
        if cls._is_blank(following) and next_end > end and (previous_blank or previous.rstrip().endswith(b"{")):
            end = next_end
        elif previous_blank and start > 0 and following.strip().startswith(b"}"):
            start = previous_start
        return start, end

    @staticmethod
    def _declarator_extent(source: bytes, declarator: "Node") -> tuple[int, int]:
        following = declarator.next_sibling
        if following is not None and following.type == ",":
            end = following.end_byte
            while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
                end += 1
            return declarator.start_byte, end
        preceding = declarator.prev_sibling
        if preceding is not None and preceding.type == ",":
            return preceding.start_byte, declarator.end_byte
        return declarator.start_byte, declarator.end_byte
