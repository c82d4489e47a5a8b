from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import tree_sitter

    from refactorkit.domain.entities import Edit, NewNode, NodeRef, SourceDocument
    from refactorkit.domain.registry_types import RuleRegistryEntry


class SyntaxGatewayProtocol(Protocol):
    """Protocol for the C# syntax model: parsing and the type-name query."""

    def parse(self, text: str, path: str = "<memory>") -> "SourceDocument":
        """Parse source text into an immutable document snapshot."""
        ...

    def resolve_type_name(
        self, type_node: "tree_sitter.Node", document: "SourceDocument"
    ) -> str | None:
        """Resolve a declared type to its simple type name, or None when unresolvable."""
        ...


class TypeResolverProtocol(Protocol):
    """The single semantic query the command-type rules need."""

    def resolve_type_name(
        self, type_node: "tree_sitter.Node", document: "SourceDocument"
    ) -> str | None: ...


class TreeEditorProtocol(Protocol):
    """Protocol for applying edits to a document snapshot. Implementers accept only Edit at boundary."""

    def apply(self, document: "SourceDocument", edits: list["Edit"]) -> str:
        """Apply edits to the document and return the new source text.

        Raises StaleSnapshotError if any edit references another snapshot or a vanished node.
        """
        ...


class EditSessionProtocol(Protocol):
    """Builder-style editor bound to one document snapshot."""

    def insert_before(self, anchor: "NodeRef", node: "NewNode") -> None: ...
    def remove(self, target: "NodeRef") -> None: ...
    def replace(self, target: "NodeRef", node: "NewNode") -> None: ...
    def ensure_import(self, module: str) -> None: ...
    def materialize(self) -> str: ...


class CancellationSignal(Protocol):
    """Cooperative cancellation; threading.Event satisfies it."""

    def is_set(self) -> bool: ...

    def set(self) -> None: ...


class TelemetryPort(Protocol):
    """Protocol for telemetry/UI updates."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def handshake(self) -> None: ...


class GuidanceServiceProtocol(Protocol):
    """Protocol for rule registry lookups (titles, templates, instructions)."""

    def get_entry(self, rule_code: str) -> "RuleRegistryEntry | None": ...
    def get_message_template(self, rule_code: str) -> str | None: ...
    def get_display_name(self, rule_code: str) -> str: ...
    def get_manual_instructions(self, rule_code: str) -> str: ...
    def resolve_code(self, code_or_symbol: str) -> str | None: ...


class FileSystemProtocol(Protocol):
    """Protocol for filesystem operations - abstracts Path usage."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        ...

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        ...

    def glob_source_files(
        self, path: str, include: list[str], exclude: list[str]
    ) -> list[str]:
        """Get all source files under path matching include globs, skipping excluded directories."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        ...

    def backup(self, path: str) -> str:
        """Copy path to path + '.bak' and return the backup path."""
        ...

    def relative_to_cwd(self, path: str) -> str:
        """Return path relative to the working directory when possible."""
        ...
