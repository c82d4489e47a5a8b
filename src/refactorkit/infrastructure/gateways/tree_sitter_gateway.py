"""Syntax model gateway: tree-sitter C# parsing and syntactic type-name resolution."""

import hashlib
import logging
import re

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

from refactorkit.domain.entities import SourceDocument
from refactorkit.domain.protocols import SyntaxGatewayProtocol
from refactorkit.domain.syntax import CSharpSyntax

logger = logging.getLogger(__name__)

CSHARP_LANGUAGE = Language(tree_sitter_c_sharp.language())

_USING_ALIAS = re.compile(
    r"^\s*(?:global\s+)?using\s+(?P<alias>[A-Za-z_]\w*)\s*=\s*(?P<target>[^;]+);"
)


class TreeSitterGateway(SyntaxGatewayProtocol):
    """
    Parses C# with tree-sitter-c-sharp into SourceDocument snapshots.

    Parsers are not shared between threads; each parse builds its own.
    """

    def __init__(self) -> None:
        self._language = CSHARP_LANGUAGE

    def parse(self, text: str, path: str = "<memory>") -> SourceDocument:
        """Parse source text into an immutable document snapshot."""
        source = text.encode("utf-8")
        tree = Parser(self._language).parse(source)
        document = SourceDocument(
            path=path,
            text=text,
            tree=tree,
            snapshot_id=self.snapshot_id(text),
        )
        if document.has_errors:
            logger.debug("%s: parsed with syntax errors", path)
        return document

    @staticmethod
    def snapshot_id(text: str) -> str:
        """SHA-256 of the UTF-8 source; identical text is the same snapshot."""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def resolve_type_name(self, type_node: Node, document: SourceDocument) -> str | None:
        """
        Resolve a declared type to its simple name.

        Nullable wrappers, qualification and generic arity are dropped; a bare name
        bound by 'using Alias = Some.Type;' resolves to the aliased type. Arrays,
        tuples, pointers and 'var' do not resolve.
        """
        name = CSharpSyntax.simple_type_name(type_node)
        if name is None:
            return None
        inner = type_node
        while inner.type == "nullable_type":
            named = CSharpSyntax.named(inner)
            if not named:
                break
            inner = named[0]
        if inner.type == "identifier":
            target = self.using_aliases(document).get(name)
            if target is not None:
                return self.simple_name_of(target)
        return name

    @staticmethod
    def using_aliases(document: SourceDocument) -> dict[str, str]:
        """Alias -> target text for every 'using Alias = Target;' in the file."""
        aliases: dict[str, str] = {}
        for directive in CSharpSyntax.walk(document.root, "using_directive"):
            found = _USING_ALIAS.match(CSharpSyntax.text(directive))
            if found:
                aliases[found.group("alias")] = found.group("target").strip()
        return aliases

    @staticmethod
    def simple_name_of(type_text: str) -> str:
        """'Prism.Commands.DelegateCommand<string>' -> 'DelegateCommand'."""
        head = type_text.split("<", 1)[0].strip().rstrip("?")
        head = head.split("::")[-1]
        return head.rsplit(".", 1)[-1].strip()
