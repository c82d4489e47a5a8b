"""Renders new-node specs as C# source text."""

from refactorkit.domain.entities import (
    AttributeSpec,
    MethodSpec,
    NewNode,
    ParameterSpec,
    PropertySpec,
    TokenSpec,
)

INDENT_UNIT = "    "


class CSharpPrinter:
    """
    Prints PropertySpec/MethodSpec as whole lines and AttributeSpec/TokenSpec inline.

    Block output starts with the given indent and ends with a newline; inline output
    carries no layout.
    """

    @staticmethod
    def is_block(node: NewNode) -> bool:
        """True for declarations that occupy whole lines."""
        return isinstance(node, (PropertySpec, MethodSpec))

    def render(self, node: NewNode, indent: str = "", newline: str = "\n") -> str:
        """Render any new-node spec."""
        if isinstance(node, PropertySpec):
            return self.render_property(node, indent, newline)
        if isinstance(node, MethodSpec):
            return self.render_method(node, indent, newline)
        if isinstance(node, AttributeSpec):
            return self.render_attribute(node)
        if isinstance(node, TokenSpec):
            return node.text
        raise TypeError(f"Cannot print {type(node).__name__}")

    @staticmethod
    def render_attribute(attribute: AttributeSpec) -> str:
        """[Name] or [Name(arg, ...)]."""
        if attribute.arguments:
            return f"[{attribute.name}({', '.join(attribute.arguments)})]"
        return f"[{attribute.name}]"

    @staticmethod
    def render_parameter(parameter: ParameterSpec) -> str:
        if parameter.type_name:
            return f"{parameter.type_name} {parameter.name}"
        return parameter.name

    def _header_lines(
        self, comments: tuple[str, ...], attributes: tuple[AttributeSpec, ...]
    ) -> list[str]:
        lines: list[str] = []
        for comment in comments:
            lines.extend(comment.replace("\r\n", "\n").split("\n"))
        lines.extend(self.render_attribute(a) for a in attributes)
        return lines

    @staticmethod
    def _join(lines: list[str], indent: str, newline: str) -> str:
        return "".join(f"{indent}{line}".rstrip() + newline for line in lines)

    def render_property(self, prop: PropertySpec, indent: str = "", newline: str = "\n") -> str:
        """Comments, one attribute per line, then the auto-property."""
        lines = self._header_lines(prop.leading_comments, prop.attributes)
        declaration = f"{' '.join(prop.modifiers)} {prop.type_name} {prop.name} {{ get; set; }}"
        if prop.initializer is not None:
            declaration = f"{declaration} = {prop.initializer};"
        lines.append(declaration)
        return self._join(lines, indent, newline)

    def render_method(self, method: MethodSpec, indent: str = "", newline: str = "\n") -> str:
        """Comments, attributes, signature and a block body one level deeper."""
        lines = self._header_lines(method.leading_comments, method.attributes)
        parameters = ", ".join(self.render_parameter(p) for p in method.parameters)
        lines.append(f"{' '.join(method.modifiers)} {method.return_type} {method.name}({parameters})")
        lines.append("{")
        for statement in method.body:
            for line in statement.replace("\r\n", "\n").split("\n"):
                lines.append(f"{INDENT_UNIT}{line}")
        lines.append("}")
        return self._join(lines, indent, newline)
