"""Read-only helpers over the tree-sitter C# syntax tree. Pure shape queries; nothing here mutates."""

from collections.abc import Iterator

from tree_sitter import Node

COMMENT = "comment"
ACCESSOR_KINDS = frozenset({"get", "set", "init", "add", "remove"})


class CSharpSyntax:
    """
    Node-shape queries shared by the matchers and planners.

    Grammar details that moved between tree-sitter-c-sharp releases (field names,
    equals_value_clause, implicit_parameter, ref_expression) are handled by looking
    at child node types rather than relying on one field layout.
    """

    @staticmethod
    def text(node: Node | None) -> str:
        """Return the source text of a node ('' for None)."""
        if node is None or node.text is None:
            return ""
        return node.text.decode("utf-8")

    @staticmethod
    def named(node: Node) -> list[Node]:
        """Named children without comment extras."""
        return [c for c in node.named_children if c.type != COMMENT]

    @staticmethod
    def first_of_type(node: Node, *types: str) -> Node | None:
        """Return the first direct child of one of the given types."""
        for child in node.children:
            if child.type in types:
                return child
        return None

    @staticmethod
    def children_of_type(node: Node, *types: str) -> list[Node]:
        """Return the direct children of the given types."""
        return [c for c in node.children if c.type in types]

    @staticmethod
    def walk(node: Node, *types: str) -> Iterator[Node]:
        """Yield descendants (including node) in document order, optionally filtered by type."""
        stack = [node]
        while stack:
            current = stack.pop()
            if not types or current.type in types:
                yield current
            stack.extend(reversed(current.children))

    @staticmethod
    def name_node(node: Node) -> Node | None:
        """The declared identifier of a declaration node."""
        name = node.child_by_field_name("name")
        if name is not None:
            return name
        return CSharpSyntax.first_of_type(node, "identifier")

    @staticmethod
    def name_of(node: Node) -> str:
        """The declared name of a declaration node ('' when absent)."""
        return CSharpSyntax.text(CSharpSyntax.name_node(node))

    @staticmethod
    def modifiers(node: Node) -> list[str]:
        """Modifier keywords of a declaration, in source order."""
        return [CSharpSyntax.text(c) for c in node.children if c.type == "modifier"]

    @staticmethod
    def operator(node: Node) -> str:
        """Operator token text of a binary or assignment expression."""
        op = node.child_by_field_name("operator")
        if op is not None:
            return CSharpSyntax.text(op)
        for child in node.children:
            if not child.is_named:
                return CSharpSyntax.text(child)
        return ""

    @staticmethod
    def unwrap_parentheses(node: Node | None) -> Node | None:
        """Strip redundant parentheses around an expression."""
        while node is not None and node.type == "parenthesized_expression":
            inner = CSharpSyntax.named(node)
            node = inner[0] if inner else None
        return node

    # -- classes and members ---------------------------------------------------

    @staticmethod
    def enclosing_class(node: Node) -> Node | None:
        """The class declaration that directly contains a member, if any."""
        parent = node.parent
        if parent is None or parent.type != "declaration_list":
            return None
        owner = parent.parent
        if owner is None or owner.type != "class_declaration":
            return None
        return owner

    @staticmethod
    def class_body(class_node: Node) -> Node | None:
        """The declaration_list of a class."""
        body = class_node.child_by_field_name("body")
        if body is not None:
            return body
        return CSharpSyntax.first_of_type(class_node, "declaration_list")

    @staticmethod
    def members(class_node: Node) -> list[Node]:
        """Member declarations of a class in source order."""
        body = CSharpSyntax.class_body(class_node)
        return CSharpSyntax.named(body) if body is not None else []

    @staticmethod
    def class_keyword(class_node: Node) -> Node | None:
        """The 'class' keyword token of a class declaration."""
        for child in class_node.children:
            if child.type == "class":
                return child
        return None

    @staticmethod
    def find_method(class_node: Node, name: str) -> Node | None:
        """First method of the class with the given name."""
        for member in CSharpSyntax.members(class_node):
            if member.type == "method_declaration" and CSharpSyntax.name_of(member) == name:
                return member
        return None

    @staticmethod
    def declarators(field_node: Node) -> list[Node]:
        """Variable declarators of a field declaration."""
        declaration = CSharpSyntax.first_of_type(field_node, "variable_declaration")
        if declaration is None:
            return []
        return CSharpSyntax.children_of_type(declaration, "variable_declarator")

    @staticmethod
    def find_field(class_node: Node, name: str) -> tuple[Node | None, Node | None]:
        """Return (field_declaration, variable_declarator) declaring name, or (None, None)."""
        for member in CSharpSyntax.members(class_node):
            if member.type != "field_declaration":
                continue
            for declarator in CSharpSyntax.declarators(member):
                if CSharpSyntax.name_of(declarator) == name:
                    return member, declarator
        return None, None

    @staticmethod
    def initializer_after_equals(node: Node) -> Node | None:
        """The expression following a '=' child, or inside an equals_value_clause child."""
        clause = CSharpSyntax.first_of_type(node, "equals_value_clause")
        if clause is not None:
            inner = CSharpSyntax.named(clause)
            return inner[0] if inner else None
        seen_equals = False
        for child in node.children:
            if seen_equals and child.is_named and child.type != COMMENT:
                return child
            if child.type == "=":
                seen_equals = True
        return None

    # -- properties and accessors ------------------------------------------------

    @staticmethod
    def property_type(prop: Node) -> Node | None:
        """Declared type node of a property."""
        return prop.child_by_field_name("type")

    @staticmethod
    def accessors(prop: Node) -> list[Node]:
        """Accessor declarations of a property ([] for expression-bodied properties)."""
        accessor_list = CSharpSyntax.first_of_type(prop, "accessor_list")
        if accessor_list is None:
            return []
        return CSharpSyntax.children_of_type(accessor_list, "accessor_declaration")

    @staticmethod
    def accessor_kind(accessor: Node) -> str:
        """'get', 'set', 'init', 'add' or 'remove'."""
        for child in accessor.children:
            if child.type in ACCESSOR_KINDS:
                return child.type
        name = accessor.child_by_field_name("name")
        return CSharpSyntax.text(name)

    @staticmethod
    def accessor(prop: Node, kind: str) -> Node | None:
        """First accessor of the given kind."""
        for acc in CSharpSyntax.accessors(prop):
            if CSharpSyntax.accessor_kind(acc) == kind:
                return acc
        return None

    @staticmethod
    def body(node: Node) -> Node | None:
        """Block or arrow_expression_clause body of an accessor, method or lambda."""
        body = node.child_by_field_name("body")
        if body is not None and body.type in ("block", "arrow_expression_clause"):
            return body
        return CSharpSyntax.first_of_type(node, "block", "arrow_expression_clause")

    @staticmethod
    def arrow_expression(arrow: Node) -> Node | None:
        """The expression of an arrow_expression_clause."""
        inner = CSharpSyntax.named(arrow)
        return inner[0] if inner else None

    @staticmethod
    def statement_expressions(body: Node | None) -> list[Node]:
        """
        Expressions of the top-level expression statements of a body, in order.

        An arrow body counts as a single statement.
        """
        if body is None:
            return []
        if body.type == "arrow_expression_clause":
            expr = CSharpSyntax.arrow_expression(body)
            return [expr] if expr is not None else []
        result: list[Node] = []
        for statement in CSharpSyntax.named(body):
            if statement.type != "expression_statement":
                continue
            inner = CSharpSyntax.named(statement)
            if inner:
                result.append(inner[0])
        return result

    @staticmethod
    def property_value_expression(prop: Node) -> Node | None:
        """
        The value-producing expression of a property.

        Preference: expression-bodied property, getter expression body, first return
        statement of a getter block.
        """
        arrow = CSharpSyntax.first_of_type(prop, "arrow_expression_clause")
        if arrow is not None:
            return CSharpSyntax.arrow_expression(arrow)
        getter = CSharpSyntax.accessor(prop, "get")
        if getter is None:
            return None
        body = CSharpSyntax.body(getter)
        if body is None:
            return None
        if body.type == "arrow_expression_clause":
            return CSharpSyntax.arrow_expression(body)
        for statement in CSharpSyntax.named(body):
            if statement.type == "return_statement":
                inner = CSharpSyntax.named(statement)
                return inner[0] if inner else None
        return None

    @staticmethod
    def property_initializer(prop: Node) -> Node | None:
        """Initializer expression of '{ get; set; } = value;' properties."""
        if CSharpSyntax.first_of_type(prop, "accessor_list") is None:
            return None
        return CSharpSyntax.initializer_after_equals(prop)

    @staticmethod
    def leading_comments(node: Node) -> list[Node]:
        """
        Comments that belong to a declaration, in source order.

        A comment belongs when it sits on its own line and no blank line separates it
        from what follows. Trailing comments of the previous line are excluded.
        """
        comments: list[Node] = []
        following = node
        sibling = node.prev_sibling
        while sibling is not None and sibling.type == COMMENT:
            if following.start_point[0] - sibling.end_point[0] > 1:
                break
            before = sibling.prev_sibling
            if before is not None and before.end_point[0] >= sibling.start_point[0]:
                break
            comments.append(sibling)
            following = sibling
            sibling = before
        comments.reverse()
        return comments

    # -- invocations and arguments -----------------------------------------------

    @staticmethod
    def invoked_name(node: Node) -> str | None:
        """Identifier text of 'Name(...)' invocations; None for any other callee shape."""
        if node.type != "invocation_expression":
            return None
        function = node.child_by_field_name("function")
        if function is None:
            inner = CSharpSyntax.named(node)
            function = inner[0] if inner else None
        if function is None or function.type != "identifier":
            return None
        return CSharpSyntax.text(function)

    @staticmethod
    def arguments(node: Node) -> list[Node]:
        """Argument nodes of an invocation or object creation."""
        argument_list = node.child_by_field_name("arguments")
        if argument_list is None:
            argument_list = CSharpSyntax.first_of_type(node, "argument_list")
        if argument_list is None:
            return []
        return CSharpSyntax.children_of_type(argument_list, "argument")

    @staticmethod
    def argument_expression(argument: Node) -> Node | None:
        """The value expression of an argument (named-argument labels skipped)."""
        inner = CSharpSyntax.named(argument)
        return inner[-1] if inner else None

    @staticmethod
    def is_ref_argument(argument: Node) -> bool:
        """True for 'ref x' arguments."""
        if any(child.type == "ref" for child in argument.children):
            return True
        expr = CSharpSyntax.argument_expression(argument)
        return expr is not None and expr.type == "ref_expression"

    @staticmethod
    def referenced_identifier(argument: Node) -> str | None:
        """Identifier of 'x' or 'ref x' arguments."""
        expr = CSharpSyntax.argument_expression(argument)
        if expr is not None and expr.type in ("ref_expression", "prefix_unary_expression"):
            inner = CSharpSyntax.named(expr)
            expr = inner[-1] if inner else None
        if expr is not None and expr.type == "identifier":
            return CSharpSyntax.text(expr)
        return None

    @staticmethod
    def string_literal_value(node: Node) -> str | None:
        """Value of a plain or verbatim string literal; None for other expressions."""
        if node.type == "string_literal":
            parts = [
                CSharpSyntax.text(c)
                for c in node.children
                if c.type in ("string_literal_content", "string_content", "escape_sequence")
            ]
            if parts:
                return "".join(parts)
            raw = CSharpSyntax.text(node)
            return raw[1:-1] if len(raw) >= 2 else ""
        if node.type == "verbatim_string_literal":
            raw = CSharpSyntax.text(node)
            return raw[2:-1].replace('""', '"')
        return None

    # -- lambdas --------------------------------------------------------------------

    @staticmethod
    def lambda_is_async(lam: Node) -> bool:
        """True when the lambda carries the async modifier."""
        for child in lam.children:
            if child.type == "=>":
                return False
            if CSharpSyntax.text(child) == "async":
                return True
        return False

    @staticmethod
    def lambda_parameters(lam: Node) -> list[tuple[str, str]]:
        """(name, type) pairs of a lambda; type is '' when implicit."""
        params = lam.child_by_field_name("parameters")
        if params is None:
            for child in lam.children:
                if child.type == "=>":
                    break
                if child.type in ("parameter_list", "identifier", "implicit_parameter"):
                    params = child
        if params is None:
            return []
        if params.type in ("identifier", "implicit_parameter"):
            return [(CSharpSyntax.text(params), "")]
        result: list[tuple[str, str]] = []
        for parameter in CSharpSyntax.children_of_type(params, "parameter"):
            type_node = parameter.child_by_field_name("type")
            result.append((CSharpSyntax.name_of(parameter), CSharpSyntax.text(type_node)))
        return result

    @staticmethod
    def lambda_body(lam: Node) -> Node | None:
        """The block or expression after '=>'."""
        body = lam.child_by_field_name("body")
        if body is not None:
            return body
        seen_arrow = False
        for child in lam.children:
            if seen_arrow and child.is_named and child.type != COMMENT:
                return child
            if child.type == "=>":
                seen_arrow = True
        return None

    # -- types ------------------------------------------------------------------------

    @staticmethod
    def simple_type_name(type_node: Node | None) -> str | None:
        """Rightmost simple name of a type, without nullability or generic arguments."""
        node = type_node
        while node is not None:
            if node.type in ("identifier", "predefined_type"):
                return CSharpSyntax.text(node)
            if node.type == "generic_name":
                ident = CSharpSyntax.name_node(node)
                return CSharpSyntax.text(ident) if ident is not None else None
            if node.type == "nullable_type":
                inner = node.child_by_field_name("type")
                node = inner if inner is not None else (CSharpSyntax.named(node) or [None])[0]
                continue
            if node.type in ("qualified_name", "alias_qualified_name"):
                inner = node.child_by_field_name("name")
                node = inner if inner is not None else (CSharpSyntax.named(node) or [None])[-1]
                continue
            return None
        return None

    @staticmethod
    def type_arguments(type_node: Node | None) -> list[str]:
        """Generic argument texts of a type, e.g. ['string'] for DelegateCommand<string>."""
        node = type_node
        while node is not None and node.type in ("nullable_type", "qualified_name", "alias_qualified_name"):
            inner = CSharpSyntax.named(node)
            node = inner[-1] if node.type != "nullable_type" else (inner[0] if inner else None)
        if node is None or node.type != "generic_name":
            return []
        argument_list = CSharpSyntax.first_of_type(node, "type_argument_list")
        if argument_list is None:
            return []
        return [CSharpSyntax.text(c) for c in CSharpSyntax.named(argument_list)]
