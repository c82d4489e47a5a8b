"""Unit tests for CSharpSyntax shape queries."""

from conftest import parse

from refactorkit.domain.syntax import CSharpSyntax

SOURCE = """public class A
{
    private int _a = 1, _b;

    // first
    // second
    public int Value
    {
        get { return _a; }
        set { _a = value; OnPropertyChanged(nameof(Value)); }
    }

    public int Trailing { get; set; } // not leading

    // detached

    public int Detached { get; set; }

    private void Run(int x) { }
}
"""


def node_named(kind: str, name: str):
    document = parse(SOURCE)
    for node in CSharpSyntax.walk(document.root, kind):
        if CSharpSyntax.name_of(node) == name:
            return node
    raise AssertionError(f"no {kind} {name}")


class TestMembers:
    def test_enclosing_class_and_members(self) -> None:
        prop = node_named("property_declaration", "Value")
        class_node = CSharpSyntax.enclosing_class(prop)
        assert class_node is not None
        kinds = [m.type for m in CSharpSyntax.members(class_node)]
        assert kinds == [
            "field_declaration",
            "property_declaration",
            "property_declaration",
            "property_declaration",
            "method_declaration",
        ]

    def test_find_field_and_initializer(self) -> None:
        class_node = CSharpSyntax.enclosing_class(node_named("property_declaration", "Value"))
        declaration, declarator = CSharpSyntax.find_field(class_node, "_a")
        assert declaration is not None and declarator is not None
        assert len(CSharpSyntax.declarators(declaration)) == 2
        assert CSharpSyntax.text(CSharpSyntax.initializer_after_equals(declarator)) == "1"
        assert CSharpSyntax.find_field(class_node, "_missing") == (None, None)

    def test_find_method(self) -> None:
        class_node = CSharpSyntax.enclosing_class(node_named("property_declaration", "Value"))
        method = CSharpSyntax.find_method(class_node, "Run")
        assert method is not None
        assert CSharpSyntax.modifiers(method) == ["private"]
        assert CSharpSyntax.find_method(class_node, "Stop") is None

    def test_class_keyword(self) -> None:
        class_node = CSharpSyntax.enclosing_class(node_named("property_declaration", "Value"))
        keyword = CSharpSyntax.class_keyword(class_node)
        assert keyword is not None and CSharpSyntax.text(keyword) == "class"


class TestSetterStatements:
    def test_statement_expressions_in_order(self) -> None:
        setter = CSharpSyntax.accessor(node_named("property_declaration", "Value"), "set")
        assert setter is not None
        expressions = CSharpSyntax.statement_expressions(CSharpSyntax.body(setter))
        assert [e.type for e in expressions] == ["assignment_expression", "invocation_expression"]
        assert CSharpSyntax.invoked_name(expressions[1]) == "OnPropertyChanged"
        assert CSharpSyntax.operator(expressions[0]) == "="

    def test_property_value_expression_from_getter_return(self) -> None:
        value = CSharpSyntax.property_value_expression(node_named("property_declaration", "Value"))
        assert CSharpSyntax.text(value) == "_a"

    def test_auto_property_has_no_value_expression(self) -> None:
        prop = node_named("property_declaration", "Trailing")
        assert CSharpSyntax.property_value_expression(prop) is None
        assert CSharpSyntax.property_initializer(prop) is None


class TestLeadingComments:
    def test_contiguous_own_line_comments(self) -> None:
        comments = CSharpSyntax.leading_comments(node_named("property_declaration", "Value"))
        assert [CSharpSyntax.text(c) for c in comments] == ["// first", "// second"]

    def test_blank_line_detaches_comment(self) -> None:
        assert CSharpSyntax.leading_comments(node_named("property_declaration", "Detached")) == []

    def test_trailing_comment_of_previous_line_excluded(self) -> None:
        source = """public class A
{
    public int X { get; set; } // about X
    public int Y { get; set; }
}
"""
        document = parse(source)
        prop = [p for p in CSharpSyntax.walk(document.root, "property_declaration")][1]
        assert CSharpSyntax.leading_comments(prop) == []


class TestExpressions:
    def test_string_literal_value(self) -> None:
        document = parse('class A { string s = "Name"; string v = @"Quoted""X"; }')
        literals = list(CSharpSyntax.walk(document.root, "string_literal", "verbatim_string_literal"))
        assert [CSharpSyntax.string_literal_value(n) for n in literals] == ["Name", 'Quoted"X']

    def test_lambda_queries(self) -> None:
        document = parse("class A { object o = async (string s) => await Go(s); }")
        lam = next(CSharpSyntax.walk(document.root, "lambda_expression"))
        assert CSharpSyntax.lambda_is_async(lam)
        assert CSharpSyntax.lambda_parameters(lam) == [("s", "string")]
        assert CSharpSyntax.text(CSharpSyntax.lambda_body(lam)) == "await Go(s)"

    def test_implicit_lambda_parameter(self) -> None:
        document = parse("class A { object o = x => Use(x); }")
        lam = next(CSharpSyntax.walk(document.root, "lambda_expression"))
        assert CSharpSyntax.lambda_parameters(lam) == [("x", "")]
        assert not CSharpSyntax.lambda_is_async(lam)

    def test_unwrap_parentheses(self) -> None:
        document = parse("class A { int x = ((y)); }")
        outer = next(CSharpSyntax.walk(document.root, "parenthesized_expression"))
        inner = CSharpSyntax.unwrap_parentheses(outer)
        assert inner is not None and inner.type == "identifier"


class TestTypes:
    def test_simple_type_name_and_arguments(self) -> None:
        document = parse(
            "class A { Prism.Commands.DelegateCommand<string>? One { get; } Command Two { get; } int[] Three { get; } }"
        )
        props = list(CSharpSyntax.walk(document.root, "property_declaration"))
        types = [CSharpSyntax.property_type(p) for p in props]
        assert [CSharpSyntax.simple_type_name(t) for t in types] == ["DelegateCommand", "Command", None]
        assert CSharpSyntax.type_arguments(types[0]) == ["string"]
        assert CSharpSyntax.type_arguments(types[1]) == []
