"""Unit tests for snapshots, node references and result values."""

from conftest import GATEWAY, parse

from refactorkit.domain.entities import (
    CheckReport,
    Edit,
    EditType,
    FileFixReport,
    FixResult,
    NodeRef,
    ScanResult,
)
from refactorkit.domain.syntax import CSharpSyntax

SOURCE = "public class A\n{\n    public int X { get; set; }\n}\n"


class TestSnapshots:
    def test_identical_text_is_the_same_snapshot(self) -> None:
        assert parse(SOURCE).snapshot_id == parse(SOURCE).snapshot_id
        assert parse(SOURCE).snapshot_id != parse(SOURCE + "\n").snapshot_id
        assert parse(SOURCE).snapshot_id == GATEWAY.snapshot_id(SOURCE)

    def test_node_at_finds_referenced_node(self) -> None:
        document = parse(SOURCE)
        prop = next(CSharpSyntax.walk(document.root, "property_declaration"))
        ref = NodeRef.of(prop, document)
        found = document.node_at(ref)
        assert found is not None
        assert found.type == "property_declaration"
        assert (found.start_byte, found.end_byte) == (prop.start_byte, prop.end_byte)

    def test_node_at_rejects_other_snapshot(self) -> None:
        document = parse(SOURCE)
        prop = next(CSharpSyntax.walk(document.root, "property_declaration"))
        ref = NodeRef.of(prop, document)
        assert parse(SOURCE.replace("X", "Y")).node_at(ref) is None

    def test_node_at_rejects_wrong_kind(self) -> None:
        document = parse(SOURCE)
        prop = next(CSharpSyntax.walk(document.root, "property_declaration"))
        ref = NodeRef(prop.start_byte, prop.end_byte, "method_declaration", document.snapshot_id)
        assert document.node_at(ref) is None

    def test_has_errors(self) -> None:
        assert not parse(SOURCE).has_errors
        assert parse("public class A { public int X { get; set; }").has_errors


class TestValues:
    def test_edit_constructors(self) -> None:
        assert Edit.ensure_import("Foo").edit_type is EditType.ENSURE_IMPORT
        assert Edit.ensure_import("Foo").module == "Foo"

    def test_fix_result_no_change_keeps_text(self) -> None:
        document = parse(SOURCE)
        result = FixResult.no_change(document, "nothing to change")
        assert not result.changed
        assert result.text == SOURCE
        assert result.reason == "nothing to change"

    def test_file_fix_report(self) -> None:
        report = FileFixReport(path="A.cs", original_text="a", text="b", applied=("MRK0001",))
        assert report.changed
        assert report.to_dict() == {
            "path": "A.cs",
            "changed": True,
            "applied": ["MRK0001"],
            "declined": [],
        }
        assert not FileFixReport(path="A.cs", original_text="a", text="a").changed

    def test_check_report_findings(self) -> None:
        empty = CheckReport(results=(ScanResult(path="A.cs"),))
        assert not empty.has_findings()
        assert empty.findings == []
