"""Unit tests for CheckSourceUseCase."""

import threading
import unittest
from pathlib import Path

import pytest
from conftest import GATEWAY, parse, use_case_deps

from refactorkit.domain.config import ConfigurationLoader
from refactorkit.domain.errors import OperationCancelledError
from refactorkit.domain.rules.command_type import CommandTypeRule
from refactorkit.domain.rules.delegate_command import DelegateCommandRule
from refactorkit.domain.rules.notified_property import NotifiedSetterRule
from refactorkit.use_cases.check_source import CheckSourceUseCase

LEGACY = """public class MainViewModel
{
    private string _title;
    public string Title
    {
        get { return _title; }
        set { SetProperty(ref _title, value); }
    }

    public Command RefreshCommand { get; }

    public DelegateCommand SaveCommand => new DelegateCommand(() => Save());
}
"""


def all_rules() -> list:
    return [
        NotifiedSetterRule(),
        DelegateCommandRule(type_resolver=GATEWAY),
        CommandTypeRule(type_resolver=GATEWAY),
    ]


class TestScan(unittest.TestCase):
    def setUp(self) -> None:
        self.use_case = CheckSourceUseCase(**use_case_deps(rules=all_rules()))

    def test_findings_in_document_order(self) -> None:
        result = self.use_case.scan(parse(LEGACY))
        self.assertEqual([v.code for v in result.findings], ["MRK0001", "MRK0003", "MRK0002"])
        self.assertFalse(result.parse_errors)

    def test_scan_is_idempotent(self) -> None:
        first = self.use_case.scan(parse(LEGACY))
        second = self.use_case.scan(parse(LEGACY))
        self.assertEqual(
            [(v.code, v.location, v.message) for v in first.findings],
            [(v.code, v.location, v.message) for v in second.findings],
        )

    def test_cancellation_between_rule_invocations(self) -> None:
        cancel = threading.Event()
        cancel.set()
        with self.assertRaises(OperationCancelledError):
            self.use_case.scan(parse(LEGACY), cancel)

    def test_disabled_rules_do_not_run(self) -> None:
        config = ConfigurationLoader({"disable": ["MRK0001", "simple-command-type"]})
        use_case = CheckSourceUseCase(**use_case_deps(rules=all_rules(), config_loader=config))
        self.assertEqual([r.code for r in use_case.rules], ["MRK0002"])
        self.assertEqual([v.code for v in use_case.scan(parse(LEGACY)).findings], ["MRK0002"])

    def test_syntax_errors_are_flagged(self) -> None:
        result = self.use_case.scan(parse(LEGACY + "public class Broken {"))
        self.assertTrue(result.parse_errors)


class TestExecute:
    def write_project(self, root: Path) -> None:
        (root / "Views").mkdir()
        (root / "bin").mkdir()
        (root / "Views" / "Main.cs").write_text(LEGACY, encoding="utf-8")
        (root / "Clean.cs").write_text("public class Clean { }\n", encoding="utf-8")
        (root / "bin" / "Generated.cs").write_text(LEGACY, encoding="utf-8")

    def test_scans_selected_files(self, tmp_path: Path) -> None:
        self.write_project(tmp_path)
        deps = use_case_deps(rules=all_rules())
        report = CheckSourceUseCase(**deps).execute(str(tmp_path))
        assert len(report.results) == 2
        assert report.has_findings()
        assert len(report.findings) == 3
        deps["telemetry"].step.assert_called_once()

    @pytest.mark.parametrize("jobs", [1, 4])
    def test_parallel_scan_matches_serial(self, tmp_path: Path, jobs: int) -> None:
        self.write_project(tmp_path)
        report = CheckSourceUseCase(**use_case_deps(rules=all_rules())).execute(str(tmp_path), jobs=jobs)
        assert [Path(r.path).name for r in report.results] == ["Clean.cs", "Main.cs"]
        assert [v.code for v in report.findings] == ["MRK0001", "MRK0003", "MRK0002"]

    def test_bom_is_not_parsed(self, tmp_path: Path) -> None:
        target = tmp_path / "Bom.cs"
        target.write_text("\ufeff" + LEGACY, encoding="utf-8")
        use_case = CheckSourceUseCase(**use_case_deps(rules=all_rules()))
        document = use_case.load(str(target))
        assert document.text == LEGACY
        assert use_case.check_file(str(target)).findings[0].line == 4

    def test_cancelled_before_reading(self, tmp_path: Path) -> None:
        self.write_project(tmp_path)
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelledError):
            CheckSourceUseCase(**use_case_deps(rules=all_rules())).execute(str(tmp_path), cancel=cancel)


class InterruptingRule:
    """Stands in for a user pressing Ctrl-C while a worker is scanning."""

    code = "MRK9000"
    symbol = "interrupting"
    node_kinds = ("class_declaration",)

    def check(self, node, document):
        raise KeyboardInterrupt


class TestParallelInterrupt:
    def test_interrupt_sets_cancel_signal(self, tmp_path: Path) -> None:
        for name in ("A.cs", "B.cs", "C.cs"):
            (tmp_path / name).write_text("public class Clean { }\n", encoding="utf-8")
        cancel = threading.Event()
        use_case = CheckSourceUseCase(**use_case_deps(rules=[InterruptingRule()]))
        with pytest.raises(KeyboardInterrupt):
            use_case.execute(str(tmp_path), jobs=2, cancel=cancel)
        assert cancel.is_set()
