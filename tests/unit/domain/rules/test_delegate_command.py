"""Unit tests for DelegateCommandRule (MRK0002)."""

import unittest

import pytest
from conftest import GATEWAY, find_violations, fix_first, parse

from refactorkit.domain.entities import ParameterSpec
from refactorkit.domain.errors import UnfixableError
from refactorkit.domain.matches import DelegateCommandMatch
from refactorkit.domain.rules.delegate_command import DelegateCommandRule
from refactorkit.domain.syntax import CSharpSyntax

LAMBDA = """using Prism.Commands;

public class MainViewModel
{
    private DelegateCommand _saveCommand;

    public DelegateCommand SaveCommand => _saveCommand ?? (_saveCommand = new DelegateCommand(x => DoThing(x)));
}
"""

EXECUTE = """using Prism.Commands;

public partial class EditorViewModel
{
    private bool _canSave;
    private DelegateCommand _saveCommand;

    public DelegateCommand SaveCommand => _saveCommand ?? (_saveCommand = new DelegateCommand(ExecuteSave, CanExecuteSave));

    private void ExecuteSave()
    {
        Persist();
    }

    private bool CanExecuteSave()
    {
        return _canSave;
    }
}
"""


def rule() -> DelegateCommandRule:
    return DelegateCommandRule(type_resolver=GATEWAY)


def extract(text: str, name: str):
    document = parse(text)
    for prop in CSharpSyntax.walk(document.root, "property_declaration"):
        if CSharpSyntax.name_of(prop) == name:
            return rule().extract(prop, document)
    raise AssertionError(f"no property {name}")


class TestDelegateCommandDetection(unittest.TestCase):
    """Detection by resolved declared type."""

    def test_reports_delegate_command_property(self) -> None:
        violations = find_violations(rule(), parse(LAMBDA))
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].code, "MRK0002")
        self.assertEqual(violations[0].symbol, "delegate-command-type")
        self.assertTrue(violations[0].fixable)
        self.assertIn("SaveCommand", violations[0].message)
        self.assertIn("DelegateCommand", violations[0].message)

    def test_generic_nullable_and_qualified_types(self) -> None:
        source = """public class A
{
    public DelegateCommand<string> OpenCommand { get; }
    public DelegateCommand? CloseCommand { get; }
    public Prism.Commands.DelegateCommand ResetCommand { get; }
    public ICommand OtherCommand { get; }
}
"""
        names = [CSharpSyntax.text(v.node) for v in find_violations(rule(), parse(source))]
        self.assertEqual(names, ["OpenCommand", "CloseCommand", "ResetCommand"])

    def test_using_alias_is_followed(self) -> None:
        source = """using DC = Prism.Commands.DelegateCommand;

public class A
{
    public DC OpenCommand { get; }
}
"""
        self.assertEqual(len(find_violations(rule(), parse(source))), 1)


class TestDelegateCommandExtraction(unittest.TestCase):
    """Backing field, lambda and execute/can-execute discovery."""

    def test_lambda_shape(self) -> None:
        match = extract(LAMBDA, "SaveCommand")
        assert match is not None
        self.assertEqual(match.backing_field_name, "_saveCommand")
        self.assertEqual(match.stem, "Save")
        self.assertEqual(match.parameters, (ParameterSpec("x", "object"),))
        self.assertEqual(match.command_body, ("DoThing(x);",))
        self.assertFalse(match.is_async)
        self.assertIsNone(match.execute_method)

    def test_generic_argument_types_implicit_parameter(self) -> None:
        source = """public class A
{
    private DelegateCommand<string> _openCommand;
    public DelegateCommand<string> OpenCommand => _openCommand ?? (_openCommand = new DelegateCommand<string>(path => Open(path)));
}
"""
        match = extract(source, "OpenCommand")
        assert match is not None
        self.assertEqual(match.parameters, (ParameterSpec("path", "string"),))

    def test_removable_can_execute_wrapper(self) -> None:
        match = extract(EXECUTE, "SaveCommand")
        assert match is not None
        self.assertIsNotNone(match.execute_method)
        self.assertEqual(match.can_execute_target_name, "_canSave")
        self.assertTrue(match.can_execute_method_removable)

    def test_complex_can_execute_is_kept(self) -> None:
        source = EXECUTE.replace("return _canSave;", "return _canSave && !IsBusy;")
        match = extract(source, "SaveCommand")
        assert match is not None
        self.assertEqual(match.can_execute_target_name, "CanExecuteSave")
        self.assertFalse(match.can_execute_method_removable)

    def test_backing_field_by_convention(self) -> None:
        source = """public class A
{
    private DelegateCommand _loadCommand;
    public DelegateCommand LoadCommand
    {
        get
        {
            if (_loadCommand == null)
            {
                _loadCommand = new DelegateCommand(() => Load());
            }
            return _loadCommand;
        }
    }
}
"""
        match = extract(source, "LoadCommand")
        assert match is not None
        self.assertEqual(match.backing_field_name, "_loadCommand")
        self.assertEqual(match.command_body, ("Load();",))

    def test_stem_keeps_bare_command_name(self) -> None:
        self.assertEqual(DelegateCommandMatch.stem_of("Command"), "Command")
        self.assertEqual(DelegateCommandMatch.stem_of("SaveCommand"), "Save")
        self.assertEqual(DelegateCommandMatch.stem_of("Savecommand"), "Savecommand")


class TestDelegateCommandFix:
    """Rewrites to [RelayCommand] methods."""

    def test_lambda_becomes_relay_command_method(self) -> None:
        result = fix_first(rule(), LAMBDA)
        assert (
            "    [RelayCommand]\n"
            "    private void Save(object x)\n"
            "    {\n"
            "        DoThing(x);\n"
            "    }\n"
        ) in result
        assert "_saveCommand" not in result
        assert "SaveCommand" not in result
        assert "using CommunityToolkit.Mvvm.Input;" in result
        assert "public partial class MainViewModel" in result

    def test_execute_method_renamed_and_wrapper_removed(self) -> None:
        result = fix_first(rule(), EXECUTE)
        assert "[RelayCommand(CanExecute = nameof(_canSave))]\n    private void Save()" in result
        assert "ExecuteSave" not in result
        assert "CanExecuteSave" not in result
        assert "private bool _canSave;" in result
        assert "_saveCommand" not in result
        assert "Persist();" in result

    def test_complex_can_execute_referenced_by_name(self) -> None:
        source = EXECUTE.replace("return _canSave;", "return _canSave && !IsBusy;")
        result = fix_first(rule(), source)
        assert "[RelayCommand(CanExecute = nameof(CanExecuteSave))]" in result
        assert "private bool CanExecuteSave()" in result

    def test_async_execute_method_gets_async_suffix(self) -> None:
        source = """public partial class A
{
    public DelegateCommand LoadCommand => new DelegateCommand(async () => await ExecuteLoad());

    private async Task ExecuteLoad()
    {
        await Task.Delay(1);
    }
}
"""
        result = fix_first(rule(), source)
        assert "[RelayCommand]\n    private async Task LoadAsync()" in result
        assert "ExecuteLoad" not in result

    def test_async_lambda_generates_task_method(self) -> None:
        source = """public partial class A
{
    public DelegateCommand RefreshCommand => new DelegateCommand(async () =>
    {
        await Reload();
        Done();
    });
}
"""
        result = fix_first(rule(), source)
        assert "private async Task RefreshAsync()" in result
        assert "        await Reload();\n        Done();\n" in result

    def test_constructor_can_execute_used_for_lambda(self) -> None:
        source = """public partial class A
{
    public DelegateCommand DeleteCommand => new DelegateCommand(() => Delete(), () => CanDelete);
}
"""
        result = fix_first(rule(), source)
        assert "[RelayCommand(CanExecute = nameof(CanDelete))]" in result
        assert "private void Delete()" in result

    def test_property_comments_move_to_method(self) -> None:
        source = """public partial class A
{
    // Saves the document.
    public DelegateCommand SaveCommand => new DelegateCommand(() => Write());
}
"""
        result = fix_first(rule(), source)
        assert "    // Saves the document.\n    [RelayCommand]\n    private void Save()" in result
        assert result.count("// Saves the document.") == 1

    def test_declined_without_lambda_or_execute_method(self) -> None:
        source = """public class A
{
    public DelegateCommand OpenCommand { get; set; }
}
"""
        document = parse(source)
        violation = find_violations(rule(), document)[0]
        with pytest.raises(UnfixableError):
            rule().fix(violation, document)

    def test_method_name(self) -> None:
        assert DelegateCommandRule.method_name("Load", True) == "LoadAsync"
        assert DelegateCommandRule.method_name("LoadAsync", True) == "LoadAsync"
        assert DelegateCommandRule.method_name("Load", False) == "Load"


class TestConstructorGuard:
    """The second DelegateCommand constructor argument."""

    def test_expression_guard_declines_the_fix(self) -> None:
        source = """public partial class A
{
    private bool _busy;
    private DelegateCommand _loadCommand;
    public DelegateCommand LoadCommand
    {
        get { return _loadCommand ?? (_loadCommand = new DelegateCommand(async () => await LoadAsync(), () => !_busy)); }
    }
}
"""
        match = extract(source, "LoadCommand")
        assert match is not None
        assert match.unrecognised_guard == "() => !_busy"
        assert match.can_execute_target_name is None
        document = parse(source)
        violation = find_violations(rule(), document)[0]
        with pytest.raises(UnfixableError, match="!_busy"):
            rule().fix(violation, document)

    def test_member_access_guard_declines_the_fix(self) -> None:
        source = """public partial class A
{
    public DelegateCommand SaveCommand => new DelegateCommand(() => Save(), () => Editor.CanSave());
}
"""
        match = extract(source, "SaveCommand")
        assert match is not None
        assert match.unrecognised_guard == "() => Editor.CanSave()"

    def test_guard_is_used_with_execute_method(self) -> None:
        source = """public partial class A
{
    private bool _ready;
    public DelegateCommand SaveCommand => new DelegateCommand(ExecuteSave, () => _ready);

    private void ExecuteSave()
    {
        Persist();
    }
}
"""
        result = fix_first(rule(), source)
        assert "[RelayCommand(CanExecute = nameof(_ready))]\n    private void Save()" in result

    def test_no_guard(self) -> None:
        match = extract(LAMBDA, "SaveCommand")
        assert match is not None
        assert match.unrecognised_guard is None
        assert match.has_body


class TestHasBody:
    def test_property_without_lambda_or_execute_method(self) -> None:
        source = """public class A
{
    public DelegateCommand OpenCommand { get; set; }
}
"""
        match = extract(source, "OpenCommand")
        assert match is not None
        assert not match.has_body
