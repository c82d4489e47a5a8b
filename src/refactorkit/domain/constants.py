"""
RefactorKit: reserved names, rule identities and marker vocabulary.
"""

# REFACTORKIT: ANSI Cyan (\033[36m)
_CYAN: str = "\033[36m"
_RESET: str = "\033[0m"
REFACTORKIT_BANNER = _CYAN + "[ refactorkit ] MVVM boilerplate migration" + _RESET

REFACTORKIT_PREFIX: str = "refactorkit."

# Rule identities. Codes are stable; symbols are the human aliases accepted by config/CLI.
NOTIFIED_SETTER_CODE: str = "MRK0001"
NOTIFIED_SETTER_SYMBOL: str = "notified-setter"
DELEGATE_COMMAND_CODE: str = "MRK0002"
DELEGATE_COMMAND_SYMBOL: str = "delegate-command-type"
SIMPLE_COMMAND_CODE: str = "MRK0003"
SIMPLE_COMMAND_SYMBOL: str = "simple-command-type"

SEVERITY_ERROR: str = "error"
HELP_URI_TEMPLATE: str = "https://github.com/SkJonko/MRK.MAUI.RefactorKit/blob/main/docs/rules/{code}.md"

# Legacy call names recognised in setters (plain identifier text equality).
ON_PROPERTY_CHANGED: str = "OnPropertyChanged"
SET_PROPERTY: str = "SetProperty"
NAMEOF: str = "nameof"

# Legacy command type names (compared against the resolved declared type).
COMMAND_TYPE: str = "Command"
DELEGATE_COMMAND_TYPE: str = "DelegateCommand"

COMMAND_SUFFIX: str = "Command"
ASYNC_SUFFIX: str = "Async"
EXECUTE_PREFIX: str = "Execute"
CAN_EXECUTE_PREFIX: str = "CanExecute"

# Marker attributes consumed by the CommunityToolkit.Mvvm source generators.
OBSERVABLE_PROPERTY_ATTRIBUTE: str = "ObservableProperty"
NOTIFY_PROPERTY_CHANGED_FOR_ATTRIBUTE: str = "NotifyPropertyChangedFor"
RELAY_COMMAND_ATTRIBUTE: str = "RelayCommand"
CAN_EXECUTE_ARGUMENT: str = "CanExecute"

OBSERVABLE_MODULE: str = "CommunityToolkit.Mvvm.ComponentModel"
RELAY_COMMAND_MODULE: str = "CommunityToolkit.Mvvm.Input"

TASK_TYPE: str = "Task"
VOID_TYPE: str = "void"
OBJECT_TYPE: str = "object"

DEFAULT_INCLUDE: tuple[str, ...] = ("**/*.cs",)
DEFAULT_EXCLUDE: tuple[str, ...] = ("bin", "obj", ".git", ".vs")
