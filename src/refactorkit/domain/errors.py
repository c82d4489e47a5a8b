"""Domain error taxonomy. NoMatch is never an exception: rules return [] or None."""


class RefactorKitError(Exception):
    """Base class for every error raised by refactorkit."""


class UnfixableError(RefactorKitError):
    """A finding fired but fix-time extraction could not rebuild enough structure."""


class StaleSnapshotError(RefactorKitError):
    """An edit references a snapshot (or node) that is no longer the current one."""

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class OperationCancelledError(RefactorKitError):
    """The caller's cancellation signal was set between two units of work."""


class ConfigurationError(RefactorKitError):
    """Invalid value in the [tool.refactorkit] section."""
