"""Error types raised by the docdoctor engine.

Registration errors are fatal to the registration call only. Detection
errors abort an aggregation run. Invalid action keys are recovered by
re-prompting and never leave the resolution engine. Precondition errors
are raised by action handlers when the context they need is absent.
"""

from __future__ import annotations


class DoctorError(Exception):
    """Base class for all docdoctor errors."""


class DuplicateCheckerError(DoctorError):
    """Raised when a checker name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Checker '{name}' is already registered")


class UnknownCheckerError(DoctorError):
    """Raised when selecting a checker that is not registered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        message = f"Unknown checker '{name}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class CheckerDetectionError(DoctorError):
    """Raised when a checker's detect call fails.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, checker_name: str, reason: str) -> None:
        self.checker_name = checker_name
        self.reason = reason
        super().__init__(f"Checker '{checker_name}' failed: {reason}")


class InvalidActionKeyError(DoctorError):
    """Raised when a key matches no entry of the current action menu."""

    def __init__(self, key: str, valid_keys: list[str]) -> None:
        self.key = key
        self.valid_keys = valid_keys
        super().__init__(
            f"Invalid choice {key!r}; expected one of: {', '.join(valid_keys)}"
        )


class ActionPreconditionError(DoctorError):
    """Raised by an action handler when its required context is missing.

    Handlers must raise this before mutating the document.
    """
