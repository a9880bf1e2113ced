"""docdoctor - pluggable document linter with interactive repair."""

from __future__ import annotations

from docdoctor.aggregator import Violation, ViolationAggregator, aggregate
from docdoctor.checkers import Action, ActionContext, Checker, CheckerRegistry
from docdoctor.document import Anchor, Document
from docdoctor.doctor import Doctor, run_doctor
from docdoctor.engine import ResolutionEngine
from docdoctor.errors import (
    ActionPreconditionError,
    CheckerDetectionError,
    DoctorError,
    DuplicateCheckerError,
    InvalidActionKeyError,
    UnknownCheckerError,
)
from docdoctor.executor import ActionExecutor

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Action",
    "ActionContext",
    "ActionExecutor",
    "ActionPreconditionError",
    "Anchor",
    "Checker",
    "CheckerDetectionError",
    "CheckerRegistry",
    "Doctor",
    "DoctorError",
    "Document",
    "DuplicateCheckerError",
    "InvalidActionKeyError",
    "ResolutionEngine",
    "UnknownCheckerError",
    "Violation",
    "ViolationAggregator",
    "aggregate",
    "run_doctor",
]
