"""Checker framework.

Provides the checker abstractions, the registry and the built-in checkers.
"""

from __future__ import annotations

from docdoctor.checkers.base import (
    MANUAL_EDIT_KEY,
    Action,
    ActionContext,
    ActionHandler,
    Checker,
    RawViolation,
)
from docdoctor.checkers.file_links import file_link_checker
from docdoctor.checkers.registry import CheckerRegistry, create_default_registry

__all__ = [
    # Base types
    "MANUAL_EDIT_KEY",
    "Action",
    "ActionContext",
    "ActionHandler",
    "Checker",
    "RawViolation",
    # Registry
    "CheckerRegistry",
    "create_default_registry",
    # Checkers
    "file_link_checker",
]
