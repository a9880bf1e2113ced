"""Caller-facing entry points.

``Doctor`` owns one registry, host and engine and runs them over one
document at a time. A batch driver (such as the CLI) iterates over
documents and decides whether to save each one.
"""

from __future__ import annotations

from collections.abc import Sequence

from docdoctor.aggregator import Violation, ViolationAggregator
from docdoctor.checkers.base import Checker
from docdoctor.checkers.registry import CheckerRegistry, create_default_registry
from docdoctor.document import Document
from docdoctor.engine import ResolutionEngine
from docdoctor.host import ConsoleHost, Host
from docdoctor.parser import parse


class Doctor:
    """Lints documents and walks the user through repairing them.

    Attributes:
        registry: Checkers available to this doctor.
        host: Host used for interaction.
        aggregator: Runs checkers and orders their violations.
        engine: Interactive resolution loop.
    """

    def __init__(
        self,
        registry: CheckerRegistry | None = None,
        host: Host | None = None,
        *,
        fail_fast: bool = False,
        isolate_checker_errors: bool = False,
    ) -> None:
        self.registry = registry if registry is not None else create_default_registry()
        self.host = host if host is not None else ConsoleHost()
        self.aggregator = ViolationAggregator(self.registry, isolate_errors=isolate_checker_errors)
        self.engine = ResolutionEngine(self.host, fail_fast=fail_fast)

    def check(
        self, document: Document, checkers: Sequence[Checker] | None = None
    ) -> list[Violation]:
        """Report violations without interaction.

        The returned violations' anchors are already released; their
        offsets are valid for the unmodified document.
        """
        violations = self.aggregator.run(document, parse(document.text, document.base_dir), checkers)
        for violation in violations:
            violation.anchor.release()
        return violations

    def run(
        self, document: Document, checkers: Sequence[Checker] | None = None
    ) -> Sequence[Violation]:
        """Lint ``document`` and resolve every violation interactively.

        Args:
            document: Document to repair in place.
            checkers: Checkers to run. Defaults to all registered.

        Returns:
            The resolved violations in document order.
        """
        tree = parse(document.text, document.base_dir)
        violations = self.aggregator.run(document, tree, checkers)
        return self.engine.resolve(document, violations)


def run_doctor(
    document: Document,
    checkers: Sequence[Checker] | None = None,
    *,
    host: Host | None = None,
    registry: CheckerRegistry | None = None,
    fail_fast: bool = False,
) -> Sequence[Violation]:
    """Lint and interactively repair a single document.

    Convenience wrapper around ``Doctor(...).run(document, checkers)``.
    """
    return Doctor(registry, host, fail_fast=fail_fast).run(document, checkers)
