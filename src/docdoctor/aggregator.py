"""Violation model and aggregation.

Runs checkers over a parsed document, anchors every reported position in
the live document and merges the results into one list ordered by
document position.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from docdoctor.checkers.base import Checker
from docdoctor.checkers.registry import CheckerRegistry
from docdoctor.document import Anchor, Document
from docdoctor.errors import CheckerDetectionError
from docdoctor.parser import DocumentTree, parse

logger = logging.getLogger(__name__)

Outcome = Literal["pending", "resolved", "failed"]


@dataclass(eq=False)
class Violation:
    """One reported problem instance.

    Attributes:
        anchor: Live location of the problem in the document.
        message: Human-readable description from the checker.
        checker: The checker that reported it.
        outcome: "pending" until handled, then "resolved" or "failed".
        chosen_key: Key of the action the user chose, if any.
        error: Failure message when the chosen action could not run.
    """

    anchor: Anchor
    message: str
    checker: Checker
    outcome: Outcome = "pending"
    chosen_key: str | None = None
    error: str | None = None

    @property
    def offset(self) -> int:
        return self.anchor.offset

    def to_dict(self, document: Document) -> dict[str, Any]:
        """Describe the violation for JSON output."""
        line, column = document.line_column(self.anchor.offset)
        result: dict[str, Any] = {
            "checker": self.checker.name,
            "message": self.message,
            "offset": self.anchor.offset,
            "line": line,
            "column": column,
            "outcome": self.outcome,
        }
        if self.chosen_key is not None:
            result["action"] = self.chosen_key
        if self.error:
            result["error"] = self.error
        return result


def aggregate(
    document: Document,
    tree: DocumentTree,
    checkers: Sequence[Checker],
    *,
    isolate_errors: bool = False,
) -> list[Violation]:
    """Run ``checkers`` over ``tree`` and return their violations in order.

    Each checker's ``detect`` is called exactly once. Violations are sorted
    by anchor offset with a stable sort, so violations at the same offset
    keep the order in which their checkers ran.

    Args:
        document: Live document the positions refer to.
        tree: Parsed form of ``document``.
        checkers: Checkers to run, in order.
        isolate_errors: If True, a failing checker is logged and skipped
            instead of aborting the run.

    Returns:
        Violations ordered by document position.

    Raises:
        CheckerDetectionError: If a checker raises and ``isolate_errors``
            is False. No anchors are left behind in that case.
    """
    violations: list[Violation] = []

    for checker in checkers:
        try:
            raw = list(checker.detect(tree))
        except Exception as e:
            if not isolate_errors:
                for violation in violations:
                    violation.anchor.release()
                raise CheckerDetectionError(checker.name, str(e)) from e
            logger.warning("Skipping checker '%s': %s", checker.name, e)
            continue

        logger.debug("Checker '%s' reported %d violation(s)", checker.name, len(raw))
        for offset, message in raw:
            violations.append(
                Violation(anchor=document.anchor(offset), message=message, checker=checker)
            )

    violations.sort(key=lambda violation: violation.anchor.offset)
    logger.info(
        "Found %d violation(s) from %d checker(s)", len(violations), len(checkers)
    )
    return violations


class ViolationAggregator:
    """Runs registered checkers over documents.

    Attributes:
        registry: Registry supplying the default checkers.
        isolate_errors: Whether failing checkers are skipped.
    """

    def __init__(self, registry: CheckerRegistry, isolate_errors: bool = False) -> None:
        self.registry = registry
        self.isolate_errors = isolate_errors

    def run(
        self,
        document: Document,
        tree: DocumentTree | None = None,
        checkers: Sequence[Checker] | None = None,
    ) -> list[Violation]:
        """Aggregate violations for ``document``.

        Args:
            document: Document to check.
            tree: Parsed document. Parsed from ``document`` if omitted.
            checkers: Checkers to run. Defaults to all registered checkers
                in registration order.

        Returns:
            Violations ordered by document position.
        """
        if tree is None:
            tree = parse(document.text, document.base_dir)
        if checkers is None:
            checkers = self.registry.list()
        return aggregate(document, tree, checkers, isolate_errors=self.isolate_errors)
