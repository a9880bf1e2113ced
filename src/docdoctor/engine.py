"""Interactive resolution engine.

Walks the ordered violations one at a time. For each it moves the edit
focus to the violation's anchor, shows the message and action menu in a
panel, reads keys until one matches the menu and dispatches the chosen
action. The panel is closed and the violation's anchor released however
the handling ends, including a KeyboardInterrupt from the host.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from contextlib import ExitStack

from docdoctor.aggregator import Violation
from docdoctor.checkers.base import MANUAL_EDIT_KEY, Action, ActionContext
from docdoctor.document import Document
from docdoctor.errors import ActionPreconditionError, InvalidActionKeyError
from docdoctor.executor import ActionExecutor
from docdoctor.host import Host

logger = logging.getLogger(__name__)


class ResolutionState(enum.Enum):
    """States a single violation goes through."""

    PRESENT = "present"
    AWAIT_INPUT = "await_input"
    DISPATCH = "dispatch"
    DONE = "done"


def _manual_edit(ctx: ActionContext) -> None:
    ctx.host.manual_edit(ctx.document)


MANUAL_EDIT_ACTION = Action(
    key=MANUAL_EDIT_KEY,
    label="manual edit",
    handler=_manual_edit,
    help="Manual edit: change the document freely, then resume to continue.",
)


class ResolutionEngine:
    """Presents violations in order and dispatches the chosen actions.

    Attributes:
        host: Host used for all user interaction.
        executor: Executor that runs the chosen actions.
        fail_fast: If True, an ActionPreconditionError aborts the whole
            resolution. Otherwise it only fails the current violation.
    """

    def __init__(
        self,
        host: Host,
        executor: ActionExecutor | None = None,
        fail_fast: bool = False,
    ) -> None:
        self.host = host
        self.executor = executor or ActionExecutor(host)
        self.fail_fast = fail_fast

    def menu_for(self, violation: Violation) -> dict[str, Action]:
        """Return the action menu for a violation.

        The checker's actions come first, in their declared order, followed
        by manual edit, which every menu has.
        """
        menu = dict(violation.checker.actions)
        menu[MANUAL_EDIT_KEY] = MANUAL_EDIT_ACTION
        return menu

    def resolve(self, document: Document, violations: Sequence[Violation]) -> Sequence[Violation]:
        """Present every violation and apply the chosen actions.

        Args:
            document: The document being repaired, mutated in place.
            violations: Violations ordered by document position.

        Returns:
            The same ``violations``, with their outcomes filled in.

        Raises:
            ActionPreconditionError: Only when ``fail_fast`` is set.
        """
        try:
            for index, violation in enumerate(violations, start=1):
                logger.debug(
                    "Presenting violation %d/%d from '%s'",
                    index,
                    len(violations),
                    violation.checker.name,
                )
                self._handle(document, violation)
                violation.anchor.release()
        finally:
            # Unwinding early (interrupt, fail-fast) must not leak anchors.
            for violation in violations:
                violation.anchor.release()
        return violations

    def _handle(self, document: Document, violation: Violation) -> None:
        state = ResolutionState.PRESENT
        menu: dict[str, Action] = {}
        key = ""

        with ExitStack() as presentation:
            while state is not ResolutionState.DONE:
                if state is ResolutionState.PRESENT:
                    offset = violation.anchor.offset
                    document.goto(offset)
                    document.reveal(offset)
                    menu = self.menu_for(violation)
                    presentation.enter_context(
                        self.host.panel(
                            self.render(document, violation, menu),
                            title=violation.checker.name,
                        )
                    )
                    state = ResolutionState.AWAIT_INPUT

                elif state is ResolutionState.AWAIT_INPUT:
                    key = self.host.read_key(self.prompt_text(menu))
                    try:
                        self._check_key(menu, key)
                    except InvalidActionKeyError as e:
                        self.host.notify(str(e))
                        continue
                    state = ResolutionState.DISPATCH

                elif state is ResolutionState.DISPATCH:
                    self._dispatch(document, violation, menu[key])
                    state = ResolutionState.DONE

    def _check_key(self, menu: dict[str, Action], key: str) -> None:
        if key not in menu:
            raise InvalidActionKeyError(key, list(menu))

    def _dispatch(self, document: Document, violation: Violation, action: Action) -> None:
        violation.chosen_key = action.key
        try:
            self.executor.execute(action, violation.anchor, document)
        except ActionPreconditionError as e:
            violation.outcome = "failed"
            violation.error = str(e)
            if self.fail_fast:
                raise
            logger.warning("Action '%s' failed: %s", action.label, e)
            self.host.notify(f"Could not {action.label}: {e}")
            return
        violation.outcome = "resolved"

    @staticmethod
    def render(document: Document, violation: Violation, menu: dict[str, Action]) -> str:
        """Format a violation and its menu for display."""
        line, column = document.line_column(violation.anchor.offset)
        where = f"{document.path.name}:" if document.path is not None else ""
        lines = [f"{where}{line}:{column}  {violation.message}", ""]
        lines.extend(f"  [{key}] {action.label}" for key, action in menu.items())
        return "\n".join(lines)

    @staticmethod
    def prompt_text(menu: dict[str, Action]) -> str:
        return f"Action ({'/'.join(menu)}): "
