"""Action executor.

Positions the document's edit focus at a violation's anchor and runs the
chosen action handler, releasing any panel the action opened on every
exit path.
"""

from __future__ import annotations

import contextlib
import logging
from contextlib import AbstractContextManager

from docdoctor.checkers.base import Action, ActionContext
from docdoctor.document import Anchor, Document
from docdoctor.errors import ActionPreconditionError
from docdoctor.host import Host

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Runs action handlers against a document.

    Attributes:
        host: Host the handlers and action panels use.
    """

    def __init__(self, host: Host) -> None:
        self.host = host

    def execute(self, action: Action, anchor: Anchor, document: Document) -> None:
        """Run ``action`` with the edit focus at ``anchor``.

        Args:
            action: The action to run.
            anchor: Where the violation currently is.
            document: The document being repaired.

        Raises:
            ActionPreconditionError: If the handler's required context is
                missing or the handler fails. The handler's own exception
                is chained as ``__cause__``. End of input and interrupts
                propagate unchanged.
        """
        document.goto(anchor.offset)
        logger.debug("Running action '%s' at offset %d", action.label, document.point)

        with self._scope(action):
            try:
                action.handler(ActionContext(document=document, host=self.host))
            except (ActionPreconditionError, EOFError):
                raise
            except Exception as e:
                logger.debug("Action '%s' raised", action.label, exc_info=True)
                raise ActionPreconditionError(f"{action.label} failed: {e}") from e

    def _scope(self, action: Action) -> AbstractContextManager[None]:
        if action.help:
            return self.host.panel(action.help, title=action.label)
        return contextlib.nullcontext()
