"""Core checker abstractions.

A Checker pairs a pure detection rule with an ordered menu of repair
actions. Checkers are immutable once created and are shared by the
registry for the lifetime of the process.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docdoctor.document import Document
    from docdoctor.host import Host
    from docdoctor.parser import DocumentTree

# Key of the universal manual-edit action; checkers may not bind it.
MANUAL_EDIT_KEY = "e"

# A raw detection result: (character offset, message).
RawViolation = tuple[int, str]


@dataclass
class ActionContext:
    """What an action handler gets to work with.

    The document's edit focus is already positioned at the violation's
    anchor when the handler is invoked.

    Attributes:
        document: The document being repaired.
        host: Host input/output, for handlers that need to ask the user.
    """

    document: Document
    host: Host


ActionHandler = Callable[[ActionContext], None]


@dataclass(frozen=True)
class Action:
    """A user-selectable repair operation.

    Attributes:
        key: Single character the user types to choose this action.
        label: Short description shown in the menu.
        handler: Callable that performs the repair.
        help: Optional text the executor displays while the handler runs.
    """

    key: str
    label: str
    handler: ActionHandler
    help: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or len(self.key) != 1 or self.key.isspace():
            raise ValueError(f"Action key must be a single character, got {self.key!r}")
        if not self.label:
            raise ValueError(f"Action '{self.key}' must have a label")


@dataclass(frozen=True, eq=False)
class Checker:
    """A named detection rule plus its repair actions.

    Attributes:
        name: Unique identifier of the checker (e.g., "broken-file-link").
        description: Human-readable description of what it detects.
        detect: Pure function from a parsed document to raw violations.
            It must not mutate the document.
        actions: Ordered mapping from menu key to Action.
    """

    name: str
    description: str
    detect: Callable[[DocumentTree], list[RawViolation]]
    actions: Mapping[str, Action] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._validate()
        # Freeze the action menu; insertion order is the menu order.
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions)))

    def _validate(self) -> None:
        """Validate checker fields.

        Raises:
            ValueError: If the name is empty or an action key is invalid.
        """
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Checker name must be a non-empty string")

        for key, action in self.actions.items():
            if key != action.key:
                raise ValueError(
                    f"Checker '{self.name}': action bound to {key!r} declares key {action.key!r}"
                )
            if key == MANUAL_EDIT_KEY:
                raise ValueError(
                    f"Checker '{self.name}': key {key!r} is reserved for manual edit"
                )

    @classmethod
    def from_actions(
        cls,
        name: str,
        description: str,
        detect: Callable[[DocumentTree], list[RawViolation]],
        actions: list[Action] | None = None,
    ) -> Checker:
        """Build a checker from an ordered list of actions.

        Raises:
            ValueError: If two actions share a key.
        """
        menu: dict[str, Action] = {}
        for action in actions or []:
            if action.key in menu:
                raise ValueError(f"Checker '{name}': duplicate action key {action.key!r}")
            menu[action.key] = action
        return cls(name=name, description=description, detect=detect, actions=menu)

    def to_dict(self) -> dict[str, Any]:
        """Describe the checker for JSON output."""
        return {
            "name": self.name,
            "description": self.description,
            "actions": {key: action.label for key, action in self.actions.items()},
        }
