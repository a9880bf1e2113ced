"""Checker registry.

Holds the registered checkers in registration order and enforces unique
names. There is no module-level registry: callers construct one (usually
with ``create_default_registry``) and pass it to the engine that uses it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from docdoctor.checkers.base import Checker
from docdoctor.errors import DuplicateCheckerError, UnknownCheckerError


class CheckerRegistry:
    """Registry of checkers, keyed by name and ordered by registration.

    Example:
        >>> registry = CheckerRegistry()
        >>> registry.register(file_link_checker())
        >>> [c.name for c in registry.list()]
        ['broken-file-link']
    """

    def __init__(self, checkers: Iterable[Checker] = ()) -> None:
        """Initialize the registry, registering ``checkers`` in order."""
        self._checkers: dict[str, Checker] = {}
        for checker in checkers:
            self.register(checker)

    def register(self, checker: Checker) -> None:
        """Register a checker.

        Args:
            checker: The checker to add.

        Raises:
            DuplicateCheckerError: If a checker with the same name is
                already registered. The registry is left unchanged.
        """
        if checker.name in self._checkers:
            raise DuplicateCheckerError(checker.name)
        self._checkers[checker.name] = checker

    def list(self) -> Sequence[Checker]:
        """Return the registered checkers in registration order."""
        return tuple(self._checkers.values())

    def names(self) -> list[str]:
        return list(self._checkers)

    def get(self, name: str) -> Checker | None:
        return self._checkers.get(name)

    def has_checker(self, name: str) -> bool:
        return name in self._checkers

    def select(self, names: Iterable[str] | None) -> Sequence[Checker]:
        """Return the named checkers, in registration order.

        Args:
            names: Checker names to select. None or empty selects all.

        Raises:
            UnknownCheckerError: If a name is not registered.
        """
        wanted = list(names or [])
        if not wanted:
            return self.list()

        for name in wanted:
            if name not in self._checkers:
                raise UnknownCheckerError(name, self.names())

        return tuple(c for c in self._checkers.values() if c.name in wanted)

    def __len__(self) -> int:
        return len(self._checkers)

    def __contains__(self, name: object) -> bool:
        return name in self._checkers


def create_default_registry() -> CheckerRegistry:
    """Create a registry populated with the built-in checkers."""
    # Import here to avoid circular imports
    from docdoctor.checkers.file_links import file_link_checker

    return CheckerRegistry([file_link_checker()])
