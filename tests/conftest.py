"""Pytest configuration and fixtures for docdoctor tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from docdoctor.document import Document

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")


class ScriptedHost:
    """Host that replays scripted keys and records what it was asked.

    Running out of keys behaves like the user pressing Ctrl-C.

    Attributes:
        keys: Keys still to be returned by read_key.
        answers: Lines still to be returned by prompt.
        edits: Manual edit steps; each is replacement text or a callable
            taking the document.
        prompts: Every prompt passed to read_key.
        notifications: Every message passed to notify.
        panels: (title, text) of every panel opened.
        open_panels: Titles of panels currently open.
    """

    def __init__(
        self,
        keys: list[str] | None = None,
        answers: list[str] | None = None,
        edits: list[Any] | None = None,
    ) -> None:
        self.keys = list(keys or [])
        self.answers = list(answers or [])
        self.edits = list(edits or [])
        self.prompts: list[str] = []
        self.notifications: list[str] = []
        self.panels: list[tuple[str | None, str]] = []
        self.open_panels: list[str | None] = []

    def read_key(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.keys:
            raise KeyboardInterrupt
        return self.keys.pop(0)

    @contextmanager
    def panel(self, text: str, title: str | None = None) -> Iterator[None]:
        self.panels.append((title, text))
        self.open_panels.append(title)
        try:
            yield
        finally:
            self.open_panels.pop()

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def prompt(self, text: str) -> str:
        return self.answers.pop(0)

    def manual_edit(self, document: Document) -> None:
        edit = self.edits.pop(0)
        if callable(edit):
            edit(document)
        else:
            document.replace_all(edit)


@pytest.fixture
def make_host() -> Callable[..., ScriptedHost]:
    """Factory for scripted hosts."""
    return ScriptedHost
