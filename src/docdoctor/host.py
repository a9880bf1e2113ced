"""Host input/output used by the resolution engine.

The engine talks to the user only through the Host protocol: a blocking
single-key read, a transient panel, notifications, free-text prompts and
a manual-edit session that returns when the user resumes. ConsoleHost
implements it on a terminal with rich and typer.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Protocol

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from docdoctor.document import Document


class Host(Protocol):
    """Interface between the engine and whoever is driving it."""

    def read_key(self, prompt: str) -> str:
        """Block until the user types one key and return it."""
        ...

    def panel(self, text: str, title: str | None = None) -> AbstractContextManager[None]:
        """Show ``text`` in a panel for the duration of the context."""
        ...

    def notify(self, message: str) -> None:
        """Show a short message to the user."""
        ...

    def prompt(self, text: str) -> str:
        """Ask the user for a line of text."""
        ...

    def manual_edit(self, document: Document) -> None:
        """Let the user edit ``document`` freely; return when they resume."""
        ...


class ConsoleHost:
    """Terminal host backed by a rich Console.

    Attributes:
        console: Console all output goes to.
        open_panels: Titles of the panels currently open, innermost last.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.open_panels: list[str] = []

    def read_key(self, prompt: str) -> str:
        """Read one key. Raises EOFError once input is exhausted."""
        self.console.print(Text(prompt, style="bold"), end="")
        key = typer.getchar()
        if not key:
            raise EOFError("No more input")
        self.console.print(Text(key))
        return key

    @contextmanager
    def panel(self, text: str, title: str | None = None) -> Iterator[None]:
        self.open_panels.append(title or "")
        try:
            self.console.print(Panel(Text(text), title=title, expand=False))
            yield
        finally:
            self.open_panels.pop()

    def notify(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def prompt(self, text: str) -> str:
        """Ask for a line of text. Raises EOFError if input ends or is aborted."""
        try:
            value: str = typer.prompt(text, default="", show_default=False)
        except typer.Abort:
            raise EOFError("No more input") from None
        return value

    def manual_edit(self, document: Document) -> None:
        """Open the document in the user's editor.

        Saving and closing the editor is the resume signal. The edited
        text is applied as minimal edits so anchors outside the changed
        regions stay put. Closing without saving leaves the document as is.
        """
        line, _column = document.line_column(document.point)
        self.console.print(
            Text(f"Opening editor at line {line}; save and close it to resume.", style="dim")
        )
        extension = document.path.suffix if document.path is not None else ".txt"
        edited = typer.edit(document.text, extension=extension)
        if edited is None:
            self.notify("No changes made.")
            return
        document.replace_all(edited)
