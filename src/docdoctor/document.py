"""Mutable document store with live anchors.

A Document holds the text being repaired, an edit focus (``point``) and
the set of live anchors into it. Every edit goes through ``_apply`` which
records it in the edit log and re-maps the anchors, so an offset captured
before a repair still denotes the same character afterwards.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path

from docdoctor.parser import parse


@dataclass(frozen=True)
class EditRecord:
    """One applied edit: ``text`` replaced the range ``[start, end)``."""

    start: int
    end: int
    text: str

    @property
    def delta(self) -> int:
        """Net change in document length caused by this edit."""
        return len(self.text) - (self.end - self.start)


class Anchor:
    """A live reference to a character position inside a Document.

    The anchor is re-mapped by its document on every edit:

    - an insertion at ``p`` moves the anchor only if it sits after ``p``;
    - a deletion or replacement of ``[s, e)`` shifts anchors at or after
      ``e`` by the length delta and collapses anchors inside the range
      to ``s``.

    Once released the anchor keeps its last offset and stops moving.
    """

    __slots__ = ("_document", "_offset")

    def __init__(self, document: Document, offset: int) -> None:
        self._document: Document | None = document
        self._offset = offset

    @property
    def offset(self) -> int:
        """The anchor's current offset into its document."""
        return self._offset

    @property
    def document(self) -> Document | None:
        """The document the anchor is bound to, or None once released."""
        return self._document

    @property
    def is_live(self) -> bool:
        return self._document is not None

    def release(self) -> None:
        """Detach the anchor from its document. Safe to call twice."""
        if self._document is not None:
            self._document._forget(self)
            self._document = None

    def _remap(self, edit: EditRecord) -> None:
        if edit.start == edit.end:
            if self._offset > edit.start:
                self._offset += edit.delta
        elif self._offset >= edit.end:
            self._offset += edit.delta
        elif self._offset > edit.start:
            self._offset = edit.start

    def __repr__(self) -> str:
        state = "live" if self.is_live else "released"
        return f"Anchor(offset={self._offset}, {state})"


class Document:
    """An in-memory document with an edit focus and anchor tracking.

    Attributes:
        path: File the document was loaded from, if any.
        point: Current edit focus offset.
        edits: Log of every edit applied, in order.
        revealed: Offsets of headings expanded by ``reveal``.
    """

    def __init__(self, text: str, path: Path | None = None) -> None:
        self._text = text
        self.path = path
        self.point = 0
        self.edits: list[EditRecord] = []
        self.revealed: set[int] = set()
        self._anchors: list[Anchor] = []

    @classmethod
    def from_path(cls, path: Path) -> Document:
        """Load a document from a UTF-8 text file, keeping its line endings."""
        with path.open(encoding="utf-8", newline="") as f:
            return cls(f.read(), path=path)

    @property
    def text(self) -> str:
        return self._text

    @property
    def modified(self) -> bool:
        """True if any edit has been applied since loading."""
        return bool(self.edits)

    @property
    def base_dir(self) -> Path | None:
        """Directory relative file references are resolved against."""
        return self.path.parent if self.path is not None else None

    def __len__(self) -> int:
        return len(self._text)

    def save(self) -> None:
        """Write the document back to its path, byte for byte as edited.

        Raises:
            ValueError: If the document has no path.
        """
        if self.path is None:
            raise ValueError("Document has no path to save to")
        with self.path.open("w", encoding="utf-8", newline="") as f:
            f.write(self._text)

    # -------------------------------------------------------------------------
    # Anchors and focus
    # -------------------------------------------------------------------------

    def anchor(self, offset: int) -> Anchor:
        """Create a live anchor at ``offset``, clamped to document bounds."""
        anchor = Anchor(self, self._clamp(offset))
        self._anchors.append(anchor)
        return anchor

    @property
    def live_anchors(self) -> list[Anchor]:
        """Anchors currently tracked by this document."""
        return list(self._anchors)

    def _forget(self, anchor: Anchor) -> None:
        self._anchors.remove(anchor)

    def goto(self, offset: int) -> None:
        """Move the edit focus to ``offset``, clamped to document bounds."""
        self.point = self._clamp(offset)

    def reveal(self, offset: int) -> list[int]:
        """Expand the heading sections enclosing ``offset``.

        Returns:
            Start offsets of the headings that enclose ``offset``,
            outermost first.
        """
        tree = parse(self._text)
        starts = [heading.start for heading in tree.heading_path(offset)]
        self.revealed.update(starts)
        return starts

    def line_column(self, offset: int) -> tuple[int, int]:
        """Return the 1-based (line, column) of ``offset``."""
        offset = self._clamp(offset)
        line = self._text.count("\n", 0, offset) + 1
        column = offset - (self._text.rfind("\n", 0, offset) + 1) + 1
        return line, column

    # -------------------------------------------------------------------------
    # Reading and editing
    # -------------------------------------------------------------------------

    def read(self, start: int, end: int) -> str:
        """Return the text in ``[start, end)``."""
        start, end = self._range(start, end)
        return self._text[start:end]

    def insert(self, offset: int, text: str) -> None:
        """Insert ``text`` at ``offset``."""
        offset = self._clamp(offset)
        self._apply(EditRecord(offset, offset, text))

    def delete(self, start: int, end: int) -> None:
        """Delete the text in ``[start, end)``."""
        start, end = self._range(start, end)
        self._apply(EditRecord(start, end, ""))

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace the text in ``[start, end)`` with ``text``."""
        start, end = self._range(start, end)
        self._apply(EditRecord(start, end, text))

    def replace_all(self, new_text: str) -> int:
        """Rewrite the document to ``new_text`` with minimal edits.

        The changed regions are computed with difflib and applied from the
        end of the document backwards, so anchors outside those regions
        keep denoting the same characters.

        Returns:
            Number of edits applied.
        """
        matcher = difflib.SequenceMatcher(None, self._text, new_text, autojunk=False)
        changes = [op for op in matcher.get_opcodes() if op[0] != "equal"]
        for _tag, i1, i2, j1, j2 in reversed(changes):
            self._apply(EditRecord(i1, i2, new_text[j1:j2]))
        return len(changes)

    def _apply(self, edit: EditRecord) -> None:
        if edit.start == edit.end and not edit.text:
            return
        self._text = self._text[: edit.start] + edit.text + self._text[edit.end :]
        for anchor in self._anchors:
            anchor._remap(edit)
        self.point = edit.start + len(edit.text)
        self.edits.append(edit)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._text)))

    def _range(self, start: int, end: int) -> tuple[int, int]:
        start, end = self._clamp(start), self._clamp(end)
        if end < start:
            start, end = end, start
        return start, end
