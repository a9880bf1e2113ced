"""Parser for Org-style outline documents.

Builds a flat, position-annotated tree of headings and bracket links that
checkers inspect. Uses only regex; every node carries the source offsets
of the text it was parsed from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Heading:
    """An outline heading.

    Attributes:
        level: Number of leading stars.
        title: Heading text without the stars.
        start: Offset of the first star.
        end: Offset where the heading's section ends (next heading of the
            same or higher level, or end of document).
    """

    level: int
    title: str
    start: int
    end: int

    kind = "heading"


@dataclass(frozen=True)
class Link:
    """A bracket link such as ``[[file:a.png][label]]``.

    Attributes:
        link_type: Link type ("file", "https", "id", "fuzzy", ...).
        path: Link target without its type prefix or search option.
        description: Text of the optional second bracket, if any.
        start: Offset of the opening ``[[``.
        end: Offset just past the closing ``]]``.
        raw: The full link markup.
        search_option: Part after ``::`` in file links, if any.
    """

    link_type: str
    path: str
    description: str | None
    start: int
    end: int
    raw: str
    search_option: str | None = None

    kind = "link"

    @property
    def label(self) -> str:
        """Text a reader sees: the description, or the path without one."""
        return self.description if self.description else self.path


@dataclass
class DocumentTree:
    """Result of parsing a document.

    Attributes:
        text: Source text the tree was built from.
        nodes: Headings and links in document order.
        base_dir: Directory relative file links resolve against.
    """

    text: str
    nodes: list[Heading | Link] = field(default_factory=list)
    base_dir: Path | None = None

    def headings(self) -> list[Heading]:
        return [node for node in self.nodes if isinstance(node, Heading)]

    def links(self, link_type: str | None = None) -> list[Link]:
        """Return all links, optionally only those of ``link_type``."""
        return [
            node
            for node in self.nodes
            if isinstance(node, Link) and (link_type is None or node.link_type == link_type)
        ]

    def link_at(self, offset: int) -> Link | None:
        """Return the link whose markup covers ``offset``, if any."""
        for link in self.links():
            if link.start <= offset < link.end:
                return link
        return None

    def heading_path(self, offset: int) -> list[Heading]:
        """Return the headings whose sections enclose ``offset``, outermost first."""
        return [h for h in self.headings() if h.start <= offset < h.end]


class OrgParser:
    """Parse Org-style text into a DocumentTree.

    All methods are static and stateless.
    """

    _HEADING_PATTERN = re.compile(r"^(\*+)[ \t]+(.*)$", re.MULTILINE)
    _LINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\](?:\[([^\[\]]*)\])?\]")
    _TYPE_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+-]*):(.*)$", re.DOTALL)
    _BLOCK_PATTERN = re.compile(
        r"^[ \t]*#\+begin_(\w+).*?^[ \t]*#\+end_\1[ \t\r]*$",
        re.MULTILINE | re.DOTALL | re.IGNORECASE,
    )
    _FILE_PREFIXES = ("/", "./", "../", "~")

    @staticmethod
    def parse(text: str, base_dir: Path | None = None) -> DocumentTree:
        """Parse ``text`` into a DocumentTree.

        Links inside ``#+begin_... / #+end_...`` blocks are literal text and
        are not reported.

        Args:
            text: Document text.
            base_dir: Directory relative file links resolve against.

        Returns:
            DocumentTree with headings and links ordered by start offset.
        """
        blocks = [(m.start(), m.end()) for m in OrgParser._BLOCK_PATTERN.finditer(text)]

        nodes: list[Heading | Link] = []
        nodes.extend(OrgParser._parse_headings(text, blocks))
        nodes.extend(OrgParser._parse_links(text, blocks))
        nodes.sort(key=lambda node: node.start)

        return DocumentTree(text=text, nodes=nodes, base_dir=base_dir)

    @staticmethod
    def parse_link(raw: str, start: int = 0) -> Link | None:
        """Parse a single bracket link. Returns None if ``raw`` is not one."""
        match = OrgParser._LINK_PATTERN.fullmatch(raw)
        if match is None:
            return None
        return OrgParser._build_link(match, offset=start)

    @staticmethod
    def _parse_headings(text: str, blocks: list[tuple[int, int]]) -> list[Heading]:
        matches = [
            m for m in OrgParser._HEADING_PATTERN.finditer(text)
            if not _inside(m.start(), blocks)
        ]
        headings: list[Heading] = []

        for i, match in enumerate(matches):
            level = len(match.group(1))
            end = len(text)
            for later in matches[i + 1 :]:
                if len(later.group(1)) <= level:
                    end = later.start()
                    break
            headings.append(
                Heading(level=level, title=match.group(2).strip(), start=match.start(), end=end)
            )

        return headings

    @staticmethod
    def _parse_links(text: str, blocks: list[tuple[int, int]]) -> list[Link]:
        return [
            OrgParser._build_link(m)
            for m in OrgParser._LINK_PATTERN.finditer(text)
            if not _inside(m.start(), blocks)
        ]

    @staticmethod
    def _build_link(match: re.Match[str], offset: int = 0) -> Link:
        target = match.group(1).strip()
        description = match.group(2)
        search_option: str | None = None

        type_match = OrgParser._TYPE_PATTERN.match(target)
        if target.startswith(OrgParser._FILE_PREFIXES):
            link_type, path = "file", target
        elif type_match:
            link_type, path = type_match.group(1).lower(), type_match.group(2)
        else:
            link_type, path = "fuzzy", target

        if link_type == "file" and "::" in path:
            path, search_option = path.split("::", 1)

        return Link(
            link_type=link_type,
            path=path,
            description=description,
            start=match.start() + offset,
            end=match.end() + offset,
            raw=match.group(0),
            search_option=search_option,
        )


def _inside(offset: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in ranges)


def parse(text: str, base_dir: Path | None = None) -> DocumentTree:
    """Parse ``text`` into a DocumentTree. Shorthand for ``OrgParser.parse``."""
    return OrgParser.parse(text, base_dir)
