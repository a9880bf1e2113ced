"""Checker for links to local files that do not exist.

Reports every ``file:`` link whose target is missing on disk and offers
to unlink it (keep the visible text), delete it, or point it elsewhere.
"""

from __future__ import annotations

from pathlib import Path

from docdoctor.checkers.base import Action, ActionContext, Checker, RawViolation
from docdoctor.document import Document
from docdoctor.errors import ActionPreconditionError
from docdoctor.parser import DocumentTree, Link, parse

CHECKER_NAME = "broken-file-link"


def resolve_link_path(link: Link, base_dir: Path | None) -> Path:
    """Resolve a file link's path against the document directory."""
    path = Path(link.path).expanduser()
    if path.is_absolute():
        return path
    return (base_dir or Path.cwd()) / path


def detect_broken_file_links(tree: DocumentTree) -> list[RawViolation]:
    """Return a violation for each file link whose target does not exist."""
    violations: list[RawViolation] = []
    for link in tree.links("file"):
        if not resolve_link_path(link, tree.base_dir).exists():
            violations.append(
                (link.start, f'Link to non-existent local file "{link.path}"')
            )
    return violations


def link_at_point(document: Document) -> Link:
    """Return the link under the document's edit focus.

    Raises:
        ActionPreconditionError: If there is no link at point.
    """
    link = parse(document.text).link_at(document.point)
    if link is None:
        line, column = document.line_column(document.point)
        raise ActionPreconditionError(f"No link at point (line {line}, column {column})")
    return link


def unlink(ctx: ActionContext) -> None:
    """Replace the link at point with its visible text."""
    link = link_at_point(ctx.document)
    ctx.document.replace(link.start, link.end, link.label)


def delete_link(ctx: ActionContext) -> None:
    """Remove the link at point, markup and text."""
    link = link_at_point(ctx.document)
    ctx.document.delete(link.start, link.end)


def retarget_link(ctx: ActionContext) -> None:
    """Ask for a new path and rewrite the link at point to use it."""
    link = link_at_point(ctx.document)
    new_path = ctx.host.prompt(f"New path for {link.path}").strip()
    if not new_path:
        raise ActionPreconditionError("No replacement path given")

    target = f"file:{new_path}"
    if link.search_option:
        target += f"::{link.search_option}"
    markup = f"[[{target}][{link.description}]]" if link.description else f"[[{target}]]"
    ctx.document.replace(link.start, link.end, markup)


def file_link_checker() -> Checker:
    """Create the broken file link checker."""
    return Checker.from_actions(
        name=CHECKER_NAME,
        description="Links to local files that do not exist",
        detect=detect_broken_file_links,
        actions=[
            Action("u", "unlink", unlink),
            Action("d", "delete link", delete_link),
            Action("r", "retarget link", retarget_link),
        ],
    )
