"""Tests for the checker framework."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import MappingProxyType

import pytest

from docdoctor.checkers import (
    MANUAL_EDIT_KEY,
    Action,
    ActionContext,
    Checker,
    CheckerRegistry,
    create_default_registry,
    file_link_checker,
)
from docdoctor.checkers.file_links import (
    delete_link,
    detect_broken_file_links,
    link_at_point,
    retarget_link,
    unlink,
)
from docdoctor.document import Document
from docdoctor.errors import (
    ActionPreconditionError,
    DuplicateCheckerError,
    UnknownCheckerError,
)
from docdoctor.parser import parse


def _noop(ctx: ActionContext) -> None:
    pass


def _make_checker(name: str, actions: list[Action] | None = None) -> Checker:
    return Checker.from_actions(name, f"{name} description", lambda tree: [], actions)


# -----------------------------------------------------------------------------
# Action and Checker Tests
# -----------------------------------------------------------------------------


class TestAction:
    """Tests for Action validation."""

    def test_create_action(self) -> None:
        """Test creating a valid action."""
        action = Action("u", "unlink", _noop)
        assert action.key == "u"
        assert action.label == "unlink"
        assert action.help is None

    @pytest.mark.parametrize("key", ["", "ab", " "])
    def test_invalid_key(self, key: str) -> None:
        """Test that keys must be a single non-space character."""
        with pytest.raises(ValueError, match="single character"):
            Action(key, "label", _noop)

    def test_empty_label(self) -> None:
        """Test that a label is required."""
        with pytest.raises(ValueError, match="must have a label"):
            Action("x", "", _noop)


class TestChecker:
    """Tests for the Checker descriptor."""

    def test_actions_keep_declared_order(self) -> None:
        """Test that the action menu preserves declaration order."""
        checker = _make_checker(
            "ordered",
            [Action("z", "last letter", _noop), Action("a", "first letter", _noop)],
        )
        assert list(checker.actions) == ["z", "a"]

    def test_actions_are_read_only(self) -> None:
        """Test that a checker's menu cannot be mutated."""
        checker = _make_checker("frozen", [Action("x", "do x", _noop)])
        assert isinstance(checker.actions, MappingProxyType)
        with pytest.raises(TypeError):
            checker.actions["y"] = Action("y", "do y", _noop)  # type: ignore[index]

    def test_checker_is_immutable(self) -> None:
        """Test that checker fields cannot be reassigned."""
        checker = _make_checker("frozen")
        with pytest.raises(AttributeError):
            checker.name = "other"  # type: ignore[misc]

    def test_checkers_are_hashable(self) -> None:
        """Test that checkers can key a mapping and compare by identity."""
        first = _make_checker("same", [Action("x", "do x", _noop)])
        second = _make_checker("same", [Action("x", "do x", _noop)])
        counts = {first: 1, second: 2}
        assert counts[first] == 1
        assert first != second
        assert first == first

    def test_empty_name_rejected(self) -> None:
        """Test that a checker needs a name."""
        with pytest.raises(ValueError, match="non-empty"):
            _make_checker("")

    def test_manual_edit_key_reserved(self) -> None:
        """Test that checkers cannot bind the manual edit key."""
        with pytest.raises(ValueError, match="reserved"):
            _make_checker("clash", [Action(MANUAL_EDIT_KEY, "edit", _noop)])

    def test_duplicate_action_keys_rejected(self) -> None:
        """Test that two actions cannot share a key."""
        with pytest.raises(ValueError, match="duplicate action key"):
            _make_checker("dup", [Action("x", "one", _noop), Action("x", "two", _noop)])

    def test_mismatched_key_rejected(self) -> None:
        """Test that a mapping key must equal the action's own key."""
        with pytest.raises(ValueError, match="declares key"):
            Checker("bad", "desc", lambda tree: [], {"a": Action("b", "b", _noop)})

    def test_to_dict(self) -> None:
        """Test JSON description of a checker."""
        checker = _make_checker("described", [Action("x", "do x", _noop)])
        assert checker.to_dict() == {
            "name": "described",
            "description": "described description",
            "actions": {"x": "do x"},
        }


# -----------------------------------------------------------------------------
# Registry Tests
# -----------------------------------------------------------------------------


class TestCheckerRegistry:
    """Tests for CheckerRegistry."""

    def test_register_preserves_order(self) -> None:
        """Test that list() returns checkers in registration order."""
        registry = CheckerRegistry()
        for name in ["b", "a", "c"]:
            registry.register(_make_checker(name))
        assert [c.name for c in registry.list()] == ["b", "a", "c"]
        assert registry.names() == ["b", "a", "c"]
        assert len(registry) == 3

    def test_duplicate_name_rejected(self) -> None:
        """Test that registering a name twice fails and leaves the registry unchanged."""
        first = _make_checker("same")
        registry = CheckerRegistry([first])
        before = registry.list()

        with pytest.raises(DuplicateCheckerError, match="same") as exc_info:
            registry.register(_make_checker("same"))

        assert exc_info.value.name == "same"
        assert registry.list() == before
        assert registry.get("same") is first

    def test_list_is_read_only(self) -> None:
        """Test that the exposed sequence cannot be used to mutate the registry."""
        registry = CheckerRegistry([_make_checker("one")])
        listed = registry.list()
        assert isinstance(listed, tuple)

    def test_lookup(self) -> None:
        """Test get, has_checker and membership."""
        checker = _make_checker("present")
        registry = CheckerRegistry([checker])
        assert registry.get("present") is checker
        assert registry.get("absent") is None
        assert registry.has_checker("present") is True
        assert "absent" not in registry

    def test_select_subset_in_registration_order(self) -> None:
        """Test selecting checkers by name."""
        registry = CheckerRegistry([_make_checker(n) for n in ["a", "b", "c"]])
        assert [c.name for c in registry.select(["c", "a"])] == ["a", "c"]

    def test_select_none_returns_all(self) -> None:
        """Test that an empty selection means every checker."""
        registry = CheckerRegistry([_make_checker(n) for n in ["a", "b"]])
        assert [c.name for c in registry.select(None)] == ["a", "b"]
        assert [c.name for c in registry.select([])] == ["a", "b"]

    def test_select_unknown(self) -> None:
        """Test that selecting an unknown name fails."""
        registry = CheckerRegistry([_make_checker("a")])
        with pytest.raises(UnknownCheckerError, match="Unknown checker 'zzz'"):
            registry.select(["zzz"])

    def test_default_registry(self) -> None:
        """Test that the default registry carries the built-in checkers."""
        registry = create_default_registry()
        assert registry.names() == ["broken-file-link"]

    def test_default_registry_is_fresh(self) -> None:
        """Test that each call builds an independent registry."""
        first = create_default_registry()
        first.register(_make_checker("extra"))
        assert "extra" not in create_default_registry()


# -----------------------------------------------------------------------------
# Broken File Link Checker Tests
# -----------------------------------------------------------------------------


@pytest.fixture
def make_context(make_host: Callable[..., object]) -> Callable[..., ActionContext]:
    """Build an ActionContext with the focus at a given offset."""

    def _make(document: Document, point: int, **host_kwargs: object) -> ActionContext:
        document.goto(point)
        return ActionContext(document=document, host=make_host(**host_kwargs))  # type: ignore[arg-type]

    return _make


class TestBrokenFileLinkDetection:
    """Tests for detecting links to missing files."""

    def test_reports_missing_files(self, tmp_path: Path) -> None:
        """Test that missing targets are reported with their position."""
        (tmp_path / "exists.png").write_bytes(b"")
        text = "[[file:exists.png]] [[file:missing.png][m]] [[https://x.org]]"
        tree = parse(text, tmp_path)

        assert detect_broken_file_links(tree) == [
            (text.index("[[file:missing"), 'Link to non-existent local file "missing.png"'),
        ]

    def test_absolute_path(self, tmp_path: Path) -> None:
        """Test that absolute paths are checked as is."""
        target = tmp_path / "abs.txt"
        target.write_text("x")
        tree = parse(f"[[file:{target}]] [[{tmp_path / 'gone.txt'}]]", Path("/nonexistent"))
        messages = [message for _offset, message in detect_broken_file_links(tree)]
        assert messages == [f'Link to non-existent local file "{tmp_path / "gone.txt"}"']

    def test_checker_descriptor(self) -> None:
        """Test the checker's name and action menu."""
        checker = file_link_checker()
        assert checker.name == "broken-file-link"
        assert [(k, a.label) for k, a in checker.actions.items()] == [
            ("u", "unlink"),
            ("d", "delete link"),
            ("r", "retarget link"),
        ]


class TestBrokenFileLinkActions:
    """Tests for the repair actions."""

    def test_unlink_without_description(self, make_context: Callable[..., ActionContext]) -> None:
        """Test that unlinking keeps the path as plain text."""
        doc = Document("See [[file:a.png]] and [[file:b.png][label]]")
        unlink(make_context(doc, 4))
        assert doc.text == "See a.png and [[file:b.png][label]]"

    def test_unlink_with_description(self, make_context: Callable[..., ActionContext]) -> None:
        """Test that unlinking keeps the description."""
        doc = Document("See [[file:a.png]] and [[file:b.png][label]]")
        unlink(make_context(doc, doc.text.index("[[file:b")))
        assert doc.text == "See [[file:a.png]] and label"

    def test_delete_link(self, make_context: Callable[..., ActionContext]) -> None:
        """Test removing the link entirely."""
        doc = Document("x [[file:a.png]] y")
        delete_link(make_context(doc, 2))
        assert doc.text == "x  y"

    def test_retarget_link(self, make_context: Callable[..., ActionContext]) -> None:
        """Test pointing a link at a new path."""
        doc = Document("[[file:old.png::p1][pic]]")
        retarget_link(make_context(doc, 0, answers=["new.png"]))
        assert doc.text == "[[file:new.png::p1][pic]]"

    def test_retarget_without_answer(self, make_context: Callable[..., ActionContext]) -> None:
        """Test that an empty answer fails without editing."""
        doc = Document("[[file:old.png]]")
        with pytest.raises(ActionPreconditionError, match="No replacement path"):
            retarget_link(make_context(doc, 0, answers=["  "]))
        assert doc.modified is False

    def test_no_link_at_point(self, make_context: Callable[..., ActionContext]) -> None:
        """Test that actions fail cleanly when the focus is not on a link."""
        doc = Document("plain text\n[[file:a.png]]")
        ctx = make_context(doc, 3)
        with pytest.raises(ActionPreconditionError, match=r"No link at point \(line 1, column 4\)"):
            unlink(ctx)
        assert doc.text == "plain text\n[[file:a.png]]"
        assert doc.modified is False

    def test_link_at_point(self) -> None:
        """Test finding the link under the focus."""
        doc = Document("ab [[file:z]]")
        doc.goto(5)
        assert link_at_point(doc).path == "z"
