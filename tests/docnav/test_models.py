"""Tests for the navigation tree models."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from docnav.models import Category, EntryLocation, NavigationTree, entry_from_builtins
from tests.helpers import assert_frozen_attribute


class TestEntryFromBuiltins:
    """Tests for converting serialized entries."""

    def test_string_is_a_leaf(self) -> None:
        """Verify plain strings stay leaf references."""
        assert entry_from_builtins("intro") == "intro"

    def test_mapping_becomes_category(self) -> None:
        """Verify nested category mappings are converted recursively."""
        entry = entry_from_builtins(
            {"type": "category", "label": "A", "items": ["x", {"label": "B", "items": ["y"]}]}
        )
        assert entry == Category("A", ("x", Category("B", ("y",))))

    def test_type_key_is_optional(self) -> None:
        """Verify the ``type`` discriminator may be omitted."""
        assert entry_from_builtins({"label": "A", "items": []}) == Category("A", ())

    @pytest.mark.parametrize(
        "value",
        [42, None, {"label": "A"}, {"items": ["x"]}, {"label": "A", "items": "x"}],
    )
    def test_rejects_unsupported_shapes(self, value: object) -> None:
        """Verify values that are neither leaves nor categories raise TypeError."""
        with pytest.raises(TypeError):
            entry_from_builtins(value)


class TestCategory:
    """Tests for Category."""

    def test_to_dict_marks_type(self) -> None:
        """Verify serialized categories carry ``type: category``."""
        category = Category("Guides", ("a", Category("Deep", ("b",))))
        assert category.to_dict() == {
            "type": "category",
            "label": "Guides",
            "items": ["a", {"type": "category", "label": "Deep", "items": ["b"]}],
        }

    def test_is_frozen(self) -> None:
        """Verify categories are immutable."""
        assert_frozen_attribute(Category("A", ("x",)), "label", "B")


class TestEntryLocation:
    """Tests for EntryLocation.describe."""

    def test_top_level(self) -> None:
        """Verify a top-level location names only the sidebar."""
        assert EntryLocation("main", (), 0).describe() == "sidebar 'main'"

    def test_nested(self) -> None:
        """Verify enclosing labels are joined outermost first."""
        location = EntryLocation("main", ("Sprint 1", "Tarefas"), 2)
        assert location.describe() == "sidebar 'main' > Sprint 1 > Tarefas"


class TestNavigationTree:
    """Tests for NavigationTree."""

    def test_preserves_sidebar_and_entry_order(self) -> None:
        """Verify declaration order survives conversion both ways."""
        payload = {"b": ["z", "y"], "a": [{"type": "category", "label": "C", "items": ["x"]}]}
        tree = NavigationTree.from_dict(payload)
        assert tree.names() == ("b", "a")
        assert tree.to_dict() == payload
        assert list(tree.to_dict()) == ["b", "a"]

    def test_sidebars_are_read_only(self, sample_tree: NavigationTree) -> None:
        """Verify the sidebars mapping cannot be modified."""
        assert isinstance(sample_tree.sidebars, MappingProxyType)
        assert isinstance(sample_tree.sidebars["tccSidebar"], tuple)
        with pytest.raises(TypeError):
            sample_tree.sidebars["new"] = ()  # type: ignore[index]
        assert_frozen_attribute(sample_tree, "sidebars", {})

    def test_equality_is_order_sensitive(self) -> None:
        """Verify trees differing only in sidebar order are not equal."""
        first = NavigationTree.from_dict({"a": ["x"], "b": ["y"]})
        second = NavigationTree.from_dict({"b": ["y"], "a": ["x"]})
        assert first != second
        assert first == NavigationTree.from_dict({"a": ["x"], "b": ["y"]})
        assert hash(first) == hash(NavigationTree.from_dict({"a": ["x"], "b": ["y"]}))

    def test_walk_yields_category_before_children(self) -> None:
        """Verify depth-first author-order traversal with locations."""
        tree = NavigationTree.from_dict({"main": [{"label": "A", "items": ["x", "y"]}, "z"]})
        walked = [(loc.path, loc.index, entry) for loc, entry in tree.walk()]
        assert walked == [
            ((), 0, Category("A", ("x", "y"))),
            (("A",), 0, "x"),
            (("A",), 1, "y"),
            ((), 1, "z"),
        ]

    def test_leaves_in_navigation_order(self, sample_tree: NavigationTree) -> None:
        """Verify leaves are listed in the order a reader meets them."""
        assert list(sample_tree.leaves("tccSidebar")) == [
            "intro",
            "fundamentacao/cybersecurity",
            "fundamentacao/vulnerability-management",
        ]
        assert len(list(sample_tree.leaves())) == 7

    def test_walk_unknown_sidebar_raises(self, sample_tree: NavigationTree) -> None:
        """Verify asking for an undefined sidebar raises KeyError."""
        with pytest.raises(KeyError):
            list(sample_tree.walk("missing"))

    def test_empty_tree(self) -> None:
        """Verify a tree without sidebars is valid and empty."""
        tree = NavigationTree()
        assert tree.names() == ()
        assert tree.to_dict() == {}
