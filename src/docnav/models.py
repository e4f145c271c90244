"""Typed models for navigation trees.

A :class:`NavigationTree` maps sidebar names to ordered entries. An entry is
either a leaf (a plain ``str`` naming a document) or a :class:`Category`
grouping further entries under a label. All models are frozen and hold tuples,
so a tree can be shared freely and validation never mutates it.

Examples
--------
>>> from docnav.models import Category, NavigationTree
>>> tree = NavigationTree.from_dict({"main": [{"label": "A", "items": ["x", "y"]}, "z"]})
>>> list(tree.leaves("main"))
['x', 'y', 'z']
>>> tree.to_dict()["main"][0]["type"]
'category'
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, TypedDict

__all__ = [
    "CATEGORY_TYPE",
    "Category",
    "CategoryDict",
    "EntryLocation",
    "LeafReference",
    "NavigationEntry",
    "NavigationTree",
    "entry_from_builtins",
]

CATEGORY_TYPE: Final[str] = "category"

type LeafReference = str
type NavigationEntry = LeafReference | Category
type EntryDict = str | CategoryDict


class CategoryDict(TypedDict):
    """Serialized category as written in a sidebars file."""

    type: str
    label: str
    items: list[EntryDict]


@dataclass(frozen=True, slots=True)
class Category:
    """Labelled group of navigation entries."""

    label: str
    items: tuple[NavigationEntry, ...] = ()

    def to_dict(self) -> CategoryDict:
        """Convert to the serialized representation."""
        return CategoryDict(
            type=CATEGORY_TYPE,
            label=self.label,
            items=[_entry_to_builtins(item) for item in self.items],
        )


@dataclass(frozen=True, slots=True)
class EntryLocation:
    """Where an entry sits inside a tree.

    Attributes
    ----------
    sidebar : str
        Sidebar holding the entry.
    path : tuple[str, ...]
        Labels of the enclosing categories, outermost first.
    index : int
        Position of the entry within its parent sequence.
    """

    sidebar: str
    path: tuple[str, ...]
    index: int

    def describe(self) -> str:
        """Return ``sidebar 'name' > Label > Label`` for messages."""
        return " > ".join((f"sidebar {self.sidebar!r}", *self.path))


def _entry_to_builtins(entry: NavigationEntry) -> EntryDict:
    if isinstance(entry, Category):
        return entry.to_dict()
    return entry


def entry_from_builtins(value: object) -> NavigationEntry:
    """Build a navigation entry from its serialized form.

    Parameters
    ----------
    value : object
        A leaf string, or a mapping with ``label`` and ``items`` (and
        optionally ``type: category``).

    Returns
    -------
    NavigationEntry
        The typed entry.

    Raises
    ------
    TypeError
        If ``value`` is neither a string nor a category mapping.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        label = value.get("label")
        items = value.get("items")
        if not isinstance(label, str) or not isinstance(items, Sequence) or isinstance(items, str):
            message = f"category entries need a string label and a list of items, got {value!r}"
            raise TypeError(message)
        return Category(label=label, items=tuple(entry_from_builtins(item) for item in items))
    message = f"unsupported navigation entry: {value!r}"
    raise TypeError(message)


def _freeze(sidebars: Mapping[str, Sequence[NavigationEntry]]) -> Mapping[str, tuple[NavigationEntry, ...]]:
    return MappingProxyType({name: tuple(entries) for name, entries in sidebars.items()})


@dataclass(frozen=True, slots=True)
class NavigationTree:
    """Named sidebars, each an ordered sequence of entries.

    Sidebar order is the insertion order of ``sidebars``.
    """

    sidebars: Mapping[str, tuple[NavigationEntry, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "sidebars", _freeze(self.sidebars))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavigationTree):
            return NotImplemented
        return list(self.sidebars.items()) == list(other.sidebars.items())

    def __hash__(self) -> int:
        return hash(tuple(self.sidebars.items()))

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[object]]) -> NavigationTree:
        """Build a tree from sidebar name to serialized entries.

        Parameters
        ----------
        data : Mapping[str, Sequence[object]]
            Serialized sidebars.

        Returns
        -------
        NavigationTree
            The typed tree, in the order of ``data``.
        """
        return cls(
            {name: tuple(entry_from_builtins(entry) for entry in entries) for name, entries in data.items()}
        )

    def to_dict(self) -> dict[str, list[EntryDict]]:
        """Convert to the serialized representation, preserving order."""
        return {
            name: [_entry_to_builtins(entry) for entry in entries]
            for name, entries in self.sidebars.items()
        }

    def names(self) -> tuple[str, ...]:
        """Return sidebar names in declaration order."""
        return tuple(self.sidebars)

    def walk(self, sidebar: str | None = None) -> Iterator[tuple[EntryLocation, NavigationEntry]]:
        """Yield every entry depth-first, in author order.

        Parameters
        ----------
        sidebar : str | None, optional
            Restrict the walk to one sidebar. Defaults to all sidebars.

        Yields
        ------
        tuple[EntryLocation, NavigationEntry]
            Location of the entry and the entry itself. A category is yielded
            before its children.

        Raises
        ------
        KeyError
            If ``sidebar`` is not defined.
        """
        names = (sidebar,) if sidebar is not None else tuple(self.sidebars)
        for name in names:
            yield from _walk_entries(name, (), self.sidebars[name])

    def leaves(self, sidebar: str | None = None) -> Iterator[LeafReference]:
        """Yield leaf references in navigation order."""
        for _, entry in self.walk(sidebar):
            if isinstance(entry, str):
                yield entry


def _walk_entries(
    sidebar: str, path: tuple[str, ...], entries: Sequence[NavigationEntry]
) -> Iterator[tuple[EntryLocation, NavigationEntry]]:
    for index, entry in enumerate(entries):
        yield EntryLocation(sidebar=sidebar, path=path, index=index), entry
        if isinstance(entry, Category):
            yield from _walk_entries(sidebar, (*path, entry.label), entry.items)
