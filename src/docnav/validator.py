"""Structural checks for navigation trees.

:func:`validate` is the fail-fast gate used before a tree is handed to the
site generator: it raises the first violation found in traversal order and
otherwise returns the tree untouched. :func:`iter_violations` yields every
violation so that tooling can report all problems in one run.

Rules, per sidebar:

* a category must have at least one item (``empty-category``);
* a category label must contain a non-whitespace character (``blank-label``);
* a document may be referenced only once (``duplicate-leaf``).

References to the same document from different sidebars are governed by
:class:`~docnav_common.settings.CrossSidebarPolicy`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from docnav.models import Category, EntryLocation
from docnav_common.errors import (
    BlankLabelError,
    CrossSidebarDuplicateError,
    DuplicateLeafError,
    EmptyCategoryError,
    NavigationError,
)
from docnav_common.logging import get_logger
from docnav_common.settings import CrossSidebarPolicy, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from docnav.models import NavigationTree

__all__ = [
    "Violation",
    "ViolationKind",
    "iter_violations",
    "validate",
]

LOGGER = get_logger(__name__)


class ViolationKind(StrEnum):
    """Kinds of structural violation."""

    EMPTY_CATEGORY = "empty-category"
    BLANK_LABEL = "blank-label"
    DUPLICATE_LEAF = "duplicate-leaf"
    CROSS_SIDEBAR_DUPLICATE = "cross-sidebar-duplicate"


@dataclass(frozen=True, slots=True)
class Violation:
    """One structural problem and where it occurs.

    Attributes
    ----------
    kind : ViolationKind
        Rule that was broken.
    location : EntryLocation
        Location of the offending entry.
    label : str | None
        Label of the offending category, for category rules.
    leaf : str | None
        Document id, for duplicate rules.
    first : EntryLocation | None
        Location of the first reference, for duplicate rules.
    """

    kind: ViolationKind
    location: EntryLocation
    label: str | None = None
    leaf: str | None = None
    first: EntryLocation | None = None

    @property
    def sidebar(self) -> str:
        """Sidebar holding the offending entry."""
        return self.location.sidebar

    @property
    def message(self) -> str:
        """Human-readable description, prefixed with the entry location."""
        where = self.location.describe()
        if self.kind is ViolationKind.EMPTY_CATEGORY:
            return f"{where}: category {self.label!r} has no items"
        if self.kind is ViolationKind.BLANK_LABEL:
            return f"{where}: category at position {self.location.index} has a blank label"
        first = self.first.describe() if self.first is not None else "an unknown location"
        return f"{where}: duplicate leaf {self.leaf!r} (first seen at {first})"

    def to_error(self) -> NavigationError:
        """Return the exception matching this violation."""
        loc = self.location
        if self.kind is ViolationKind.EMPTY_CATEGORY:
            return EmptyCategoryError(self.message, sidebar=loc.sidebar, path=loc.path, index=loc.index)
        if self.kind is ViolationKind.BLANK_LABEL:
            return BlankLabelError(self.message, sidebar=loc.sidebar, path=loc.path, index=loc.index)
        first = self.first if self.first is not None else loc
        leaf = self.leaf or ""
        if self.kind is ViolationKind.CROSS_SIDEBAR_DUPLICATE:
            return CrossSidebarDuplicateError(
                self.message,
                sidebar=loc.sidebar,
                leaf=leaf,
                first_sidebar=first.sidebar,
                path=loc.path,
                index=loc.index,
                first_path=first.path,
            )
        return DuplicateLeafError(
            self.message,
            sidebar=loc.sidebar,
            leaf=leaf,
            path=loc.path,
            index=loc.index,
            first_path=first.path,
        )


def _resolve_policy(policy: CrossSidebarPolicy | str | None) -> CrossSidebarPolicy:
    if policy is None:
        return get_settings().cross_sidebar_duplicates
    return CrossSidebarPolicy(policy)


def iter_violations(
    tree: NavigationTree,
    *,
    cross_sidebar: CrossSidebarPolicy | str | None = None,
) -> Iterator[Violation]:
    """Yield every violation in ``tree`` in traversal order.

    Sidebars are visited in declaration order and entries depth-first in
    author order. A category that is both blank-labelled and empty yields the
    blank label first.

    Parameters
    ----------
    tree : NavigationTree
        Tree to inspect.
    cross_sidebar : CrossSidebarPolicy | str | None, optional
        Treatment of documents referenced by several sidebars. ``None`` uses
        the configured default. Under ``warn`` each reuse is logged and not
        yielded.

    Yields
    ------
    Violation
        Each problem found.
    """
    policy = _resolve_policy(cross_sidebar)
    owners: dict[str, EntryLocation] = {}
    for sidebar in tree.names():
        seen: dict[str, EntryLocation] = {}
        for location, entry in tree.walk(sidebar):
            if isinstance(entry, Category):
                if not entry.label.strip():
                    yield Violation(ViolationKind.BLANK_LABEL, location, label=entry.label)
                if not entry.items:
                    yield Violation(ViolationKind.EMPTY_CATEGORY, location, label=entry.label)
                continue
            first = seen.get(entry)
            if first is not None:
                yield Violation(ViolationKind.DUPLICATE_LEAF, location, leaf=entry, first=first)
                continue
            seen[entry] = location
            owner = owners.setdefault(entry, location)
            if owner.sidebar == sidebar or policy is CrossSidebarPolicy.ALLOW:
                continue
            if policy is CrossSidebarPolicy.WARN:
                LOGGER.warning(
                    "Document referenced by more than one sidebar",
                    extra={
                        "operation": "validate",
                        "leaf": entry,
                        "sidebar": sidebar,
                        "first_sidebar": owner.sidebar,
                    },
                )
                continue
            yield Violation(ViolationKind.CROSS_SIDEBAR_DUPLICATE, location, leaf=entry, first=owner)


def validate(
    tree: NavigationTree,
    *,
    cross_sidebar: CrossSidebarPolicy | str | None = None,
) -> NavigationTree:
    """Check ``tree`` and return it unchanged when well formed.

    Parameters
    ----------
    tree : NavigationTree
        Tree to check.
    cross_sidebar : CrossSidebarPolicy | str | None, optional
        Treatment of documents referenced by several sidebars. ``None`` uses
        the configured default (``allow`` unless overridden).

    Returns
    -------
    NavigationTree
        The very same ``tree`` object.

    Raises
    ------
    EmptyCategoryError
        If a category has no items.
    BlankLabelError
        If a category label is empty or whitespace-only.
    DuplicateLeafError
        If a document is referenced twice within one sidebar, or by two
        sidebars under the ``error`` policy.

    Examples
    --------
    >>> from docnav.models import NavigationTree
    >>> tree = NavigationTree.from_dict({"main": [{"label": "A", "items": ["x", "y"]}, "z"]})
    >>> validate(tree) is tree
    True
    """
    for violation in iter_violations(tree, cross_sidebar=cross_sidebar):
        error = violation.to_error()
        LOGGER.debug(
            "Navigation tree rejected",
            extra={"operation": "validate", "status": "error", "code": error.code.value},
        )
        raise error
    return tree
