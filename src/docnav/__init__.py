"""Validate, load and export documentation sidebar navigation trees.

Examples
--------
>>> from docnav import NavigationTree, validate
>>> tree = NavigationTree.from_dict({"main": [{"label": "A", "items": ["x", "y"]}, "z"]})
>>> validate(tree) is tree
True
"""

from __future__ import annotations

from docnav.loader import dump_tree, load_tree, parse_tree, write_tree
from docnav.models import Category, EntryLocation, LeafReference, NavigationEntry, NavigationTree
from docnav.site import SiteConfig, check_site, enforce_site, load_site_config
from docnav.validator import Violation, ViolationKind, iter_violations, validate

__all__ = [
    "Category",
    "EntryLocation",
    "LeafReference",
    "NavigationEntry",
    "NavigationTree",
    "SiteConfig",
    "Violation",
    "ViolationKind",
    "check_site",
    "dump_tree",
    "enforce_site",
    "iter_violations",
    "load_site_config",
    "load_tree",
    "parse_tree",
    "validate",
    "write_tree",
]
