"""Error code registry and type URIs for Problem Details.

Codes are kebab-case and stable; the Problem Details ``type`` of an error is
derived from its code.

Examples
--------
>>> from docnav_common.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.DUPLICATE_LEAF)
'https://docnav.dev/problems/duplicate-leaf'
"""

from __future__ import annotations

from enum import StrEnum

from docnav_common.problem_details import PROBLEM_BASE_URI

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]

BASE_TYPE_URI = PROBLEM_BASE_URI


class ErrorCode(StrEnum):
    """Stable error codes for docnav exceptions.

    Attributes
    ----------
    EMPTY_CATEGORY
        A category has no items.
    BLANK_LABEL
        A category label is empty or whitespace-only.
    DUPLICATE_LEAF
        A document is referenced more than once within one sidebar.
    CROSS_SIDEBAR_DUPLICATE
        A document is referenced by more than one sidebar while that is disallowed.
    NAVIGATION_LOAD_ERROR
        A sidebars document could not be read or does not have the expected shape.
    SITE_CONFIG_INVALID
        A site configuration document failed validation.
    UNKNOWN_SIDEBAR
        The navbar points at a sidebar the tree does not define.
    BROKEN_LINK
        A navbar or footer link targets a document that does not exist.
    UNLISTED_DOCUMENT
        A navbar or footer link targets a document no sidebar references.
    CONFIGURATION_ERROR
        Runtime settings are invalid.
    RUNTIME_ERROR
        Unclassified failure.
    """

    EMPTY_CATEGORY = "empty-category"
    BLANK_LABEL = "blank-label"
    DUPLICATE_LEAF = "duplicate-leaf"
    CROSS_SIDEBAR_DUPLICATE = "cross-sidebar-duplicate"
    NAVIGATION_LOAD_ERROR = "navigation-load-error"
    SITE_CONFIG_INVALID = "site-config-invalid"
    UNKNOWN_SIDEBAR = "unknown-sidebar"
    BROKEN_LINK = "broken-link"
    UNLISTED_DOCUMENT = "unlisted-document"
    CONFIGURATION_ERROR = "configuration-error"
    RUNTIME_ERROR = "runtime-error"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details type URI for ``code``.

    Parameters
    ----------
    code : ErrorCode
        Error code to resolve.

    Returns
    -------
    str
        Type URI under :data:`BASE_TYPE_URI`.
    """
    return f"{BASE_TYPE_URI}/{code.value}"
