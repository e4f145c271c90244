"""Error codes and the docnav exception hierarchy."""

from __future__ import annotations

from docnav_common.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from docnav_common.errors.exceptions import (
    BlankLabelError,
    BrokenLinkError,
    ConfigurationError,
    CrossSidebarDuplicateError,
    DocnavError,
    DuplicateLeafError,
    EmptyCategoryError,
    NavigationError,
    NavigationLoadError,
    SiteConfigError,
    UnknownSidebarError,
    UnlistedDocumentError,
)

__all__ = [
    "BASE_TYPE_URI",
    "BlankLabelError",
    "BrokenLinkError",
    "ConfigurationError",
    "CrossSidebarDuplicateError",
    "DocnavError",
    "DuplicateLeafError",
    "EmptyCategoryError",
    "ErrorCode",
    "NavigationError",
    "NavigationLoadError",
    "SiteConfigError",
    "UnknownSidebarError",
    "UnlistedDocumentError",
    "get_type_uri",
]
