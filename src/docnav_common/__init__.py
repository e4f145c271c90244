"""Shared infrastructure for docnav: logging, errors, Problem Details and settings."""

from __future__ import annotations

from docnav_common.errors import DocnavError, ErrorCode
from docnav_common.logging import get_logger, setup_logging, with_fields
from docnav_common.settings import CrossSidebarPolicy, DocnavSettings, get_settings

__all__ = [
    "CrossSidebarPolicy",
    "DocnavError",
    "DocnavSettings",
    "ErrorCode",
    "get_logger",
    "get_settings",
    "setup_logging",
    "with_fields",
]
