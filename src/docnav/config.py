"""Option objects for check and export runs.

Frozen dataclasses replace boolean and path positional arguments in the
programmatic entry points used by the CLI.

Examples
--------
>>> from pathlib import Path
>>> from docnav.config import CheckOptions
>>> options = CheckOptions(sidebars=Path("sidebars.yaml"))
>>> options.site is None
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from docnav.loader import TreeFormat
    from docnav_common.settings import CrossSidebarPolicy

__all__ = [
    "CheckOptions",
    "ExportOptions",
]


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Configuration for a check run.

    Attributes
    ----------
    sidebars : Path
        Sidebars file to load and validate.
    site : Path | None, optional
        Site configuration to cross-check against the tree. Defaults to None.
    docs : Path | None, optional
        Directory holding the site's documents; links to documents missing
        from it are broken. Only used together with ``site``. Defaults to None.
    cross_sidebar : CrossSidebarPolicy | None, optional
        Override of the configured cross-sidebar policy. Defaults to None.
    """

    sidebars: Path
    site: Path | None = None
    docs: Path | None = None
    cross_sidebar: CrossSidebarPolicy | None = None


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """Configuration for an export run.

    Attributes
    ----------
    sidebars : Path
        Sidebars file to load.
    fmt : TreeFormat, optional
        Output format. Defaults to ``"json"``.
    output : Path | None, optional
        Destination file; ``None`` writes to stdout. Defaults to None.
    """

    sidebars: Path
    fmt: TreeFormat = "json"
    output: Path | None = None
