"""Tests for check and export option objects."""

from __future__ import annotations

from pathlib import Path

from docnav.config import CheckOptions, ExportOptions
from docnav_common.settings import CrossSidebarPolicy
from tests.helpers import assert_frozen_attribute, assert_frozen_attributes


class TestCheckOptions:
    """Tests for CheckOptions configuration."""

    def test_defaults(self) -> None:
        """Verify optional fields default to None."""
        options = CheckOptions(sidebars=Path("sidebars.yaml"))
        assert options.site is None
        assert options.docs is None
        assert options.cross_sidebar is None

    def test_custom_values(self) -> None:
        """Verify custom values are accepted."""
        options = CheckOptions(
            sidebars=Path("sidebars.yaml"),
            site=Path("site.yaml"),
            docs=Path("docs"),
            cross_sidebar=CrossSidebarPolicy.ERROR,
        )
        assert options.site == Path("site.yaml")
        assert options.docs == Path("docs")
        assert options.cross_sidebar is CrossSidebarPolicy.ERROR

    def test_is_frozen(self) -> None:
        """Verify options are immutable."""
        options = CheckOptions(sidebars=Path("sidebars.yaml"))
        assert_frozen_attributes(options, site=Path("other.yaml"), cross_sidebar=CrossSidebarPolicy.WARN)


class TestExportOptions:
    """Tests for ExportOptions configuration."""

    def test_defaults(self) -> None:
        """Verify JSON on stdout is the default."""
        options = ExportOptions(sidebars=Path("sidebars.yaml"))
        assert options.fmt == "json"
        assert options.output is None

    def test_is_frozen(self) -> None:
        """Verify options are immutable."""
        assert_frozen_attribute(ExportOptions(sidebars=Path("s.yaml")), "fmt", "yaml")
