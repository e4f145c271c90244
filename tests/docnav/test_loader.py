"""Tests for loading and serializing navigation trees."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import yaml

from docnav.loader import dump_tree, format_for_path, load_tree, parse_tree, read_document, write_tree
from docnav.models import Category, NavigationTree
from docnav_common.errors import ErrorCode, NavigationLoadError
from tests.conftest import EXAMPLES_DIR

if TYPE_CHECKING:
    from pathlib import Path


class TestParseTree:
    """Tests for schema-checked parsing of decoded documents."""

    def test_accepts_valid_payload(self, sample_payload: dict[str, list[object]]) -> None:
        """Verify a valid payload converts to the equivalent tree."""
        tree = parse_tree(sample_payload)
        assert tree.to_dict() == sample_payload

    @pytest.mark.parametrize(
        ("payload", "pointer"),
        [
            (["intro"], "/"),
            ({"main": "intro"}, "/main"),
            ({"main": [""]}, "/main/0"),
            ({"main": ["ok", "   "]}, "/main/1"),
            ({"main": [{"label": "A"}]}, "/main/0"),
            ({"main": [{"label": "A", "items": [], "collapsed": True}]}, "/main/0"),
            ({"main": [{"type": "link", "label": "A", "items": []}]}, "/main/0"),
            ({"": ["intro"]}, "/"),
            ({2024: ["intro"]}, "/"),
        ],
    )
    def test_rejects_malformed_payload(self, payload: object, pointer: str) -> None:
        """Verify shape errors raise NavigationLoadError naming the location."""
        with pytest.raises(NavigationLoadError) as excinfo:
            parse_tree(payload, source="sidebars.yaml")
        error = excinfo.value
        assert error.code is ErrorCode.NAVIGATION_LOAD_ERROR
        assert error.message.startswith(f"sidebars.yaml: invalid sidebars document at {pointer}")

    def test_schema_problem_is_attached(self) -> None:
        """Verify the Problem Details payload carries the JSON pointer."""
        with pytest.raises(NavigationLoadError) as excinfo:
            parse_tree({"main": [42]}, source="sidebars.json")
        problem = excinfo.value.to_problem_details()
        assert problem["type"] == "https://docnav.dev/problems/navigation-load-error"
        assert problem["status"] == 400
        assert str(problem["jsonPointer"]).startswith("/main/0")
        assert problem["source"] == "sidebars.json"

    def test_structural_rules_are_not_checked(self) -> None:
        """Verify empty categories load; rejecting them is the validator's job."""
        tree = parse_tree({"main": [{"label": "A", "items": []}]})
        assert tree.sidebars["main"] == (Category("A", ()),)


class TestFiles:
    """Tests for reading and writing sidebars files."""

    def test_load_yaml(self, sidebars_yaml: Path, sample_tree: NavigationTree) -> None:
        """Verify YAML files load in author order."""
        assert load_tree(sidebars_yaml) == sample_tree

    def test_load_json(self, sidebars_json: Path, sample_tree: NavigationTree) -> None:
        """Verify JSON files load in author order."""
        assert load_tree(str(sidebars_json)) == sample_tree

    def test_missing_file(self, tmp_path: Path) -> None:
        """Verify an unreadable file raises NavigationLoadError with the cause chained."""
        with pytest.raises(NavigationLoadError) as excinfo:
            load_tree(tmp_path / "absent.yaml")
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Verify a YAML syntax error raises NavigationLoadError."""
        path = tmp_path / "broken.yml"
        path.write_text("main: [intro\n", encoding="utf-8")
        with pytest.raises(NavigationLoadError, match="malformed YAML"):
            load_tree(path)

    def test_non_string_sidebar_name(self, tmp_path: Path) -> None:
        """Verify YAML keys that do not decode to strings are rejected."""
        path = tmp_path / "sidebars.yaml"
        path.write_text("2024:\n  - intro\ntrue:\n  - other\n", encoding="utf-8")
        with pytest.raises(NavigationLoadError) as excinfo:
            load_tree(path)
        assert excinfo.value.to_problem_details()["validator"] == "type"

    def test_malformed_json(self, tmp_path: Path) -> None:
        """Verify a JSON syntax error raises NavigationLoadError."""
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(NavigationLoadError, match="malformed JSON"):
            read_document(path)

    @pytest.mark.parametrize(("name", "fmt"), [("a.json", "json"), ("a.YAML", "yaml"), ("a.yml", "yaml")])
    def test_format_for_path(self, tmp_path: Path, name: str, fmt: str) -> None:
        """Verify the format follows the suffix, case-insensitively."""
        assert format_for_path(tmp_path / name) == fmt

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        """Verify other suffixes are rejected."""
        with pytest.raises(NavigationLoadError, match="unsupported file type '.ts'"):
            format_for_path(tmp_path / "sidebars.ts")

    def test_bundled_example_loads(self) -> None:
        """Verify the example sidebars file is well formed."""
        tree = load_tree(EXAMPLES_DIR / "sidebars.yaml")
        assert tree.names() == ("tccSidebar", "sprintsSidebar")
        assert next(tree.leaves("tccSidebar")) == "intro"


class TestDump:
    """Tests for serialization."""

    def test_json_round_trip_keeps_order(self, sample_tree: NavigationTree) -> None:
        """Verify dump then parse gives an identical, identically ordered tree."""
        rendered = dump_tree(sample_tree, "json")
        assert rendered.endswith("\n")
        assert "Fundamentação" in rendered
        assert parse_tree(json.loads(rendered)) == sample_tree

    def test_yaml_round_trip_keeps_order(self, sample_tree: NavigationTree) -> None:
        """Verify YAML output is not key-sorted and parses back identically."""
        rendered = dump_tree(sample_tree, "yaml")
        assert rendered.index("tccSidebar") < rendered.index("sprintsSidebar")
        assert parse_tree(yaml.safe_load(rendered)) == sample_tree

    def test_write_tree_uses_suffix(self, tmp_path: Path, sample_tree: NavigationTree) -> None:
        """Verify write_tree picks the format from the target suffix."""
        target = write_tree(sample_tree, tmp_path / "out" / "sidebars.yml")
        assert target.is_file()
        assert yaml.safe_load(target.read_text(encoding="utf-8")) == sample_tree.to_dict()
        assert load_tree(target) == sample_tree
