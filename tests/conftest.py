"""Shared pytest fixtures for the docnav test-suite.

This module provides reusable fixtures for:
- Sample navigation trees and sidebars files on disk
- Settings isolation from the caller's ``DOCNAV_*`` environment
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, cast

import pytest
import yaml

from docnav.models import NavigationTree
from docnav_common.settings import reset_settings_cache

if TYPE_CHECKING:
    from collections.abc import Iterator

REPO_ROOT = Path(__file__).resolve().parents[1]
EXAMPLES_DIR = REPO_ROOT / "examples"

SAMPLE_SIDEBARS: dict[str, list[object]] = {
    "tccSidebar": [
        "intro",
        {
            "type": "category",
            "label": "Fundamentação Teórica",
            "items": [
                "fundamentacao/cybersecurity",
                "fundamentacao/vulnerability-management",
            ],
        },
    ],
    "sprintsSidebar": [
        {
            "type": "category",
            "label": "Sprint 1",
            "items": ["sprints/sprint-1/objetivos", "sprints/sprint-1/tarefas"],
        },
        {
            "type": "category",
            "label": "Sprint 2",
            "items": ["sprints/sprint-2/objetivos", "sprints/sprint-2/tarefas"],
        },
    ],
}


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Run every test with default settings, unaffected by the caller's environment."""
    for name in (
        "DOCNAV_CROSS_SIDEBAR_DUPLICATES",
        "DOCNAV_DOCS_ROUTE_BASE",
        "DOCNAV_LOG_LEVEL",
        "DOCNAV_ENVELOPE_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of the settings.
    monkeypatch.chdir(tmp_path)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def sample_payload() -> dict[str, list[object]]:
    """Return a fresh copy of the sample sidebars payload."""
    return cast("dict[str, list[object]]", json.loads(json.dumps(SAMPLE_SIDEBARS)))


@pytest.fixture
def sample_tree(sample_payload: dict[str, list[object]]) -> NavigationTree:
    """Return the sample payload as a typed tree."""
    return NavigationTree.from_dict(sample_payload)


@pytest.fixture
def sidebars_yaml(tmp_path: Path, sample_payload: dict[str, list[object]]) -> Path:
    """Write the sample payload as a YAML sidebars file."""
    path = tmp_path / "sidebars.yaml"
    path.write_text(yaml.safe_dump(sample_payload, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return path


@pytest.fixture
def sidebars_json(tmp_path: Path, sample_payload: dict[str, list[object]]) -> Path:
    """Write the sample payload as a JSON sidebars file."""
    path = tmp_path / "sidebars.json"
    path.write_text(json.dumps(sample_payload, ensure_ascii=False), encoding="utf-8")
    return path

