"""JSON Schemas shipped with docnav and cached validators for them."""

from __future__ import annotations

import json
from functools import cache
from pathlib import Path
from typing import Final

from jsonschema import Draft202012Validator

__all__ = [
    "CLI_ENVELOPE_SCHEMA",
    "NAVIGATION_TREE_SCHEMA",
    "SCHEMA_ROOT",
    "get_schema_path",
    "get_validator",
]

SCHEMA_ROOT: Final[Path] = Path(__file__).resolve().parent
NAVIGATION_TREE_SCHEMA: Final[str] = "navigation_tree.json"
CLI_ENVELOPE_SCHEMA: Final[str] = "cli_envelope.json"


def get_schema_path(name: str) -> Path:
    """Return the absolute path of the packaged schema ``name``.

    Raises
    ------
    FileNotFoundError
        If no schema with that basename is packaged.
    """
    path = SCHEMA_ROOT / name
    if not path.is_file():
        message = f"Unknown schema: {name}"
        raise FileNotFoundError(message)
    return path


@cache
def get_validator(name: str) -> Draft202012Validator:
    """Load, check and cache a validator for the packaged schema ``name``."""
    with get_schema_path(name).open(encoding="utf-8") as handle:
        schema = json.load(handle)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)
