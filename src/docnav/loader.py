"""Load and serialize navigation trees.

Sidebars files are JSON or YAML documents mapping sidebar names to entry
lists, the shape the site generator reads. Raw payloads are checked against
``schema/navigation_tree.json`` before conversion so that shape problems are
reported with a JSON pointer; structural rules (empty categories, duplicates)
are left to :mod:`docnav.validator`.

Author order is kept everywhere: ``json`` and ``yaml.safe_load`` build
insertion-ordered dicts, and dumping never sorts keys.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Final, Literal

import yaml
from jsonschema.exceptions import best_match

from docnav.models import NavigationTree
from docnav.schema import NAVIGATION_TREE_SCHEMA, get_validator
from docnav_common.errors import NavigationLoadError
from docnav_common.logging import get_logger
from docnav_common.problem_details import (
    ProblemDetailsParams,
    SchemaProblemDetailsParams,
    build_schema_problem_details,
)

__all__ = [
    "SUPPORTED_SUFFIXES",
    "TreeFormat",
    "dump_tree",
    "format_for_path",
    "load_tree",
    "parse_tree",
    "read_document",
    "write_tree",
]

LOGGER = get_logger(__name__)

type TreeFormat = Literal["json", "yaml"]

SUPPORTED_SUFFIXES: Final[dict[str, TreeFormat]] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def format_for_path(path: Path) -> TreeFormat:
    """Return the serialization format implied by ``path``'s suffix.

    Raises
    ------
    NavigationLoadError
        If the suffix is not one of :data:`SUPPORTED_SUFFIXES`.
    """
    fmt = SUPPORTED_SUFFIXES.get(path.suffix.lower())
    if fmt is None:
        supported = ", ".join(sorted(SUPPORTED_SUFFIXES))
        message = f"{path}: unsupported file type {path.suffix!r} (expected one of {supported})"
        raise NavigationLoadError(message, source=str(path))
    return fmt


def read_document(path: Path) -> object:
    """Read a JSON or YAML document from ``path``.

    Parameters
    ----------
    path : Path
        File to read.

    Returns
    -------
    object
        Decoded document.

    Raises
    ------
    NavigationLoadError
        If the file cannot be read or decoded.
    """
    fmt = format_for_path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        message = f"{path}: cannot read file"
        raise NavigationLoadError(message, source=str(path), cause=exc) from exc
    try:
        if fmt == "json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        message = f"{path}: malformed {fmt.upper()} document"
        raise NavigationLoadError(message, source=str(path), cause=exc) from exc


def parse_tree(payload: object, *, source: str | None = None) -> NavigationTree:
    """Check ``payload`` against the navigation tree schema and convert it.

    Parameters
    ----------
    payload : object
        Decoded sidebars document.
    source : str | None, optional
        Where the payload came from, used in messages.

    Returns
    -------
    NavigationTree
        Typed tree in author order.

    Raises
    ------
    NavigationLoadError
        If the payload does not have the sidebars shape.

    Examples
    --------
    >>> tree = parse_tree({"main": ["intro", {"type": "category", "label": "A", "items": ["x"]}]})
    >>> tree.names()
    ('main',)
    """
    error = best_match(get_validator(NAVIGATION_TREE_SCHEMA).iter_errors(payload))
    if error is not None:
        origin = source or "<payload>"
        pointer = "/" + "/".join(str(part) for part in error.absolute_path)
        problem = build_schema_problem_details(
            SchemaProblemDetailsParams(
                base=ProblemDetailsParams(
                    type="https://docnav.dev/problems/navigation-load-error",
                    title="Sidebars document does not match the navigation tree schema",
                    status=400,
                    detail="",
                    instance=f"urn:docnav:load:{origin}",
                ),
                error=error,
                extensions={"source": origin},
            )
        )
        message = f"{origin}: invalid sidebars document at {pointer}: {error.message}"
        raise NavigationLoadError(message, source=source, problem=problem, cause=error)
    if not isinstance(payload, Mapping):
        message = f"{source or '<payload>'}: sidebars document must be a mapping"
        raise NavigationLoadError(message, source=source)
    return NavigationTree.from_dict(payload)


def load_tree(path: Path | str) -> NavigationTree:
    """Read and parse the sidebars file at ``path``.

    Raises
    ------
    NavigationLoadError
        If the file cannot be read, decoded, or does not match the schema.
    """
    target = Path(path)
    tree = parse_tree(read_document(target), source=str(target))
    LOGGER.info(
        "Loaded navigation tree",
        extra={"operation": "load", "source": str(target), "sidebars": list(tree.names())},
    )
    return tree


def dump_tree(tree: NavigationTree, fmt: TreeFormat = "json") -> str:
    """Serialize ``tree`` in author order.

    Parameters
    ----------
    tree : NavigationTree
        Tree to serialize.
    fmt : TreeFormat, optional
        ``"json"`` (default) or ``"yaml"``.

    Returns
    -------
    str
        Serialized document ending with a newline.
    """
    payload = tree.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_tree(tree: NavigationTree, path: Path | str) -> Path:
    """Write ``tree`` to ``path`` in the format implied by its suffix."""
    target = Path(path)
    fmt = format_for_path(target)
    rendered = dump_tree(tree, fmt)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(rendered, encoding="utf-8")
    LOGGER.info(
        "Wrote navigation tree",
        extra={"operation": "export", "target": str(target), "size_bytes": len(rendered.encode())},
    )
    return target
