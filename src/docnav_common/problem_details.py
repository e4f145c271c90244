"""Problem Details helpers for RFC 9457 compliance.

Builders for the error payloads docnav attaches to exceptions and CLI
envelopes.

Examples
--------
>>> from docnav_common.problem_details import (
...     ProblemDetailsParams,
...     build_problem_details,
...     render_problem,
... )
>>> problem = build_problem_details(
...     ProblemDetailsParams(
...         type="https://docnav.dev/problems/empty-category",
...         title="Empty category",
...         status=422,
...         detail="sidebar 'main' > A: category has no items",
...         instance="urn:docnav:sidebar:main",
...         extensions={"sidebar": "main", "path": ["A"]},
...     )
... )
>>> assert "empty-category" in render_problem(problem)
"""

# pylint: disable=redefined-builtin

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

__all__ = [
    "PROBLEM_BASE_URI",
    "ExceptionProblemDetailsParams",
    "JsonPrimitive",
    "JsonValue",
    "ProblemDetailsDict",
    "ProblemDetailsParams",
    "SchemaProblemDetailsParams",
    "build_problem_details",
    "build_schema_problem_details",
    "coerce_optional_dict",
    "problem_from_exception",
    "render_problem",
    "to_jsonable",
    "validation_error_dicts",
]
__all__.sort()

PROBLEM_BASE_URI: Final[str] = "https://docnav.dev/problems"

JsonPrimitive = str | int | float | bool | None
JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]

ProblemDetailsDict = dict[str, JsonValue]


def coerce_optional_dict(
    mapping: Mapping[str, JsonValue] | None,
) -> dict[str, JsonValue] | None:
    """Return ``mapping`` as a ``dict`` when non-empty, otherwise ``None``.

    Parameters
    ----------
    mapping : Mapping[str, JsonValue] | None
        Mapping of extension values.

    Returns
    -------
    dict[str, JsonValue] | None
        Materialised dictionary or ``None`` when ``mapping`` is empty/``None``.
    """
    if mapping is None:
        return None
    materialised = {str(key): value for key, value in mapping.items()}
    if not materialised:
        return None
    return materialised


@dataclass(frozen=True, slots=True)
class ProblemDetailsParams:
    """Core fields required to build a Problem Details payload."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    extensions: Mapping[str, JsonValue] | None = None


def build_problem_details(params: ProblemDetailsParams) -> ProblemDetailsDict:
    """Build an RFC 9457 Problem Details payload.

    Extension members are merged at the top level of the payload.

    Parameters
    ----------
    params : ProblemDetailsParams
        Structured fields describing the Problem Details payload.

    Returns
    -------
    ProblemDetailsDict
        Problem Details payload conforming to RFC 9457.
    """
    payload: ProblemDetailsDict = {
        "type": params.type,
        "title": params.title,
        "status": params.status,
        "detail": params.detail,
        "instance": params.instance,
    }
    extensions = coerce_optional_dict(params.extensions)
    if extensions:
        for key, value in extensions.items():
            payload[key] = value
    return payload


def _json_pointer_from(error: object) -> str | None:
    raw_path = getattr(error, "absolute_path", None)
    if isinstance(raw_path, Sequence):
        tokens = [str(part) for part in raw_path]
        if tokens:
            return "/" + "/".join(tokens)
    return None


@dataclass(frozen=True, slots=True)
class SchemaProblemDetailsParams:
    """Inputs required to construct schema validation problem details."""

    base: ProblemDetailsParams
    error: Exception
    extensions: Mapping[str, JsonValue] | None = None


def build_schema_problem_details(params: SchemaProblemDetailsParams) -> ProblemDetailsDict:
    """Return Problem Details describing a JSON Schema validation failure.

    The schema error message becomes the ``detail``; its location is exposed
    as a ``jsonPointer`` extension together with the failing ``validator``
    keyword.

    Parameters
    ----------
    params : SchemaProblemDetailsParams
        Schema validation error context.

    Returns
    -------
    ProblemDetailsDict
        Problem Details payload.
    """
    detail_attr = getattr(params.error, "message", None)
    detail = str(detail_attr) if detail_attr is not None else str(params.error)
    merged: dict[str, JsonValue] = {}
    pointer = _json_pointer_from(params.error)
    if pointer:
        merged["jsonPointer"] = pointer
    validator_raw = getattr(params.error, "validator", None)
    if validator_raw is not None:
        merged["validator"] = str(validator_raw)
    additional = coerce_optional_dict(params.extensions)
    if additional:
        merged.update(additional)
    base = replace(params.base, detail=detail, extensions=merged or None)
    return build_problem_details(base)


@dataclass(frozen=True, slots=True)
class ExceptionProblemDetailsParams:
    """Inputs describing an exception-derived Problem Details payload."""

    base: ProblemDetailsParams
    exception: Exception
    extensions: Mapping[str, JsonValue] | None = None


def problem_from_exception(params: ExceptionProblemDetailsParams) -> ProblemDetailsDict:
    """Build Problem Details from an exception.

    Parameters
    ----------
    params : ExceptionProblemDetailsParams
        Structured context describing the exception and base problem fields.

    Returns
    -------
    ProblemDetailsDict
        Problem Details payload whose ``detail`` is the exception text.
    """
    merged: dict[str, JsonValue] = {"exception_type": params.exception.__class__.__name__}
    if params.extensions:
        merged.update(params.extensions)
    base = replace(params.base, detail=str(params.exception), extensions=merged)
    return build_problem_details(base)


def render_problem(problem: ProblemDetailsDict) -> str:
    """Render Problem Details as a JSON string.

    Parameters
    ----------
    problem : ProblemDetailsDict
        Problem Details payload.

    Returns
    -------
    str
        JSON-encoded Problem Details (pretty-printed, non-ASCII preserved).
    """
    return json.dumps(problem, indent=2, ensure_ascii=False)


def to_jsonable(value: object) -> JsonValue:
    """Coerce ``value`` into a JSON-compatible Problem Details value.

    Unknown objects fall back to their ``repr``.
    """
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, Path):
        return value.as_posix()
    return repr(value)


def validation_error_dicts(error: object) -> Iterator[dict[str, JsonValue]]:
    """Yield JSON-compatible dictionaries for each error of a pydantic ``ValidationError``.

    Parameters
    ----------
    error : object
        Exception exposing an ``errors()`` method returning error mappings.

    Yields
    ------
    dict[str, JsonValue]
        One dictionary per validation error, without the documentation ``url``.
    """
    raw_errors = getattr(error, "errors", None)
    if not callable(raw_errors):
        yield {"detail": to_jsonable(str(error))}
        return
    for raw in raw_errors():
        if isinstance(raw, Mapping):
            yield {str(key): to_jsonable(val) for key, val in raw.items() if key != "url"}
        else:
            yield {"detail": to_jsonable(raw)}
