"""Typed runtime settings for docnav.

The helpers wrap ``pydantic_settings.BaseSettings`` so configuration is read
from ``DOCNAV_*`` environment variables (or a ``.env`` file) and validated
once. Validation errors surface as :class:`SettingsError` carrying an RFC 9457
Problem Details payload so callers can fail fast with a structured report.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import StrEnum
from pathlib import Path
from typing import Final

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docnav_common.errors import ConfigurationError
from docnav_common.problem_details import (
    JsonValue,
    ProblemDetailsDict,
    ProblemDetailsParams,
    build_problem_details,
    validation_error_dicts,
)

__all__: Final[list[str]] = [
    "CrossSidebarPolicy",
    "DocnavSettings",
    "SettingsError",
    "get_settings",
    "load_settings",
    "reset_settings_cache",
]


class CrossSidebarPolicy(StrEnum):
    """How a document referenced by several sidebars is treated."""

    ALLOW = "allow"
    WARN = "warn"
    ERROR = "error"


class SettingsError(ConfigurationError):
    """Raised when docnav settings fail validation."""

    def __init__(
        self,
        message: str,
        *,
        problem: ProblemDetailsDict,
        errors: Sequence[dict[str, JsonValue]],
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause, context={"errors": list(errors)})
        self.problem = problem
        self.errors: tuple[dict[str, JsonValue], ...] = tuple(errors)


class DocnavSettings(BaseSettings):
    """Runtime configuration shared by the library and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DOCNAV_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    cross_sidebar_duplicates: CrossSidebarPolicy = Field(
        default=CrossSidebarPolicy.ALLOW,
        description="Treatment of a document referenced by more than one sidebar",
    )
    docs_route_base: str = Field(
        default="/docs/",
        description="Route prefix under which the site serves documents",
    )
    log_level: str = Field(default="INFO", description="Root log level used by the CLI")
    envelope_dir: Path | None = Field(
        default=None,
        description="Directory receiving CLI run envelopes; unset disables them",
    )

    @field_validator("docs_route_base", mode="before")
    @classmethod
    def _normalise_route_base(cls, value: object) -> str:
        if not isinstance(value, str):
            message = "docs_route_base must be a string"
            raise ValueError(message)
        stripped = value.strip().strip("/")
        return f"/{stripped}/" if stripped else "/"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        level = str(value).strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            message = f"unknown log level {value!r}"
            raise ValueError(message)
        return level


_SETTINGS_CACHE: dict[str, DocnavSettings] = {}


def load_settings[SettingsT: BaseSettings](
    settings_factory: Callable[[], SettingsT] | type[SettingsT],
) -> SettingsT:
    """Instantiate settings via ``settings_factory`` with structured error handling.

    Parameters
    ----------
    settings_factory : Callable[[], SettingsT] | type[SettingsT]
        Zero-argument callable returning a ``BaseSettings`` instance.

    Returns
    -------
    SettingsT
        Validated settings instance.

    Raises
    ------
    SettingsError
        Raised when validation fails; the pydantic errors are attached as
        Problem Details.
    """
    try:
        return settings_factory()
    except ValidationError as exc:
        attr_name: object = getattr(settings_factory, "__name__", None)
        settings_name = (
            attr_name if isinstance(attr_name, str) else settings_factory.__class__.__name__
        )
        error_dicts = tuple(validation_error_dicts(exc))
        problem = build_problem_details(
            ProblemDetailsParams(
                type="https://docnav.dev/problems/configuration-error",
                title="Invalid docnav settings",
                status=500,
                detail="Failed to load docnav configuration",
                instance=f"urn:docnav:settings:{settings_name}:invalid",
                extensions={"errors": list(error_dicts), "settings_class": settings_name},
            )
        )
        message = "Failed to load docnav settings"
        raise SettingsError(message, problem=problem, errors=error_dicts, cause=exc) from exc


def get_settings() -> DocnavSettings:
    """Return the cached settings singleton, loading it on first use."""
    cached = _SETTINGS_CACHE.get("default")
    if cached is None:
        cached = load_settings(DocnavSettings)
        _SETTINGS_CACHE["default"] = cached
    return cached


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    _SETTINGS_CACHE.clear()
