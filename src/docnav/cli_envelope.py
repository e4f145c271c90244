"""Typed CLI envelope recording the outcome of one docnav command.

Envelopes are msgspec structs serialised with camelCase keys and validated
against ``schema/cli_envelope.json`` before they are returned.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

import msgspec
from msgspec import UNSET, Struct, UnsetType, structs

from docnav.schema import CLI_ENVELOPE_SCHEMA, get_validator

if TYPE_CHECKING:
    from docnav_common.problem_details import ProblemDetailsDict

__all__ = [
    "CLI_ENVELOPE_SCHEMA_ID",
    "CLI_ENVELOPE_SCHEMA_VERSION",
    "CliEnvelope",
    "CliEnvelopeBuilder",
    "CliErrorEntry",
    "CliErrorStatus",
    "CliFileResult",
    "CliFileStatus",
    "CliStatus",
    "render_cli_envelope",
    "validate_cli_envelope",
]

type CliStatus = Literal["success", "violation", "config", "error"]
type CliFileStatus = Literal["success", "skipped", "error", "violation"]
type CliErrorStatus = Literal["error", "violation", "config"]

CLI_ENVELOPE_SCHEMA_VERSION = "1.0.0"
CLI_ENVELOPE_SCHEMA_ID = "https://docnav.dev/schema/cli-envelope.json"


class CliFileResult(Struct, kw_only=True, omit_defaults=True):
    """Per-file result."""

    path: str
    status: CliFileStatus
    message: str | UnsetType = UNSET
    problem: dict[str, Any] | UnsetType = UNSET


class CliErrorEntry(Struct, kw_only=True, omit_defaults=True):
    """Error-level entry."""

    status: CliErrorStatus
    message: str
    file: str | UnsetType = UNSET
    problem: dict[str, Any] | UnsetType = UNSET


def _generated_at() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="seconds")


class CliEnvelope(Struct, kw_only=True, rename="camel"):
    """Envelope payload for one command run."""

    schema_version: str = CLI_ENVELOPE_SCHEMA_VERSION
    schema_id: str = CLI_ENVELOPE_SCHEMA_ID
    generated_at: str = msgspec.field(default_factory=_generated_at)
    status: CliStatus = "success"
    command: str = ""
    subcommand: str = ""
    correlation_id: str | UnsetType = UNSET
    duration_seconds: float = 0.0
    files: list[CliFileResult] = msgspec.field(default_factory=list)
    errors: list[CliErrorEntry] = msgspec.field(default_factory=list)
    problem: dict[str, Any] | UnsetType = UNSET


def validate_cli_envelope(envelope: CliEnvelope) -> None:
    """Validate ``envelope`` against the packaged CLI envelope schema.

    Raises
    ------
    ValueError
        If the envelope does not match the schema.
    """
    payload = msgspec.to_builtins(envelope)
    errors = [err.message for err in get_validator(CLI_ENVELOPE_SCHEMA).iter_errors(payload)]
    if errors:
        message = f"CLI envelope validation failed: {', '.join(errors)}"
        raise ValueError(message)


def render_cli_envelope(envelope: CliEnvelope, *, indent: int = 2) -> str:
    """Return ``envelope`` as pretty-printed JSON."""
    return json.dumps(msgspec.to_builtins(envelope), indent=indent, ensure_ascii=False)


@dataclass(slots=True)
class CliEnvelopeBuilder:
    """Fluent builder for assembling CLI envelopes.

    Examples
    --------
    >>> builder = CliEnvelopeBuilder.create(command="docnav", subcommand="check")
    >>> envelope = builder.add_file(path="sidebars.yaml", status="success").finish()
    >>> envelope.status
    'success'
    """

    envelope: CliEnvelope

    @classmethod
    def create(
        cls,
        *,
        command: str,
        subcommand: str = "",
        status: CliStatus = "success",
        correlation_id: str | None = None,
    ) -> CliEnvelopeBuilder:
        """Start an envelope for ``command``, optionally tagged with the run's correlation id."""
        return cls(
            CliEnvelope(
                command=command,
                subcommand=subcommand,
                status=status,
                correlation_id=correlation_id if correlation_id is not None else UNSET,
            )
        )

    def add_file(
        self,
        *,
        path: str,
        status: CliFileStatus,
        message: str | None = None,
        problem: ProblemDetailsDict | None = None,
    ) -> CliEnvelopeBuilder:
        """Append a file-level result."""
        entry = CliFileResult(
            path=path,
            status=status,
            message=message if message is not None else UNSET,
            problem=problem if problem is not None else UNSET,
        )
        self.envelope = structs.replace(self.envelope, files=[*self.envelope.files, entry])
        return self

    def add_error(
        self,
        *,
        status: CliErrorStatus,
        message: str,
        file: str | None = None,
        problem: ProblemDetailsDict | None = None,
    ) -> CliEnvelopeBuilder:
        """Append an error entry."""
        entry = CliErrorEntry(
            status=status,
            message=message,
            file=file if file is not None else UNSET,
            problem=problem if problem is not None else UNSET,
        )
        self.envelope = structs.replace(self.envelope, errors=[*self.envelope.errors, entry])
        return self

    def set_status(self, status: CliStatus) -> CliEnvelopeBuilder:
        """Set the overall run status."""
        self.envelope = structs.replace(self.envelope, status=status)
        return self

    def set_problem(self, problem: ProblemDetailsDict | None) -> CliEnvelopeBuilder:
        """Attach (or clear) the top-level Problem Details payload."""
        replacement: ProblemDetailsDict | UnsetType = problem if problem is not None else UNSET
        self.envelope = structs.replace(self.envelope, problem=replacement)
        return self

    def finish(self, *, duration_seconds: float | None = None) -> CliEnvelope:
        """Validate and return the envelope.

        Raises
        ------
        ValueError
            If the assembled envelope does not match the schema.
        """
        if duration_seconds is not None:
            self.envelope = structs.replace(self.envelope, duration_seconds=float(duration_seconds))
        validate_cli_envelope(self.envelope)
        return self.envelope
