"""Tests for the CLI envelope structs and builder."""

from __future__ import annotations

import json
from datetime import datetime
from typing import cast

import msgspec
import pytest
from msgspec import structs

from docnav.cli_envelope import (
    CLI_ENVELOPE_SCHEMA_ID,
    CliEnvelope,
    CliEnvelopeBuilder,
    CliStatus,
    render_cli_envelope,
    validate_cli_envelope,
)
from docnav_common.errors import EmptyCategoryError


def _envelope(status: CliStatus) -> CliEnvelope:
    builder = CliEnvelopeBuilder.create(command="docnav", status=status, subcommand="check")
    return builder.finish(duration_seconds=0.0)


def test_builder_minimal() -> None:
    envelope = _envelope("success")

    assert envelope.schema_version == "1.0.0"
    assert envelope.schema_id == CLI_ENVELOPE_SCHEMA_ID
    assert envelope.status == "success"
    assert envelope.command == "docnav"
    assert envelope.subcommand == "check"
    assert envelope.duration_seconds == 0.0
    assert envelope.files == []
    assert envelope.errors == []


def test_builder_sets_timestamp() -> None:
    envelope = _envelope("success")
    datetime.fromisoformat(envelope.generated_at)


@pytest.mark.parametrize("status", ["success", "violation", "config", "error"])
def test_builder_supports_statuses(status: CliStatus) -> None:
    assert _envelope(status).status == status


def test_serialized_keys_are_camel_case() -> None:
    payload = msgspec.to_builtins(_envelope("success"))
    assert {"schemaVersion", "schemaId", "generatedAt", "durationSeconds"} <= set(payload)
    assert "problem" not in payload
    assert "correlationId" not in payload


def test_correlation_id_is_serialized_when_given() -> None:
    envelope = CliEnvelopeBuilder.create(command="docnav", subcommand="leaves", correlation_id="run-1").finish()
    validate_cli_envelope(envelope)
    assert json.loads(render_cli_envelope(envelope))["correlationId"] == "run-1"


def test_builder_records_files_errors_and_problem() -> None:
    error = EmptyCategoryError("sidebar 'main': category 'A' has no items", sidebar="main", index=0)
    problem = error.to_problem_details()
    envelope = (
        CliEnvelopeBuilder.create(command="docnav", subcommand="check")
        .add_file(path="sidebars.yaml", status="violation", message="1 violation(s)")
        .add_error(status="violation", message=error.message, file="sidebars.yaml", problem=problem)
        .set_status("violation")
        .set_problem(problem)
        .finish(duration_seconds=0.25)
    )

    rendered = json.loads(render_cli_envelope(envelope))
    assert rendered["status"] == "violation"
    assert rendered["durationSeconds"] == 0.25
    assert rendered["files"] == [{"path": "sidebars.yaml", "status": "violation", "message": "1 violation(s)"}]
    assert rendered["errors"][0]["problem"]["code"] == "empty-category"
    assert rendered["problem"]["type"] == "https://docnav.dev/problems/empty-category"


def test_set_problem_none_clears_it() -> None:
    builder = CliEnvelopeBuilder.create(command="docnav").set_problem({"type": "about:blank"})
    envelope = builder.set_problem(None).finish()
    assert "problem" not in msgspec.to_builtins(envelope)


def test_validate_rejects_invalid_status() -> None:
    envelope = structs.replace(_envelope("success"), status=cast("CliStatus", "invalid_status"))
    with pytest.raises(ValueError, match="CLI envelope validation failed"):
        validate_cli_envelope(envelope)


def test_validate_rejects_negative_duration() -> None:
    envelope = structs.replace(_envelope("success"), duration_seconds=-1.0)
    with pytest.raises(ValueError, match="CLI envelope validation failed"):
        validate_cli_envelope(envelope)
