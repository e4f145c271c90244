"""Helpers for asserting on structured log records captured by ``caplog``."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    import logging

    from _pytest.logging import LogCaptureFixture

__all__ = ["records_for", "structured_field"]


def structured_field(record: logging.LogRecord, name: str) -> object:
    """Return the structured field ``name`` of ``record`` (``None`` when absent)."""
    record_dict = cast("dict[str, object]", record.__dict__)
    return record_dict.get(name)


def records_for(caplog: LogCaptureFixture, operation: str) -> list[logging.LogRecord]:
    """Return the captured records whose ``operation`` field equals ``operation``."""
    return [record for record in caplog.records if structured_field(record, "operation") == operation]
