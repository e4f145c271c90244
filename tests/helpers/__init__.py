"""Shared test helpers for docnav.

Helpers defined here have no runtime side-effects and favour explicit, typed
APIs so that they compose cleanly with pytest fixtures.
"""

from __future__ import annotations

from tests.helpers.immutability import (
    assert_frozen_attribute,
    assert_frozen_attributes,
)
from tests.helpers.log_records import records_for, structured_field

__all__ = [
    "assert_frozen_attribute",
    "assert_frozen_attributes",
    "records_for",
    "structured_field",
]
