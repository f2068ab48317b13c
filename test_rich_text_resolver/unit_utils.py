"""Utilities that ease unit-testing."""

from __future__ import annotations

import difflib
import itertools
from typing import Callable, List

from pytest import CaptureFixture, LogCaptureFixture, MonkeyPatch  # noqa: PT013

from rich_text_resolver.documents.blocks import BlockItem
from rich_text_resolver.staging.base import blocks_from_json, blocks_to_json

__all__ = (
    "CaptureFixture",
    "LogCaptureFixture",
    "MonkeyPatch",
    "assert_round_trips_through_JSON",
    "sequential_keys",
)


def assert_round_trips_through_JSON(blocks: List[BlockItem]) -> None:
    """Raises AssertionError if `blocks -> JSON -> List[BlockItem] -> JSON` are not equal."""
    original_json = blocks_to_json(blocks)
    assert original_json is not None

    round_tripped_blocks = blocks_from_json(text=original_json)

    round_tripped_json = blocks_to_json(round_tripped_blocks)
    assert round_tripped_json is not None

    assert round_tripped_json == original_json, _diff(
        "JSON differs:", round_tripped_json, original_json
    )


def sequential_keys(prefix: str = "k") -> Callable[[], str]:
    """Key factory producing "k1", "k2", ... in the order keys are requested."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def _diff(heading: str, actual: str, expected: str) -> str:
    """Unified diff of `actual` against `expected`, under `heading`."""
    lines = difflib.unified_diff(
        expected.splitlines(), actual.splitlines(), "expected", "actual", lineterm=""
    )
    return "\n".join([heading, *lines])
