"""Removal of ignored paths from actual and expected response trees."""

from __future__ import annotations

import copy
from collections.abc import MutableMapping, MutableSequence
from typing import Any

from contract_flow_tester.failures import MalformedDocumentError

IGNORE_SENTINEL = "@Ignore@"
MAX_SCRUB_DEPTH = 64


def scrub_ignored_fields(
    actual: Any,
    expected: Any,
    *,
    sentinel: str = IGNORE_SENTINEL,
    max_depth: int = MAX_SCRUB_DEPTH,
) -> tuple[Any, Any]:
    """Return deep copies of both trees with sentinel-marked paths removed.

    Only paths present in `expected` are visited. A sentinel value removes the key
    from both copies whatever the actual value is. Keys that exist only in
    `actual` are kept so the following equality check fails on them.

    Raises:
      MalformedDocumentError: If `expected` nests deeper than `max_depth`.
    """
    scrubbed_actual = copy.deepcopy(actual)
    scrubbed_expected = copy.deepcopy(expected)
    _scrub_node(scrubbed_actual, scrubbed_expected, sentinel, max_depth, depth=0)
    return scrubbed_actual, scrubbed_expected


def _scrub_node(actual: Any, expected: Any, sentinel: str, max_depth: int, *, depth: int) -> None:
    if depth > max_depth:
        raise MalformedDocumentError(
            f"Expected response nests deeper than {max_depth} levels."
        )
    if isinstance(expected, MutableMapping):
        _scrub_mapping(actual, expected, sentinel, max_depth, depth=depth)
    elif isinstance(expected, MutableSequence):
        _scrub_sequence(actual, expected, sentinel, max_depth, depth=depth)


def _scrub_mapping(
    actual: Any,
    expected: MutableMapping[str, Any],
    sentinel: str,
    max_depth: int,
    *,
    depth: int,
) -> None:
    actual_mapping = actual if isinstance(actual, MutableMapping) else None
    for key in list(expected):
        value = expected[key]
        if _is_sentinel(value, sentinel):
            del expected[key]
            if actual_mapping is not None:
                actual_mapping.pop(key, None)
            continue
        if actual_mapping is not None and key in actual_mapping:
            _descend(actual_mapping[key], value, sentinel, max_depth, depth=depth)


def _scrub_sequence(
    actual: Any,
    expected: MutableSequence[Any],
    sentinel: str,
    max_depth: int,
    *,
    depth: int,
) -> None:
    actual_items = actual if isinstance(actual, MutableSequence) else None
    # Walk from the end so deletions do not shift indices still to be visited.
    for index in range(len(expected) - 1, -1, -1):
        value = expected[index]
        has_actual = actual_items is not None and index < len(actual_items)
        if _is_sentinel(value, sentinel):
            # Past the end of actual the sentinel stays, keeping the length mismatch.
            if has_actual:
                del expected[index]
                del actual_items[index]  # type: ignore[index]
            continue
        if has_actual:
            _descend(actual_items[index], value, sentinel, max_depth, depth=depth)  # type: ignore[index]


def _descend(actual: Any, expected: Any, sentinel: str, max_depth: int, *, depth: int) -> None:
    same_family = (
        isinstance(expected, MutableMapping) and isinstance(actual, MutableMapping)
    ) or (isinstance(expected, MutableSequence) and isinstance(actual, MutableSequence))
    if same_family:
        _scrub_node(actual, expected, sentinel, max_depth, depth=depth + 1)


def _is_sentinel(value: Any, sentinel: str) -> bool:
    return isinstance(value, str) and value == sentinel
