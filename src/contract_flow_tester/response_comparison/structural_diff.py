"""Deep equality over JSON trees with first-mismatch reporting."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from .comparison_outcomes import ComparisonResult, FieldMismatch, ResponseMismatchError
from .ignore_scrubber import IGNORE_SENTINEL, scrub_ignored_fields

_MISSING = object()


def compare_responses(
    actual: Any, expected: Any, *, sentinel: str = IGNORE_SENTINEL
) -> ComparisonResult:
    """Scrub ignored fields from both trees and compare what remains."""
    scrubbed_actual, scrubbed_expected = scrub_ignored_fields(actual, expected, sentinel=sentinel)
    return ComparisonResult(
        scrubbed_actual=scrubbed_actual,
        scrubbed_expected=scrubbed_expected,
        first_mismatch=find_first_mismatch(scrubbed_actual, scrubbed_expected),
    )


def assert_responses_match(
    actual: Any, expected: Any, *, sentinel: str = IGNORE_SENTINEL
) -> ComparisonResult:
    """Compare both trees and raise ResponseMismatchError when they differ."""
    comparison = compare_responses(actual, expected, sentinel=sentinel)
    if not comparison.is_equal:
        raise ResponseMismatchError(comparison)
    return comparison


def find_first_mismatch(actual: Any, expected: Any, path: str = "$") -> FieldMismatch | None:
    """Return the first path where the trees differ, or None when they are equal."""
    if isinstance(expected, Mapping) and isinstance(actual, Mapping):
        return _first_mapping_mismatch(actual, expected, path)
    if _is_array(expected) and _is_array(actual):
        return _first_sequence_mismatch(actual, expected, path)
    if _scalars_equal(actual, expected):
        return None
    return _mismatch(path, expected, actual)


def _first_mapping_mismatch(
    actual: Mapping[str, Any], expected: Mapping[str, Any], path: str
) -> FieldMismatch | None:
    for key, expected_value in expected.items():
        child_path = f"{path}.{key}"
        if key not in actual:
            return _mismatch(child_path, expected_value, _MISSING)
        mismatch = find_first_mismatch(actual[key], expected_value, child_path)
        if mismatch:
            return mismatch
    for key, actual_value in actual.items():
        if key not in expected:
            return _mismatch(f"{path}.{key}", _MISSING, actual_value)
    return None


def _first_sequence_mismatch(
    actual: Sequence[Any], expected: Sequence[Any], path: str
) -> FieldMismatch | None:
    for index, expected_value in enumerate(expected):
        child_path = f"{path}[{index}]"
        if index >= len(actual):
            return _mismatch(child_path, expected_value, _MISSING)
        mismatch = find_first_mismatch(actual[index], expected_value, child_path)
        if mismatch:
            return mismatch
    if len(actual) > len(expected):
        index = len(expected)
        return _mismatch(f"{path}[{index}]", _MISSING, actual[index])
    return None


def _scalars_equal(actual: Any, expected: Any) -> bool:
    # JSON booleans and numbers are distinct even though Python treats True == 1.
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if isinstance(actual, Mapping) or isinstance(expected, Mapping):
        return False
    if _is_array(actual) or _is_array(expected):
        return False
    return bool(actual == expected)


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def _mismatch(path: str, expected: Any, actual: Any) -> FieldMismatch:
    return FieldMismatch(path=path, expected=_display(expected), actual=_display(actual))


def _display(value: Any) -> str:
    if value is _MISSING:
        return "<missing>"
    return json.dumps(
        value, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=str
    )
