"""Response comparison exports."""

from .comparison_outcomes import ComparisonResult, FieldMismatch, ResponseMismatchError
from .ignore_scrubber import IGNORE_SENTINEL, MAX_SCRUB_DEPTH, scrub_ignored_fields
from .structural_diff import assert_responses_match, compare_responses, find_first_mismatch

__all__ = [
    "IGNORE_SENTINEL",
    "MAX_SCRUB_DEPTH",
    "ComparisonResult",
    "FieldMismatch",
    "ResponseMismatchError",
    "assert_responses_match",
    "compare_responses",
    "find_first_mismatch",
    "scrub_ignored_fields",
]
