"""Response comparison entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from contract_flow_tester.failures import AssertionFailure


@dataclass(frozen=True)
class FieldMismatch:
    """First location where the actual tree differs from the expected tree."""

    path: str
    expected: str
    actual: str


@dataclass(frozen=True)
class ComparisonResult:
    """Scrubbed actual and expected trees plus the first mismatch, if any."""

    scrubbed_actual: Any
    scrubbed_expected: Any
    first_mismatch: FieldMismatch | None

    @property
    def is_equal(self) -> bool:
        """Return True when both scrubbed trees are equal."""
        return self.first_mismatch is None


class ResponseMismatchError(AssertionFailure):
    """Raised when the scrubbed reply differs from the expected response."""

    def __init__(self, comparison: ComparisonResult) -> None:
        self.comparison = comparison
        mismatch = comparison.first_mismatch
        detail = (
            f" at {mismatch.path}: expected {mismatch.expected}, actual {mismatch.actual}"
            if mismatch
            else ""
        )
        super().__init__(f"Reply does not match expected response{detail}")
