"""Run execution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from contract_flow_tester.configuration.runtime_settings import Configuration
from contract_flow_tester.response_comparison import FieldMismatch
from contract_flow_tester.testcase_ingestion.descriptor_models import TestCaseDescriptor


class CaseStatus(str, Enum):
    """Terminal status of one test case."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class FailurePhase(str, Enum):
    """Phase in which a test case failed."""

    EXCHANGE_TIMEOUT = "exchange-timeout"
    RESPONSE_MISMATCH = "response-mismatch"
    STORE_VERIFICATION_TIMEOUT = "store-verification-timeout"
    MALFORMED_DOCUMENT = "malformed-document"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class PreparedCase:
    """Payload and rendered documents for one test-case execution."""

    payload: Mapping[str, str]
    request_body: Any
    expected_response: Any


@dataclass(frozen=True)
class CaseOutcome:  # pylint: disable=too-many-instance-attributes
    """Result of executing one test case."""

    name: str
    status: CaseStatus
    duration_seconds: float
    payload: Mapping[str, str]
    phase: FailurePhase | None = None
    reason: str | None = None
    group_name: str | None = None
    mismatch: FieldMismatch | None = None

    @property
    def passed(self) -> bool:
        """Return True when the test case passed."""
        return self.status == CaseStatus.PASSED


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one suite run."""

    config_path: str
    case_paths: tuple[str, ...]
    output_dir: str | None
    dry_run: bool = False


@dataclass(frozen=True)
class RunArtifacts:
    """Loaded domain artifacts required during run execution."""

    configuration: Configuration
    descriptors: tuple[TestCaseDescriptor, ...]


@dataclass(frozen=True)
class SuiteOutcome:
    """Output contract for one completed suite run."""

    output_path: Path
    outcomes: tuple[CaseOutcome, ...]
    dry_run: bool

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == CaseStatus.FAILED)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == CaseStatus.PASSED)
