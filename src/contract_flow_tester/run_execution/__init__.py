"""Run execution domain exports."""

from .case_driver import TestCaseDriver, prepare_case
from .run_contracts import (
    CaseOutcome,
    CaseStatus,
    FailurePhase,
    PreparedCase,
    RunArtifacts,
    RunRequest,
    SuiteOutcome,
)

__all__ = [
    "CaseOutcome",
    "CaseStatus",
    "FailurePhase",
    "PreparedCase",
    "RunArtifacts",
    "RunRequest",
    "SuiteOutcome",
    "TestCaseDriver",
    "prepare_case",
]
