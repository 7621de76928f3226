"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

RESULTS_SHEET_NAME = "Results"
RUN_INFO_SHEET_NAME = "RunInfo"

RESULT_COLUMNS: tuple[str, ...] = (
    "Name",
    "Status",
    "Phase",
    "Group",
    "Reason",
    "Mismatch Path",
    "Expected",
    "Actual",
    "Transaction Id",
    "Duration (s)",
)


@dataclass(frozen=True)
class RunMetadata:
    """Metadata rendered into the RunInfo sheet."""

    run_start: datetime
    config_path: Path
    output_path: Path
    dry_run: bool
