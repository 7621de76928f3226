"""Results workbook writer service."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from contract_flow_tester.run_execution.run_contracts import CaseOutcome, CaseStatus
from contract_flow_tester.template_rendering import TRANSACTION_ID_KEY

from .report_models import RESULT_COLUMNS, RESULTS_SHEET_NAME, RUN_INFO_SHEET_NAME, RunMetadata

_STATUS_FILLS = {
    CaseStatus.PASSED: PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    CaseStatus.FAILED: PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"),
    CaseStatus.SKIPPED: PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
}


def write_results_workbook(
    output_path: Path | str,
    outcomes: Sequence[CaseOutcome],
    run_metadata: RunMetadata,
) -> Path:
    """Write one row per test case plus a RunInfo sheet and return the resolved path."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = RESULTS_SHEET_NAME

    _write_header(sheet)
    for row_index, outcome in enumerate(outcomes, start=2):
        _write_outcome_row(sheet, row_index, outcome)
    sheet.freeze_panes = "A2"

    _write_run_info_sheet(workbook, run_metadata, outcomes)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _write_header(sheet: Worksheet) -> None:
    for column_index, name in enumerate(RESULT_COLUMNS, start=1):
        cell = sheet.cell(row=1, column=column_index, value=name)
        cell.font = Font(bold=True)
        sheet.column_dimensions[get_column_letter(column_index)].width = max(
            12, min(len(name) + 6, 40)
        )


def _write_outcome_row(sheet: Worksheet, row_index: int, outcome: CaseOutcome) -> None:
    mismatch = outcome.mismatch
    values = (
        outcome.name,
        outcome.status.value,
        outcome.phase.value if outcome.phase else None,
        outcome.group_name,
        outcome.reason,
        mismatch.path if mismatch else None,
        mismatch.expected if mismatch else None,
        mismatch.actual if mismatch else None,
        outcome.payload.get(TRANSACTION_ID_KEY),
        round(outcome.duration_seconds, 3),
    )
    for column_index, value in enumerate(values, start=1):
        sheet.cell(row=row_index, column=column_index, value=value)
    sheet.cell(row=row_index, column=2).fill = _STATUS_FILLS[outcome.status]


def _write_run_info_sheet(
    workbook: Workbook, run_metadata: RunMetadata, outcomes: Sequence[CaseOutcome]
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    counts = {status: 0 for status in CaseStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1
    entries = [
        ("run_start", run_metadata.run_start.isoformat()),
        ("config_path", str(run_metadata.config_path)),
        ("output_path", str(run_metadata.output_path)),
        ("dry_run", run_metadata.dry_run),
        ("total", len(outcomes)),
        ("passed", counts[CaseStatus.PASSED]),
        ("failed", counts[CaseStatus.FAILED]),
        ("skipped", counts[CaseStatus.SKIPPED]),
    ]
    for row_index, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row_index, column=1, value=key)
        sheet.cell(row=row_index, column=2, value=value)
