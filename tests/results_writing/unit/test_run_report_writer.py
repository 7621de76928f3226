"""Results workbook writer tests."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from contract_flow_tester.response_comparison import FieldMismatch
from contract_flow_tester.results_writing import (
    RESULT_COLUMNS,
    RESULTS_SHEET_NAME,
    RUN_INFO_SHEET_NAME,
    RunMetadata,
    write_results_workbook,
)
from contract_flow_tester.run_execution import CaseOutcome, CaseStatus, FailurePhase
from openpyxl import load_workbook


def _metadata(tmp_path: Path, *, dry_run: bool = False) -> RunMetadata:
    return RunMetadata(
        run_start=datetime(2024, 5, 1, 8, 30, tzinfo=UTC),
        config_path=tmp_path / "config.yaml",
        output_path=tmp_path / "results.xlsx",
        dry_run=dry_run,
    )


def _outcomes() -> tuple[CaseOutcome, ...]:
    return (
        CaseOutcome(
            name="booking passes",
            status=CaseStatus.PASSED,
            duration_seconds=1.23456,
            payload={"txId": "TX1"},
        ),
        CaseOutcome(
            name="reply differs",
            status=CaseStatus.FAILED,
            duration_seconds=0.5,
            payload={"txId": "TX2"},
            phase=FailurePhase.RESPONSE_MISMATCH,
            reason="Reply does not match expected response",
            mismatch=FieldMismatch(path="$.body.status", expected='"OK"', actual='"NO"'),
        ),
        CaseOutcome(
            name="row missing",
            status=CaseStatus.FAILED,
            duration_seconds=2.0,
            payload={"txId": "TX3"},
            phase=FailurePhase.STORE_VERIFICATION_TIMEOUT,
            reason="did not hold",
            group_name="booking-row",
        ),
    )


def test_writes_one_row_per_test_case(tmp_path: Path) -> None:
    written = write_results_workbook(tmp_path / "results.xlsx", _outcomes(), _metadata(tmp_path))

    assert written == (tmp_path / "results.xlsx").resolve()
    sheet = load_workbook(written)[RESULTS_SHEET_NAME]
    header = [cell.value for cell in sheet[1]]
    assert tuple(header) == RESULT_COLUMNS
    rows = [[cell.value for cell in row] for row in sheet.iter_rows(min_row=2)]
    assert rows[0] == ["booking passes", "PASSED", None, None, None, None, None, None, "TX1", 1.235]
    assert rows[1][:8] == [
        "reply differs",
        "FAILED",
        "response-mismatch",
        None,
        "Reply does not match expected response",
        "$.body.status",
        '"OK"',
        '"NO"',
    ]
    assert rows[2][2:4] == ["store-verification-timeout", "booking-row"]
    assert sheet.freeze_panes == "A2"


def test_run_info_sheet_summarizes_the_run(tmp_path: Path) -> None:
    written = write_results_workbook(tmp_path / "results.xlsx", _outcomes(), _metadata(tmp_path))

    sheet = load_workbook(written)[RUN_INFO_SHEET_NAME]
    info = {row[0].value: row[1].value for row in sheet.iter_rows()}
    assert info["run_start"] == "2024-05-01T08:30:00+00:00"
    assert info["dry_run"] is False
    assert info["total"] == 3
    assert info["passed"] == 1
    assert info["failed"] == 2
    assert info["skipped"] == 0


def test_creates_missing_output_directory(tmp_path: Path) -> None:
    output_path = tmp_path / "nested" / "dir" / "results.xlsx"

    written = write_results_workbook(output_path, (), _metadata(tmp_path, dry_run=True))

    assert written.exists()
    assert load_workbook(written)[RESULTS_SHEET_NAME].max_row == 1
