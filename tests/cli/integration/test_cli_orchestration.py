"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner
from contract_flow_tester.cli import cli, main


def _write_dry_run_suite(tmp_path: Path) -> tuple[Path, Path]:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("execution:\n  reply_timeout_ms: 1000\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["scaffold-case", "--name", "Order Accepted", "--output-dir", str(tmp_path / "cases")],
    )
    assert result.exit_code == 0
    return config_path, tmp_path / "cases"


def test_generate_config_command_writes_placeholder_file_with_default_name(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("config.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "kafka:" in content
        assert "relational_store:" in content
        assert "execution:" in content
        assert "<REQUIRED>" in content
        assert str(output_path) in result.output


def test_generate_config_command_fails_when_output_file_already_exists(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "config.yaml"
    output_path.write_text("already-there", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert "already exists" in str(result.exception).lower()
    assert output_path.read_text(encoding="utf-8") == "already-there"


def test_scaffold_case_command_prints_written_files(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["scaffold-case", "--name", "Payment Booked", "--output-dir", str(tmp_path)]
    )

    assert result.exit_code == 0
    assert "payment-booked.case.json" in result.output
    assert (tmp_path / "payment-booked.response.json").exists()


def test_run_command_dry_run_reports_skipped_cases(tmp_path: Path) -> None:
    config_path, cases_dir = _write_dry_run_suite(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "run",
            "--config",
            str(config_path),
            "--case",
            str(cases_dir),
            "--output-dir",
            str(tmp_path / "results"),
            "--dry-run",
        ],
    )

    assert result.exit_code == 0
    assert "SKIP Order Accepted" in result.output
    written = list((tmp_path / "results").glob("contract-results-*.xlsx"))
    assert len(written) == 1
    assert str(written[0]) in result.output


def test_run_command_returns_failure_exit_code_for_failed_cases(
    tmp_path: Path, capsys
) -> None:
    config_path, cases_dir = _write_dry_run_suite(tmp_path)
    request_path = cases_dir / "order-accepted.request.json"
    request_path.write_text('{"broken": ${txId}}', encoding="utf-8")
    descriptor_path = cases_dir / "order-accepted.case.json"
    descriptor = json.loads(descriptor_path.read_text(encoding="utf-8"))
    assert descriptor["templateData"]["templatePath"] == request_path.name

    exit_code = main(
        ["run", "--config", str(config_path), "--case", str(cases_dir), "--dry-run"]
    )
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "FAIL Order Accepted [malformed-document]" in captured.out
    assert "1 of 1 test case(s) failed." in captured.err
