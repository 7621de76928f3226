"""CLI error-handling tests."""

from __future__ import annotations

from contract_flow_tester.cli import main


def test_missing_required_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["run", "--case", "cases"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Missing option" in captured.err
    assert "--config" in captured.err
    assert "Traceback" not in captured.err


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["run", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option" in captured.err
    assert "--bogus" in captured.err
    assert "Traceback" not in captured.err


def test_run_errors_are_reported_without_traceback(tmp_path, capsys) -> None:
    exit_code = main(
        ["run", "--config", str(tmp_path / "missing.yaml"), "--case", str(tmp_path)]
    )
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Configuration file not found" in captured.err
    assert "Traceback" not in captured.err
