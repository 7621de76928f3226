"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from contract_flow_tester.case_scaffolding import write_case_scaffold
from contract_flow_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from contract_flow_tester.run_execution import CaseOutcome, CaseStatus, RunRequest
from contract_flow_tester.run_execution.suite_run_use_case import (
    RunExecutionError,
    execute_contract_suite_run,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_STATUS_LABELS = {
    CaseStatus.PASSED: "PASS",
    CaseStatus.FAILED: "FAIL",
    CaseStatus.SKIPPED: "SKIP",
}


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="contract-flow-tester")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for run diagnostics written to stderr",
)
def cli(log_level: str) -> None:
    """Contract tests for request/reply message flows."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML run configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML run configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="scaffold-case")
@click.option(
    "--name",
    "case_name",
    required=True,
    help="Human readable test case name",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    default=".",
    show_default=True,
    type=click.Path(path_type=str),
    help="Directory receiving the descriptor and template files",
)
def scaffold_case(case_name: str, output_dir: str) -> None:
    """Write a starter test-case descriptor with request and response templates."""
    try:
        written = write_case_scaffold(output_dir, case_name)
    except (FileExistsError, OSError, ValueError) as exc:
        raise CliError(str(exc)) from exc
    for path in written:
        click.echo(str(path))


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the YAML run configuration file",
)
@click.option(
    "--case",
    "case_paths",
    required=True,
    multiple=True,
    type=click.Path(path_type=str),
    help="Test-case descriptor file or directory of *.case.json files (repeatable)",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for storing result workbooks",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Render every test case without touching the channel or stores.",
)
def run_cases(
    config_path: str, case_paths: tuple[str, ...], output_dir: str | None, dry_run: bool
) -> None:
    """Execute the given test cases and write a results workbook."""
    try:
        outcome = execute_contract_suite_run(
            RunRequest(
                config_path=config_path,
                case_paths=tuple(case_paths),
                output_dir=output_dir,
                dry_run=dry_run,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    for case_outcome in outcome.outcomes:
        click.echo(_format_outcome(case_outcome))
    click.echo(str(outcome.output_path))
    if outcome.failed:
        raise CliError(f"{outcome.failed} of {len(outcome.outcomes)} test case(s) failed.")


def _format_outcome(outcome: CaseOutcome) -> str:
    line = f"{_STATUS_LABELS[outcome.status]} {outcome.name}"
    if outcome.phase is not None:
        line += f" [{outcome.phase.value}]"
    if outcome.reason:
        line += f": {outcome.reason}"
    return line


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
