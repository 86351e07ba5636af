"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from avro_bigtable_load_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from avro_bigtable_load_tester.load_testing import (
    LoadTestExecutionError,
    LoadTestRequest,
    execute_backlog_load_test,
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="avro-bigtable-load-tester")
def cli() -> None:
    """Avro to Bigtable import load tester."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML load test configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML load test configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML load test configuration file",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for storing the run report workbook",
)
@click.option(
    "--log-level",
    "log_level",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity",
)
def run_load_test(config_path: str, output_dir: str | None, log_level: str) -> None:
    """Run the Avro backlog import load test and release everything it provisioned."""
    logging.basicConfig(level=log_level.upper(), format=_LOG_FORMAT)
    try:
        outcome = execute_backlog_load_test(
            LoadTestRequest(config_path=config_path, output_dir=output_dir)
        )
    except LoadTestExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(f"job {outcome.job_id} finished; sampled {outcome.sampled_rows} row(s)")
    if not outcome.metrics_exported:
        click.echo("metrics were not exported", err=True)
    click.echo(str(outcome.report_path))


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
