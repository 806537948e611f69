"""Command-line interface for kerchief."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from kerchief.canvas_api import CanvasAPIError
from kerchief.identifiers import IdentifierError
from kerchief.logging_setup import setup_logging
from kerchief.staging import StagingError
from kerchief.workflow import (
    init_config,
    print_alternatives,
    run_assignments,
    run_check,
    run_status,
    run_submit,
)

# Errors that end a command with a message instead of a traceback. ValueError
# covers ConfigError and IdentifierError, OSError covers RootNotFoundError.
FATAL_ERRORS = (CanvasAPIError, StagingError, OSError, ValueError)


def _fail(error: Exception) -> NoReturn:
    print(f"Error: {error}")
    if isinstance(error, IdentifierError):
        print_alternatives(error)
    sys.exit(1)


@click.group()
@click.version_option(package_name="kerchief")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug).")
def main(verbose: int) -> None:
    """Upload assignments to Canvas."""
    setup_logging(verbose)


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing configuration.")
def init(force: bool) -> None:
    """Initialize a `kerchief.toml` configuration file in the current directory."""
    try:
        path = init_config(Path.cwd(), force=force)
    except FATAL_ERRORS as e:
        _fail(e)
    print(f"Successfully wrote a template configuration to `{path.name}`.")


@main.command()
@click.argument("key")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Save a submission report (.yaml, .yml or .csv).",
)
def submit(key: str, yes: bool, report_path: Path | None) -> None:
    """Submit the homework with the given KEY, as specified in `kerchief.toml`."""
    try:
        run_submit(key, confirm=lambda: yes or click.confirm("Proceed?"), report_path=report_path)
    except FATAL_ERRORS as e:
        _fail(e)


@main.command()
@click.argument("key", required=False)
def check(key: str | None) -> None:
    """Validate the configuration against Canvas without uploading anything."""
    try:
        ok = run_check(key)
    except FATAL_ERRORS as e:
        _fail(e)
    if not ok:
        sys.exit(1)


@main.command()
def assignments() -> None:
    """List the assignments of the configured course."""
    try:
        run_assignments()
    except FATAL_ERRORS as e:
        _fail(e)


@main.command()
@click.argument("key")
def status(key: str) -> None:
    """Show the latest submission to the assignment with the given KEY."""
    try:
        run_status(key)
    except FATAL_ERRORS as e:
        _fail(e)


if __name__ == "__main__":
    main()
