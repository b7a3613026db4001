"""Typer application and CLI entry point for specsync.

This module builds the root Typer application and registers the built-in
``sync`` and ``inspect`` commands.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~specsync.exceptions.SpecsyncError` exits with the error's own exit
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`specsync.config`: Settings resolution used by every command.
    :mod:`specsync.output`: Output and logging set up in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from specsync import __version__
from specsync.commands.inspect import inspect_command
from specsync.commands.sync import sync_command
from specsync.config import atomic_write, get_data_dir
from specsync.exceptions import SpecsyncError
from specsync.exit_codes import EXIT_GENERIC_FAILURE
from specsync.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="specsync",
    help="Import OpenAPI/Swagger documents as executable request collections.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("sync")(sync_command)
app.command("inspect")(inspect_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specsync {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~specsync.output.OutputManager` and routes
    ``specsync`` log records to stderr.
    """
    if json_output and plain_output:
        raise typer.BadParameter("--json and --plain cannot be combined")
    fmt = (
        OutputFormat.JSON if json_output
        else OutputFormat.PLAIN if plain_output
        else OutputFormat.AUTO
    )
    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    output.configure_logging()
    set_output(output)


def _setup_signal_handlers() -> None:
    """Exit with status 130 on Ctrl-C instead of printing a traceback."""

    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: Exception) -> Path:
    """Save the traceback of *exc* under ``<data dir>/logs`` and return the file."""
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    path = get_data_dir() / "logs" / f"crash-{stamp}.log"
    atomic_write(path, "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return path


def main() -> None:
    """Console-script entry point.

    A :class:`~specsync.exceptions.SpecsyncError` escaping a command exits
    with that error's code; anything else is saved to a crash log and exits
    with status 1.
    """
    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)
    except SpecsyncError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
