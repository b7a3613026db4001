"""Console output for the ``specsync`` CLI.

Converted collections and ``inspect`` tables are the only things written to
stdout, so ``specsync sync ... -o - | jq`` always sees clean JSON. Status
lines, warnings, errors and log records go to stderr.

Rich styling is used when stdout is a terminal and colour is allowed
(``NO_COLOR`` unset, ``TERM`` not ``dumb``, no ``--no-color``); otherwise
everything is plain text.

:class:`OutputManager` is created by :func:`~specsync.app.main_callback` and
installed with :func:`set_output`; the module-level helpers (:func:`info`,
:func:`error`, ...) forward to whichever instance is installed.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

_LOGGER_NAME = "specsync"


class OutputFormat(str, Enum):
    """Supported output formats. ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug log records on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #

    def configure_logging(self, verbose: Optional[bool] = None) -> None:
        """Send ``specsync`` log records to stderr.

        WARNING and above by default, DEBUG when verbose. Calling it again
        replaces the previously installed handler.
        """
        if verbose is not None:
            self._verbose = verbose

        logger = logging.getLogger(_LOGGER_NAME)
        for handler in list(logger.handlers):
            if isinstance(handler, RichHandler):
                logger.removeHandler(handler)
        logger.addHandler(
            RichHandler(
                console=self._stderr,
                show_time=False,
                show_path=False,
                markup=False,
                rich_tracebacks=False,
            )
        )
        logger.setLevel(logging.DEBUG if self._verbose else logging.WARNING)

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, end="" if text.endswith("\n") else "\n", flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print *rows* to stdout: a Rich table, JSON records keyed by
        header, or tab-separated lines, depending on the active format."""
        if self._format == OutputFormat.JSON:
            payload = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(payload, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            self.print_data("\n".join("\t".join(line) for line in [headers, *rows]))
            return

        table = Table(*headers, title=title, header_style="bold cyan")
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Status line. Hidden by ``--quiet``."""
        self._emit(message, quietable=True)

    def success(self, message: str) -> None:
        """Completion line, green in Rich mode. Hidden by ``--quiet``."""
        self._emit(message, style="green", quietable=True)

    def warning(self, message: str) -> None:
        self._emit(message, label="Warning", style="yellow")

    def error(self, message: str) -> None:
        self._emit(message, label="Error", style="bold red")

    def _emit(
        self,
        message: str,
        label: Optional[str] = None,
        style: Optional[str] = None,
        quietable: bool = False,
    ) -> None:
        if quietable and self._quiet:
            return
        if self._no_color:
            sys.stderr.write(f"{label}: {message}\n" if label else f"{message}\n")
            sys.stderr.flush()
            return
        text = Text()
        if label:
            text.append(f"{label}: ", style=style)
            text.append(message)
        else:
            text.append(message, style=style)
        self._stderr.print(text)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager`."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global :class:`OutputManager` (used by the test suite)."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
