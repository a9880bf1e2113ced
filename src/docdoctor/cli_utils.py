"""CLI utility functions for docdoctor.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Document collection: Expanding files and directories given on the command line
- Logging setup: Routing library log records to the rich stderr console
- Error formatting: Consistent user-friendly error messages with exit codes
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from docdoctor.config import DoctorConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad input, missing file, violations found)
EXIT_SYSTEM_ERROR = 2  # System error (permissions, I/O, etc.)


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


def configure_logging(level: str, console: Console) -> None:
    """Send docdoctor log records to ``console`` at ``level``.

    Replaces any handler installed by a previous call so repeated CLI
    invocations in one process do not duplicate output.
    """
    logger = logging.getLogger("docdoctor")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


# -----------------------------------------------------------------------------
# Document Collection
# -----------------------------------------------------------------------------


def collect_documents(paths: Iterable[Path], extensions: list[str]) -> list[Path]:
    """Expand command-line paths into the list of documents to process.

    Files are taken as given. Directories are searched recursively for
    files whose suffix is in ``extensions``. Duplicates are dropped while
    keeping the first occurrence.

    Raises:
        typer.Exit: If a path does not exist.
    """
    documents: list[Path] = []
    seen: set[Path] = set()

    for path in paths:
        if not path.exists():
            error(f"Path does not exist: {path}")

        if path.is_dir():
            found = sorted(
                p for p in path.rglob("*") if p.is_file() and p.suffix in extensions
            )
        else:
            found = [path]

        for document in found:
            key = document.resolve()
            if key not in seen:
                seen.add(key)
                documents.append(document)

    return documents


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    checkers: list[str] | None = None,
    fail_fast: bool | None = None,
    isolate_checker_errors: bool | None = None,
    log_level: str | None = None,
    start_dir: Path | None = None,
) -> DoctorConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Options left unset (None or empty) do not override other sources.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if checkers:
        cli_overrides["checkers"] = checkers
    if fail_fast is not None:
        cli_overrides["fail_fast"] = fail_fast
    if isolate_checker_errors is not None:
        cli_overrides["isolate_checker_errors"] = isolate_checker_errors
    if log_level is not None:
        cli_overrides["log_level"] = log_level

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs a fresh instance.


def checker_option() -> Any:
    """Create a Typer Option for --checker / -k (repeatable)."""
    return typer.Option(
        None,
        "--checker",
        "-k",
        help="Run only this checker (repeatable; default: all).",
    )


def verbose_option() -> Any:
    """Create a Typer Option for --verbose / -V."""
    return typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show debug logging.",
    )


def isolate_option() -> Any:
    """Create a Typer Option for --isolate-checker-errors."""
    return typer.Option(
        None,
        "--isolate-checker-errors/--no-isolate-checker-errors",
        help="Skip checkers that fail instead of aborting the document.",
    )
