"""docdoctor CLI - Main entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from docdoctor import __version__
from docdoctor.checkers.base import Checker
from docdoctor.checkers.registry import CheckerRegistry, create_default_registry
from docdoctor.cli_utils import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    checker_option,
    collect_documents,
    configure_logging,
    isolate_option,
    verbose_option,
    wire_config,
)
from docdoctor.config import DoctorConfig
from docdoctor.document import Document
from docdoctor.doctor import Doctor
from docdoctor.errors import (
    ActionPreconditionError,
    CheckerDetectionError,
    UnknownCheckerError,
)
from docdoctor.host import ConsoleHost

app = typer.Typer(
    name="docdoctor",
    help="docdoctor - Lint documents and repair them interactively.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {escape(message)}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def _output_warning(message: str, quiet: bool = False) -> None:
    """Print a warning message."""
    if not quiet:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> None:
    """Print error and exit."""
    _output_error(message)
    raise typer.Exit(code=exit_code)


def _load_document(path: Path) -> Document:
    """Read a document, exiting with a system error if it cannot be read."""
    try:
        return Document.from_path(path)
    except (OSError, UnicodeDecodeError) as e:
        _output_error(f"Cannot read {path}: {e}")
        raise typer.Exit(code=EXIT_SYSTEM_ERROR) from e


def _prepare(
    checker: list[str] | None,
    verbose: bool,
    fail_fast: bool | None = None,
    isolate: bool | None = None,
) -> tuple[DoctorConfig, CheckerRegistry, list[Checker]]:
    """Resolve configuration, set up logging and select checkers."""
    config = wire_config(
        checkers=checker,
        fail_fast=fail_fast,
        isolate_checker_errors=isolate,
        log_level="DEBUG" if verbose else None,
    )
    configure_logging(config.log_level, err_console)

    registry = create_default_registry()
    try:
        selected = list(registry.select(config.checkers))
    except UnknownCheckerError as e:
        _exit_error(str(e))
    return config, registry, selected


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docdoctor version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """docdoctor - Lint documents and repair them interactively."""
    pass


# -----------------------------------------------------------------------------
# Checks Command
# -----------------------------------------------------------------------------


@app.command("checks")
def list_checks(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """List the registered checkers and their actions."""
    registry = create_default_registry()

    if json_output:
        console.print_json(json.dumps([c.to_dict() for c in registry.list()]))
        return

    table = Table(title="Checkers")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Actions", style="dim")

    for checker in registry.list():
        actions = ", ".join(f"{key}: {a.label}" for key, a in checker.actions.items())
        table.add_row(checker.name, checker.description, escape(actions))

    console.print(table)


# -----------------------------------------------------------------------------
# Check Command
# -----------------------------------------------------------------------------


@app.command()
def check(
    paths: list[Path] = typer.Argument(..., help="Documents or directories to check."),
    checker: list[str] | None = checker_option(),
    isolate: bool | None = isolate_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
    verbose: bool = verbose_option(),
) -> None:
    """Report violations without changing anything.

    Exit codes:
      0 - No violations found
      1 - Violations found (or bad input)
      2 - A document could not be read or a checker failed
    """
    config, registry, selected = _prepare(checker, verbose, isolate=isolate)
    doctor = Doctor(
        registry,
        ConsoleHost(console),
        isolate_checker_errors=config.isolate_checker_errors,
    )

    result: dict[str, Any] = {"success": True, "total_violations": 0, "documents": []}

    for path in collect_documents(paths, config.extensions):
        document = _load_document(path)
        try:
            violations = doctor.check(document, selected)
        except CheckerDetectionError as e:
            _exit_error(f"{path}: {e}", EXIT_SYSTEM_ERROR)

        result["total_violations"] += len(violations)
        result["documents"].append({
            "path": str(path),
            "violations": [v.to_dict(document) for v in violations],
        })

    result["success"] = result["total_violations"] == 0

    if json_output:
        console.print_json(json.dumps(result))
    else:
        _check_print_results(result)

    if not result["success"]:
        raise typer.Exit(code=EXIT_USER_ERROR)


def _check_print_results(result: dict[str, Any]) -> None:
    """Print check command results to console."""
    for doc in result["documents"]:
        for v in doc["violations"]:
            console.print(
                f"{escape(doc['path'])}:{v['line']}:{v['column']}: "
                f"[dim]\\[{v['checker']}][/dim] {escape(v['message'])}"
            )

    total = result["total_violations"]
    checked = len(result["documents"])
    if total == 0:
        _output_success(f"No violations found in {checked} document(s)")
    else:
        _output_warning(
            f"Found {total} violation(s) in {checked} document(s). "
            "Run 'docdoctor fix' to repair them"
        )


# -----------------------------------------------------------------------------
# Fix Command
# -----------------------------------------------------------------------------


@app.command()
def fix(
    paths: list[Path] = typer.Argument(..., help="Documents or directories to repair."),
    checker: list[str] | None = checker_option(),
    fail_fast: bool | None = typer.Option(
        None,
        "--fail-fast/--no-fail-fast",
        help="Stop at the first action that cannot be applied.",
    ),
    isolate: bool | None = isolate_option(),
    no_save: bool = typer.Option(
        False,
        "--no-save",
        help="Do not write repaired documents back to disk.",
    ),
    verbose: bool = verbose_option(),
) -> None:
    """Walk through violations and repair them interactively.

    Each violation is shown with a menu of actions. Press the key of an
    action to apply it, or 'e' to edit the document yourself. A document
    is saved only if it was changed.

    Exit codes:
      0 - Every chosen action was applied
      1 - An action failed, or the run was interrupted
      2 - A document could not be read or a checker failed
    """
    config, registry, selected = _prepare(checker, verbose, fail_fast, isolate)
    doctor = Doctor(
        registry,
        ConsoleHost(console),
        fail_fast=config.fail_fast,
        isolate_checker_errors=config.isolate_checker_errors,
    )

    resolved = 0
    failed = 0

    for path in collect_documents(paths, config.extensions):
        document = _load_document(path)
        console.print(Rule(escape(str(path))))

        try:
            violations = doctor.run(document, selected)
        except ActionPreconditionError as e:
            _exit_error(f"{path}: {e} (document not saved)")
        except CheckerDetectionError as e:
            _exit_error(f"{path}: {e}", EXIT_SYSTEM_ERROR)
        except (KeyboardInterrupt, EOFError):
            console.print()
            _exit_error(f"Interrupted; {path} not saved")

        if not violations:
            console.print("[dim]No violations.[/dim]")
        resolved += sum(1 for v in violations if v.outcome == "resolved")
        failed += sum(1 for v in violations if v.outcome == "failed")

        if document.modified and not no_save:
            document.save()
            _output_success(f"Saved {path}")

    if failed:
        _exit_error(f"Resolved {resolved} violation(s), {failed} failed")
    _output_success(f"Resolved {resolved} violation(s)")
