"""CLI for the content specification identifier codec."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer

from .corpus import emphasis_table, high_school_domains, parsed_records, render_grade_table, target_counts, target_set_table
from .formatter import convert
from .grades import parse_grade
from .orchestrator import check_fixture
from .parser import parse
from .vocabulary import Dialect, Grade, Severity

logger = logging.getLogger(__name__)

app = typer.Typer(help="Content specification identifier codec CLI.")

_DIALECT_NAMES = ", ".join(d.value for d in Dialect if d is not Dialect.UNKNOWN)


@app.callback()
def _configure(
    log_level: str = typer.Option("WARNING", envvar="CONTENTSPEC_LOG_LEVEL", help="Logging level"),
) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        _echo_json(_envelope("Usage", f"unknown log level '{log_level}'"))
        raise typer.Exit(code=2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Show version output."""
    typer.echo("contentspec 0.1.0")


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True))


def _envelope(error: str, reason: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"error": error, "reason": reason, "details": details if details is not None else {}}


def _dialect(value: str) -> Dialect:
    try:
        dialect = Dialect(value.lower())
    except ValueError:
        dialect = Dialect.UNKNOWN
    if dialect is Dialect.UNKNOWN:
        _echo_json(_envelope("Usage", f"unknown dialect '{value}', expected one of: {_DIALECT_NAMES}"))
        raise typer.Exit(code=2)
    return dialect


def _grade(value: str | None) -> Grade:
    return parse_grade(value) if value else Grade.UNSPECIFIED


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        _echo_json(_envelope("Input", f"input-read-error: {exc}", {"path": str(path)}))
        raise typer.Exit(code=2) from exc


@app.command("parse")
def parse_command(
    identifier: str = typer.Argument(..., help="Identifier text in any dialect"),
    grade: str | None = typer.Option(None, "--grade", help="Default grade for identifiers that omit it"),
) -> None:
    """Parse one identifier and print the outcome as JSON."""
    outcome = parse(identifier, _grade(grade))
    _echo_json(outcome.to_dict())
    if outcome.severity is Severity.ERROR:
        raise typer.Exit(code=1)


@app.command("convert")
def convert_command(
    identifier: str = typer.Argument(..., help="Identifier text in any dialect"),
    to: str = typer.Option(..., "--to", help=f"Target dialect ({_DIALECT_NAMES})"),
    grade: str | None = typer.Option(None, "--grade", help="Default grade for identifiers that omit it"),
) -> None:
    """Convert one identifier to another dialect."""
    target = _dialect(to)
    outcome = parse(identifier, _grade(grade))
    if outcome.identifier is None:
        _echo_json(_envelope("Parse", outcome.description))
        raise typer.Exit(code=1)
    converted = convert(outcome.identifier, target, default_grade=_grade(grade))
    if converted.severity is not Severity.NO_ERROR:
        _echo_json(_envelope("Convert", converted.description, {"to": target.value}))
        raise typer.Exit(code=1)
    typer.echo(converted.text)


@app.command("check")
def check_command(
    fixture: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, help="Fixture file of '<grade> <id>' lines"),
    via: str | None = typer.Option(None, "--via", help="Also convert each identifier to this dialect and back"),
) -> None:
    """Round-trip every identifier in a fixture file and report problems."""
    via_dialect = _dialect(via) if via else None
    logger.debug("checking fixture %s", fixture)
    report = check_fixture(_read_lines(fixture), via=via_dialect)
    for result in report["results"]:
        typer.echo(f"{result['grade']} {result['id']}")
        if result["severity"] == Severity.NO_ERROR.label:
            continue
        color = typer.colors.GREEN if result["severity"] == Severity.CORRECTED.label else typer.colors.RED
        typer.secho(f"   {result['reason']}", fg=color)
    counts = report["counts"]
    typer.echo(
        f"{len(report['results'])} checked, {report['skipped']} skipped: "
        + ", ".join(f"{label}={counts[label]}" for label in sorted(counts))
    )
    if counts[Severity.ERROR.label]:
        raise typer.Exit(code=1)


@app.command("stats")
def stats_command(
    fixture: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, help="Fixture file of '<grade> <id>' lines"),
    table: str = typer.Option("target-sets", "--table", help="target-sets, targets, emphasis or domains"),
) -> None:
    """Print corpus statistics for a fixture file."""
    records = parsed_records(_read_lines(fixture))
    if table == "target-sets":
        result = target_set_table(records)
        for line in render_grade_table(result["table"], empty="0"):
            typer.echo(line)
        for conflict in result["conflicts"]:
            typer.secho(f"Target set mismatch: {conflict}", fg=typer.colors.RED)
    elif table == "targets":
        for name, counts in target_counts(records).items():
            typer.echo(f"{name}:")
            for key, count in counts.items():
                typer.echo(f"  {key}: {count}")
    elif table == "emphasis":
        for line in render_grade_table(emphasis_table(records)):
            typer.echo(line)
    elif table == "domains":
        result = high_school_domains(records)
        typer.echo(", ".join(f'"{letter}": "{domain}"' for letter, domain in result["domains"].items()))
        for conflict in result["conflicts"]:
            typer.secho(conflict, fg=typer.colors.RED)
    else:
        _echo_json(_envelope("Usage", f"unknown table '{table}'"))
        raise typer.Exit(code=2)


def main() -> None:
    """Entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
