"""CLI interface for lhr-model."""

import json
import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .codec import dumps, from_bytes, loads, to_bytes
from .compat import displayed_url, effective_form_factor, upgrade
from .config import (
    BINARY_SUFFIXES,
    DEFAULT_INDENT,
    DEFAULT_LOG_LEVEL,
    JSON_SUFFIXES,
    LOG_LEVEL_ENV,
)
from .errors import is_authoritative
from .exceptions import LhrError
from .fields import finite_or_none
from .findings import Severity, Validation
from .finalizer import finalize_result
from .models import Result
from .scoring import category_scores, score_rating
from .validation import validate_result

log = logging.getLogger(__name__)

console = Console()


def setup_logging(level: str) -> None:
    """Send library logs to stderr through rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[handler], force=True)


def severity_style(severity: Severity) -> str:
    """Get Rich style for severity level."""
    return {
        Severity.PASS: "green",
        Severity.INFO: "blue",
        Severity.WARNING: "yellow",
        Severity.ERROR: "red",
    }.get(severity, "white")


def severity_icon(severity: Severity) -> str:
    """Get icon for severity level."""
    return {
        Severity.PASS: "✓",
        Severity.INFO: "ℹ",
        Severity.WARNING: "⚠",
        Severity.ERROR: "✗",
    }.get(severity, "•")


def score_color(score) -> str:
    """Get color for a 0-1 score."""
    return {
        "pass": "green",
        "average": "yellow",
        "fail": "red",
    }.get(score_rating(score), "dim")


def print_score_bar(score, width: int = 20) -> Text:
    """Create a visual score bar for a 0-1 score, or a dash when unscored."""
    value = finite_or_none(score)
    bar = Text()
    if value is None:
        bar.append("░" * width, style="dim")
        bar.append("   –", style="dim")
        return bar
    value = min(1.0, max(0.0, value))
    filled = int(value * width)
    color = score_color(value)
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    bar.append(f" {round(value * 100):>3}", style=f"bold {color}")
    return bar


def is_binary_path(path: Path) -> bool:
    return path.suffix.lower() in BINARY_SUFFIXES


def read_result(path: Path, strict: bool = False, issues: list | None = None) -> Result:
    """Read a result file in either form.

    The suffix decides the form; files with an unknown suffix are read as JSON
    when they start with ``{`` and as binary otherwise.
    """
    data = path.read_bytes()
    suffix = path.suffix.lower()
    if suffix in BINARY_SUFFIXES:
        binary = True
    elif suffix in JSON_SUFFIXES:
        binary = False
    else:
        binary = not data.lstrip().startswith(b"{")
    log.debug("Reading %s as %s", path, "binary" if binary else "JSON")
    if binary:
        return from_bytes(data, strict=strict, issues=issues)
    return loads(data, strict=strict, issues=issues)


def write_result(result: Result, path: Path, binary: bool, indent: int | None = DEFAULT_INDENT) -> None:
    if binary:
        path.write_bytes(to_bytes(result))
    else:
        path.write_text(dumps(result, indent=indent) + "\n", encoding="utf-8")


def _load_or_exit(path: str, strict: bool = False, issues: list | None = None) -> Result:
    try:
        return read_result(Path(path), strict=strict, issues=issues)
    except LhrError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def print_result(result: Result, verbose: bool = False) -> None:
    """Print a result summary to console."""
    settings = result.config_settings
    form_factor = effective_form_factor(settings)
    subtitle = [f"Lighthouse {result.lighthouse_version}", result.fetch_time.isoformat()]
    if form_factor is not None:
        subtitle.append(form_factor.value)

    console.print()
    console.print(Panel(
        f"[bold]{displayed_url(result)}[/bold]\n"
        f"[dim]{' • '.join(subtitle)}[/dim]",
        title="Audit result",
        border_style="blue",
    ))

    if not is_authoritative(result):
        error = result.runtime_error
        console.print(f"\n[red]Runtime error {error.code.name}:[/red] {error.message or ''}")
        console.print("[dim]Audits and categories below are best-effort.[/dim]")

    if result.run_warnings:
        console.print("\n[bold]Run warnings:[/bold]")
        for warning in result.run_warnings:
            console.print(f"  [yellow]⚠[/yellow] {warning}")

    console.print()
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Score")
    table.add_column("Audits", justify="right")
    for category_id, category in result.categories.items():
        table.add_row(category.title or category_id, print_score_bar(category.score),
                      str(len(category.audit_refs)))
    console.print(table)

    if verbose:
        audits = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        audits.add_column("Audit", style="cyan")
        audits.add_column("Mode")
        audits.add_column("Score")
        audits.add_column("Value")
        for audit_id, audit in result.audits.items():
            audits.add_row(audit_id, audit.mode.value, print_score_bar(audit.score, width=10),
                           audit.display_value or "")
        console.print(audits)

    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]lhr-model v{__version__}[/dim]")
    console.print()


def print_validation(validation: Validation, issues: list, verbose: bool = False) -> None:
    """Print check results and decode issues to console."""
    console.print()
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    for check in validation.checks:
        errors = len(check.errors)
        warnings = len(check.warnings)
        status_parts = []
        if errors:
            status_parts.append(f"[red]{errors} error{'s' if errors > 1 else ''}[/red]")
        if warnings:
            status_parts.append(f"[yellow]{warnings} warning{'s' if warnings > 1 else ''}[/yellow]")
        if not errors and not warnings:
            status_parts.append("[green]OK[/green]")
        table.add_row(check.name, ", ".join(status_parts))
    if issues:
        table.add_row("Decoding", f"[yellow]{len(issues)} field{'s' if len(issues) > 1 else ''} dropped[/yellow]")
    console.print(table)

    for issue in issues:
        console.print(f"  [yellow]⚠[/] {issue.path}: {issue.message}")

    shown = (Severity.PASS, Severity.INFO, Severity.WARNING, Severity.ERROR) if verbose \
        else (Severity.WARNING, Severity.ERROR)
    for finding in validation.findings:
        if finding.severity not in shown:
            continue
        style = severity_style(finding.severity)
        console.print(f"  [{style}]{severity_icon(finding.severity)}[/] {finding.message}")
        if finding.path:
            console.print(f"    [dim]{finding.path}[/dim]")
        if finding.details:
            console.print(f"    [dim]{finding.details}[/dim]")
        if finding.fix_hint:
            console.print(f"    [cyan]→ {finding.fix_hint}[/cyan]")

    top = validation.top_problems
    if top and not verbose:
        console.print("\n[bold]Fix first:[/bold]\n")
        for i, finding in enumerate(top[:3], 1):
            console.print(f"  {i}. [bold]{finding.message}[/bold]")
            console.print(f"     [cyan]{finding.fix_hint}[/cyan]")
    console.print()


@click.group(invoke_without_command=True)
@click.option("--log-level", envvar=LOG_LEVEL_ENV, default=DEFAULT_LOG_LEVEL,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help=f"Log level (env: {LOG_LEVEL_ENV})")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, log_level: str):
    """lhr - inspect, check and convert audit run results.

    \b
    Commands:
        show      Summarize a result file
        validate  Check a result file for structural problems
        score     Recompute category scores
        convert   Convert between JSON and binary forms
    """
    setup_logging(log_level)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, help="List every audit")
def show(path: str, verbose: bool):
    """Summarize a result file.

    \b
    Examples:
        lhr show report.json
        lhr show report.lhrb --verbose
    """
    result = _load_or_exit(path)
    print_result(result, verbose=verbose)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Fail on any malformed field")
@click.option("-v", "--verbose", is_flag=True, help="Show all findings, not just problems")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def validate(path: str, strict: bool, verbose: bool, json_output: bool):
    """Check a result file for structural problems.

    Exits with status 1 when the file cannot be read or any check fails.
    """
    issues: list = []
    result = _load_or_exit(path, strict=strict, issues=issues)
    validation = validate_result(result)

    if json_output:
        output = {
            "ok": validation.ok,
            "decode_issues": [{"path": i.path, "message": i.message} for i in issues],
            "checks": [
                {
                    "name": c.name,
                    "passed": c.passed,
                    "findings": [
                        {
                            "check": f.check,
                            "message": f.message,
                            "severity": f.severity.value,
                            "path": f.path,
                            "details": f.details,
                            "fix_hint": f.fix_hint,
                            "impact": f.impact,
                        }
                        for f in c.findings
                    ],
                }
                for c in validation.checks
            ],
        }
        click.echo(json.dumps(output, indent=2))
    else:
        print_validation(validation, issues, verbose=verbose)

    if not validation.ok:
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-w", "--write", "output", type=click.Path(dir_okay=False),
              help="Write the rescored result to this file")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def score(path: str, output: str | None, json_output: bool):
    """Recompute category scores from the audits.

    Results carrying a runtime error are never rescored.
    """
    result = _load_or_exit(path)
    computed = category_scores(result)

    if json_output:
        click.echo(json.dumps({
            category_id: {
                "stored": finite_or_none(result.categories[category_id].score),
                "computed": value,
                "rating": score_rating(value),
            }
            for category_id, value in computed.items()
        }, indent=2))
    else:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Category", style="cyan")
        table.add_column("Stored")
        table.add_column("Computed")
        for category_id, value in computed.items():
            table.add_row(category_id, print_score_bar(result.categories[category_id].score),
                          print_score_bar(value))
        console.print(table)
        if not is_authoritative(result):
            console.print("[yellow]Run failed; stored scores are kept.[/yellow]")

    if output:
        out = Path(output)
        try:
            write_result(finalize_result(result), out, binary=is_binary_path(out))
        except LhrError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        if not json_output:
            console.print(f"[green]✓[/green] Wrote [cyan]{out}[/cyan]")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("dest", type=click.Path(dir_okay=False))
@click.option("--to", "target", type=click.Choice(["json", "binary"]),
              help="Output form (default: from DEST suffix)")
@click.option("--upgrade", "do_upgrade", is_flag=True,
              help="Fill replacement fields from deprecated ones")
@click.option("--indent", default=DEFAULT_INDENT, show_default=True, help="JSON indent")
def convert(source: str, dest: str, target: str | None, do_upgrade: bool, indent: int):
    """Convert a result between JSON and binary forms.

    \b
    Examples:
        lhr convert report.json report.lhrb
        lhr convert report.lhrb report.json --upgrade
    """
    result = _load_or_exit(source)
    if do_upgrade:
        result = upgrade(result)
    out = Path(dest)
    binary = target == "binary" if target else is_binary_path(out)
    try:
        write_result(result, out, binary=binary, indent=indent)
    except LhrError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] Wrote [cyan]{out}[/cyan] ({'binary' if binary else 'JSON'})")


def main():
    """Entry point for the ``lhr`` command."""
    cli()


if __name__ == "__main__":
    main()
