"""Data management commands for CapJournal CLI.

Handles capital settings, CSV/JSON export, backup import and the
factory reset.
"""

from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from capjournal.cli.common import error_panel, finite, get_journal, get_settings, money
from capjournal.cli.main import console
from capjournal.exceptions import ValidationError
from capjournal.io.backup import export_backup, export_csv, parse_backup


def _validate_month(value: str) -> str:
    try:
        date.fromisoformat(f"{value}-01")
    except ValueError:
        raise click.BadParameter(f"Invalid month: {value}. Use YYYY-MM")
    return value


@click.command()
@click.option("--initial-capital", type=float, default=None, callback=finite, help="Capital before the first entry.")
@click.option(
    "--month-start",
    nargs=2,
    type=(str, float),
    callback=finite,
    default=None,
    help="Pin the start capital of a month: YYYY-MM AMOUNT.",
)
@click.option("--clear-month", default=None, help="Remove the pinned start capital of a month (YYYY-MM).")
@click.pass_context
def config(
    ctx: click.Context,
    initial_capital: Optional[float],
    month_start: Optional[tuple[str, float]],
    clear_month: Optional[str],
) -> None:
    """View or change the capital settings.

    Without options the current settings are shown.

    \b
    Examples:
      capjournal config
      capjournal config --initial-capital 5000
      capjournal config --month-start 2024-03 7200
      capjournal config --clear-month 2024-03
    """
    settings = get_settings(ctx)
    journal = get_journal(ctx)

    if initial_capital is not None:
        journal.set_initial_capital(initial_capital)
        console.print(f"[green]✓[/green] Initial capital set to {money(initial_capital, settings.currency)}")
    if month_start:
        month, capital = month_start
        journal.set_month_start_capital(_validate_month(month), capital)
        console.print(f"[green]✓[/green] {month} now starts at {money(capital, settings.currency)}")
    if clear_month:
        journal.clear_month_start_capital(_validate_month(clear_month))
        console.print(f"[green]✓[/green] {clear_month} start capital cleared")

    cfg = journal.config
    text = (
        f"Initial Capital:  [bold]{money(cfg.total_initial_capital, settings.currency)}[/bold]\n"
        f"Database:         [dim]{settings.db_path}[/dim]\n"
        f"Entries:          {len(journal.entries)}"
    )
    console.print(Panel(text, title="[bold cyan]Settings[/bold cyan]", border_style="cyan"))

    if cfg.monthly_start_capitals:
        table = Table(title="Pinned Month Start Capitals", show_header=True, header_style="bold cyan")
        table.add_column("Month", style="bold")
        table.add_column("Start Capital", justify="right")
        for month in sorted(cfg.monthly_start_capitals):
            table.add_row(month, money(cfg.monthly_start_capitals[month], settings.currency))
        console.print(table)


@click.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="json",
    show_default=True,
    help="csv: calculated history; json: full backup.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file. Defaults to a dated file in the current directory.",
)
@click.pass_context
def export(ctx: click.Context, fmt: str, output: Optional[Path]) -> None:
    """Export the journal.

    \b
    Examples:
      capjournal export                 # JSON backup
      capjournal export --format csv    # Spreadsheet of calculated days
    """
    journal = get_journal(ctx)
    today = date.today().isoformat()

    if fmt == "csv":
        content = export_csv(journal.snapshot().days)
        output = output or Path(f"capjournal_history_{today}.csv")
    else:
        content = export_backup(journal.entries, journal.config)
        output = output or Path(f"capjournal_backup_{today}.json")

    output.write_text(content, encoding="utf-8")
    console.print(f"[green]✓[/green] Exported {len(journal.entries)} entries to {output}")


@click.command(name="import")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-y", "--yes", is_flag=True, default=False, help="Replace the journal without asking.")
@click.pass_context
def import_cmd(ctx: click.Context, backup_file: Path, yes: bool) -> None:
    """Restore the journal from a JSON backup.

    The current entries and settings are replaced, not merged.

    \b
    Examples:
      capjournal import capjournal_backup_2024-06-30.json
    """
    journal = get_journal(ctx)

    try:
        entries, cfg = parse_backup(backup_file.read_bytes(), journal.config)
    except ValidationError as e:
        error_panel(e.message)

    if not yes and not click.confirm(
        f"Replace {len(journal.entries)} current entries with {len(entries)} from "
        f"{backup_file.name}?",
        default=False,
    ):
        console.print("[yellow]Cancelled. Nothing was imported.[/yellow]")
        return

    journal.import_data(entries, cfg)
    console.print(f"[green]✓[/green] Imported {len(entries)} entries")


@click.command()
@click.option("-y", "--yes", is_flag=True, default=False, help="Reset without asking.")
@click.pass_context
def reset(ctx: click.Context, yes: bool) -> None:
    """Delete every entry and restore the default settings."""
    journal = get_journal(ctx)

    if not yes:
        answer = click.prompt("Type DELETE to erase the whole journal", default="", show_default=False)
        if answer != "DELETE":
            console.print("[yellow]Cancelled.[/yellow]")
            return

    journal.reset()
    console.print("[green]✓[/green] Journal reset")
