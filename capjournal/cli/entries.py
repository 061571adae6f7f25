"""Entry commands for CapJournal CLI.

Handles recording, editing, deleting and listing daily entries.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from capjournal.cli.common import (
    empty_panel,
    error_panel,
    finite,
    get_journal,
    get_settings,
    money,
    parse_date,
    pct,
)
from capjournal.cli.main import console
from capjournal.exceptions import EntryNotFoundError
from capjournal.journal import AddOutcome, Journal, UpdateOutcome
from capjournal.models import TradeEntry


def resolve_entry(journal: Journal, target: str) -> TradeEntry:
    """Find an entry by id, id prefix or YYYY-MM-DD date.

    Raises:
        EntryNotFoundError: If nothing (or more than one entry) matches.
    """
    try:
        entry = journal.find_by_date(parse_date(target))
        if entry is not None:
            return entry
    except click.BadParameter:
        pass

    for entry in journal.entries:
        if entry.id == target:
            return entry

    matches = [e for e in journal.entries if e.id.startswith(target)]
    if len(matches) == 1:
        return matches[0]
    raise EntryNotFoundError(target)


@click.command()
@click.argument("entry_date", metavar="DATE")
@click.argument("final_capital", type=float, callback=finite)
@click.option("--deposit", type=click.FloatRange(min=0), default=0.0, callback=finite, help="Cash added today.")
@click.option("--withdrawal", type=click.FloatRange(min=0), default=0.0, callback=finite, help="Cash removed today.")
@click.option("--trades", "trade_count", type=click.IntRange(min=0), default=0, help="Trades executed.")
@click.option("--notes", default="", help="Journal notes for the day.")
@click.option("-y", "--yes", is_flag=True, default=False, help="Overwrite without asking.")
@click.pass_context
def add(
    ctx: click.Context,
    entry_date: str,
    final_capital: float,
    deposit: float,
    withdrawal: float,
    trade_count: int,
    notes: str,
    yes: bool,
) -> None:
    """Record the closing capital for a day.

    If the day already has an entry you are asked before it is
    overwritten. Days with a manual starting-capital adjustment are
    updated without asking.

    \b
    Examples:
      capjournal add 2024-01-02 10250
      capjournal add 2024-01-03 11300 --deposit 1000 --trades 4
      capjournal add 2024-01-04 11100 --notes "Chased the open"
    """
    day = parse_date(entry_date)
    journal = get_journal(ctx)

    outcome = journal.add_entry(day, final_capital, deposit, withdrawal, notes, trade_count)

    if outcome == AddOutcome.CONFLICT:
        if not yes and not click.confirm(
            f"An entry for {day} already exists. Overwrite it?", default=False
        ):
            journal.discard_pending()
            console.print("[yellow]Cancelled. The existing entry was kept.[/yellow]")
            return
        journal.confirm_overwrite()
        console.print(f"[green]✓[/green] Entry for {day} overwritten")
    elif outcome == AddOutcome.MERGED:
        console.print(f"[green]✓[/green] Entry for {day} merged with capital adjustment")
    else:
        console.print(f"[green]✓[/green] Entry for {day} recorded")


@click.command()
@click.argument("target")
@click.option("--date", "new_date", default=None, help="Move the entry to this date.")
@click.option("--capital", "new_capital", type=float, default=None, callback=finite, help="New closing capital.")
@click.option("--deposit", type=click.FloatRange(min=0), default=None, callback=finite, help="New deposit.")
@click.option("--withdrawal", type=click.FloatRange(min=0), default=None, callback=finite, help="New withdrawal.")
@click.option("--trades", "trade_count", type=click.IntRange(min=0), default=None, help="New trade count.")
@click.option("--notes", default=None, help="New notes.")
@click.option("-y", "--yes", is_flag=True, default=False, help="Replace a colliding entry without asking.")
@click.pass_context
def edit(
    ctx: click.Context,
    target: str,
    new_date: Optional[str],
    new_capital: Optional[float],
    deposit: Optional[float],
    withdrawal: Optional[float],
    trade_count: Optional[int],
    notes: Optional[str],
    yes: bool,
) -> None:
    """Edit an entry, identified by its date or id.

    Options that are not given keep their current value.

    \b
    Examples:
      capjournal edit 2024-01-03 --capital 11250
      capjournal edit 2024-01-03 --date 2024-01-04
    """
    journal = get_journal(ctx)
    try:
        entry = resolve_entry(journal, target)
    except EntryNotFoundError as e:
        error_panel(e.message)

    moved_to = parse_date(new_date) if new_date else entry.date
    outcome = journal.update_entry(
        entry.id,
        moved_to,
        new_capital if new_capital is not None else entry.final_capital,
        deposit if deposit is not None else entry.deposit,
        withdrawal if withdrawal is not None else entry.withdrawal,
        notes if notes is not None else entry.notes,
        trade_count if trade_count is not None else entry.trade_count,
    )

    if outcome == UpdateOutcome.COLLISION:
        if not yes and not click.confirm(
            f"Another entry already exists for {moved_to}. Replace it with this one?",
            default=False,
        ):
            journal.discard_pending()
            console.print("[yellow]Cancelled. Nothing was changed.[/yellow]")
            return
        journal.confirm_update()

    console.print(f"[green]✓[/green] Entry for {moved_to} updated")


@click.command()
@click.argument("target")
@click.option("-y", "--yes", is_flag=True, default=False, help="Delete without asking.")
@click.pass_context
def delete(ctx: click.Context, target: str, yes: bool) -> None:
    """Permanently delete an entry, identified by its date or id.

    \b
    Examples:
      capjournal delete 2024-01-03
    """
    journal = get_journal(ctx)
    try:
        entry = journal.request_delete(resolve_entry(journal, target).id)
    except EntryNotFoundError as e:
        error_panel(e.message)

    if not yes and not click.confirm(
        f"Delete the entry for {entry.date}? This cannot be undone.", default=False
    ):
        journal.discard_pending()
        console.print("[yellow]Cancelled.[/yellow]")
        return

    journal.confirm_delete()
    console.print(f"[green]✓[/green] Entry for {entry.date} deleted")


@click.command()
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show only the newest N days.")
@click.pass_context
def history(ctx: click.Context, limit: Optional[int]) -> None:
    """Display the calculated daily history, newest first.

    \b
    Examples:
      capjournal history
      capjournal history --limit 10
    """
    settings = get_settings(ctx)
    journal = get_journal(ctx)
    snapshot = journal.snapshot()

    if not snapshot.days:
        empty_panel("History")
        return

    cur = settings.currency
    table = Table(title="Daily History", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Start", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Flows", justify="right")
    table.add_column("P/L Day", justify="right")
    table.add_column("P/L Week", justify="right")
    table.add_column("P/L Month", justify="right")
    table.add_column("P/L Total", justify="right")
    table.add_column("Trades", justify="right")

    for day in snapshot.days[:limit]:
        flows = []
        if day.deposit:
            flows.append(f"[green]+{day.deposit:,.2f}[/green]")
        if day.withdrawal:
            flows.append(f"[red]-{day.withdrawal:,.2f}[/red]")
        table.add_row(
            day.id[:8],
            day.date.isoformat() + (" [yellow]*[/yellow]" if day.initial_capital is not None else ""),
            money(day.initial_capital_daily, cur),
            money(day.final_capital, cur),
            " ".join(flows) or "-",
            f"{money(day.pl_daily_dollar, cur, signed=True)} {pct(day.pl_daily_percent)}",
            pct(day.pl_week_to_date_percent),
            pct(day.pl_month_to_date_percent),
            f"{money(day.pl_total_to_date_dollar, cur, signed=True)} {pct(day.pl_total_to_date_percent)}",
            str(day.trade_count),
        )

    console.print(table)

    latest = snapshot.days[0]
    console.print(Panel(
        f"Current capital: [bold]{money(latest.final_capital, cur)}[/bold]   "
        f"Net invested: {money(latest.initial_capital_total, cur)}   "
        f"Total P/L: {money(latest.pl_total_to_date_dollar, cur, signed=True)} "
        f"({pct(latest.pl_total_to_date_percent)})",
        border_style="cyan",
    ))
