"""Helpers shared by the CapJournal CLI commands."""

import math
from datetime import date
from typing import Optional

import click
from rich.panel import Panel

from capjournal.cli.main import console
from capjournal.db.store import DataStore
from capjournal.journal import Journal
from capjournal.settings import Settings, load_settings


def get_settings(ctx: click.Context) -> Settings:
    """Load settings, applying the --db override."""
    settings = load_settings()
    db_path = (ctx.obj or {}).get("db_path")
    if db_path is not None:
        settings = settings.model_copy(update={"db_path": db_path})
    return settings


def get_journal(ctx: click.Context) -> Journal:
    """Open the journal for the current invocation."""
    settings = get_settings(ctx)
    return Journal(DataStore(settings.db_path))


def error_panel(message: str) -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def finite(ctx: click.Context, param: click.Parameter, value):
    """Reject NaN and infinite amounts in float options and arguments."""
    values = value if isinstance(value, tuple) else (value,)
    for v in values:
        if isinstance(v, float) and not math.isfinite(v):
            raise click.BadParameter(f"{v} is not a finite amount")
    return value


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date format: {value}. Use YYYY-MM-DD")


def money(value: float, currency: str = "$", signed: bool = False) -> str:
    """Format an amount, optionally colored by sign."""
    if not signed:
        return f"{currency}{value:,.2f}"
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else "-"
    return f"[{color}]{sign}{currency}{abs(value):,.2f}[/{color}]"


def pct(value: float, signed: bool = True) -> str:
    if not signed:
        return f"{value:.2f}%"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:+.2f}%[/{color}]"


def empty_panel(title: str, message: Optional[str] = None) -> None:
    console.print(Panel(
        f"[dim]{message or 'No journal entries found'}[/dim]",
        title=f"[bold]{title}[/bold]",
        border_style="dim",
    ))
