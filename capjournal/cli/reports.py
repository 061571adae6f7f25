"""Report commands for CapJournal CLI.

Period summaries, global statistics, the calendar heatmap, the capital
curve, the notes wall and the cash-flow report.
"""

from datetime import date
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from capjournal.cli.common import (
    empty_panel,
    get_journal,
    get_settings,
    money,
    parse_date,
    pct,
)
from capjournal.cli.main import console
from capjournal.engine.views import (
    CURVE_VIEWS,
    calendar_month,
    capital_curve,
    cash_flow_report,
    filter_notes,
)

PERIOD_CHOICES = ["week", "month", "quarter", "year"]
WEEKDAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


@click.command()
@click.option(
    "--period",
    type=click.Choice(PERIOD_CHOICES),
    default="month",
    show_default=True,
    help="Period granularity.",
)
@click.pass_context
def summary(ctx: click.Context, period: str) -> None:
    """Display P&L summaries per week, month, quarter or year.

    \b
    Examples:
      capjournal summary
      capjournal summary --period week
    """
    cur = get_settings(ctx).currency
    snapshot = get_journal(ctx).snapshot()
    summaries = snapshot.summaries(period)

    if not summaries:
        empty_panel(f"{period.title()} Summary")
        return

    table = Table(title=f"{period.title()}ly Summary", show_header=True, header_style="bold cyan")
    table.add_column("Period", style="bold")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("P/L", justify="right")
    table.add_column("P/L %", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Days", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("Deposits", justify="right")
    table.add_column("Withdrawals", justify="right")

    for s in summaries:
        table.add_row(
            s.label,
            money(s.start_capital, cur),
            money(s.end_capital, cur),
            money(s.pl_dollar, cur, signed=True),
            pct(s.pl_percent),
            f"{s.win_rate:.1f}%",
            str(s.day_count),
            str(s.total_operations),
            money(s.total_deposits, cur) if s.total_deposits else "-",
            money(s.total_withdrawals, cur) if s.total_withdrawals else "-",
        )

    console.print(table)


@click.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Display portfolio statistics.

    Shows capital and ROI on net invested capital, cash flows, journal
    duration, streaks, win rate, trade volume and average/extreme
    daily, weekly and monthly results.
    """
    cur = get_settings(ctx).currency
    s = get_journal(ctx).snapshot().stats

    if s.start_date is None:
        empty_panel("Statistics")
        return

    capital_text = (
        f"Current Capital:  [bold]{money(s.current_capital, cur)}[/bold]\n"
        f"Net Invested:     {money(s.total_initial_capital, cur)}\n"
        f"Total P/L:        {money(s.total_pl_dollar, cur, signed=True)} ({pct(s.total_pl_percent)})\n"
        f"{'─' * 36}\n"
        f"Deposits:         [green]{money(s.total_deposits, cur)}[/green]\n"
        f"Withdrawals:      [red]{money(s.total_withdrawals, cur)}[/red]\n"
        f"Net Cash Flow:    {money(s.net_cash_flow, cur, signed=True)}"
    )
    console.print(Panel(capital_text, title="[bold cyan]Capital[/bold cyan]", border_style="cyan"))

    activity_text = (
        f"Since:            {s.start_date.isoformat()}\n"
        f"Duration:         {s.duration_weeks:.1f} weeks | {s.duration_months:.1f} months | "
        f"{s.duration_years:.2f} years\n"
        f"Days:             {s.winning_days}W / {s.losing_days}L (win rate {s.win_rate:.1f}%)\n"
        f"Best Streak:      {s.max_consecutive_wins} wins\n"
        f"Worst Streak:     {s.max_consecutive_losses} losses\n"
        f"{'─' * 36}\n"
        f"Total Trades:     {s.total_trades}\n"
        f"Avg Trades:       {s.avg_trades_per_day:.1f}/day | {s.avg_trades_per_week:.1f}/week | "
        f"{s.avg_trades_per_month:.1f}/month\n"
        f"Max Trades/Day:   {s.max_trades_per_day}"
    )
    console.print(Panel(activity_text, title="[bold cyan]Activity[/bold cyan]", border_style="cyan"))

    table = Table(title="Averages", show_header=True, header_style="bold cyan")
    table.add_column("Bucket", style="bold")
    table.add_column("Avg Win", justify="right")
    table.add_column("Avg Win %", justify="right")
    table.add_column("Avg Loss", justify="right")
    table.add_column("Avg Loss %", justify="right")

    for label, prefix in (("Daily", "daily"), ("Weekly", "weekly"), ("Monthly", "monthly")):
        table.add_row(
            label,
            money(getattr(s, f"avg_win_{prefix}_dollar"), cur, signed=True),
            pct(getattr(s, f"avg_win_{prefix}_percent")),
            money(getattr(s, f"avg_loss_{prefix}_dollar"), cur, signed=True),
            pct(getattr(s, f"avg_loss_{prefix}_percent")),
        )
    console.print(table)

    console.print(
        f"\n[bold]Best Day:[/bold] {money(s.max_win_daily_dollar, cur, signed=True)} "
        f"({pct(s.max_win_daily_percent)})   "
        f"[bold]Worst Day:[/bold] {money(s.max_loss_daily_dollar, cur, signed=True)} "
        f"({pct(s.max_loss_daily_percent)})"
    )
    console.print(
        f"[bold]Expectancy:[/bold] {money(s.avg_general_dollar, cur, signed=True)} "
        f"({pct(s.avg_general_percent)}) per day"
    )


def _parse_month(value: Optional[str]) -> tuple[int, int]:
    if value is None:
        today = date.today()
        return today.year, today.month
    try:
        year, month = (int(part) for part in value.split("-"))
        date(year, month, 1)
    except ValueError:
        raise click.BadParameter(f"Invalid month: {value}. Use YYYY-MM")
    return year, month


@click.command(name="calendar")
@click.option("--month", "month_value", default=None, help="Month to show (YYYY-MM). Defaults to today.")
@click.pass_context
def calendar_cmd(ctx: click.Context, month_value: Optional[str]) -> None:
    """Display a month as a P&L heatmap calendar.

    \b
    Examples:
      capjournal calendar
      capjournal calendar --month 2024-03
    """
    year, month = _parse_month(month_value)
    cur = get_settings(ctx).currency
    snapshot = get_journal(ctx).snapshot()
    weeks = calendar_month(snapshot.days, year, month)

    table = Table(
        title=f"{date(year, month, 1):%B %Y}",
        show_header=True,
        header_style="bold cyan",
        show_lines=True,
    )
    for name in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"):
        table.add_column(name, justify="center", min_width=8)

    styles = {"win": "green", "loss": "red", "flat": "white", "empty": "dim"}
    for week in weeks:
        row = []
        for cell in week:
            if cell is None:
                row.append("")
            elif cell.pl_dollar is None:
                row.append(f"[dim]{cell.day}[/dim]")
            else:
                style = styles[cell.outcome]
                row.append(f"{cell.day}\n[{style}]{cell.pl_dollar:+,.0f}[/{style}]")
        table.add_row(*row)

    console.print(table)

    month_id = f"{year:04d}-{month:02d}"
    month_summary = next((s for s in snapshot.monthly if s.period_id == month_id), None)
    if month_summary:
        console.print(
            f"[bold]Month P/L:[/bold] {money(month_summary.pl_dollar, cur, signed=True)} "
            f"({pct(month_summary.pl_percent)}) over {month_summary.day_count} days"
        )


@click.command()
@click.option(
    "--view",
    type=click.Choice(list(CURVE_VIEWS)),
    default="daily",
    show_default=True,
    help="Curve granularity.",
)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show only the last N points.")
@click.pass_context
def curve(ctx: click.Context, view: str, limit: Optional[int]) -> None:
    """Display the closing-capital curve.

    \b
    Examples:
      capjournal curve
      capjournal curve --view monthly
    """
    cur = get_settings(ctx).currency
    points = capital_curve(get_journal(ctx).snapshot().days, view)

    if not points:
        empty_panel("Capital Curve")
        return
    if limit:
        points = points[-limit:]

    peak = max(p.final_capital for p in points)
    bar_width = 30

    table = Table(title=f"Capital Curve ({view})", show_header=True, header_style="bold cyan")
    table.add_column("Period", style="bold")
    table.add_column("Capital", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Flows", justify="right")
    table.add_column("", no_wrap=True)

    for p in points:
        filled = int(p.final_capital / peak * bar_width) if peak > 0 else 0
        color = "green" if p.change_dollar >= 0 else "red"
        flows = p.deposits - p.withdrawals
        table.add_row(
            p.label,
            money(p.final_capital, cur),
            f"{money(p.change_dollar, cur, signed=True)} {pct(p.change_percent)}",
            money(flows, cur, signed=True) if flows else "-",
            f"[{color}]{'█' * max(filled, 0)}[/{color}]",
        )

    console.print(table)


@click.command()
@click.option("--search", default=None, help="Only notes containing this text.")
@click.option(
    "--outcome",
    type=click.Choice(["all", "winners", "losers"]),
    default="all",
    show_default=True,
    help="Filter by day result.",
)
@click.option("--weekday", type=click.Choice(WEEKDAYS), default=None, help="Only this day of the week.")
@click.option("--from", "from_date", default=None, help="Start date (YYYY-MM-DD).")
@click.option("--to", "to_date", default=None, help="End date (YYYY-MM-DD).")
@click.option("--oldest-first", is_flag=True, default=False, help="Show oldest notes first.")
@click.pass_context
def notes(
    ctx: click.Context,
    search: Optional[str],
    outcome: str,
    weekday: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
    oldest_first: bool,
) -> None:
    """Browse the journal notes.

    \b
    Examples:
      capjournal notes
      capjournal notes --outcome losers --weekday mon
      capjournal notes --search "revenge"
    """
    cur = get_settings(ctx).currency
    days = filter_notes(
        get_journal(ctx).snapshot().days,
        search=search,
        outcome=outcome,
        weekday=WEEKDAYS.index(weekday) if weekday else None,
        start=parse_date(from_date) if from_date else None,
        end=parse_date(to_date) if to_date else None,
        newest_first=not oldest_first,
    )

    if not days:
        empty_panel("Notes", "No notes match the filters")
        return

    for day in days:
        border = "green" if day.pl_daily_dollar >= 0 else "red"
        console.print(Panel(
            day.notes,
            title=f"[bold]{day.date:%a %Y-%m-%d}[/bold]",
            subtitle=f"{money(day.pl_daily_dollar, cur, signed=True)} ({pct(day.pl_daily_percent)})",
            border_style=border,
        ))


@click.command()
@click.option(
    "--period",
    type=click.Choice(PERIOD_CHOICES),
    default="month",
    show_default=True,
    help="Period granularity.",
)
@click.pass_context
def funds(ctx: click.Context, period: str) -> None:
    """Display deposits and withdrawals per period.

    \b
    Examples:
      capjournal funds
      capjournal funds --period year
    """
    cur = get_settings(ctx).currency
    report = cash_flow_report(get_journal(ctx).snapshot().summaries(period))

    console.print(Panel(
        f"Deposits:     [green]{money(report.total_deposits, cur)}[/green] "
        f"({report.deposit_count} {period}s, avg {money(report.avg_deposit, cur)})\n"
        f"Withdrawals:  [red]{money(report.total_withdrawals, cur)}[/red] "
        f"({report.withdrawal_count} {period}s, avg {money(report.avg_withdrawal, cur)})\n"
        f"{'─' * 36}\n"
        f"[bold]Net:          {money(report.net, cur, signed=True)}[/bold]",
        title="[bold cyan]Funds[/bold cyan]",
        border_style="cyan",
    ))

    if not report.active_periods:
        console.print("[dim]No deposits or withdrawals recorded[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Period", style="bold")
    table.add_column("Deposits", justify="right")
    table.add_column("Withdrawals", justify="right")
    table.add_column("Net", justify="right")
    for s in report.active_periods:
        table.add_row(
            s.label,
            money(s.total_deposits, cur),
            money(s.total_withdrawals, cur),
            money(s.total_deposits - s.total_withdrawals, cur, signed=True),
        )
    console.print(table)
