"""Main CLI entry point for CapJournal.

This module provides the main click group and lazy loading
of the command modules.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are imported only when one of their commands
    is invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    # Entries
    "add": "capjournal.cli.entries",
    "edit": "capjournal.cli.entries",
    "delete": "capjournal.cli.entries",
    "history": "capjournal.cli.entries",
    # Reports
    "summary": "capjournal.cli.reports",
    "stats": "capjournal.cli.reports",
    "calendar": "capjournal.cli.reports",
    "curve": "capjournal.cli.reports",
    "notes": "capjournal.cli.reports",
    "funds": "capjournal.cli.reports",
    # Data management
    "config": "capjournal.cli.data",
    "export": "capjournal.cli.data",
    "import": "capjournal.cli.data",
    "reset": "capjournal.cli.data",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="capjournal")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Journal database file (overrides the settings file).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[Path], verbose: bool) -> None:
    """CapJournal - track daily trading capital and P&L.

    Record your closing balance each day along with deposits,
    withdrawals and notes; CapJournal derives daily, weekly, monthly,
    quarterly and yearly returns, streaks and cash-flow summaries.

    \b
    Quick Start:
      capjournal config --initial-capital 5000
      capjournal add 2024-01-02 5100 --trades 3
      capjournal history
      capjournal stats
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
