"""CLI commands for CapJournal.

This package provides the command-line interface for CapJournal:
recording daily capital, editing the journal, and viewing derived
P&L reports.
"""

from capjournal.cli.main import cli, main

__all__ = ["cli", "main"]
