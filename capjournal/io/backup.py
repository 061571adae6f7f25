"""CSV export and JSON backup/restore for CapJournal."""

import csv
import io
import json
from datetime import datetime
from typing import Callable, Union

from pydantic import ValidationError as PydanticValidationError

from capjournal.exceptions import ValidationError
from capjournal.journal import new_entry_id, sanitize_entry
from capjournal.models import AppConfig, CalculatedDay, TradeEntry

BACKUP_VERSION = "1.0"

CSV_HEADERS = [
    "Date",
    "Week",
    "Month",
    "Initial Capital",
    "Final Capital",
    "Daily P/L ($)",
    "Daily P/L (%)",
    "Weekly P/L ($)",
    "Weekly P/L (%)",
    "Monthly P/L ($)",
    "Monthly P/L (%)",
    "Total P/L ($)",
    "Total P/L (%)",
]


def _fraction(percent: float) -> str:
    return f"{percent / 100:.4f}"


def export_csv(days: list[CalculatedDay]) -> str:
    """Render calculated days as CSV, oldest first.

    Percentages are written as fractions (12.5% -> 0.1250). The text starts
    with a UTF-8 byte order mark so spreadsheet tools detect the encoding.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for day in sorted(days, key=lambda d: d.date):
        writer.writerow([
            day.date.isoformat(),
            day.week_id,
            day.month_id,
            f"{day.initial_capital_daily:.2f}",
            f"{day.final_capital:.2f}",
            f"{day.pl_daily_dollar:.2f}",
            _fraction(day.pl_daily_percent),
            f"{day.pl_week_to_date_dollar:.2f}",
            _fraction(day.pl_week_to_date_percent),
            f"{day.pl_month_to_date_dollar:.2f}",
            _fraction(day.pl_month_to_date_percent),
            f"{day.pl_total_to_date_dollar:.2f}",
            _fraction(day.pl_total_to_date_percent),
        ])
    return "\ufeff" + buffer.getvalue()


def export_backup(entries: list[TradeEntry], config: AppConfig) -> str:
    """Serialize raw entries and config as a versioned JSON backup."""
    document = {
        "version": BACKUP_VERSION,
        "timestamp": datetime.now().isoformat(),
        "entries": [
            e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in entries
        ],
        "config": config.model_dump(mode="json", by_alias=True),
    }
    return json.dumps(document, indent=2)


def parse_backup(
    data: Union[str, bytes],
    fallback_config: AppConfig,
    id_factory: Callable[[], str] = new_entry_id,
) -> tuple[list[TradeEntry], AppConfig]:
    """Parse and validate a JSON backup.

    Args:
        data: Backup file contents, as text or raw UTF-8 bytes.
        fallback_config: Config to use when the backup carries none.
        id_factory: Source of ids for entries that lack one.

    Returns:
        Tuple of (entries, config).

    Raises:
        ValidationError: If the backup is not usable.
    """
    try:
        text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError("The file is damaged or is not a valid backup", str(e)) from e

    if not isinstance(document, dict):
        raise ValidationError("The file is damaged or is not a valid backup")

    raw_entries = document.get("entries")
    if not isinstance(raw_entries, list):
        raise ValidationError("The file does not contain a valid entry history")

    try:
        entries = [sanitize_entry(raw, id_factory) for raw in raw_entries]
    except (PydanticValidationError, AttributeError) as e:
        raise ValidationError("The backup contains malformed entries", str(e)) from e

    raw_config = document.get("config")
    if raw_config is None:
        return entries, fallback_config
    try:
        config = AppConfig.model_validate(raw_config)
    except PydanticValidationError as e:
        raise ValidationError("The backup contains a malformed config", str(e)) from e
    return entries, config
