"""CSV export of the ledger."""

import csv
import io
from datetime import date
from pathlib import Path
from typing import Iterable

from moola.dates import format_date
from moola.domain.formatting import format_export_amount
from moola.domain.ledger import ExpenseRecord, sort_by_date_desc

CSV_HEADER = ["Date", "Amount", "Currency", "Note", "Recurring", "Frequency"]


def export_filename(today: date) -> str:
    return f"moola-export-{format_date(today)}.csv"


def build_csv(records: Iterable[ExpenseRecord], currency_code: str, use_eu_format: bool = False) -> str:
    """Render records as CSV, newest date first.

    Args:
        records: Records to export.
        currency_code: Currency code written on every row.
        use_eu_format: Write amounts with a decimal comma.

    Returns:
        CSV text including the header row.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for record in sort_by_date_desc(records):
        writer.writerow(
            [
                record.date,
                format_export_amount(record.amount, use_eu_format),
                currency_code,
                record.note,
                "Yes" if record.recurring else "No",
                record.freq.value if record.freq else "",
            ]
        )

    return buffer.getvalue()


def write_export(
    records: Iterable[ExpenseRecord],
    output_dir: Path,
    today: date,
    currency_code: str,
    use_eu_format: bool = False,
) -> Path:
    """Write the CSV export into output_dir and return its path.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(today)
    path.write_text(build_csv(records, currency_code, use_eu_format), encoding="utf-8")
    return path
