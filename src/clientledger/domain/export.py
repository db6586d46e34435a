"""CSV export of reviewed transactions."""

import csv
import io
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, TextIO

from clientledger.domain.entities import TransactionView

HEADERS = ["Time", "Narration", "Amount", "Category", "Category Reason"]


def _serialize_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def write_transactions_csv(transactions: Iterable[TransactionView], fh: TextIO) -> int:
    """Write transactions to an open text stream.

    The Category column holds the effective category. Returns the number of
    rows written (header excluded).
    """
    writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(HEADERS)
    count = 0
    for txn in transactions:
        writer.writerow(
            [
                _serialize_value(txn.transaction.tx_timestamp),
                _serialize_value(txn.transaction.tx_narration),
                _serialize_value(txn.tx_amount),
                _serialize_value(txn.effective_category_name),
                _serialize_value(txn.transaction.reason),
            ]
        )
        count += 1
    return count


def export_transactions_csv(transactions: Iterable[TransactionView], output_path: Path) -> Path:
    """Write transactions to CSV at ``output_path`` and return the path."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        write_transactions_csv(transactions, fh)
    return output_path


def transactions_csv_text(transactions: Iterable[TransactionView]) -> str:
    """Render transactions as CSV text."""
    buffer = io.StringIO(newline="")
    write_transactions_csv(transactions, buffer)
    return buffer.getvalue()
