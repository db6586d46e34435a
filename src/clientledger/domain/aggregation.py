"""Aggregation of transactions into category breakdowns."""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from clientledger.database.base import Database
from clientledger.domain.entities import (
    UNCATEGORIZED,
    AggregationReport,
    AmountLine,
    CategoryGroup,
    CategorySummary,
    TransactionView,
)
from clientledger.domain.category import CategoryService
from clientledger.domain.client import ClientService


def _amount(txn: Any) -> Decimal:
    value = txn.tx_amount
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _category_name(txn: Any) -> str:
    return txn.effective_category_name or UNCATEGORIZED


def summarize(transactions: Sequence[Any]) -> CategorySummary:
    """Group transactions by effective category name.

    Each group holds the sum of absolute amounts and its share of the total.
    Transactions without an amount, or with a zero amount, are left out.
    Groups keep the order in which their names were first seen.

    Args:
        transactions: Items exposing ``tx_amount`` and ``effective_category_name``

    Returns:
        CategorySummary with total and groups
    """
    total = Decimal("0")
    sums: dict[str, Decimal] = {}
    for txn in transactions:
        amount = abs(_amount(txn))
        if not amount:
            continue
        total += amount
        name = _category_name(txn)
        sums[name] = sums.get(name, Decimal("0")) + amount

    groups = tuple(
        CategoryGroup(
            name=name,
            value=value,
            percentage=float(value / total * 100) if total else 0.0,
        )
        for name, value in sums.items()
    )
    return CategorySummary(total=total, groups=groups)


def build_report(transactions: Sequence[Any]) -> AggregationReport:
    """Build expense, income and unified breakdowns for a set of transactions."""
    expenses = [txn for txn in transactions if _amount(txn) < 0]
    income = [txn for txn in transactions if _amount(txn) > 0]

    lines = [
        AmountLine(id=txn.id, amount=_amount(txn), category_name=_category_name(txn))
        for txn in transactions
        if _amount(txn)
    ]
    lines.sort(key=lambda line: abs(line.amount), reverse=True)

    return AggregationReport(
        expense=summarize(expenses),
        income=summarize(income),
        unified=summarize(transactions),
        transactions_by_amount=tuple(lines),
    )


class AggregationService:
    """Service building category reports from stored transactions."""

    def __init__(self, db: Database):
        """Initialize aggregation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.clients = ClientService(db)
        self.categories = CategoryService(db)

    def file_report(
        self,
        accountant_id: str,
        client_id: int,
        file_id: int,
        pending_edits: Optional[Mapping[int, Optional[int]]] = None,
    ) -> AggregationReport:
        """Build the report for one file.

        Args:
            accountant_id: Accountant making the request
            client_id: Client owning the file
            file_id: File ID
            pending_edits: Optional unsaved category choices (transaction ID to
                category ID or None) to preview in the report

        Raises:
            NotFoundError: If the client is not the accountant's
        """
        self.clients.get_client(accountant_id, client_id)
        transactions = self.db.list_transactions_by_file(client_id, file_id)
        if pending_edits:
            transactions = self.preview(transactions, pending_edits)
        return build_report(transactions)

    def client_report(self, accountant_id: str, client_id: int) -> AggregationReport:
        """Build the report across all files of a client."""
        self.clients.get_client(accountant_id, client_id)
        return build_report(self.db.list_transactions_by_client(client_id))

    def preview(
        self, transactions: Sequence[TransactionView], pending_edits: Mapping[int, Optional[int]]
    ) -> list[TransactionView]:
        """Return copies of the views with unsaved overrides applied.

        A pending value of None clears the override, so the AI category shows
        through again.
        """
        names = self.categories.category_names()
        previewed = []
        for txn in transactions:
            if txn.id not in pending_edits:
                previewed.append(txn)
                continue
            category_id = pending_edits[txn.id]
            previewed.append(
                replace(
                    txn,
                    transaction=replace(txn.transaction, updated_category_id=category_id),
                    updated_category_name=names.get(category_id) if category_id is not None else None,
                )
            )
        return previewed
