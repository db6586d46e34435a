"""Transaction reconciliation service."""

import logging
from typing import Mapping, Optional, Sequence, Union

from clientledger.database.base import Database
from clientledger.domain.client import ClientService
from clientledger.domain.entities import (
    CategoryPatch,
    SortMode,
    TransactionInsert,
    TransactionView,
)
from clientledger.domain.errors import (
    NotFoundError,
    PartialUpdateError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def parse_sort_mode(value: Union[str, SortMode, None]) -> SortMode:
    """Resolve a sort mode name, defaulting to newest first.

    Raises:
        ValidationError: If the name is not a known sort mode
    """
    if value is None or value == "":
        return SortMode.CREATED_DESC
    try:
        return SortMode(value)
    except ValueError as e:
        choices = ", ".join(mode.value for mode in SortMode)
        raise ValidationError(f"Unknown sort mode '{value}' (expected one of: {choices})") from e


def sort_transactions(
    transactions: Sequence[TransactionView], sort: Union[str, SortMode, None] = None
) -> list[TransactionView]:
    """Sort transactions without disturbing the relative order of ties.

    Category sorts use the effective category name; transactions without one
    sort as an empty name.
    """
    mode = parse_sort_mode(sort)
    if mode in (SortMode.CREATED_ASC, SortMode.CREATED_DESC):
        def key(txn):
            return (txn.created_at, txn.id)
    else:
        def key(txn):
            return (txn.effective_category_name or "").casefold()

    descending = mode in (SortMode.CREATED_DESC, SortMode.CATEGORY_DESC)
    return sorted(transactions, key=key, reverse=descending)


class TransactionService:
    """Service owning transactions and their category overrides."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.clients = ClientService(db)

    def insert_batch(self, rows: Sequence[TransactionInsert]) -> int:
        """Bulk-create transactions from verified webhook rows.

        Returns:
            Number of rows inserted

        Raises:
            PersistenceError: If the store rejects the batch
        """
        return self.db.insert_transactions(rows)

    def list_by_file(
        self,
        accountant_id: str,
        client_id: int,
        file_id: int,
        sort: Union[str, SortMode, None] = SortMode.CREATED_DESC,
    ) -> list[TransactionView]:
        """List a file's transactions for review.

        Args:
            accountant_id: Accountant making the request
            client_id: Client owning the file
            file_id: File ID
            sort: Sort mode (created_desc, created_asc, category_asc, category_desc)

        Returns:
            Transaction views in the requested order

        Raises:
            NotFoundError: If the client is not the accountant's
            ValidationError: If the sort mode is unknown
        """
        mode = parse_sort_mode(sort)
        self.clients.get_client(accountant_id, client_id)
        return sort_transactions(self.db.list_transactions_by_file(client_id, file_id), mode)

    def list_by_client(self, accountant_id: str, client_id: int) -> list[TransactionView]:
        """List all of a client's transactions in creation order."""
        self.clients.get_client(accountant_id, client_id)
        return self.db.list_transactions_by_client(client_id)

    def pending_patches(
        self,
        transactions: Sequence[TransactionView],
        edits: Mapping[int, Optional[int]],
        accountant_id: str,
        feedback: Optional[Mapping[int, str]] = None,
    ) -> list[CategoryPatch]:
        """Turn edited category choices into patches, dropping no-op edits.

        An edit equal to the transaction's effective category is skipped.
        Edits for IDs not in ``transactions`` are kept so the store can
        report them.
        """
        effective = {txn.id: txn.effective_category_id for txn in transactions}
        feedback = feedback or {}
        patches = []
        for txn_id, category_id in edits.items():
            if txn_id in effective and effective[txn_id] == category_id:
                continue
            patches.append(
                CategoryPatch(
                    id=txn_id,
                    updated_category_id=category_id,
                    accountant_id=accountant_id,
                    feedback_for_update=feedback.get(txn_id),
                )
            )
        return patches

    def apply_overrides(
        self,
        accountant_id: str,
        client_id: int,
        file_id: int,
        patches: Sequence[CategoryPatch],
    ) -> list[int]:
        """Apply category overrides one by one within a client/file scope.

        Each patch is written independently. When any fail, the error lists
        every failing transaction; patches already written are kept.

        Args:
            accountant_id: Accountant making the request
            client_id: Client scope every patched row must belong to
            file_id: File scope every patched row must belong to
            patches: Overrides to apply

        Returns:
            IDs of the updated transactions

        Raises:
            NotFoundError: If the client is not the accountant's
            PartialUpdateError: If one or more patches failed
        """
        self.clients.get_client(accountant_id, client_id)

        applied: list[int] = []
        failures: list[tuple[int, str]] = []
        for patch in patches:
            try:
                self.db.update_transaction_category(
                    transaction_id=patch.id,
                    client_id=client_id,
                    file_id=file_id,
                    updated_category_id=patch.updated_category_id,
                    updated_by=patch.accountant_id,
                    feedback_for_update=patch.feedback_for_update,
                )
            except (NotFoundError, PersistenceError) as e:
                failures.append((patch.id, str(e)))
            else:
                applied.append(patch.id)

        if failures:
            logger.warning(
                "Category overrides partially applied: %d updated, %d failed",
                len(applied),
                len(failures),
            )
            raise PartialUpdateError(failures, applied)

        logger.info("Applied %d category override(s) to file %s", len(applied), file_id)
        return applied
