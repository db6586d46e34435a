"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the denormalized
category-name join fields that only exist on the display model.
"""

from typing import Optional

from clientledger.domain import entities as domain
from clientledger.database.models import (
    Client as ORMClient,
    File as ORMFile,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def client_to_domain(orm_client: ORMClient) -> domain.Client:
    """Convert SQLAlchemy Client model to domain Client entity."""
    return domain.Client(
        id=orm_client.id,
        accountant_id=orm_client.accountant_id,
        first_name=orm_client.first_name,
        last_name=orm_client.last_name,
        email=orm_client.email,
        phone_number=orm_client.phone_number,
        created_at=orm_client.created_at,
    )


def file_to_domain(orm_file: ORMFile) -> domain.File:
    """Convert SQLAlchemy File model to domain File entity."""
    return domain.File(
        id=orm_file.id,
        client_id=orm_file.client_id,
        accountant_id=orm_file.accountant_id,
        name=orm_file.name,
        storage_path=orm_file.storage_path,
        size=orm_file.size,
        uploaded_at=orm_file.uploaded_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(id=orm_category.id, name=orm_category.name)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        client_id=orm_transaction.client_id,
        file_id=orm_transaction.file_id,
        accountant_id=orm_transaction.accountant_id,
        tx_amount=orm_transaction.tx_amount,
        tx_narration=orm_transaction.tx_narration,
        tx_timestamp=orm_transaction.tx_timestamp,
        category_id_by_ai=orm_transaction.category_id_by_ai,
        updated_category_id=orm_transaction.updated_category_id,
        reason=orm_transaction.reason,
        confidence=orm_transaction.confidence,
        feedback_for_update=orm_transaction.feedback_for_update,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        updated_by=orm_transaction.updated_by,
    )


def transaction_view_to_domain(
    orm_transaction: ORMTransaction,
    ai_category_name: Optional[str],
    updated_category_name: Optional[str],
) -> domain.TransactionView:
    """Convert a joined transaction row to the domain display model."""
    return domain.TransactionView(
        transaction=transaction_to_domain(orm_transaction),
        ai_category_name=ai_category_name,
        updated_category_name=updated_category_name,
    )


def transaction_insert_to_orm(row: domain.TransactionInsert) -> ORMTransaction:
    """Build an ORM Transaction from a verified webhook row.

    Override fields are left unset; only the override path writes them.
    """
    return ORMTransaction(
        accountant_id=row.accountant_id,
        client_id=row.client_id,
        file_id=row.file_id,
        category_id_by_ai=row.category_id_by_ai,
        reason=row.reason,
        confidence=row.confidence,
        tx_amount=row.tx_amount,
        tx_narration=row.tx_narration,
        tx_timestamp=row.tx_timestamp,
    )
