"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from clientledger.domain.entities import (
    Client,
    File,
    Category,
    Transaction,
    TransactionInsert,
    TransactionView,
)

# Largest primary key a 64-bit signed INTEGER column can hold
MAX_ID = 2**63 - 1


def id_in_range(value: int) -> bool:
    """Whether ``value`` fits the integer ID columns."""
    return 0 <= value <= MAX_ID


class Database(ABC):
    """Abstract database interface for clientledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the current session."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Client operations
    @abstractmethod
    def create_client(
        self,
        accountant_id: str,
        first_name: str,
        email: str,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> int:
        """Create a client. Returns client ID."""
        pass

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        pass

    @abstractmethod
    def list_clients(self, accountant_id: str) -> list[Client]:
        """List an accountant's clients ordered by first name."""
        pass

    @abstractmethod
    def update_client(self, client_id: int, **fields) -> None:
        """Update client fields. Only keys present in ``fields`` change."""
        pass

    # File operations
    @abstractmethod
    def create_file(
        self,
        client_id: int,
        accountant_id: str,
        name: str,
        storage_path: str,
        size: Optional[int] = None,
    ) -> int:
        """Record an uploaded file. Returns file ID."""
        pass

    @abstractmethod
    def get_file(self, file_id: int) -> Optional[File]:
        """Get file by ID."""
        pass

    @abstractmethod
    def list_files(self, client_id: int) -> list[File]:
        """List a client's files, most recently uploaded first."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transactions(self, rows: Sequence[TransactionInsert]) -> int:
        """Insert rows in one unit of work. Returns the number inserted.

        Raises:
            PersistenceError: If the write fails; nothing is committed.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions_by_file(self, client_id: int, file_id: int) -> list[TransactionView]:
        """List a file's transactions with AI and override category names.

        Rows come back in creation order (oldest first, ties by ID).
        """
        pass

    @abstractmethod
    def list_transactions_by_client(self, client_id: int) -> list[TransactionView]:
        """List every transaction of a client across files, in creation order."""
        pass

    @abstractmethod
    def update_transaction_category(
        self,
        transaction_id: int,
        client_id: int,
        file_id: int,
        updated_category_id: Optional[int],
        updated_by: str,
        feedback_for_update: Optional[str] = None,
    ) -> None:
        """Set the override category of a transaction within a client/file scope.

        Raises:
            NotFoundError: If no transaction with that ID exists in the scope
            PersistenceError: If the write fails
        """
        pass
