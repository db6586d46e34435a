"""Shared domain error messages and error types."""

from typing import Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Malformed payload or missing required field."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist or is outside the caller's scope."""


class ConfigurationError(DomainError):
    """A required secret or credential is not configured."""


class AuthenticationError(DomainError):
    """Missing or invalid signature or principal."""


class PersistenceError(DomainError):
    """The store failed to write."""


class StorageError(DomainError):
    """The object-storage collaborator rejected a request."""


class PartialUpdateError(DomainError):
    """Some category overrides failed; the others were applied and stand."""

    def __init__(self, failures: Sequence[tuple[int, str]], applied: Sequence[int] = ()):
        self.failures = list(failures)
        self.applied = list(applied)
        super().__init__(partial_update_failed(self.failures))


def client_not_found(client_id: int) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def file_not_found(file_id: int) -> str:
    """Return message for missing file."""
    return f"File {file_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_in_scope(transaction_id: int, client_id: int, file_id: int) -> str:
    """Return message when a transaction is unknown for the client/file scope."""
    return f"Transaction {transaction_id} not found for client {client_id} and file {file_id}"


def missing_fields(names: Sequence[str]) -> str:
    """Return message for an event missing required fields."""
    return f"Missing required field{'s' if len(names) != 1 else ''}: {', '.join(names)}"


def partial_update_failed(failures: Sequence[tuple[int, str]]) -> str:
    """Return message listing every failed override."""
    lines = "\n".join(f"- tx {tx_id}: {cause}" for tx_id, cause in failures)
    return f"Failed to update some transactions:\n{lines}"
