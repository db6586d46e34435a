"""Client domain service."""

from typing import Optional

from clientledger.database.base import Database
from clientledger.domain.entities import Client, File
from clientledger.domain.errors import NotFoundError, ValidationError, client_not_found, file_not_found

EDITABLE_FIELDS = ("first_name", "last_name", "email", "phone_number")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ClientService:
    """Service for an accountant's clients and their files.

    Every lookup takes the accountant ID of the caller; clients of other
    accountants are reported as not found.
    """

    def __init__(self, db: Database):
        """Initialize client service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_client(
        self,
        accountant_id: str,
        first_name: str,
        email: str,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Client:
        """Create a client owned by the accountant.

        Raises:
            ValidationError: If accountant, first name or email is missing
        """
        if not accountant_id:
            raise ValidationError("Missing accountant")
        first_name = _clean(first_name)
        email = _clean(email)
        if not first_name:
            raise ValidationError("First name is required")
        if not email:
            raise ValidationError("Email is required")

        client_id = self.db.create_client(
            accountant_id=accountant_id,
            first_name=first_name,
            email=email,
            last_name=_clean(last_name),
            phone_number=_clean(phone_number),
        )
        return self.get_client(accountant_id, client_id)

    def get_client(self, accountant_id: str, client_id: int) -> Client:
        """Get one of the accountant's clients.

        Raises:
            NotFoundError: If the client does not exist or belongs to someone else
        """
        client = self.db.get_client(client_id)
        if client is None or client.accountant_id != accountant_id:
            raise NotFoundError(client_not_found(client_id))
        return client

    def list_clients(self, accountant_id: str) -> list[Client]:
        """List the accountant's clients ordered by first name."""
        return self.db.list_clients(accountant_id)

    def update_client(self, accountant_id: str, client_id: int, **changes) -> Client:
        """Edit client fields.

        Raises:
            NotFoundError: If the client is not the accountant's
            ValidationError: If a field is unknown or a required field is cleared
        """
        self.get_client(accountant_id, client_id)

        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown client field(s): {', '.join(unknown)}")

        cleaned = {key: _clean(value) for key, value in changes.items()}
        for required in ("first_name", "email"):
            if required in cleaned and cleaned[required] is None:
                raise ValidationError(f"{required.replace('_', ' ').capitalize()} is required")

        if cleaned:
            self.db.update_client(client_id, **cleaned)
        return self.get_client(accountant_id, client_id)

    def list_files(self, accountant_id: str, client_id: int) -> list[File]:
        """List the client's files, newest upload first."""
        self.get_client(accountant_id, client_id)
        return self.db.list_files(client_id)

    def get_file(self, accountant_id: str, client_id: int, file_id: int) -> File:
        """Get a file of one of the accountant's clients.

        Raises:
            NotFoundError: If the file is unknown or belongs to another client
        """
        self.get_client(accountant_id, client_id)
        file = self.db.get_file(file_id)
        if file is None or file.client_id != client_id:
            raise NotFoundError(file_not_found(file_id))
        return file
