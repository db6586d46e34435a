"""Upload orchestration: credentials, file records and classification trigger."""

import logging
import re
import time
from typing import Optional, Protocol

from clientledger.database.base import Database
from clientledger.domain.client import ClientService
from clientledger.domain.entities import ClassificationRequest, File, UploadedFile, UploadSlot
from clientledger.domain.errors import DomainError, ValidationError, file_not_found
from clientledger.services.storage import StorageGateway

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TTL = 300
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class Notifier(Protocol):
    def notify(self, request: ClassificationRequest): ...


def sanitize_filename(filename: str) -> str:
    """Replace characters outside ``[A-Za-z0-9._-]`` with underscores."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_storage_path(client_id, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Build ``clients/<client_id>/<epoch-millis>_<safe filename>``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"clients/{client_id}/{timestamp_ms}_{sanitize_filename(filename)}"


class UploadService:
    """Service coordinating storage credentials, file records and classification."""

    def __init__(
        self,
        db: Database,
        storage: StorageGateway,
        notifier: Notifier,
        download_ttl: int = DEFAULT_DOWNLOAD_TTL,
    ):
        """Initialize upload service.

        Args:
            db: Database instance
            storage: Object-storage gateway
            notifier: Classification trigger
            download_ttl: Lifetime in seconds of the URL handed to the classifier
        """
        self.db = db
        self.storage = storage
        self.notifier = notifier
        self.download_ttl = download_ttl
        self.clients = ClientService(db)

    def request_upload_slot(self, client_id, filename: Optional[str]) -> UploadSlot:
        """Issue an upload credential for a new object under the client's prefix.

        Raises:
            ValidationError: If client ID or filename is missing
            ConfigurationError: If storage credentials are not configured
            StorageError: If storage refuses the request
        """
        if client_id in (None, "") or not filename or not str(filename).strip():
            raise ValidationError("Missing clientId or filename")

        path = build_storage_path(client_id, str(filename).strip())
        signed = self.storage.create_signed_upload(path)
        return UploadSlot(bucket=self.storage.bucket, path=path, token=signed.token)

    def sign_download(self, path: Optional[str], expires_in: int = DEFAULT_DOWNLOAD_TTL) -> str:
        """Issue a signed download URL for a stored object.

        Raises:
            ValidationError: If the path is missing or the lifetime is not positive
        """
        if not path:
            raise ValidationError("Missing path")
        if expires_in <= 0:
            raise ValidationError("expiresIn must be a positive number of seconds")
        return self.storage.create_signed_download_url(path, expires_in)

    def finalize_upload(
        self,
        accountant_id: str,
        client_id: int,
        uploaded_file: UploadedFile,
        uploaded_path: str,
    ) -> File:
        """Record an uploaded file and trigger its classification.

        Once the file row exists the upload counts as done: failing to sign
        the download URL or to reach the classifier is logged only.

        Args:
            accountant_id: Accountant who uploaded the file
            client_id: Client the file belongs to
            uploaded_file: Name and size of the transferred file
            uploaded_path: Storage path the bytes were written to

        Returns:
            The recorded File

        Raises:
            NotFoundError: If the client is not the accountant's
            ValidationError: If name or path is missing
        """
        self.clients.get_client(accountant_id, client_id)
        if not uploaded_file.name or not uploaded_path:
            raise ValidationError("Missing file name or path")

        file_id = self.db.create_file(
            client_id=client_id,
            accountant_id=accountant_id,
            name=uploaded_file.name,
            storage_path=uploaded_path,
            size=uploaded_file.size,
        )
        file = self.db.get_file(file_id)
        if file is None:
            raise DomainError(file_not_found(file_id))
        logger.info("Recorded file %s for client %s at %s", file_id, client_id, uploaded_path)

        self._trigger_classification(file)
        return file

    def _trigger_classification(self, file: File) -> None:
        try:
            signed_url = self.storage.create_signed_download_url(file.storage_path, self.download_ttl)
        except DomainError as e:
            logger.error("Could not sign download URL for file %s; classification not triggered: %s", file.id, e)
            return

        request = ClassificationRequest(
            client_id=file.client_id,
            file_id=file.id,
            accountant_id=file.accountant_id,
            signed_url=signed_url,
        )
        try:
            self.notifier.notify(request)
        except Exception:
            logger.exception("Failed to schedule classification for file %s", file.id)
