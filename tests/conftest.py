"""Shared pytest fixtures for clientledger tests."""

import json
import logging
import os
import tempfile
from decimal import Decimal

import pytest

from clientledger.config import Settings
from clientledger.database.factories import create_sqlite_database
from clientledger.domain.aggregation import AggregationService
from clientledger.domain.category import CategoryService
from clientledger.domain.client import ClientService
from clientledger.domain.entities import TransactionInsert
from clientledger.domain.errors import StorageError
from clientledger.domain.transaction import TransactionService
from clientledger.domain.upload import UploadService
from clientledger.domain.webhook import SIGNATURE_PREFIX, compute_signature
from clientledger.services.storage import SignedUpload, StorageGateway

ACCOUNTANT_ID = "acct-1"
OTHER_ACCOUNTANT_ID = "acct-2"
WEBHOOK_SECRET = "test-webhook-secret"


class FakeStorage(StorageGateway):
    """In-memory storage gateway recording the paths it signed."""

    def __init__(self, bucket: str = "client-files"):
        self.bucket = bucket
        self.uploads: list[str] = []
        self.downloads: list[tuple[str, int]] = []
        self.fail_downloads = False

    def create_signed_upload(self, path: str) -> SignedUpload:
        self.uploads.append(path)
        return SignedUpload(path=path, token=f"token-{len(self.uploads)}", signed_url=f"https://storage.test/upload/{path}")

    def create_signed_download_url(self, path: str, expires_in: int) -> str:
        if self.fail_downloads:
            raise StorageError("Object not found")
        self.downloads.append((path, expires_in))
        return f"https://storage.test/{path}?expires={expires_in}"


class FakeNotifier:
    """Synchronous notifier collecting classification requests."""

    def __init__(self, fail: bool = False):
        self.requests = []
        self.fail = fail

    def notify(self, request):
        if self.fail:
            raise RuntimeError("classifier unreachable")
        self.requests.append(request)


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Header value for a webhook body."""
    return f"{SIGNATURE_PREFIX}{compute_signature(secret, body)}"


def event_body(events) -> bytes:
    return json.dumps(events).encode("utf-8")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by create_app or the CLI group."""
    yield
    logging.getLogger("clientledger").handlers.clear()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def client_service(temp_db):
    """Create a ClientService with a temporary database."""
    return ClientService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def aggregation_service(temp_db):
    """Create an AggregationService with a temporary database."""
    return AggregationService(temp_db)


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def upload_service(temp_db, fake_storage, fake_notifier):
    """Create an UploadService with fake storage and notifier."""
    return UploadService(temp_db, fake_storage, fake_notifier)


@pytest.fixture
def sample_client(client_service):
    """Create a client owned by ACCOUNTANT_ID."""
    return client_service.create_client(
        ACCOUNTANT_ID, first_name="Ada", last_name="Lovelace", email="ada@example.com"
    )


@pytest.fixture
def sample_file(temp_db, sample_client):
    """Record an uploaded file for the sample client."""
    file_id = temp_db.create_file(
        client_id=sample_client.id,
        accountant_id=ACCOUNTANT_ID,
        name="statement.pdf",
        storage_path=f"clients/{sample_client.id}/1700000000000_statement.pdf",
        size=1024,
    )
    return temp_db.get_file(file_id)


@pytest.fixture
def sample_categories(category_service):
    """Create some categories and return their IDs by name."""
    names = ["Groceries", "Rent", "Salary", "Utilities"]
    return {name: category_service.create_category(name).id for name in names}


@pytest.fixture
def sample_transactions(temp_db, sample_client, sample_file, sample_categories):
    """Insert a small classified batch and return the stored views in creation order."""
    def row(amount, category, narration):
        return TransactionInsert(
            accountant_id=ACCOUNTANT_ID,
            client_id=sample_client.id,
            file_id=sample_file.id,
            category_id_by_ai=sample_categories.get(category),
            reason=f"Looks like {category}" if category else None,
            confidence="0.9",
            tx_amount=Decimal(amount),
            tx_narration=narration,
        )

    temp_db.insert_transactions(
        [
            row("-50.00", "Groceries", "SUPERMARKET"),
            row("-1200.00", "Rent", "LANDLORD"),
            row("3000.00", "Salary", "ACME PAYROLL"),
            row("-25.00", "Groceries", "CORNER SHOP"),
            row("-80.00", None, "UNKNOWN"),
        ]
    )
    return temp_db.list_transactions_by_file(sample_client.id, sample_file.id)


@pytest.fixture
def settings(temp_db):
    return Settings(database_path=temp_db.database_path, webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def app(settings, temp_db, fake_storage, fake_notifier):
    """Flask app wired to the temporary database and fakes."""
    from clientledger.web import create_app

    app = create_app(settings=settings, db=temp_db, storage=fake_storage, notifier=fake_notifier)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def http(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"X-Accountant-Id": ACCOUNTANT_ID}


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
