"""Per-application collaborators and the request-scoped principal."""

from dataclasses import dataclass

from flask import current_app, request

from clientledger.config import Settings
from clientledger.database.base import Database
from clientledger.domain.errors import AuthenticationError
from clientledger.services.storage import StorageGateway

EXTENSION_KEY = "clientledger"
ACCOUNTANT_HEADER = "X-Accountant-Id"


@dataclass
class AppServices:
    """Collaborators shared by every request of one application."""

    settings: Settings
    db: Database
    storage: StorageGateway
    notifier: object


def app_services() -> AppServices:
    return current_app.extensions[EXTENSION_KEY]


def current_accountant_id() -> str:
    """Accountant ID set by the identity layer in front of the API.

    Raises:
        AuthenticationError: If the request carries no principal
    """
    accountant_id = (request.headers.get(ACCOUNTANT_HEADER) or "").strip()
    if not accountant_id:
        raise AuthenticationError("Missing accountant")
    return accountant_id
