"""Map domain errors to JSON responses."""

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from clientledger.domain.errors import (
    AuthenticationError,
    ConfigurationError,
    DomainError,
    NotFoundError,
    PartialUpdateError,
    PersistenceError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching type wins.
STATUS_CODES = (
    (PartialUpdateError, 207),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (ConfigurationError, 500),
    (PersistenceError, 500),
    (StorageError, 502),
)


def status_for(error: DomainError) -> int:
    """HTTP status for a domain error."""
    for error_type, status in STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    """Answer every failure with ``{"error": message}``."""

    @app.errorhandler(PartialUpdateError)
    def handle_partial_update(error: PartialUpdateError):
        body = {
            "error": str(error),
            "failures": [{"id": tx_id, "error": cause} for tx_id, cause in error.failures],
            "updated": error.applied,
        }
        return jsonify(body), status_for(error)

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("%s: %s", type(error).__name__, error)
        return jsonify({"error": str(error)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal Server Error"}), 500
