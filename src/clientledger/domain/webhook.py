"""Classification webhook verification and ingestion."""

import hashlib
import hmac
import json
import logging
from decimal import Decimal
from typing import Any, Optional, Sequence

from clientledger.database.base import Database, id_in_range
from clientledger.domain.entities import (
    InvalidEvent,
    ParsedEvents,
    TransactionInsert,
    WebhookResult,
)
from clientledger.domain.errors import (
    AuthenticationError,
    ConfigurationError,
    ValidationError,
    missing_fields,
)
from clientledger.domain.transaction import TransactionService
from clientledger.utils.amount_parser import parse_amount
from clientledger.utils.date_parser import parse_timestamp

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-signature"
SIGNATURE_PREFIX = "sha256="
REQUIRED_EVENT_FIELDS = ("accountant_id", "client_id", "file_id")
# tx_amount is stored as NUMERIC(14, 2)
MAX_ABS_AMOUNT = Decimal("1e12")


def compute_signature(secret: str, raw_body: bytes) -> str:
    """Return the hex HMAC-SHA256 of the raw body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def normalize_signature(header: Optional[str]) -> str:
    """Accept either bare hex or ``sha256=<hex>``."""
    if not header:
        return ""
    header = header.strip()
    if header.startswith(SIGNATURE_PREFIX):
        return header[len(SIGNATURE_PREFIX):]
    return header


def _coerce_id(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValueError(f"{field} must be an integer")
    if not id_in_range(value):
        raise ValueError(f"{field} is out of range")
    return value


def _amount(value: Any) -> Decimal:
    amount = parse_amount(value)
    if abs(amount) >= MAX_ABS_AMOUNT:
        raise ValueError("tx_amount is out of range")
    return amount


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else json.dumps(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class WebhookVerifier:
    """Verifies signed classification payloads and maps events to insert rows."""

    def __init__(self, secret: Optional[str]):
        self.secret = secret

    def verify(self, raw_body: bytes, signature_header: Optional[str]) -> None:
        """Check the signature over the exact raw bytes.

        Raises:
            ConfigurationError: If no secret is configured
            AuthenticationError: If the signature is missing or does not match
        """
        if not self.secret:
            raise ConfigurationError("Missing WEBHOOK_SECRET")

        provided = normalize_signature(signature_header)
        if not provided:
            raise AuthenticationError("Missing x-signature")

        expected = compute_signature(self.secret, raw_body)
        if not hmac.compare_digest(provided.lower().encode("ascii", "replace"), expected.encode("ascii")):
            raise AuthenticationError("Invalid signature")

    def parse_events(self, raw_body: bytes) -> list:
        """Decode the body into a list of events.

        Accepts a bare JSON array or an object with an ``events`` array.

        Raises:
            ValidationError: If the body is not JSON or has another shape
        """
        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, ValueError) as e:
            raise ValidationError("Invalid JSON") from e

        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get("events"), list):
            return payload["events"]
        raise ValidationError("Expected an array of events or an object with an 'events' array")

    def extract_rows(self, events: Sequence[Any]) -> ParsedEvents:
        """Soft-validate events, collecting rejected ones instead of failing."""
        rows: list[TransactionInsert] = []
        invalids: list[InvalidEvent] = []

        for index, event in enumerate(events):
            try:
                rows.append(self._event_to_row(event))
            except ValueError as e:
                logger.warning("Rejected webhook event #%d: %s", index, e)
                invalids.append(InvalidEvent(index=index, error=str(e)))

        return ParsedEvents(rows=tuple(rows), invalids=tuple(invalids))

    def _event_to_row(self, event: Any) -> TransactionInsert:
        if not isinstance(event, dict):
            raise ValueError("Event must be an object")

        missing = [name for name in REQUIRED_EVENT_FIELDS if _is_blank(event.get(name))]
        if missing:
            raise ValueError(missing_fields(missing))

        category_id = event.get("category_id")
        tx_amount = event.get("tx_amount")
        tx_timestamp = event.get("tx_timestamp")
        reason = event.get("reason")
        if reason is None:
            reason = event.get("reason_by_ai")

        return TransactionInsert(
            accountant_id=str(event["accountant_id"]),
            client_id=_coerce_id(event["client_id"], "client_id"),
            file_id=_coerce_id(event["file_id"], "file_id"),
            category_id_by_ai=None if _is_blank(category_id) else _coerce_id(category_id, "category_id"),
            reason=_optional_text(reason),
            confidence=None if event.get("confidence") is None else str(event["confidence"]),
            tx_amount=None if _is_blank(tx_amount) else _amount(tx_amount),
            tx_narration=_optional_text(event.get("tx_narration")),
            tx_timestamp=None if _is_blank(tx_timestamp) else parse_timestamp(tx_timestamp),
        )


class WebhookService:
    """Service ingesting classification results into the transaction store."""

    def __init__(self, db: Database, verifier: WebhookVerifier):
        """Initialize webhook service.

        Args:
            db: Database instance
            verifier: Signature verifier holding the shared secret
        """
        self.db = db
        self.verifier = verifier
        self.transactions = TransactionService(db)

    def ingest(self, raw_body: bytes, signature_header: Optional[str]) -> WebhookResult:
        """Verify, validate and bulk-insert one webhook delivery.

        The signature is checked before the body is parsed. Individually bad
        events are reported in the result; the batch fails only when no event
        is usable or the store rejects the insert.

        Args:
            raw_body: Request body exactly as received
            signature_header: Value of the x-signature header

        Returns:
            WebhookResult with inserted count and rejected events

        Raises:
            ConfigurationError: If the secret is not configured
            AuthenticationError: If the signature is missing or wrong
            ValidationError: If the body is malformed or holds no valid event
            PersistenceError: If the bulk insert fails
        """
        try:
            self.verifier.verify(raw_body, signature_header)
        except AuthenticationError as e:
            logger.warning("Webhook signature rejected: %s", e)
            raise

        events = self.verifier.parse_events(raw_body)
        parsed = self.verifier.extract_rows(events)
        if not parsed.rows:
            raise ValidationError(
                f"No valid events in payload ({len(parsed.invalids)} rejected)"
            )

        inserted = self.transactions.insert_batch(parsed.rows)
        logger.info(
            "Ingested classification batch: %d inserted, %d rejected",
            inserted,
            len(parsed.invalids),
            extra={"inserted": inserted, "rejected": len(parsed.invalids)},
        )
        return WebhookResult(inserted=inserted, invalids=parsed.invalids)
