"""Domain model entities for clientledger.

These are pure data classes representing business concepts, independent of
database schema. Rows coming out of the store (including denormalized join
fields such as category names) are mapped into these records before any
business logic sees them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

UNCATEGORIZED = "Uncategorized"


class SortMode(str, Enum):
    """Orderings offered for a file's transaction listing."""

    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"
    CATEGORY_ASC = "category_asc"
    CATEGORY_DESC = "category_desc"


@dataclass(frozen=True)
class Client:
    """Accountant-scoped client domain entity."""

    id: int
    accountant_id: str
    first_name: str
    last_name: Optional[str]
    email: str
    phone_number: Optional[str]
    created_at: datetime

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass(frozen=True)
class File:
    """Uploaded statement file domain entity."""

    id: int
    client_id: int
    accountant_id: str
    name: str
    storage_path: str
    size: Optional[int]
    uploaded_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity. Names are not unique."""

    id: int
    name: str


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    client_id: int
    file_id: int
    accountant_id: str
    tx_amount: Optional[Decimal]
    tx_narration: Optional[str]
    tx_timestamp: Optional[datetime]
    category_id_by_ai: Optional[int]
    updated_category_id: Optional[int]
    reason: Optional[str]
    confidence: Optional[str]
    feedback_for_update: Optional[str]
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[str]

    @property
    def effective_category_id(self) -> Optional[int]:
        """Override if present, else the AI category."""
        if self.updated_category_id is not None:
            return self.updated_category_id
        return self.category_id_by_ai


@dataclass(frozen=True)
class TransactionView:
    """Transaction joined with the names of its AI and override categories."""

    transaction: Transaction
    ai_category_name: Optional[str]
    updated_category_name: Optional[str]

    @property
    def id(self) -> int:
        return self.transaction.id

    @property
    def tx_amount(self) -> Optional[Decimal]:
        return self.transaction.tx_amount

    @property
    def created_at(self) -> datetime:
        return self.transaction.created_at

    @property
    def effective_category_id(self) -> Optional[int]:
        return self.transaction.effective_category_id

    @property
    def effective_category_name(self) -> Optional[str]:
        """Name of the effective category, following the same precedence as the id."""
        if self.transaction.updated_category_id is not None:
            return self.updated_category_name
        if self.transaction.category_id_by_ai is not None:
            return self.ai_category_name
        return None


@dataclass(frozen=True)
class TransactionInsert:
    """Row to insert for one verified classification event."""

    accountant_id: str
    client_id: int
    file_id: int
    category_id_by_ai: Optional[int] = None
    reason: Optional[str] = None
    confidence: Optional[str] = None
    tx_amount: Optional[Decimal] = None
    tx_narration: Optional[str] = None
    tx_timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryPatch:
    """Accountant override for one transaction's category."""

    id: int
    updated_category_id: Optional[int]
    accountant_id: str
    feedback_for_update: Optional[str] = None


@dataclass(frozen=True)
class InvalidEvent:
    """Webhook event rejected by soft validation."""

    index: int
    error: str


@dataclass(frozen=True)
class ParsedEvents:
    """Tagged result of soft validation: rows to insert plus rejected events."""

    rows: tuple[TransactionInsert, ...]
    invalids: tuple[InvalidEvent, ...]


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of a webhook delivery."""

    inserted: int
    invalids: tuple[InvalidEvent, ...] = ()

    @property
    def ok(self) -> bool:
        return self.inserted > 0

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "inserted": self.inserted,
            "invalids": [{"index": i.index, "error": i.error} for i in self.invalids],
        }


@dataclass(frozen=True)
class CategoryGroup:
    """One slice of a category breakdown."""

    name: str
    value: Decimal
    percentage: float


@dataclass(frozen=True)
class CategorySummary:
    """Grouped absolute sums for a subset of transactions."""

    total: Decimal
    groups: tuple[CategoryGroup, ...] = ()


@dataclass(frozen=True)
class AmountLine:
    """Single transaction line in the by-amount listing of a report."""

    id: int
    amount: Decimal
    category_name: str

    @property
    def is_expense(self) -> bool:
        return self.amount < 0


@dataclass(frozen=True)
class AggregationReport:
    """Expense, income and unified breakdowns for a set of transactions."""

    expense: CategorySummary
    income: CategorySummary
    unified: CategorySummary
    transactions_by_amount: tuple[AmountLine, ...] = field(default_factory=tuple)

    @property
    def has_chart_data(self) -> bool:
        return len(self.unified.groups) > 0


@dataclass(frozen=True)
class UploadSlot:
    """Time-limited upload credential for one storage object."""

    bucket: str
    path: str
    token: str


@dataclass(frozen=True)
class UploadedFile:
    """Metadata of a file the caller has already transferred to storage."""

    name: str
    size: Optional[int] = None


@dataclass(frozen=True)
class ClassificationRequest:
    """Payload sent to the external classification service."""

    client_id: int
    file_id: int
    accountant_id: str
    signed_url: str

    def to_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "signed_url": self.signed_url,
            "file_id": self.file_id,
            "accountant_id": self.accountant_id,
        }
