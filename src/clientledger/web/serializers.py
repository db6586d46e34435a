"""JSON shapes for domain entities."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from clientledger.domain.entities import (
    AggregationReport,
    Category,
    CategorySummary,
    Client,
    File,
    TransactionView,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def client_json(client: Client) -> dict:
    return {
        "id": client.id,
        "accountant_id": client.accountant_id,
        "first_name": client.first_name,
        "last_name": client.last_name,
        "email": client.email,
        "phone_number": client.phone_number,
        "created_at": _iso(client.created_at),
    }


def file_json(file: File) -> dict:
    return {
        "id": file.id,
        "client_id": file.client_id,
        "accountant_id": file.accountant_id,
        "name": file.name,
        "storage_path": file.storage_path,
        "size": file.size,
        "uploaded_at": _iso(file.uploaded_at),
    }


def category_json(category: Category) -> dict:
    return {"id": category.id, "name": category.name}


def transaction_json(view: TransactionView) -> dict:
    txn = view.transaction
    return {
        "id": txn.id,
        "client_id": txn.client_id,
        "file_id": txn.file_id,
        "accountant_id": txn.accountant_id,
        "tx_amount": _number(txn.tx_amount),
        "tx_narration": txn.tx_narration,
        "tx_timestamp": _iso(txn.tx_timestamp),
        "category_id_by_ai": txn.category_id_by_ai,
        "updated_category_id": txn.updated_category_id,
        "ai_category_name": view.ai_category_name,
        "updated_category_name": view.updated_category_name,
        "effective_category_id": view.effective_category_id,
        "effective_category_name": view.effective_category_name,
        "reason": txn.reason,
        "confidence": txn.confidence,
        "feedback_for_update": txn.feedback_for_update,
        "created_at": _iso(txn.created_at),
        "updated_at": _iso(txn.updated_at),
        "updated_by": txn.updated_by,
    }


def summary_json(summary: CategorySummary) -> dict:
    return {
        "total": float(summary.total),
        "groups": [
            {"name": g.name, "value": float(g.value), "percentage": g.percentage}
            for g in summary.groups
        ],
    }


def report_json(report: AggregationReport) -> dict:
    return {
        "expense": summary_json(report.expense),
        "income": summary_json(report.income),
        "unified": summary_json(report.unified),
        "transactions_by_amount": [
            {"id": line.id, "tx_amount": float(line.amount), "category_name": line.category_name}
            for line in report.transactions_by_amount
        ],
        "has_chart_data": report.has_chart_data,
    }
