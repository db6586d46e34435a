"""Tests for domain entities."""

from dataclasses import FrozenInstanceError
from datetime import datetime, UTC
from decimal import Decimal

import pytest

from clientledger.domain.entities import (
    AggregationReport,
    AmountLine,
    CategorySummary,
    Client,
    InvalidEvent,
    SortMode,
    Transaction,
    TransactionView,
    WebhookResult,
)


def _transaction(ai=None, override=None):
    now = datetime.now(UTC)
    return Transaction(
        id=1,
        client_id=1,
        file_id=1,
        accountant_id="acct-1",
        tx_amount=Decimal("-1.00"),
        tx_narration=None,
        tx_timestamp=None,
        category_id_by_ai=ai,
        updated_category_id=override,
        reason=None,
        confidence=None,
        feedback_for_update=None,
        created_at=now,
        updated_at=now,
        updated_by=None,
    )


class TestTransaction:
    """Tests for Transaction and TransactionView."""

    @pytest.mark.parametrize(
        "ai,override,expected",
        [(None, None, None), (3, None, 3), (3, 4, 4), (None, 4, 4)],
    )
    def test_effective_category_id(self, ai, override, expected):
        assert _transaction(ai, override).effective_category_id == expected

    def test_effective_name_follows_id(self):
        assert TransactionView(_transaction(3, 4), "AI", "Override").effective_category_name == "Override"
        assert TransactionView(_transaction(3, None), "AI", None).effective_category_name == "AI"
        assert TransactionView(_transaction(None, None), None, None).effective_category_name is None

    def test_immutability(self):
        txn = _transaction()
        with pytest.raises(FrozenInstanceError):
            txn.updated_category_id = 5


def test_client_full_name():
    client = Client(1, "acct-1", "Ada", "Lovelace", "ada@example.com", None, datetime.now(UTC))
    assert client.full_name == "Ada Lovelace"


def test_sort_mode_values():
    assert [m.value for m in SortMode] == ["created_desc", "created_asc", "category_asc", "category_desc"]


def test_webhook_result_to_dict():
    result = WebhookResult(inserted=2, invalids=(InvalidEvent(0, "Missing required field: client_id"),))

    assert result.ok
    assert result.to_dict() == {
        "ok": True,
        "inserted": 2,
        "invalids": [{"index": 0, "error": "Missing required field: client_id"}],
    }
    assert not WebhookResult(inserted=0).ok


def test_report_without_groups_has_no_chart_data():
    empty = CategorySummary(total=Decimal("0"))
    assert not AggregationReport(empty, empty, empty).has_chart_data


def test_amount_line_direction():
    assert AmountLine(1, Decimal("-3"), "Food").is_expense
    assert not AmountLine(2, Decimal("3"), "Salary").is_expense
