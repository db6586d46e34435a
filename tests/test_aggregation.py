"""Tests for category aggregation."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import pytest

from clientledger.domain.aggregation import build_report, summarize
from clientledger.domain.entities import UNCATEGORIZED
from clientledger.domain.errors import NotFoundError

from conftest import ACCOUNTANT_ID, OTHER_ACCOUNTANT_ID


@dataclass(frozen=True)
class Line:
    """Minimal stand-in exposing what aggregation reads."""

    id: int
    tx_amount: Optional[Decimal]
    effective_category_name: Optional[str]


def _lines(*specs):
    return [Line(i, None if amount is None else Decimal(amount), name) for i, (amount, name) in enumerate(specs, 1)]


class TestSummarize:
    """Tests for grouping one subset."""

    def test_groups_absolute_sums(self):
        summary = summarize(_lines(("-30", "Food"), ("-70", "Rent"), ("-20", "Food")))

        assert summary.total == Decimal("120")
        assert [(g.name, g.value) for g in summary.groups] == [
            ("Food", Decimal("50")),
            ("Rent", Decimal("70")),
        ]

    def test_first_encounter_order(self):
        summary = summarize(_lines(("-1", "B"), ("-1", "A"), ("-1", "B"), ("-1", "C")))
        assert [g.name for g in summary.groups] == ["B", "A", "C"]

    def test_uncategorized_bucket(self):
        summary = summarize(_lines(("-10", None), ("-5", "Food"), ("-1", "")))

        names = [g.name for g in summary.groups]
        assert names == [UNCATEGORIZED, "Food"]
        assert summary.groups[0].value == Decimal("11")

    def test_zero_and_missing_amounts_are_excluded(self):
        summary = summarize(_lines(("0", "Zero"), (None, "Missing"), ("-5", "Food")))

        assert [g.name for g in summary.groups] == ["Food"]
        assert summary.total == Decimal("5")

    def test_percentages_sum_to_100(self):
        summary = summarize(_lines(("-1", "A"), ("-1", "B"), ("-1", "C")))

        assert sum(g.percentage for g in summary.groups) == pytest.approx(100.0)
        assert summary.groups[0].percentage == pytest.approx(100 / 3)

    def test_empty_subset(self):
        summary = summarize([])
        assert summary.total == Decimal("0")
        assert summary.groups == ()

    def test_idempotent_and_input_unchanged(self):
        lines = _lines(("-10", "A"), ("20", "B"), ("-5", None))
        snapshot = list(lines)

        assert summarize(lines) == summarize(lines)
        assert lines == snapshot


class TestBuildReport:
    """Tests for expense/income/unified reports."""

    def test_splits_by_sign(self):
        report = build_report(_lines(("-100", "Rent"), ("250", "Salary"), ("-50", "Food")))

        assert [g.name for g in report.expense.groups] == ["Rent", "Food"]
        assert report.expense.total == Decimal("150")
        assert [g.name for g in report.income.groups] == ["Salary"]
        assert report.income.total == Decimal("250")
        assert report.unified.total == Decimal("400")
        assert report.has_chart_data

    def test_empty_income(self):
        report = build_report(_lines(("-10", "Food")))
        assert report.income.total == Decimal("0")
        assert report.income.groups == ()

    def test_only_zero_amounts_has_no_chart_data(self):
        report = build_report(_lines(("0", "Food")))
        assert not report.has_chart_data
        assert report.transactions_by_amount == ()

    def test_transactions_by_amount(self):
        report = build_report(_lines(("-10", "Food"), ("300", "Salary"), ("-120", None)))

        assert [line.amount for line in report.transactions_by_amount] == [
            Decimal("300"),
            Decimal("-120"),
            Decimal("-10"),
        ]
        assert report.transactions_by_amount[1].category_name == UNCATEGORIZED
        assert report.transactions_by_amount[1].is_expense


class TestAggregationService:
    """Tests for reports built from stored transactions."""

    def test_file_report(self, aggregation_service, sample_client, sample_file, sample_transactions):
        report = aggregation_service.file_report(ACCOUNTANT_ID, sample_client.id, sample_file.id)

        assert report.expense.total == Decimal("1355.00")
        assert [g.name for g in report.expense.groups] == ["Groceries", "Rent", UNCATEGORIZED]
        assert report.expense.groups[0].value == Decimal("75.00")
        assert report.income.total == Decimal("3000.00")

    def test_report_follows_overrides(self, aggregation_service, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        from clientledger.domain.entities import CategoryPatch

        uncategorized = sample_transactions[4]
        transaction_service.apply_overrides(
            ACCOUNTANT_ID,
            sample_client.id,
            sample_file.id,
            [CategoryPatch(id=uncategorized.id, updated_category_id=sample_categories["Utilities"], accountant_id=ACCOUNTANT_ID)],
        )

        report = aggregation_service.file_report(ACCOUNTANT_ID, sample_client.id, sample_file.id)
        assert [g.name for g in report.expense.groups] == ["Groceries", "Rent", "Utilities"]

    def test_preview_applies_pending_edits(self, aggregation_service, sample_client, sample_file, sample_transactions, sample_categories):
        rent = sample_transactions[1]
        report = aggregation_service.file_report(
            ACCOUNTANT_ID,
            sample_client.id,
            sample_file.id,
            pending_edits={rent.id: sample_categories["Utilities"]},
        )

        assert "Rent" not in [g.name for g in report.expense.groups]
        assert "Utilities" in [g.name for g in report.expense.groups]

    def test_preview_does_not_persist(self, temp_db, aggregation_service, sample_transactions, sample_categories):
        rent = sample_transactions[1]
        previewed = aggregation_service.preview(sample_transactions, {rent.id: sample_categories["Salary"]})

        assert previewed[1].effective_category_name == "Salary"
        assert sample_transactions[1].effective_category_name == "Rent"
        assert temp_db.get_transaction(rent.id).updated_category_id is None

    def test_preview_clearing_shows_ai_category(self, aggregation_service, sample_transactions):
        groceries = sample_transactions[0]
        previewed = aggregation_service.preview(sample_transactions, {groceries.id: None})
        assert previewed[0].effective_category_name == "Groceries"

    def test_client_report(self, aggregation_service, sample_client, sample_transactions):
        report = aggregation_service.client_report(ACCOUNTANT_ID, sample_client.id)
        assert report.unified.total == Decimal("4355.00")

    def test_other_accountant_is_rejected(self, aggregation_service, sample_client, sample_file):
        with pytest.raises(NotFoundError):
            aggregation_service.file_report(OTHER_ACCOUNTANT_ID, sample_client.id, sample_file.id)
