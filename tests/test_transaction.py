"""Tests for transaction listing, sorting and category overrides."""

from dataclasses import replace

import pytest

from clientledger.domain.entities import CategoryPatch, SortMode
from clientledger.domain.errors import NotFoundError, PartialUpdateError, ValidationError
from clientledger.domain.transaction import parse_sort_mode, sort_transactions

from conftest import ACCOUNTANT_ID, OTHER_ACCOUNTANT_ID


def _names(views):
    return [v.effective_category_name for v in views]


def test_parse_sort_mode_defaults_to_newest_first():
    assert parse_sort_mode(None) is SortMode.CREATED_DESC
    assert parse_sort_mode("") is SortMode.CREATED_DESC
    assert parse_sort_mode("category_asc") is SortMode.CATEGORY_ASC


def test_parse_sort_mode_rejects_unknown():
    with pytest.raises(ValidationError, match="Unknown sort mode"):
        parse_sort_mode("amount")


class TestEffectiveCategory:
    """Override takes precedence over the AI category."""

    def test_ai_category_when_no_override(self, sample_transactions):
        first = sample_transactions[0]
        assert first.effective_category_id == first.transaction.category_id_by_ai
        assert first.effective_category_name == "Groceries"

    def test_override_wins(self, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        target = sample_transactions[0]
        transaction_service.apply_overrides(
            ACCOUNTANT_ID,
            sample_client.id,
            sample_file.id,
            [CategoryPatch(id=target.id, updated_category_id=sample_categories["Rent"], accountant_id=ACCOUNTANT_ID)],
        )

        views = transaction_service.list_by_file(ACCOUNTANT_ID, sample_client.id, sample_file.id, "created_asc")
        updated = views[0]
        assert updated.effective_category_id == sample_categories["Rent"]
        assert updated.effective_category_name == "Rent"
        assert updated.ai_category_name == "Groceries"

    def test_uncategorized_has_no_effective_category(self, sample_transactions):
        last = sample_transactions[-1]
        assert last.effective_category_id is None
        assert last.effective_category_name is None


class TestSorting:
    """Tests for the four sort modes."""

    def test_created_asc_and_desc(self, transaction_service, sample_client, sample_file, sample_transactions):
        asc = transaction_service.list_by_file(ACCOUNTANT_ID, sample_client.id, sample_file.id, "created_asc")
        desc = transaction_service.list_by_file(ACCOUNTANT_ID, sample_client.id, sample_file.id, "created_desc")

        assert [v.id for v in asc] == [v.id for v in sample_transactions]
        assert [v.id for v in desc] == [v.id for v in reversed(sample_transactions)]

    def test_default_is_newest_first(self, transaction_service, sample_client, sample_file, sample_transactions):
        views = transaction_service.list_by_file(ACCOUNTANT_ID, sample_client.id, sample_file.id)
        assert views[0].id == sample_transactions[-1].id

    def test_category_asc_puts_uncategorized_first(self, sample_transactions):
        ordered = sort_transactions(sample_transactions, SortMode.CATEGORY_ASC)
        assert _names(ordered) == [None, "Groceries", "Groceries", "Rent", "Salary"]

    def test_category_sort_is_stable(self, sample_transactions):
        groceries = [v.id for v in sample_transactions if v.effective_category_name == "Groceries"]

        asc = [v.id for v in sort_transactions(sample_transactions, "category_asc") if v.effective_category_name == "Groceries"]
        desc = [v.id for v in sort_transactions(sample_transactions, "category_desc") if v.effective_category_name == "Groceries"]

        assert asc == groceries
        assert desc == groceries

    def test_category_desc(self, sample_transactions):
        ordered = sort_transactions(sample_transactions, "category_desc")
        assert _names(ordered) == ["Salary", "Rent", "Groceries", "Groceries", None]

    def test_category_sort_ignores_case(self, sample_transactions):
        views = [
            replace(sample_transactions[0], ai_category_name="banking"),
            replace(sample_transactions[1], ai_category_name="Travel"),
            replace(sample_transactions[2], ai_category_name="Car"),
        ]
        ordered = sort_transactions(views, "category_asc")
        assert _names(ordered) == ["banking", "Car", "Travel"]

    def test_sorting_uses_override_name(self, sample_transactions):
        first = sample_transactions[0]
        overridden = replace(
            first,
            transaction=replace(first.transaction, updated_category_id=999),
            updated_category_name="Zoo",
        )
        views = [overridden] + list(sample_transactions[1:4])

        ordered = sort_transactions(views, "category_desc")
        assert ordered[0].id == first.id

    def test_sort_does_not_modify_input(self, sample_transactions):
        before = list(sample_transactions)
        sort_transactions(sample_transactions, "category_desc")
        assert sample_transactions == before


class TestScope:
    """Listing is limited to the accountant's clients."""

    def test_other_accountant_cannot_list(self, transaction_service, sample_client, sample_file, sample_transactions):
        with pytest.raises(NotFoundError):
            transaction_service.list_by_file(OTHER_ACCOUNTANT_ID, sample_client.id, sample_file.id)

    def test_list_by_client(self, transaction_service, sample_client, sample_transactions):
        assert len(transaction_service.list_by_client(ACCOUNTANT_ID, sample_client.id)) == 5


class TestPendingPatches:
    """Tests for turning edits into patches."""

    def test_no_op_edits_are_skipped(self, transaction_service, sample_transactions, sample_categories):
        groceries, rent = sample_transactions[0], sample_transactions[1]
        edits = {
            groceries.id: sample_categories["Groceries"],
            rent.id: sample_categories["Utilities"],
        }

        patches = transaction_service.pending_patches(sample_transactions, edits, ACCOUNTANT_ID)

        assert [p.id for p in patches] == [rent.id]
        assert patches[0].updated_category_id == sample_categories["Utilities"]
        assert patches[0].accountant_id == ACCOUNTANT_ID

    def test_feedback_is_attached(self, transaction_service, sample_transactions, sample_categories):
        target = sample_transactions[0]
        patches = transaction_service.pending_patches(
            sample_transactions,
            {target.id: sample_categories["Rent"]},
            ACCOUNTANT_ID,
            feedback={target.id: "Paid to landlord"},
        )
        assert patches[0].feedback_for_update == "Paid to landlord"

    def test_unknown_ids_are_kept(self, transaction_service, sample_transactions, sample_categories):
        patches = transaction_service.pending_patches(
            sample_transactions, {9999: sample_categories["Rent"]}, ACCOUNTANT_ID
        )
        assert [p.id for p in patches] == [9999]


class TestApplyOverrides:
    """Tests for category overrides."""

    def test_applies_and_records_who(self, temp_db, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        target = sample_transactions[4]
        applied = transaction_service.apply_overrides(
            ACCOUNTANT_ID,
            sample_client.id,
            sample_file.id,
            [
                CategoryPatch(
                    id=target.id,
                    updated_category_id=sample_categories["Utilities"],
                    accountant_id=ACCOUNTANT_ID,
                    feedback_for_update="Electricity bill",
                )
            ],
        )

        assert applied == [target.id]
        stored = temp_db.get_transaction(target.id)
        assert stored.updated_category_id == sample_categories["Utilities"]
        assert stored.updated_by == ACCOUNTANT_ID
        assert stored.feedback_for_update == "Electricity bill"
        assert stored.category_id_by_ai is None

    def test_out_of_scope_patch_fails_alone(self, temp_db, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        good = sample_transactions[0]
        other_file_id = temp_db.create_file(
            client_id=sample_client.id, accountant_id=ACCOUNTANT_ID, name="other.pdf", storage_path="clients/x/other.pdf"
        )
        patches = [
            CategoryPatch(id=good.id, updated_category_id=sample_categories["Rent"], accountant_id=ACCOUNTANT_ID),
            CategoryPatch(id=9999, updated_category_id=sample_categories["Rent"], accountant_id=ACCOUNTANT_ID),
        ]

        with pytest.raises(PartialUpdateError) as exc_info:
            transaction_service.apply_overrides(ACCOUNTANT_ID, sample_client.id, sample_file.id, patches)

        error = exc_info.value
        assert error.applied == [good.id]
        assert [tx_id for tx_id, _ in error.failures] == [9999]
        assert "- tx 9999:" in str(error)
        assert temp_db.get_transaction(good.id).updated_category_id == sample_categories["Rent"]

        # Correct id, wrong file scope
        with pytest.raises(PartialUpdateError):
            transaction_service.apply_overrides(
                ACCOUNTANT_ID,
                sample_client.id,
                other_file_id,
                [CategoryPatch(id=good.id, updated_category_id=sample_categories["Salary"], accountant_id=ACCOUNTANT_ID)],
            )
        assert temp_db.get_transaction(good.id).updated_category_id == sample_categories["Rent"]

    def test_oversized_id_fails_alone(self, temp_db, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        good = sample_transactions[1]
        patches = [
            CategoryPatch(id=2**64, updated_category_id=sample_categories["Salary"], accountant_id=ACCOUNTANT_ID),
            CategoryPatch(id=good.id, updated_category_id=sample_categories["Salary"], accountant_id=ACCOUNTANT_ID),
        ]

        with pytest.raises(PartialUpdateError) as exc_info:
            transaction_service.apply_overrides(ACCOUNTANT_ID, sample_client.id, sample_file.id, patches)

        assert exc_info.value.failures[0][0] == 2**64
        assert exc_info.value.applied == [good.id]
        assert temp_db.get_transaction(good.id).updated_category_id == sample_categories["Salary"]

    def test_unknown_category_fails(self, transaction_service, sample_client, sample_file, sample_transactions):
        patch = CategoryPatch(id=sample_transactions[0].id, updated_category_id=9999, accountant_id=ACCOUNTANT_ID)

        with pytest.raises(PartialUpdateError) as exc_info:
            transaction_service.apply_overrides(ACCOUNTANT_ID, sample_client.id, sample_file.id, [patch])
        assert "Category 9999 not found" in exc_info.value.failures[0][1]

    def test_clearing_override_restores_ai_category(self, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        target = sample_transactions[0]
        scope = (ACCOUNTANT_ID, sample_client.id, sample_file.id)
        transaction_service.apply_overrides(
            *scope, [CategoryPatch(id=target.id, updated_category_id=sample_categories["Rent"], accountant_id=ACCOUNTANT_ID)]
        )
        transaction_service.apply_overrides(
            *scope, [CategoryPatch(id=target.id, updated_category_id=None, accountant_id=ACCOUNTANT_ID)]
        )

        views = transaction_service.list_by_file(*scope, "created_asc")
        assert views[0].transaction.updated_category_id is None
        assert views[0].effective_category_name == "Groceries"

    def test_other_accountant_is_rejected(self, transaction_service, sample_client, sample_file, sample_transactions, sample_categories):
        patch = CategoryPatch(id=sample_transactions[0].id, updated_category_id=sample_categories["Rent"], accountant_id=OTHER_ACCOUNTANT_ID)
        with pytest.raises(NotFoundError):
            transaction_service.apply_overrides(OTHER_ACCOUNTANT_ID, sample_client.id, sample_file.id, [patch])

    def test_empty_patch_list(self, transaction_service, sample_client, sample_file):
        assert transaction_service.apply_overrides(ACCOUNTANT_ID, sample_client.id, sample_file.id, []) == []
