"""Tests for the flat budget item list."""

from datetime import date, datetime

import pytest

from conftest import CLOTHES_ID, CREDIT_CARD_ID, insert_expense
from homebudget.services import budget_items, database
from homebudget.services.database import StoreUnavailable


class TestGetBudgetItems:
    """Tests for the joined, balance-annotated item list."""

    def test_empty_budget(self, budget_db):
        """No expenses gives no items."""
        assert budget_items.get_budget_items(None, None, False, 0) == []

    def test_items_sorted_by_date(self, sample_budget):
        """Items come back in date order regardless of insertion order."""
        items = budget_items.get_budget_items(None, None, False, 0)
        dates = [item.date for item in items]
        assert dates == sorted(dates)
        assert len(items) == 7

    def test_same_date_keeps_insertion_order(self, sample_budget):
        """Socks (id 2) and groceries (id 3) share a date."""
        items = budget_items.get_budget_items(None, None, False, 0)
        assert [item.short_description for item in items[:2]] == ['socks', 'groceries']

    def test_running_balance(self, sample_budget):
        """Each balance is the previous balance plus the item's amount."""
        items = budget_items.get_budget_items(None, None, False, 0)
        assert items[0].balance == items[0].amount
        for previous, current in zip(items, items[1:]):
            assert current.balance == pytest.approx(previous.balance + current.amount)
        assert items[-1].balance == pytest.approx(845.0)

    def test_hat_balances(self, hat_budget):
        """Opposite hats net to zero."""
        items = budget_items.get_budget_items(None, None, False, 0)
        assert [item.balance for item in items] == [10, 0]

    def test_item_fields(self, hat_budget):
        """Items carry the joined category description and expense data."""
        item = budget_items.get_budget_items(None, None, False, 0)[0]
        assert item.category_id == CLOTHES_ID
        assert item.expense_id == 1
        assert item.date == date(2018, 1, 10)
        assert item.category_description == 'Clothes'
        assert item.short_description == 'hat'
        assert item.amount == 10

    def test_inclusive_date_bounds(self, sample_budget):
        """Items dated exactly on start or end are included."""
        items = budget_items.get_budget_items(date(2019, 1, 5), date(2019, 1, 20), False, 0)
        assert [item.short_description for item in items] == ['socks', 'groceries', 'refund']

    def test_datetime_bounds_ignore_time(self, sample_budget):
        """A datetime bound covers its whole day."""
        items = budget_items.get_budget_items(
            datetime(2019, 1, 20, 18, 30), datetime(2019, 1, 20, 6, 0), False, 0
        )
        assert [item.short_description for item in items] == ['refund']

    def test_balance_restarts_within_date_range(self, sample_budget):
        """Balances cover only the filtered result set."""
        items = budget_items.get_budget_items(date(2019, 2, 1), None, False, 0)
        assert [item.balance for item in items] == pytest.approx([1000.0, 955.0, 855.0])

    def test_filter_by_category(self, sample_budget):
        """Only the requested category is returned when filtering."""
        items = budget_items.get_budget_items(None, None, True, CLOTHES_ID)
        assert [item.short_description for item in items] == ['socks', 'scarf']
        assert [item.balance for item in items] == pytest.approx([-20.0, -65.0])

    def test_filter_flag_off_ignores_category(self, sample_budget):
        """Without the flag the category id makes no difference."""
        unfiltered = budget_items.get_budget_items(None, None, False, 0)
        assert budget_items.get_budget_items(None, None, False, CLOTHES_ID) == unfiltered
        assert budget_items.get_budget_items(None, None, False, 9999) == unfiltered

    def test_idempotent(self, sample_budget):
        """Repeated calls on an unchanged store give equal results."""
        first = budget_items.get_budget_items(None, None, False, 0)
        assert budget_items.get_budget_items(None, None, False, 0) == first

    def test_items_are_snapshots(self, hat_budget):
        """Renaming a category does not change items already fetched."""
        items = budget_items.get_budget_items(None, None, False, 0)
        hat_budget.execute("UPDATE categories SET description = 'Hats' WHERE id = ?", (CLOTHES_ID,))
        assert items[0].category_description == 'Clothes'
        assert budget_items.get_budget_items(None, None, False, 0)[0].category_description == 'Hats'

    def test_items_are_immutable(self, hat_budget):
        item = budget_items.get_budget_items(None, None, False, 0)[0]
        with pytest.raises(AttributeError):
            item.amount = 5

    def test_late_insert_sorted_in(self, hat_budget):
        """A later insert with an earlier date is listed first."""
        insert_expense(hat_budget, '2017-12-31', CREDIT_CARD_ID, 5, 'gift card')
        items = budget_items.get_budget_items(None, None, False, 0)
        assert items[0].short_description == 'gift card'
        assert [item.balance for item in items] == [5, 15, 5]


class TestStoreUnavailable:
    """Every report propagates a closed store."""

    @pytest.mark.parametrize('report', [
        budget_items.get_budget_items,
        budget_items.get_budget_items_by_category,
        budget_items.get_budget_items_by_month,
        budget_items.get_budget_dictionary_by_category_and_month,
    ])
    def test_no_database_open(self, budget_db, report):
        database.close_db()
        with pytest.raises(StoreUnavailable):
            report(None, None, False, 0)

    @pytest.mark.parametrize('report', [
        budget_items.get_budget_items,
        budget_items.get_budget_items_by_month,
    ])
    def test_connection_closed_underneath(self, budget_db, report):
        budget_db.close()
        with pytest.raises(StoreUnavailable):
            report(None, None, False, 0)
