"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from homebudget.services import database  # noqa: E402

# Default category ids (see database.DEFAULT_CATEGORIES)
CREDIT_CARD_ID = 9
CLOTHES_ID = 10
SAVINGS_ID = 15
INCOME_ID = 16


@pytest.fixture
def db_path(tmp_path):
    """Path for a throwaway database file."""
    return str(tmp_path / 'budget.db')


@pytest.fixture
def budget_db(db_path):
    """Fresh database with the default categories."""
    conn = database.open_database(db_path, new_db=True)
    yield conn
    database.close_db()


def insert_expense(conn, expense_date: str, category_id: int, amount: float, description: str) -> int:
    """Insert an expense directly, bypassing sign validation."""
    cursor = conn.execute(
        "INSERT INTO expenses (date, amount, description, category_id) VALUES (?, ?, ?, ?)",
        (expense_date, amount, description, category_id)
    )
    conn.commit()
    return cursor.lastrowid


@pytest.fixture
def hat_budget(budget_db):
    """Two opposite 'hat' entries in January 2018."""
    insert_expense(budget_db, '2018-01-10', CLOTHES_ID, 10, 'hat')
    insert_expense(budget_db, '2018-01-11', CREDIT_CARD_ID, -10, 'hat')
    return budget_db


@pytest.fixture
def sample_budget(budget_db):
    """Expenses over three months and several categories.

    Inserted out of date order so ordering is exercised.
    """
    rows = [
        ('2019-02-01', INCOME_ID, 1000.0, 'pay'),
        ('2019-01-05', CLOTHES_ID, -20.0, 'socks'),
        ('2019-01-05', 3, -12.5, 'groceries'),
        ('2019-01-20', CREDIT_CARD_ID, 30.0, 'refund'),
        ('2019-02-14', CLOTHES_ID, -45.0, 'scarf'),
        ('2019-03-01', SAVINGS_ID, -100.0, 'rainy day'),
        ('2019-01-31', 3, -7.5, 'milk'),
    ]
    for row in rows:
        insert_expense(budget_db, *row)
    return budget_db
