"""Expense store."""

from datetime import date
from typing import List

from aws_lambda_powertools import Logger

from homebudget.models.entities import Expense, parse_date, type_is_positive
from homebudget.services import categories, database

logger = Logger(service="homebudget-expenses")


def _ensure_amount_matches_category_sign(amount: float, category_id: int) -> None:
    """Reject amounts whose sign does not fit the category type.

    Raises:
        ValueError: if the category is missing or the sign is wrong
    """
    try:
        category = categories.get_category(category_id)
    except LookupError:
        raise ValueError('Category does not exist.') from None

    if type_is_positive(category.type) and amount < 0:
        raise ValueError('Negative expense amounts cannot go into positive categories.')
    if not type_is_positive(category.type) and amount > 0:
        raise ValueError('Positive expense amounts cannot go into negative categories.')


def list_expenses() -> List[Expense]:
    """Get all expenses in id order."""
    rows = database.fetch_all(
        "SELECT id, date, amount, description, category_id FROM expenses ORDER BY id"
    )
    return [Expense.from_row(row) for row in rows]


def get_expense(expense_id: int) -> Expense:
    """Get an expense by ID.

    Raises:
        LookupError: if no expense has this id
    """
    row = database.fetch_one(
        "SELECT id, date, amount, description, category_id FROM expenses WHERE id = ?",
        (expense_id,)
    )
    if row is None:
        raise LookupError(f'Cannot find expense with id {expense_id}')
    return Expense.from_row(row)


def add_expense(expense_date: date, category_id: int, amount: float, description: str) -> Expense:
    """Create a new expense.

    Args:
        expense_date: Date of the expense
        category_id: Category ID
        amount: Signed amount; must match the category's polarity
        description: Short description

    Returns:
        Created expense
    """
    _ensure_amount_matches_category_sign(amount, category_id)

    with database.transaction():
        database.execute(
            "INSERT INTO expenses (date, amount, description, category_id) VALUES (?, ?, ?, ?)",
            (parse_date(expense_date).isoformat(), amount, description, category_id)
        )
        expense_id = database.last_insert_id()

    logger.info("Expense added", extra={"expense_id": expense_id, "category_id": category_id})
    return get_expense(expense_id)


def update_expense(expense_id: int, expense_date: date, category_id: int,
                   amount: float, description: str) -> Expense:
    """Replace all properties of an expense.

    Raises:
        LookupError: if the expense does not exist
        ValueError: if the amount sign does not match the category
    """
    get_expense(expense_id)
    _ensure_amount_matches_category_sign(amount, category_id)

    with database.transaction():
        database.execute(
            """UPDATE expenses
               SET date = ?, amount = ?, description = ?, category_id = ?
               WHERE id = ?""",
            (parse_date(expense_date).isoformat(), amount, description, category_id, expense_id)
        )

    logger.info("Expense updated", extra={"expense_id": expense_id})
    return get_expense(expense_id)


def delete_expense(expense_id: int) -> bool:
    """Delete an expense.

    Returns:
        True if deleted, False if not found
    """
    with database.transaction():
        cursor = database.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Expense deleted", extra={"expense_id": expense_id})
    return deleted
