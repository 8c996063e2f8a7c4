"""Expense management routes."""

import json
from datetime import datetime
from typing import Any, Tuple

from homebudget.services import expenses


def _error(status_code: int, error: str, message: str) -> dict:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'error': error, 'message': message})
    }


def _parse_expense_body(body: dict) -> Tuple[Any, int, float, str]:
    """Validate and convert expense fields.

    Raises:
        ValueError: if a field is missing or malformed
    """
    for field in ['date', 'category_id', 'amount']:
        if body.get(field) in (None, ''):
            raise ValueError(f'{field} is required')

    try:
        expense_date = datetime.strptime(body['date'], '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValueError('date must be a date (YYYY-MM-DD)') from None

    try:
        category_id = int(body['category_id'])
        amount = float(body['amount'])
    except (TypeError, ValueError):
        raise ValueError('category_id and amount must be numbers') from None

    return expense_date, category_id, amount, str(body.get('description', ''))


def handle_list() -> dict:
    """List all expenses.

    Returns:
        Response with expense list
    """
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'expenses': [e.to_dict() for e in expenses.list_expenses()]})
    }


def handle_create(body: dict) -> dict:
    """Create a new expense.

    Args:
        body: Expense data (date, category_id, amount, description)

    Returns:
        Response with created expense
    """
    try:
        expense = expenses.add_expense(*_parse_expense_body(body))
    except ValueError as e:
        return _error(400, 'bad_request', str(e))

    return {
        'statusCode': 201,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(expense.to_dict())
    }


def handle_update(expense_id: int, body: dict) -> dict:
    """Update an expense.

    Missing fields keep their current values.

    Args:
        expense_id: Expense ID
        body: Updated expense data

    Returns:
        Response with updated expense
    """
    try:
        current = expenses.get_expense(expense_id)
    except LookupError:
        return _error(404, 'not_found', 'Expense not found')

    merged = current.to_dict()
    merged.update({k: v for k, v in body.items() if k in merged and k != 'id'})

    try:
        updated = expenses.update_expense(expense_id, *_parse_expense_body(merged))
    except ValueError as e:
        return _error(400, 'bad_request', str(e))

    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(updated.to_dict())
    }


def handle_delete(expense_id: int) -> dict:
    """Delete an expense."""
    if not expenses.delete_expense(expense_id):
        return _error(404, 'not_found', 'Expense not found')

    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'deleted': True})
    }
