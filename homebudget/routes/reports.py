"""Budget report routes."""

import json
from datetime import date, datetime
from typing import Optional, Tuple

from homebudget.services import budget_items


def _bad_request(message: str) -> dict:
    return {
        'statusCode': 400,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'error': 'bad_request', 'message': message})
    }


def _ok(body: dict) -> dict:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body)
    }


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f'{name} must be a date (YYYY-MM-DD)') from None


def parse_report_query(query: dict) -> Tuple[Optional[date], Optional[date], bool, int]:
    """Read report filters from query parameters.

    Args:
        query: Query parameters (start, end, filter, category_id)

    Returns:
        Tuple of (start, end, filter_flag, category_id)

    Raises:
        ValueError: if a parameter cannot be parsed
    """
    start = _parse_date(query.get('start'), 'start')
    end = _parse_date(query.get('end'), 'end')
    filter_flag = str(query.get('filter', 'false')).lower() == 'true'

    try:
        category_id = int(query.get('category_id', 0) or 0)
    except ValueError:
        raise ValueError('category_id must be an integer') from None

    return start, end, filter_flag, category_id


def handle_budget_items(query: dict) -> dict:
    """List budget items with running balances.

    Args:
        query: Query parameters (start, end, filter, category_id)

    Returns:
        Response with budget item list
    """
    try:
        filters = parse_report_query(query)
    except ValueError as e:
        return _bad_request(str(e))

    items = budget_items.get_budget_items(*filters)
    return _ok({'items': [item.to_dict() for item in items]})


def handle_by_category(query: dict) -> dict:
    """Budget items grouped by category."""
    try:
        filters = parse_report_query(query)
    except ValueError as e:
        return _bad_request(str(e))

    groups = budget_items.get_budget_items_by_category(*filters)
    return _ok({'categories': [group.to_dict() for group in groups]})


def handle_by_month(query: dict) -> dict:
    """Budget items grouped by month."""
    try:
        filters = parse_report_query(query)
    except ValueError as e:
        return _bad_request(str(e))

    groups = budget_items.get_budget_items_by_month(*filters)
    return _ok({'months': [group.to_dict() for group in groups]})


def handle_by_category_and_month(query: dict) -> dict:
    """Month-by-category cross-tab, as flat records ending with TOTALS."""
    try:
        filters = parse_report_query(query)
    except ValueError as e:
        return _bad_request(str(e))

    records = budget_items.get_budget_dictionary_by_category_and_month(*filters)
    return _ok({'records': [record.to_dict() for record in records]})
