"""Budget item reports: flat list, by category, by month, and cross-tab.

Every report re-reads the database; nothing is cached between calls.
Amounts are signed, so an expense of $15 is stored and reported as -15.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

from aws_lambda_powertools import Logger

from homebudget.models.entities import (
    BudgetItem,
    BudgetItemsByCategory,
    BudgetItemsByMonth,
    CategoryMonthSummary,
    MonthRecord,
    TotalsRecord,
    parse_date,
)
from homebudget.services import categories, database

logger = Logger(service="homebudget-reports")

# Stand-ins for an open-ended date range
EARLIEST_DATE = date(1900, 1, 1)
LATEST_DATE = date(2500, 1, 1)

DateBound = Optional[Union[date, datetime]]


def _date_str(value: Union[date, datetime]) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _date_range(start: DateBound, end: DateBound) -> Tuple[str, str]:
    return (
        _date_str(start if start is not None else EARLIEST_DATE),
        _date_str(end if end is not None else LATEST_DATE),
    )


def _category_filter(filter_flag: bool, category_id: int, column: str) -> Tuple[str, tuple]:
    """SQL fragment and params for the optional category filter."""
    if not filter_flag:
        return '', ()
    return f' AND {column} = ?', (category_id,)


def get_budget_items(start: DateBound, end: DateBound,
                     filter_flag: bool, category_id: int) -> List[BudgetItem]:
    """Get budget items in date order with a running balance.

    Args:
        start: First date to include, or None for no lower bound
        end: Last date to include, or None for no upper bound
        filter_flag: Only include items of category_id when True
        category_id: Category to keep; ignored unless filter_flag is set

    Returns:
        Budget items sorted by date; items on the same date keep store order

    Raises:
        StoreUnavailable: if the database is not open
    """
    start_str, end_str = _date_range(start, end)
    category_sql, category_params = _category_filter(filter_flag, category_id, 'e.category_id')

    sql = f"""
        SELECT
            e.id AS expense_id,
            e.date,
            e.amount,
            e.description AS short_description,
            c.id AS category_id,
            c.description AS category_description
        FROM expenses e
        JOIN categories c ON c.id = e.category_id
        WHERE e.date BETWEEN ? AND ?{category_sql}
        ORDER BY e.date, e.id
    """
    rows = database.fetch_all(sql, (start_str, end_str) + category_params)

    items = []
    balance = 0.0
    for row in rows:
        amount = float(row['amount'])
        balance += amount
        items.append(BudgetItem(
            category_id=row['category_id'],
            expense_id=row['expense_id'],
            date=parse_date(row['date']),
            category_description=row['category_description'],
            short_description=row['short_description'],
            amount=amount,
            balance=balance
        ))

    logger.debug(
        "Budget items loaded",
        extra={
            "start": start_str,
            "end": end_str,
            "filter_flag": filter_flag,
            "category_id": category_id,
            "item_count": len(items)
        }
    )
    return items


def _category_totals(start: DateBound, end: DateBound,
                     filter_flag: bool, category_id: int) -> Dict[str, float]:
    """Sum amounts per category description with the same filter as the items."""
    start_str, end_str = _date_range(start, end)
    category_sql, category_params = _category_filter(filter_flag, category_id, 'e.category_id')

    sql = f"""
        SELECT c.description AS category_description, SUM(e.amount) AS total
        FROM expenses e
        JOIN categories c ON c.id = e.category_id
        WHERE e.date BETWEEN ? AND ?{category_sql}
        GROUP BY c.description
    """
    rows = database.fetch_all(sql, (start_str, end_str) + category_params)
    return {row['category_description']: row['total'] or 0.0 for row in rows}


def get_budget_items_by_category(start: DateBound, end: DateBound,
                                 filter_flag: bool, category_id: int) -> List[BudgetItemsByCategory]:
    """Group budget items by category description.

    Grouping uses the description, not the id, so categories sharing a
    description fall into one group. Balances stay those of the full list.

    Args:
        start: First date to include, or None
        end: Last date to include, or None
        filter_flag: Only include items of category_id when True
        category_id: Category to keep; ignored unless filter_flag is set

    Returns:
        One group per description, sorted by description
    """
    items = get_budget_items(start, end, filter_flag, category_id)

    grouped: Dict[str, List[BudgetItem]] = {}
    for item in items:
        grouped.setdefault(item.category_description, []).append(item)

    # Totals come from the database rather than summing details
    totals = _category_totals(start, end, filter_flag, category_id)

    return [
        BudgetItemsByCategory(
            category=description,
            details=grouped[description],
            total=totals.get(description, 0.0)
        )
        for description in sorted(grouped)
    ]


def _month_total(month_key: str, start: DateBound, end: DateBound,
                 filter_flag: bool, category_id: int) -> float:
    """Sum amounts within one 'yyyy-MM' month, clipped to start/end.

    Dates are compared as text, so day 31 bounds every month.
    """
    sql = "SELECT SUM(amount) AS total FROM expenses WHERE date BETWEEN ? AND ?"
    params: tuple = (month_key + '-01', month_key + '-31')

    if start is not None:
        sql += " AND date >= ?"
        params += (_date_str(start),)
    if end is not None:
        sql += " AND date <= ?"
        params += (_date_str(end),)

    category_sql, category_params = _category_filter(filter_flag, category_id, 'category_id')
    sql += category_sql
    params += category_params

    total = database.fetch_scalar(sql, params)
    return float(total) if total is not None else 0.0


def get_budget_items_by_month(start: DateBound, end: DateBound,
                              filter_flag: bool, category_id: int) -> List[BudgetItemsByMonth]:
    """Group budget items by calendar month.

    Args:
        start: First date to include, or None
        end: Last date to include, or None
        filter_flag: Only include items of category_id when True
        category_id: Category to keep; ignored unless filter_flag is set

    Returns:
        One group per month ('yyyy/MM'), in chronological order
    """
    items = get_budget_items(start, end, filter_flag, category_id)

    grouped: Dict[str, List[BudgetItem]] = {}
    for item in items:
        grouped.setdefault(item.date.strftime('%Y-%m'), []).append(item)

    summary = []
    for month_key, details in grouped.items():
        summary.append(BudgetItemsByMonth(
            month=month_key.replace('-', '/'),
            details=details,
            total=_month_total(month_key, start, end, filter_flag, category_id)
        ))
    return summary


def get_budget_dictionary_by_category_and_month(
        start: DateBound, end: DateBound,
        filter_flag: bool, category_id: int) -> List[Union[MonthRecord, TotalsRecord]]:
    """Cross-tab budget items by month and category.

    Returns one MonthRecord per month that has items, each holding a
    subtotal and details for every category present that month, followed
    by a TotalsRecord with each category's total over all months.
    Categories that never appear are left out of the totals, not zeroed.

    Args:
        start: First date to include, or None
        end: Last date to include, or None
        filter_flag: Only include items of category_id when True
        category_id: Category to keep; ignored unless filter_flag is set

    Returns:
        Month records in chronological order, then the totals record
    """
    months = get_budget_items_by_month(start, end, filter_flag, category_id)

    records: List[Union[MonthRecord, TotalsRecord]] = []
    totals_per_category: Dict[str, float] = {}

    for month_group in months:
        grouped: Dict[str, List[BudgetItem]] = {}
        for item in month_group.details:
            grouped.setdefault(item.category_description, []).append(item)

        month_categories: Dict[str, CategoryMonthSummary] = {}
        for description in sorted(grouped):
            details = grouped[description]
            total = sum(item.amount for item in details)
            month_categories[description] = CategoryMonthSummary(total=total, details=details)
            totals_per_category[description] = totals_per_category.get(description, 0.0) + total

        records.append(MonthRecord(
            month=month_group.month,
            total=month_group.total,
            categories=month_categories
        ))

    grand_totals: Dict[str, float] = {}
    for category in categories.list_categories():
        if category.description in totals_per_category:
            grand_totals[category.description] = totals_per_category[category.description]

    records.append(TotalsRecord(categories=grand_totals))
    return records
