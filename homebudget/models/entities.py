"""Data model entities."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class CategoryType(Enum):
    """Category types.

    Values match the ids stored in the category_types table.
    """
    INCOME = 1
    EXPENSE = 2
    CREDIT = 3
    SAVINGS = 4

    @property
    def label(self) -> str:
        """Display name, e.g. 'Credit'."""
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> 'CategoryType':
        """Parse a type from its name ('Expense', 'expense', 'EXPENSE')."""
        try:
            return cls[str(label).strip().upper()]
        except KeyError:
            raise ValueError(f'Unknown category type: {label}') from None


def type_is_positive(category_type: CategoryType) -> bool:
    """Whether amounts in categories of this type must be positive.

    Income and Credit are positive; Expense and Savings are negative.
    """
    return category_type in (CategoryType.INCOME, CategoryType.CREDIT)


def parse_date(value: Any) -> date:
    """Parse a stored 'YYYY-MM-DD' string (or pass through a date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value[:10], '%Y-%m-%d').date()


@dataclass(frozen=True)
class Category:
    """Expense category."""
    id: int
    description: str
    type: CategoryType

    @classmethod
    def from_row(cls, d: dict) -> 'Category':
        """Create from database row dict."""
        return cls(
            id=d['id'],
            description=d['description'],
            type=CategoryType(d['type_id'])
        )

    def to_dict(self) -> dict:
        return {'id': self.id, 'description': self.description, 'type': self.type.label}


@dataclass(frozen=True)
class Expense:
    """Single expense record."""
    id: int
    date: date
    category_id: int
    amount: float
    description: str

    @classmethod
    def from_row(cls, d: dict) -> 'Expense':
        """Create from database row dict."""
        return cls(
            id=d['id'],
            date=parse_date(d['date']),
            category_id=d['category_id'],
            amount=float(d['amount']),
            description=d['description']
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'category_id': self.category_id,
            'amount': self.amount,
            'description': self.description
        }


@dataclass(frozen=True)
class BudgetItem:
    """An expense joined with its category, plus the running balance.

    A snapshot: later edits to the expense or category are not reflected.
    """
    category_id: int
    expense_id: int
    date: date
    category_description: str
    short_description: str
    amount: float
    balance: float

    def to_dict(self) -> dict:
        return {
            'category_id': self.category_id,
            'expense_id': self.expense_id,
            'date': self.date.isoformat(),
            'category': self.category_description,
            'short_description': self.short_description,
            'amount': self.amount,
            'balance': self.balance
        }


@dataclass(frozen=True)
class BudgetItemsByMonth:
    """Budget items for one calendar month ('yyyy/MM')."""
    month: str
    details: List[BudgetItem]
    total: float

    def to_dict(self) -> dict:
        return {
            'month': self.month,
            'details': [item.to_dict() for item in self.details],
            'total': self.total
        }


@dataclass(frozen=True)
class BudgetItemsByCategory:
    """Budget items sharing one category description."""
    category: str
    details: List[BudgetItem]
    total: float

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'details': [item.to_dict() for item in self.details],
            'total': self.total
        }


@dataclass(frozen=True)
class CategoryMonthSummary:
    """One category's slice of a month in the cross-tab."""
    total: float
    details: List[BudgetItem]


@dataclass(frozen=True)
class MonthRecord:
    """Cross-tab row for a month.

    categories is keyed by category description, sorted ascending, and only
    holds categories with at least one item in the month.
    """
    month: str
    total: float
    categories: Dict[str, CategoryMonthSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to the legacy string-keyed record.

        A category named 'Month' or 'Total' overwrites those keys.
        """
        record: Dict[str, Any] = {'Month': self.month, 'Total': self.total}
        for description, summary in self.categories.items():
            record['details:' + description] = [item.to_dict() for item in summary.details]
            record[description] = summary.total
        return record


@dataclass(frozen=True)
class TotalsRecord:
    """Trailing cross-tab row with grand totals per category."""
    categories: Dict[str, float] = field(default_factory=dict)

    month = 'TOTALS'

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {'Month': self.month}
        record.update(self.categories)
        return record


@dataclass(frozen=True)
class SerializableBudgetItem:
    """Portable form of a budget item used for copy/paste between budgets.

    Any field may be missing in data coming from outside.
    """
    amount: Optional[float]
    date: Optional[date]
    expense_description: Optional[str]
    category_description: Optional[str]
    category_type: Optional[CategoryType]

    @property
    def is_valid(self) -> bool:
        return (
            self.amount is not None
            and self.date is not None
            and self.expense_description is not None
            and self.category_description is not None
            and self.category_type is not None
        )

    @classmethod
    def from_dict(cls, d: dict) -> 'SerializableBudgetItem':
        """Create from decoded JSON, leaving unparseable fields as None."""
        amount = d.get('amount')
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            amount = None

        item_date = None
        if isinstance(d.get('date'), str):
            try:
                item_date = parse_date(d['date'])
            except ValueError:
                item_date = None

        category_type = None
        if isinstance(d.get('category_type'), str):
            try:
                category_type = CategoryType.from_label(d['category_type'])
            except ValueError:
                category_type = None

        expense_description = d.get('expense_description')
        category_description = d.get('category_description')

        return cls(
            amount=float(amount) if amount is not None else None,
            date=item_date,
            expense_description=expense_description if isinstance(expense_description, str) else None,
            category_description=category_description if isinstance(category_description, str) else None,
            category_type=category_type
        )

    def to_dict(self) -> dict:
        return {
            'amount': self.amount,
            'date': self.date.isoformat() if self.date else None,
            'expense_description': self.expense_description,
            'category_description': self.category_description,
            'category_type': self.category_type.label if self.category_type else None
        }

    def __str__(self) -> str:
        expense = f'"{self.expense_description}"' if self.expense_description is not None \
            else 'Expense with a missing description'
        when = self.date.isoformat() if self.date else 'missing date'
        amount = f'amount {self.amount}' if self.amount is not None else 'missing amount'
        category = f'category "{self.category_description}"' if self.category_description is not None \
            else 'missing category'
        kind = self.category_type.label if self.category_type else 'missing category type'
        return f'{expense} on {when} with {amount} in {category} ({kind})'
