"""Copy/paste of budget items between budgets as JSON text."""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from aws_lambda_powertools import Logger

from homebudget.models.entities import BudgetItem, Category, SerializableBudgetItem
from homebudget.services import categories, expenses

logger = Logger(service="homebudget-clipboard")


@dataclass
class ImportReport:
    """Outcome of adding serialized budget items."""
    expenses_added: int = 0
    categories_added: int = 0
    successes: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        status = 'with errors!' if self.errors else 'successfully!'
        lines = [
            f'Added {self.expenses_added} expenses (and {self.categories_added} categories) {status}'
        ]
        return '\n'.join(lines + self.successes + self.errors)

    def to_dict(self) -> dict:
        return {
            'expenses_added': self.expenses_added,
            'categories_added': self.categories_added,
            'successes': self.successes,
            'errors': self.errors,
            'message': self.message
        }


class SerializedItemsError(Exception):
    """Some serialized items could not be added; others may have been."""

    def __init__(self, report: ImportReport):
        super().__init__(report.message)
        self.report = report


def serialize_budget_items(items: Iterable[BudgetItem]) -> str:
    """Serialize budget items with everything needed to re-create them.

    Raises:
        LookupError: if an item's category no longer exists
    """
    category_cache: Dict[int, Category] = {}
    serializable = []
    for item in items:
        if item.category_id not in category_cache:
            category_cache[item.category_id] = categories.get_category(item.category_id)
        category = category_cache[item.category_id]

        serializable.append(SerializableBudgetItem(
            amount=item.amount,
            date=item.date,
            expense_description=item.short_description,
            category_description=item.category_description,
            category_type=category.type
        ).to_dict())

    return json.dumps(serializable)


def add_serialized_budget_items(serialized: str) -> ImportReport:
    """Add items from serialize_budget_items() to the open budget.

    Missing categories are created. A category that exists with a different
    type is a conflict, and its items are skipped. As many items as
    possible are added.

    Args:
        serialized: JSON text from serialize_budget_items()

    Returns:
        Report of what was added

    Raises:
        json.JSONDecodeError: if the text is not JSON
        ValueError: if the JSON is not a list
        SerializedItemsError: if any item failed; carries the report
    """
    data = json.loads(serialized)
    if not isinstance(data, list):
        raise ValueError('Serialized budget items must be a list.')

    items = [
        SerializableBudgetItem.from_dict(entry if isinstance(entry, dict) else {})
        for entry in data
    ]
    report = ImportReport()

    known = {category.description: category for category in categories.list_categories()}
    conflicted = set()
    failed = set()

    for item in items:
        if not item.is_valid:
            continue

        description = categories.normalize_description(item.category_description)
        if description in failed:
            continue

        existing = known.get(description)
        if existing is None:
            try:
                created = categories.add_category(item.category_description, item.category_type)
            except ValueError as e:
                report.errors.append(f'Failed to add category "{item.category_description}" -- {e}')
                failed.add(description)
                continue
            known[created.description] = created
            report.categories_added += 1
            report.successes.append(
                f'Added category "{created.description}" ({created.type.label}).'
            )
        elif existing.type != item.category_type:
            if existing.description not in conflicted:
                report.errors.append(
                    f'A category named "{existing.description}" was found but it has the wrong type '
                    f'(tried to add one with type "{item.category_type.label}", '
                    f'but the existing one is "{existing.type.label}").'
                )
            conflicted.add(existing.description)

    for item in items:
        if not item.is_valid:
            report.errors.append(f'Failed to add invalid expense {item} -- Missing data')
            continue

        description = categories.normalize_description(item.category_description)
        category = known.get(description)
        if description in conflicted or category is None:
            report.errors.append(f'Failed to add expense {item} -- Category had a conflict.')
            continue

        try:
            expenses.add_expense(item.date, category.id, item.amount, item.expense_description)
        except ValueError as e:
            report.errors.append(f'Failed to add expense {item} -- {e}')
            continue
        report.expenses_added += 1
        report.successes.append(f'Added expense {item}.')

    if report.errors:
        logger.warning(
            "Serialized items added with errors",
            extra={
                "expenses_added": report.expenses_added,
                "categories_added": report.categories_added,
                "error_count": len(report.errors)
            }
        )
        raise SerializedItemsError(report)

    logger.info(
        "Serialized items added",
        extra={"expenses_added": report.expenses_added, "categories_added": report.categories_added}
    )
    return report
